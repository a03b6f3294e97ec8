#!/usr/bin/env python3
"""A CLI for the eda_bridge library."""
