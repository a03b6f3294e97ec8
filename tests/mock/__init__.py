#!/usr/bin/env python3
"""EDA bridge - mocked transports for testing."""

from .transport import (  # noqa: F401
    FakePubSubTransport,
    FakeRegisterTransport,
    identity_registers,
)
