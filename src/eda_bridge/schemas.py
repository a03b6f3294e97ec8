#!/usr/bin/env python3
"""EDA bridge - Schema processor for the bridge (upper) layer."""

from __future__ import annotations

import logging
from typing import Final, TypedDict

import voluptuous as vol

from eda_tx.schemas import SCH_TRANSPORTS_DICT

from .const import (
    DEFAULT_DISCOVERY_PREFIX,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_TOPIC_PREFIX,
    SZ_CONFIG,
    SZ_DISABLE_DISCOVERY,
    SZ_DISCOVERY_PREFIX,
    SZ_POLL_INTERVAL,
    SZ_TOPIC_PREFIX,
)

_LOGGER = logging.getLogger(__name__)

_TOPIC_REGEX: Final = r"^[a-zA-Z0-9_-]+(/[a-zA-Z0-9_-]+)*$"  # no wildcards, etc.


class BridgeConfigT(TypedDict):
    topic_prefix: str
    poll_interval: float
    disable_discovery: bool
    discovery_prefix: str


SCH_BRIDGE_CONFIG = vol.Schema(
    {
        vol.Optional(SZ_TOPIC_PREFIX, default=DEFAULT_TOPIC_PREFIX): vol.Match(
            _TOPIC_REGEX
        ),
        vol.Optional(SZ_POLL_INTERVAL, default=DEFAULT_POLL_INTERVAL): vol.All(
            vol.Coerce(float), vol.Range(min=1, max=3600)
        ),
        vol.Optional(SZ_DISABLE_DISCOVERY, default=False): bool,
        vol.Optional(SZ_DISCOVERY_PREFIX, default=DEFAULT_DISCOVERY_PREFIX): vol.Match(
            _TOPIC_REGEX
        ),
    },
    extra=vol.PREVENT_EXTRA,
)

SCH_GLOBAL_CONFIG = vol.Schema(
    {vol.Optional(SZ_CONFIG, default={}): SCH_BRIDGE_CONFIG} | SCH_TRANSPORTS_DICT,
    extra=vol.PREVENT_EXTRA,
)
