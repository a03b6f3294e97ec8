#!/usr/bin/env python3
"""EDA bridge - an Enervent EDA (Modbus) to MQTT bridge."""

from __future__ import annotations

from typing import Final

from eda_tx.const import (  # noqa: F401
    SZ_MODE as SZ_MODE,
    SZ_OFF as SZ_OFF,
    SZ_OFFLINE as SZ_OFFLINE,
    SZ_ON as SZ_ON,
    SZ_ONLINE as SZ_ONLINE,
    SZ_READINGS as SZ_READINGS,
    SZ_SET as SZ_SET,
    SZ_SETTINGS as SZ_SETTINGS,
    SZ_STATUS as SZ_STATUS,
    SZ_UNKNOWN as SZ_UNKNOWN,
)

DEFAULT_TOPIC_PREFIX: Final = "eda"
DEFAULT_DISCOVERY_PREFIX: Final = "homeassistant"
DEFAULT_POLL_INTERVAL: Final[float] = 10  # seconds

SZ_CONFIG: Final = "config"
SZ_DISABLE_DISCOVERY: Final = "disable_discovery"
SZ_DISCOVERY_PREFIX: Final = "discovery_prefix"
SZ_POLL_INTERVAL: Final = "poll_interval"
SZ_TOPIC_PREFIX: Final = "topic_prefix"

# Home Assistant entity types
SZ_BINARY_SENSOR: Final = "binary_sensor"
SZ_NUMBER: Final = "number"
SZ_SENSOR: Final = "sensor"
SZ_SWITCH: Final = "switch"
