#!/usr/bin/env python3
"""EDA bridge - constants shared by the register and pub/sub layers."""

from __future__ import annotations

from typing import Final

# used by the register transport...
DEFAULT_MODBUS_PORT: Final[int] = 502
DEFAULT_MODBUS_TIMEOUT: Final[float] = 3.0
DEFAULT_UNIT_ID: Final[int] = 1

DEFAULT_BAUDRATE: Final[int] = 19200
DEFAULT_BYTESIZE: Final[int] = 8
DEFAULT_PARITY: Final = "N"
DEFAULT_STOPBITS: Final[int] = 1

MAX_REGISTER_VALUE: Final[int] = 0xFFFF
MAX_BLOCK_LENGTH: Final[int] = 32  # registers per read request

# used by the pub/sub transport...
DEFAULT_MQTT_PORT: Final[int] = 1883
DEFAULT_KEEPALIVE: Final[int] = 60
DEFAULT_PUBLISH_TIMEOUT: Final[float] = 5.0
DEFAULT_CONNECT_TIMEOUT: Final[float] = 9.0

SZ_TIMEOUT: Final = "timeout"
SZ_UNIT_ID: Final = "unit_id"
SZ_BAUDRATE: Final = "baudrate"
SZ_BYTESIZE: Final = "bytesize"
SZ_PARITY: Final = "parity"
SZ_STOPBITS: Final = "stopbits"

SZ_CLIENT_ID: Final = "client_id"
SZ_KEEPALIVE: Final = "keepalive"
SZ_PUBLISH_TIMEOUT: Final = "publish_timeout"
SZ_QOS: Final = "qos"

# URL schemes
SZ_TCP: Final = "tcp"
SZ_RTU: Final = "rtu"
SZ_MQTT: Final = "mqtt"

# topic taxonomy (these are a stable, external contract)
SZ_MODE: Final = "mode"
SZ_READINGS: Final = "readings"
SZ_SETTINGS: Final = "settings"
SZ_STATUS: Final = "status"
SZ_SET: Final = "set"

SZ_ONLINE: Final = "online"
SZ_OFFLINE: Final = "offline"
SZ_ON: Final = "ON"
SZ_OFF: Final = "OFF"

# used by the alarm history...
SZ_ALARM_TYPE: Final = "type"
SZ_ALARM_STATE: Final = "state"
SZ_TIMESTAMP: Final = "timestamp"

SZ_UNKNOWN: Final = "unknown"
