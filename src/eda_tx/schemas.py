#!/usr/bin/env python3
"""EDA bridge - Schema processor for the transport (lower) layer."""

from __future__ import annotations

import logging
from typing import Any, Final, TypedDict

import voluptuous as vol

from .const import (
    DEFAULT_BAUDRATE,
    DEFAULT_BYTESIZE,
    DEFAULT_KEEPALIVE,
    DEFAULT_MODBUS_TIMEOUT,
    DEFAULT_PARITY,
    DEFAULT_PUBLISH_TIMEOUT,
    DEFAULT_STOPBITS,
    DEFAULT_UNIT_ID,
    SZ_BAUDRATE,
    SZ_BYTESIZE,
    SZ_CLIENT_ID,
    SZ_KEEPALIVE,
    SZ_PARITY,
    SZ_PUBLISH_TIMEOUT,
    SZ_QOS,
    SZ_STOPBITS,
    SZ_TIMEOUT,
    SZ_UNIT_ID,
)

_LOGGER = logging.getLogger(__name__)


#
# 1/3: Register (Modbus) transport configuration
SZ_MODBUS_DEVICE: Final = "modbus_device"
SZ_MODBUS_CONFIG: Final = "modbus_config"


class ModbusConfigT(TypedDict):
    timeout: float
    unit_id: int
    baudrate: int
    bytesize: int
    parity: str
    stopbits: int


SCH_MODBUS_CONFIG = vol.Schema(
    {
        vol.Optional(SZ_TIMEOUT, default=DEFAULT_MODBUS_TIMEOUT): vol.All(
            vol.Coerce(float), vol.Range(min=0.1, max=60)
        ),
        vol.Optional(SZ_UNIT_ID, default=DEFAULT_UNIT_ID): vol.All(
            vol.Coerce(int), vol.Range(min=0, max=247)
        ),
        vol.Optional(SZ_BAUDRATE, default=DEFAULT_BAUDRATE): vol.All(
            vol.Coerce(int), vol.Any(9600, 19200, 38400, 57600, 115200)
        ),
        vol.Optional(SZ_BYTESIZE, default=DEFAULT_BYTESIZE): vol.All(
            vol.Coerce(int), vol.Any(7, 8)
        ),
        vol.Optional(SZ_PARITY, default=DEFAULT_PARITY): vol.All(
            vol.Upper, vol.Any("N", "E", "O")
        ),
        vol.Optional(SZ_STOPBITS, default=DEFAULT_STOPBITS): vol.All(
            vol.Coerce(int), vol.Any(1, 2)
        ),
    },
    extra=vol.PREVENT_EXTRA,
)


#
# 2/3: Pub/sub (MQTT) transport configuration
SZ_MQTT_BROKER: Final = "mqtt_broker"
SZ_MQTT_CONFIG: Final = "mqtt_config"


class MqttConfigT(TypedDict):
    client_id: str | None
    keepalive: int
    publish_timeout: float
    qos: int


SCH_MQTT_CONFIG = vol.Schema(
    {
        vol.Optional(SZ_CLIENT_ID, default=None): vol.Any(None, str),
        vol.Optional(SZ_KEEPALIVE, default=DEFAULT_KEEPALIVE): vol.All(
            vol.Coerce(int), vol.Range(min=5, max=3600)
        ),
        vol.Optional(SZ_PUBLISH_TIMEOUT, default=DEFAULT_PUBLISH_TIMEOUT): vol.All(
            vol.Coerce(float), vol.Range(min=0.1, max=60)
        ),
        vol.Optional(SZ_QOS, default=0): vol.All(vol.Coerce(int), vol.In((0, 1, 2))),
    },
    extra=vol.PREVENT_EXTRA,
)


#
# 3/3: Both transports, as used by the bridge's (upper layer) schema
SCH_TRANSPORTS_DICT: Final[dict[vol.Optional, Any]] = {
    vol.Optional(SZ_MODBUS_CONFIG, default={}): SCH_MODBUS_CONFIG,
    vol.Optional(SZ_MQTT_CONFIG, default={}): SCH_MQTT_CONFIG,
}
