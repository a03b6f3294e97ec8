#!/usr/bin/env python3
"""EDA bridge - Home Assistant (MQTT) discovery payloads.

Each entity's config is published to: <prefix>/<entity_type>/<device_key>/<name>/config
"""

from __future__ import annotations

import logging
from typing import Any

from .catalog import Flag, Reading, RegisterMap, Setting
from .const import (
    SZ_BINARY_SENSOR,
    SZ_MODE,
    SZ_NUMBER,
    SZ_OFF,
    SZ_ON,
    SZ_READINGS,
    SZ_SENSOR,
    SZ_SET,
    SZ_SETTINGS,
    SZ_STATUS,
    SZ_SWITCH,
)
from .device import MANUFACTURER, DeviceIdentity

_LOGGER = logging.getLogger(__name__)


def device_info(identity: DeviceIdentity) -> dict[str, str]:
    """Return the "device" block that is part of each entity's config."""

    return {
        "identifiers": identity.device_key,
        "name": f"{MANUFACTURER} {identity.model_name}",
        "sw_version": identity.software_version,
        "model": identity.model_name,
        "manufacturer": MANUFACTURER,
    }


def _entity_config(
    base: dict[str, Any], topic_prefix: str, category: str, name: str, display: str
) -> dict[str, Any]:
    slug = topic_prefix.replace("/", "_")  # e.g. hvac/eda -> hvac_eda
    return base | {
        "name": display,
        "object_id": f"{slug}_{name}",
        "unique_id": f"{slug}-{name}",
        "state_topic": f"{topic_prefix}/{category}/{name}",
    }


def _unit_config(entry: Reading | Setting) -> dict[str, str]:
    result = {}
    if entry.codec.unit:
        result["unit_of_measurement"] = entry.codec.unit
    if entry.codec.device_class:
        result["device_class"] = entry.codec.device_class
    return result


def _reading_config(
    base: dict[str, Any], topic_prefix: str, reading: Reading
) -> dict[str, Any]:
    return _entity_config(
        base, topic_prefix, SZ_READINGS, reading.name, reading.display_name
    ) | {"state_class": "measurement"} | _unit_config(reading)


def _setting_config(
    base: dict[str, Any], topic_prefix: str, setting: Setting
) -> dict[str, Any]:
    return (
        _entity_config(
            base, topic_prefix, SZ_SETTINGS, setting.name, setting.display_name
        )
        | {
            "command_topic": f"{topic_prefix}/{SZ_SETTINGS}/{setting.name}/{SZ_SET}",
            "entity_category": "config",
            "min": setting.minimum,
            "max": setting.maximum,
        }
        | _unit_config(setting)
    )


def _flag_config(base: dict[str, Any], topic_prefix: str, flag: Flag) -> dict[str, Any]:
    result = _entity_config(base, topic_prefix, SZ_MODE, flag.name, flag.display_name)
    result |= {"icon": "mdi:fan", "payload_on": SZ_ON, "payload_off": SZ_OFF}
    if flag.writable:
        result["command_topic"] = f"{topic_prefix}/{SZ_MODE}/{flag.name}/{SZ_SET}"
    return result


def discovery_configs(
    register_map: RegisterMap,
    identity: DeviceIdentity,
    topic_prefix: str,
    discovery_prefix: str,
) -> dict[str, dict[str, Any]]:
    """Return the discovery config of every entity, keyed by its config topic.

    Readings are sensors, settings are numbers, and modes are either switches (if
    writable) or binary sensors.
    """

    base = {
        "platform": "mqtt",
        "availability_topic": f"{topic_prefix}/{SZ_STATUS}",
        "device": device_info(identity),
    }

    def config_topic(entity_type: str, name: str) -> str:
        return f"{discovery_prefix}/{entity_type}/{identity.device_key}/{name}/config"

    result: dict[str, dict[str, Any]] = {}

    for reading in register_map.readings.values():
        result[config_topic(SZ_SENSOR, reading.name)] = _reading_config(
            base, topic_prefix, reading
        )

    for setting in register_map.settings.values():
        result[config_topic(SZ_NUMBER, setting.name)] = _setting_config(
            base, topic_prefix, setting
        )

    for flag in register_map.flags.values():
        entity_type = SZ_SWITCH if flag.writable else SZ_BINARY_SENSOR
        result[config_topic(entity_type, flag.name)] = _flag_config(
            base, topic_prefix, flag
        )

    return result
