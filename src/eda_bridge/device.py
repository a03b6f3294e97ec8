#!/usr/bin/env python3
"""EDA bridge - the identity (model, versions) and alarm history of a unit."""

from __future__ import annotations

import dataclasses
import logging
import re
from datetime import datetime as dt
from typing import Final

from eda_tx.const import SZ_UNKNOWN
from eda_tx.helpers import decode_alarm_timestamp
from eda_tx.transport import RegisterTransport

FAN_TYPE_AC: Final = "AC"
FAN_TYPE_EC: Final = "EC"

MANUFACTURER: Final = "Enervent"

FAMILY_TYPE_NAMES: Final[dict[int, str]] = {
    0: "Pingvin",
    1: "Pandion",
    2: "Pegasus",
    3: "Pegasus XL",
    4: "LTR-3",
    5: "LTR-6",
    6: "LTR-7",
    7: "LTR-7 XL",
}

AUTOMATION_AND_HEATING_TYPE_NAMES: Final[dict[int, str]] = {
    0: "ED/MD",
    1: "EDX/MDX",
    2: "EDW/MDW",
    3: "EDE/MDE",
}

COOLING_TYPE_NAMES: Final[dict[int, str]] = {
    1: "CG",
    2: "CW",
}

# the identity registers: family, fan, automation, heater, cooling, version (x3)
IDENTITY_ADDRESS: Final = 599
IDENTITY_LENGTH: Final = 8

# the alarm history is a list of slots, each of: type, state, Y, M, D, h, m
ALARM_HISTORY_ADDRESS: Final = 385
ALARM_HISTORY_SLOTS: Final = 10
ALARM_LENGTH: Final = 7

_DEVICE_KEY_INVALID_CHARS: Final = re.compile(r"[^a-z0-9_-]")


_LOGGER = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True, kw_only=True)
class DeviceIdentity:
    """The immutable identity of a unit, read once per connection."""

    family_type: str
    fan_type: str
    heating_type_installed: str | None
    cooling_type_installed: str | None
    software_version: str

    @property
    def model_name(self) -> str:
        return model_name(self)

    @property
    def device_key(self) -> str:
        return device_key(self)


@dataclasses.dataclass(frozen=True, kw_only=True, order=True)
class AlarmEntry:
    """An entry of a unit's alarm history (entries are ordered by timestamp)."""

    timestamp: dt  # naive, local
    type: int
    state: int

    def __str__(self) -> str:
        return f"{self.timestamp.isoformat()}, type={self.type}, state={self.state}"


def family_name(code: int) -> str:
    """Return the name of a family of units, e.g. 0 -> Pingvin."""
    return FAMILY_TYPE_NAMES.get(code, SZ_UNKNOWN)


def automation_and_heating_type_name(code: int) -> str:
    """Return the name of an automation/heating type, e.g. 3 -> EDE/MDE."""
    return AUTOMATION_AND_HEATING_TYPE_NAMES.get(code, SZ_UNKNOWN)


def model_name(identity: DeviceIdentity) -> str:
    """Return a human-readable model name, e.g. Pegasus eco EDE - CG.

    The cooling type is appended only to a heating type.
    """

    result = identity.family_type
    if identity.fan_type == FAN_TYPE_EC:
        result += " eco"

    if identity.heating_type_installed is not None:
        result += f" {identity.heating_type_installed}"
        # TODO: confirm how a unit with cooling, but no heating, names itself
        if identity.cooling_type_installed is not None:
            result += f" - {identity.cooling_type_installed}"

    return result


def device_key(identity: DeviceIdentity) -> str:
    """Return a stable identifier for a unit, e.g. enervent-pingvin-ec.

    It is safe to use as a topic level, or as a HA <node_id> ([a-zA-Z0-9_-]).
    """

    key = f"{MANUFACTURER}-{identity.family_type}-{identity.fan_type}".lower()
    return _DEVICE_KEY_INVALID_CHARS.sub("_", key)


async def read_device_identity(transport: RegisterTransport) -> DeviceIdentity:
    """Read the identity registers of a unit."""

    (
        family_code,
        fan_code,
        automation_code,
        heater_installed,
        cooling_code,
        *version,
    ) = await transport.read_registers(IDENTITY_ADDRESS, IDENTITY_LENGTH)

    if heater_installed:  # e.g. EDE/MDE -> EDE
        heating_type = automation_and_heating_type_name(automation_code).split("/")[0]
    else:
        heating_type = None

    if cooling_code:
        cooling_type = COOLING_TYPE_NAMES.get(cooling_code, SZ_UNKNOWN)
    else:
        cooling_type = None

    identity = DeviceIdentity(
        family_type=family_name(family_code),
        fan_type=FAN_TYPE_EC if fan_code == 1 else FAN_TYPE_AC,
        heating_type_installed=heating_type,
        cooling_type_installed=cooling_type,
        software_version=".".join(str(v) for v in version),
    )

    _LOGGER.info(
        "Found a unit: %s %s (software version: %s)",
        MANUFACTURER,
        identity.model_name,
        identity.software_version,
    )
    return identity


async def read_alarm_history(transport: RegisterTransport) -> list[AlarmEntry]:
    """Return the alarm history of a unit, newest first (empty slots are skipped).

    May raise DecodeRangeError if a (non-empty) slot has an invalid timestamp.
    """

    alarms = []

    for idx in range(ALARM_HISTORY_SLOTS):
        fields = await transport.read_registers(
            ALARM_HISTORY_ADDRESS + idx * ALARM_LENGTH, ALARM_LENGTH
        )
        if fields[0] == 0:  # an empty slot
            continue
        alarms.append(AlarmEntry(**decode_alarm_timestamp(fields)))

    return sorted(alarms, reverse=True)
