#!/usr/bin/env python3
"""EDA bridge - Test the identity resolver, and the alarm history."""

import re
from datetime import datetime as dt

import pytest

from eda_bridge.device import (
    ALARM_HISTORY_ADDRESS,
    ALARM_LENGTH,
    AlarmEntry,
    DeviceIdentity,
    automation_and_heating_type_name,
    family_name,
    read_alarm_history,
    read_device_identity,
)
from eda_tx import exceptions as exc

from .mock import FakeRegisterTransport, identity_registers


def _identity(family, fan, heating=None, cooling=None) -> DeviceIdentity:
    return DeviceIdentity(
        family_type=family,
        fan_type=fan,
        heating_type_installed=heating,
        cooling_type_installed=cooling,
        software_version="1.0.0",
    )


@pytest.mark.parametrize(
    "identity, expected",
    (
        (_identity("Pingvin", "EC", "EDE"), "Pingvin eco EDE"),
        (_identity("Pegasus", "EC", "EDE", "CG"), "Pegasus eco EDE - CG"),
        (_identity("Pandion", "AC"), "Pandion"),
        (_identity("LTR-6", "AC", "EDW", "CW"), "LTR-6 EDW - CW"),
        (_identity("Pingvin", "EC", None, "CG"), "Pingvin eco"),
    ),
)
def test_model_name(identity: DeviceIdentity, expected: str) -> None:
    assert identity.model_name == expected


def test_lookup_tables() -> None:
    assert automation_and_heating_type_name(0) == "ED/MD"
    assert automation_and_heating_type_name(3) == "EDE/MDE"
    assert automation_and_heating_type_name(4) == "unknown"

    assert family_name(0) == "Pingvin"
    assert family_name(7) == "LTR-7 XL"
    assert family_name(999) == "unknown"


@pytest.mark.parametrize(
    "identity, expected",
    (
        (_identity("Pingvin", "EC"), "enervent-pingvin-ec"),
        (_identity("Pegasus XL", "AC", "EDE"), "enervent-pegasus_xl-ac"),
        (_identity("LTR-7 XL", "EC"), "enervent-ltr-7_xl-ec"),
        (_identity("unknown", "AC"), "enervent-unknown-ac"),
    ),
)
def test_device_key(identity: DeviceIdentity, expected: str) -> None:
    assert identity.device_key == expected
    assert re.fullmatch(r"[a-z0-9_-]+", identity.device_key)


async def test_read_device_identity() -> None:
    registers = FakeRegisterTransport(identity_registers())

    identity = await read_device_identity(registers)

    assert identity.family_type == "Pegasus"
    assert identity.fan_type == "EC"
    assert identity.heating_type_installed == "EDE"
    assert identity.cooling_type_installed == "CG"
    assert identity.software_version == "2.1.7"
    assert identity.model_name == "Pegasus eco EDE - CG"


async def test_read_device_identity_no_options() -> None:
    registers = FakeRegisterTransport(
        identity_registers(family=1, fan=0, heater=0, cooling=0)
    )

    identity = await read_device_identity(registers)

    assert identity.heating_type_installed is None
    assert identity.cooling_type_installed is None
    assert identity.model_name == "Pandion"
    assert identity.device_key == "enervent-pandion-ac"


def _alarm_registers(slot: int, *fields: int) -> dict[int, int]:
    address = ALARM_HISTORY_ADDRESS + slot * ALARM_LENGTH
    return dict(zip(range(address, address + ALARM_LENGTH), fields))


async def test_read_alarm_history() -> None:
    registers = FakeRegisterTransport(
        _alarm_registers(0, 10, 2, 22, 1, 21, 13, 45)
        | _alarm_registers(3, 4, 1, 23, 6, 2, 8, 0)  # slots 1, 2 are empty
    )

    result = await read_alarm_history(registers)

    assert result == [  # newest first
        AlarmEntry(timestamp=dt(2023, 6, 2, 8, 0), type=4, state=1),
        AlarmEntry(timestamp=dt(2022, 1, 21, 13, 45), type=10, state=2),
    ]


async def test_read_alarm_history_empty() -> None:
    assert await read_alarm_history(FakeRegisterTransport()) == []


async def test_read_alarm_history_invalid() -> None:
    registers = FakeRegisterTransport(_alarm_registers(0, 10, 2, 22, 0, 0, 0, 0))

    with pytest.raises(exc.DecodeRangeError):
        await read_alarm_history(registers)
