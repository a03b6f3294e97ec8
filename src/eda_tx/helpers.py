#!/usr/bin/env python3
"""EDA bridge - Codec layer - Helper functions.

Converts raw (unsigned 16-bit) register values into typed values, and back again.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime as dt
from typing import Final, TypeAlias

from . import exceptions as exc
from .const import MAX_REGISTER_VALUE, SZ_ALARM_STATE, SZ_ALARM_TYPE, SZ_TIMESTAMP

RegisterT: TypeAlias = int  # 0x0000-0xFFFF
FlagSummaryT: TypeAlias = dict[str, bool]

SZ_NORMAL: Final = "normal"

# The bits of the status word (register 44), in bit order; a bit's index is
# its position in the word.
STATE_BITFIELD_FLAGS: Final[tuple[tuple[int, str], ...]] = (
    (0, "maxCooling"),
    (1, "maxHeating"),
    (2, "emergencyStop"),
    (3, "stop"),
    (4, "away"),
    (5, "longAway"),
    (6, "temperatureBoost"),
    (7, "co2Boost"),
    (8, "humidityBoost"),
    (9, "manualBoost"),
    (10, "overPressure"),
    (11, "cookerHood"),
    (12, "centralVacuumCleaner"),
    (13, "heaterCooldown"),
    (14, "summerNightCooling"),
    (15, "defrosting"),
)

_FLAG_BITS: Final[dict[str, int]] = {name: bit for bit, name in STATE_BITFIELD_FLAGS}
_FLAG_MASK: Final[int] = sum(1 << bit for bit, _ in STATE_BITFIELD_FLAGS)

FLAG_NAMES: Final[tuple[str, ...]] = (SZ_NORMAL,) + tuple(_FLAG_BITS)


def _wrap(value: int) -> RegisterT:
    """Wrap an int into unsigned 16-bit space (two's complement if negative)."""
    return value & MAX_REGISTER_VALUE


def decode_flags(word: RegisterT) -> FlagSummaryT:
    """Convert a 16-bit status word into a summary of all its (named) flags.

    Every known flag is present in the result. The device is in normal operation
    when none of the flag bits are set. Any other bits are ignored.
    """
    result = {SZ_NORMAL: word & _FLAG_MASK == 0}
    result.update({name: bool((word >> bit) & 1) for bit, name in STATE_BITFIELD_FLAGS})
    return result


def set_flag(word: RegisterT, flag: str, desired: bool) -> RegisterT:
    """Return the status word with only the named flag's bit set (or cleared).

    The caller must supply the current word, as all other bits are unchanged.
    """
    try:
        bit = _FLAG_BITS[flag]
    except KeyError:
        raise exc.UnknownFlag(f"Unknown flag: {flag}") from None

    if desired:
        return word | (1 << bit)
    return word & ~(1 << bit) & MAX_REGISTER_VALUE


def decode_temperature(raw: RegisterT) -> float:
    """Convert a 2's complement register value into a temperature (in 0.1 °C)."""
    value = raw if raw < 2**15 else raw - 2**16
    return value / 10


def encode_temperature(value: float) -> RegisterT:
    """Convert a temperature into a 2's complement register value (in 0.1 °C)."""
    return _wrap(round(value * 10))


def decode_percentage(raw: RegisterT) -> int:
    """Convert a register value into a percentage (resolution of 1%)."""
    return raw


def encode_percentage(value: float) -> RegisterT:
    """Convert a percentage into a register value (resolution of 1%)."""
    return _wrap(round(value))


def decode_minutes(raw: RegisterT) -> int:
    """Convert a register value into a duration (in minutes)."""
    return raw


def encode_minutes(value: float) -> RegisterT:
    """Convert a duration (in minutes) into a register value."""
    return _wrap(round(value))


def decode_coefficient(raw: RegisterT) -> int:
    """Convert a register value into a (PID-style) cascade coefficient."""
    return raw


def encode_coefficient(value: float) -> RegisterT:
    return _wrap(round(value))


def decode_alarm_timestamp(fields: Sequence[RegisterT]) -> dict:
    """Convert the seven registers of an alarm into its type, state & timestamp.

    The registers are: type, state, year (from 2000), month, day, hour, minute. The
    unit has no notion of timezones, so the result is naive local (wall-clock) time.
    """
    if len(fields) != 7:
        raise exc.DecodeRangeError(f"Invalid alarm: {fields}, is not 7 registers")

    alarm_type, state, year, month, day, hour, minute = fields

    try:
        timestamp = dt(
            year=2000 + year, month=month, day=day, hour=hour, minute=minute
        )
    except ValueError as err:
        raise exc.DecodeRangeError(f"Invalid alarm timestamp: {fields}: {err}") from err

    return {
        SZ_ALARM_TYPE: alarm_type,
        SZ_ALARM_STATE: state,
        SZ_TIMESTAMP: timestamp,
    }
