#!/usr/bin/env python3
"""EDA bridge - the register map (catalog) of an EDA automation board.

Binds each reading, setting & flag (mode) to its holding register and its codec.
Exposing another value requires only another entry in these tables.
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Callable, Iterable
from typing import Final, TypeAlias

from eda_tx import exceptions as exc
from eda_tx.const import MAX_BLOCK_LENGTH, SZ_MODE, SZ_READINGS, SZ_SETTINGS
from eda_tx.helpers import (
    FLAG_NAMES,
    FlagSummaryT,
    RegisterT,
    decode_coefficient,
    decode_flags,
    decode_minutes,
    decode_percentage,
    decode_temperature,
    encode_coefficient,
    encode_minutes,
    encode_percentage,
    encode_temperature,
)
from eda_tx.transport import RegisterTransport

ValueT: TypeAlias = float | int
BlockT: TypeAlias = tuple[int, int]  # (address, count)
SnapshotT: TypeAlias = dict[int, RegisterT]  # address -> raw value


_LOGGER = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class Codec:
    """Convert a raw register value to a value (with a unit), and back again."""

    decode: Callable[[RegisterT], ValueT]
    encode: Callable[[float], RegisterT]
    unit: str | None = None
    device_class: str | None = None


TEMPERATURE: Final = Codec(decode_temperature, encode_temperature, "°C", "temperature")
HUMIDITY: Final = Codec(decode_percentage, encode_percentage, "%", "humidity")
PERCENTAGE: Final = Codec(decode_percentage, encode_percentage, "%")
MINUTES: Final = Codec(decode_minutes, encode_minutes, "min", "duration")
COEFFICIENT: Final = Codec(decode_coefficient, encode_coefficient)


@dataclasses.dataclass(frozen=True, kw_only=True)
class Reading:
    """A read-only value, e.g. a temperature sensor."""

    name: str
    address: int
    codec: Codec
    display_name: str


@dataclasses.dataclass(frozen=True, kw_only=True)
class Setting:
    """A read-write value, its range is enforced only by the UI (if at all)."""

    name: str
    address: int
    codec: Codec
    display_name: str
    minimum: float
    maximum: float


@dataclasses.dataclass(frozen=True, kw_only=True)
class Flag:
    """A mode of operation, i.e. one bit of the status word."""

    name: str
    address: int
    display_name: str
    writable: bool = False


CatalogEntryT: TypeAlias = Reading | Setting | Flag


STATUS_WORD_ADDRESS: Final = 44

EDA_READINGS: Final[tuple[Reading, ...]] = (
    Reading(
        name="ventilationLevelActual",
        address=1,
        codec=PERCENTAGE,
        display_name="Ventilation level (actual)",
    ),
    Reading(
        name="ventilationLevelTarget",
        address=3,
        codec=PERCENTAGE,
        display_name="Ventilation level (target)",
    ),
    Reading(
        name="freshAirTemperature",
        address=6,
        codec=TEMPERATURE,
        display_name="Outside temperature",
    ),
    Reading(
        name="supplyAirTemperatureAfterHeatRecovery",
        address=7,
        codec=TEMPERATURE,
        display_name="Supply air temperature (after heat recovery)",
    ),
    Reading(
        name="supplyAirTemperature",
        address=8,
        codec=TEMPERATURE,
        display_name="Supply air temperature",
    ),
    Reading(
        name="wasteAirTemperature",
        address=9,
        codec=TEMPERATURE,
        display_name="Waste air temperature",
    ),
    Reading(
        name="exhaustAirTemperature",
        address=10,
        codec=TEMPERATURE,
        display_name="Exhaust air temperature",
    ),
    Reading(
        name="exhaustAirTemperatureBeforeHeatRecovery",
        address=11,
        codec=TEMPERATURE,
        display_name="Exhaust air temperature (before heat recovery)",
    ),
    Reading(
        name="exhaustAirHumidity",
        address=13,
        codec=HUMIDITY,
        display_name="Exhaust air humidity",
    ),
    Reading(
        name="heatRecoverySupplySide",
        address=29,
        codec=PERCENTAGE,
        display_name="Heat recovery (supply)",
    ),
    Reading(
        name="heatRecoveryExhaustSide",
        address=30,
        codec=PERCENTAGE,
        display_name="Heat recovery (exhaust)",
    ),
    Reading(
        name="heatRecoveryTemperatureDifferenceSupplySide",
        address=31,
        codec=TEMPERATURE,
        display_name="Heat recovery temperature difference (supply)",
    ),
    Reading(
        name="heatRecoveryTemperatureDifferenceExhaustSide",
        address=32,
        codec=TEMPERATURE,
        display_name="Heat recovery temperature difference (exhaust)",
    ),
    Reading(
        name="mean48HourExhaustHumidity",
        address=34,
        codec=HUMIDITY,
        display_name="Exhaust air humidity (48h mean)",
    ),
    Reading(
        name="cascadeSp",
        address=35,
        codec=COEFFICIENT,
        display_name="Cascade setpoint",
    ),
    Reading(
        name="cascadeP",
        address=47,
        codec=COEFFICIENT,
        display_name="Cascade P-value",
    ),
    Reading(
        name="cascadeI",
        address=48,
        codec=COEFFICIENT,
        display_name="Cascade I-value",
    ),
    Reading(
        name="overPressureTimeLeft",
        address=49,
        codec=MINUTES,
        display_name="Overpressure time left",
    ),
)

EDA_SETTINGS: Final[tuple[Setting, ...]] = (
    Setting(
        name="overPressureDelay",
        address=57,
        codec=MINUTES,
        display_name="Overpressure delay",
        minimum=1,
        maximum=60,
    ),
    Setting(
        name="awayVentilationLevel",
        address=100,
        codec=PERCENTAGE,
        display_name="Away ventilation level",
        minimum=1,
        maximum=100,
    ),
    Setting(
        name="awayTemperatureReduction",
        address=101,
        codec=TEMPERATURE,
        display_name="Away temperature reduction",
        minimum=0,
        maximum=20,
    ),
    Setting(
        name="longAwayVentilationLevel",
        address=102,
        codec=PERCENTAGE,
        display_name="Long away ventilation level",
        minimum=1,
        maximum=100,
    ),
    Setting(
        name="longAwayTemperatureReduction",
        address=103,
        codec=TEMPERATURE,
        display_name="Long away temperature reduction",
        minimum=0,
        maximum=20,
    ),
    Setting(
        name="temperatureTarget",
        address=135,
        codec=TEMPERATURE,
        display_name="Temperature target",
        minimum=0,
        maximum=30,
    ),
)

_WRITABLE_FLAGS: Final = (
    "away",
    "longAway",
    "overPressure",
    "maxHeating",
    "maxCooling",
    "manualBoost",
    "summerNightCooling",
)

_FLAG_DISPLAY_NAMES: Final = {
    "normal": "Normal",
    "maxCooling": "Max cooling",
    "maxHeating": "Max heating",
    "emergencyStop": "Emergency stop",
    "stop": "Stop",
    "away": "Away",
    "longAway": "Long away",
    "temperatureBoost": "Temperature boost",
    "co2Boost": "CO2 boost",
    "humidityBoost": "Humidity boost",
    "manualBoost": "Manual boost",
    "overPressure": "Overpressure",
    "cookerHood": "Cooker hood",
    "centralVacuumCleaner": "Central vacuum cleaner",
    "heaterCooldown": "Heater cooldown",
    "summerNightCooling": "Summer night cooling",
    "defrosting": "Defrosting",
}

EDA_FLAGS: Final[tuple[Flag, ...]] = tuple(
    Flag(
        name=name,
        address=STATUS_WORD_ADDRESS,
        display_name=_FLAG_DISPLAY_NAMES[name],
        writable=name in _WRITABLE_FLAGS,
    )
    for name in FLAG_NAMES
)


def contiguous_blocks(
    addresses: Iterable[int], max_length: int = MAX_BLOCK_LENGTH
) -> list[BlockT]:
    """Return the (address, count) of each contiguous run of register addresses.

    No run is longer than max_length.
    """

    blocks: list[BlockT] = []

    for address in sorted(set(addresses)):
        if blocks:
            start, count = blocks[-1]
            if address == start + count and count < max_length:
                blocks[-1] = (start, count + 1)
                continue
        blocks.append((address, 1))

    return blocks


class RegisterMap:
    """The register map of a family of units, with its readings/settings/flags."""

    def __init__(
        self,
        readings: Iterable[Reading],
        settings: Iterable[Setting],
        flags: Iterable[Flag],
    ) -> None:
        self.readings: dict[str, Reading] = {r.name: r for r in readings}
        self.settings: dict[str, Setting] = {s.name: s for s in settings}
        self.flags: dict[str, Flag] = {f.name: f for f in flags}

        self.blocks: list[BlockT] = contiguous_blocks(
            e.address for e in self.entries()
        )

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(readings={len(self.readings)}, "
            f"settings={len(self.settings)}, flags={len(self.flags)})"
        )

    def entries(self) -> list[CatalogEntryT]:
        return [*self.readings.values(), *self.settings.values(), *self.flags.values()]

    def get_setting(self, name: str) -> Setting:
        try:
            return self.settings[name]
        except KeyError:
            raise exc.UnknownSetting(f"Unknown setting: {name}") from None

    def get_flag(self, name: str) -> Flag:
        try:
            return self.flags[name]
        except KeyError:
            raise exc.UnknownFlag(f"Unknown flag: {name}") from None

    async def read_snapshot(self, transport: RegisterTransport) -> SnapshotT:
        """Read every register in the map, one (contiguous) block at a time."""

        snapshot: SnapshotT = {}
        for address, count in self.blocks:
            values = await transport.read_registers(address, count)
            snapshot.update(zip(range(address, address + count), values))
        return snapshot

    def decode_flags(self, snapshot: SnapshotT) -> FlagSummaryT:
        """Return the state of each flag (mode), as per its status word."""

        summaries: dict[int, FlagSummaryT] = {}
        result = {}

        for flag in self.flags.values():
            if flag.address not in summaries:
                summaries[flag.address] = decode_flags(snapshot[flag.address])
            result[flag.name] = summaries[flag.address][flag.name]

        return result

    async def read_state(
        self, transport: RegisterTransport
    ) -> dict[str, dict[str, ValueT]]:
        """Read & decode every register in the map (modes, readings & settings)."""

        snapshot = await self.read_snapshot(transport)

        return {
            SZ_MODE: self.decode_flags(snapshot),
            SZ_READINGS: self.decode_readings(snapshot),
            SZ_SETTINGS: self.decode_settings(snapshot),
        }

    def decode_readings(self, snapshot: SnapshotT) -> dict[str, ValueT]:
        return {
            r.name: r.codec.decode(snapshot[r.address]) for r in self.readings.values()
        }

    def decode_settings(self, snapshot: SnapshotT) -> dict[str, ValueT]:
        return {
            s.name: s.codec.decode(snapshot[s.address]) for s in self.settings.values()
        }


EDA_REGISTER_MAP: Final = RegisterMap(EDA_READINGS, EDA_SETTINGS, EDA_FLAGS)
