#!/usr/bin/env python3
"""Fixtures for testing."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from typing import Final

import pytest

from eda_bridge import Gateway
from eda_bridge.catalog import STATUS_WORD_ADDRESS
from eda_tx.helpers import RegisterT

from .mock import FakePubSubTransport, FakeRegisterTransport, identity_registers

TOPIC_PREFIX: Final = "eda"

# a Pegasus eco EDE - CG, in away mode, with a few non-zero readings/settings
UNIT_REGISTERS: Final[dict[int, RegisterT]] = identity_registers() | {
    1: 40,  # ventilationLevelActual
    6: 65486,  # freshAirTemperature: -5.0
    8: 171,  # supplyAirTemperature: 17.1
    13: 35,  # exhaustAirHumidity
    STATUS_WORD_ADDRESS: 1 << 4,  # away
    100: 30,  # awayVentilationLevel
    135: 210,  # temperatureTarget: 21.0
}


@pytest.fixture()
def registers() -> FakeRegisterTransport:
    return FakeRegisterTransport(UNIT_REGISTERS)


@pytest.fixture()
def pubsub() -> FakePubSubTransport:
    return FakePubSubTransport()


@pytest.fixture()
async def gwy(
    registers: FakeRegisterTransport, pubsub: FakePubSubTransport
) -> AsyncGenerator[Gateway, None]:
    """Return a gateway that has not been started (i.e. it doesn't poll)."""

    gwy = Gateway(registers, pubsub, config={"topic_prefix": TOPIC_PREFIX})

    try:
        yield gwy
    finally:
        for task in gwy._tasks:
            task.cancel()
