#!/usr/bin/env python3
"""EDA bridge - Test the gateway (publish all, apply write, subscribe for writes)."""

import asyncio

import pytest

from eda_bridge import EDA_REGISTER_MAP, Gateway
from eda_bridge.catalog import STATUS_WORD_ADDRESS
from eda_tx import exceptions as exc

from .mock import FakePubSubTransport, FakeRegisterTransport

NUM_TOPICS = (
    1  # status
    + len(EDA_REGISTER_MAP.flags)
    + len(EDA_REGISTER_MAP.readings)
    + len(EDA_REGISTER_MAP.settings)
)

INVALID_WRITES = (
    ("mode/turbo", "ON"),  # unknown flag
    ("mode/defrosting", "ON"),  # read-only flag
    ("mode/normal", "ON"),  # derived flag
    ("mode/away", "on"),  # not ON/OFF
    ("settings/turbo", "1"),  # unknown setting
    ("settings/temperatureTarget", "warm"),
    ("settings/temperatureTarget", "nan"),
    ("settings/temperatureTarget", "inf"),
    ("settings/temperatureTarget", "1e308"),  # too large to encode
    ("settings/temperatureTarget", "-1e308"),
    ("readings/freshAirTemperature", "1"),  # readings are read-only
    ("status", "online"),
)


async def test_publish_all(gwy: Gateway, pubsub: FakePubSubTransport) -> None:
    await gwy.publish_all()

    assert len(pubsub.published) == NUM_TOPICS
    assert pubsub.retained == {}

    assert pubsub.published["eda/status"] == "online"
    assert pubsub.published["eda/mode/away"] == "ON"
    assert pubsub.published["eda/mode/normal"] == "OFF"
    assert pubsub.published["eda/mode/longAway"] == "OFF"
    assert pubsub.published["eda/readings/freshAirTemperature"] == "-5.0"
    assert pubsub.published["eda/readings/supplyAirTemperature"] == "17.1"
    assert pubsub.published["eda/readings/ventilationLevelActual"] == "40"
    assert pubsub.published["eda/settings/temperatureTarget"] == "21.0"


async def test_publish_all_failures(gwy: Gateway, pubsub: FakePubSubTransport) -> None:
    pubsub.fail_topics = {"eda/mode/away", "eda/readings/freshAirTemperature"}

    with pytest.raises(exc.PublishFailed) as exc_info:
        await gwy.publish_all()

    assert set(exc_info.value.failures) == pubsub.fail_topics
    assert isinstance(exc_info.value, exc.TransportError)

    # a failed topic doesn't prevent the others from being published
    assert len(pubsub.published) == NUM_TOPICS - len(pubsub.fail_topics)


async def test_publish_all_no_registers(
    gwy: Gateway, registers: FakeRegisterTransport, pubsub: FakePubSubTransport
) -> None:
    registers.fail_reads = True

    with pytest.raises(exc.TransportError):
        await gwy.publish_all()

    assert pubsub.published == {}


async def test_apply_write_setting(
    gwy: Gateway, registers: FakeRegisterTransport, pubsub: FakePubSubTransport
) -> None:
    await gwy.publish_all()
    before = dict(pubsub.published)
    pubsub.clear()

    await gwy.apply_write("settings/awayVentilationLevel", b"55")

    assert registers.writes == [(100, 55)]
    assert pubsub.published["eda/settings/awayVentilationLevel"] == "55"

    # everything else is re-published, unchanged
    del before["eda/settings/awayVentilationLevel"]
    del pubsub.published["eda/settings/awayVentilationLevel"]
    assert pubsub.published == before


async def test_apply_write_temperature(
    gwy: Gateway, registers: FakeRegisterTransport, pubsub: FakePubSubTransport
) -> None:
    await gwy.apply_write("settings/temperatureTarget", "22.5")
    assert registers.registers[135] == 225
    assert pubsub.published["eda/settings/temperatureTarget"] == "22.5"

    await gwy.apply_write("settings/awayTemperatureReduction", "-1")
    assert registers.registers[101] == 0xFFF6
    assert pubsub.published["eda/settings/awayTemperatureReduction"] == "-1.0"


async def test_apply_write_flag(
    gwy: Gateway, registers: FakeRegisterTransport, pubsub: FakePubSubTransport
) -> None:
    registers.registers[STATUS_WORD_ADDRESS] |= 0x8000  # defrosting

    await gwy.apply_write("mode/longAway", "ON")

    assert registers.registers[STATUS_WORD_ADDRESS] == 0x8000 | 1 << 5 | 1 << 4
    assert pubsub.published["eda/mode/longAway"] == "ON"
    assert pubsub.published["eda/mode/away"] == "ON"
    assert pubsub.published["eda/mode/defrosting"] == "ON"

    await gwy.apply_write("mode/away", b"OFF")

    assert registers.registers[STATUS_WORD_ADDRESS] == 0x8000 | 1 << 5
    assert pubsub.published["eda/mode/away"] == "OFF"


@pytest.mark.parametrize("target, payload", INVALID_WRITES)
async def test_apply_write_invalid(
    gwy: Gateway,
    registers: FakeRegisterTransport,
    pubsub: FakePubSubTransport,
    target: str,
    payload: str,
) -> None:
    await gwy.apply_write(target, payload)  # is not fatal

    assert registers.writes == []
    assert len(pubsub.published) == NUM_TOPICS  # but the state is still published


async def test_apply_write_concurrently(
    gwy: Gateway, registers: FakeRegisterTransport, pubsub: FakePubSubTransport
) -> None:
    await asyncio.gather(
        gwy.apply_write("mode/longAway", "ON"),
        gwy.apply_write("mode/manualBoost", "ON"),
        gwy.apply_write("mode/away", "OFF"),
        gwy.apply_write("settings/awayVentilationLevel", "55"),
    )

    # no read-modify-write of the status word was lost
    assert registers.registers[STATUS_WORD_ADDRESS] == 1 << 5 | 1 << 9
    assert registers.max_in_flight == 1

    assert pubsub.published["eda/mode/longAway"] == "ON"
    assert pubsub.published["eda/mode/manualBoost"] == "ON"
    assert pubsub.published["eda/mode/away"] == "OFF"
    assert pubsub.published["eda/settings/awayVentilationLevel"] == "55"


async def test_subscribe_for_writes(
    gwy: Gateway, registers: FakeRegisterTransport, pubsub: FakePubSubTransport
) -> None:
    await gwy.subscribe_for_writes()

    assert pubsub.subscriptions == ["eda/mode/+/set", "eda/settings/+/set"]

    pubsub.inject("eda/settings/awayVentilationLevel/set", b"55")
    pubsub.inject("eda/mode/away/set", b"OFF")
    pubsub.inject("other/settings/awayVentilationLevel/set", b"66")  # not ours
    pubsub.inject("eda/settings/awayVentilationLevel", b"77")  # not a /set

    await asyncio.gather(*gwy._tasks)

    assert len(gwy._tasks) == 2
    assert registers.registers[100] == 55
    assert registers.registers[STATUS_WORD_ADDRESS] == 0
    assert pubsub.published["eda/settings/awayVentilationLevel"] == "55"
    assert pubsub.published["eda/mode/normal"] == "ON"


async def test_write_request_transport_error(
    gwy: Gateway, registers: FakeRegisterTransport, pubsub: FakePubSubTransport
) -> None:
    await gwy.subscribe_for_writes()
    registers.fail_reads = True

    pubsub.inject("eda/mode/away/set", b"OFF")
    await asyncio.gather(*gwy._tasks)  # the error is logged, not raised

    assert registers.writes == []
    assert pubsub.published == {}


async def test_write_request_out_of_range(
    gwy: Gateway, registers: FakeRegisterTransport, pubsub: FakePubSubTransport
) -> None:
    await gwy.subscribe_for_writes()

    pubsub.inject("eda/settings/temperatureTarget/set", b"1e308")
    results = await asyncio.gather(*gwy._tasks, return_exceptions=True)

    assert results and all(r is None for r in results)  # the task did not die
    assert registers.writes == []
    assert len(pubsub.published) == NUM_TOPICS


async def test_start_stop(
    gwy: Gateway, registers: FakeRegisterTransport, pubsub: FakePubSubTransport
) -> None:
    await gwy.start()

    assert gwy.identity is not None
    assert gwy.identity.model_name == "Pegasus eco EDE - CG"

    assert len(pubsub.retained) == len(EDA_REGISTER_MAP.entries())  # discovery
    assert len(pubsub.published) == NUM_TOPICS + len(pubsub.retained)
    assert pubsub.published["eda/status"] == "online"
    assert len(pubsub.subscriptions) == 2

    await gwy.stop()

    assert pubsub.published["eda/status"] == "offline"
    assert pubsub.is_closed and registers.is_closed


async def test_start_no_discovery(
    registers: FakeRegisterTransport, pubsub: FakePubSubTransport
) -> None:
    config = {"topic_prefix": "hvac/eda", "disable_discovery": True}
    gwy = Gateway(registers, pubsub, config=config)

    await gwy.start()
    await gwy.stop()

    assert pubsub.retained == {}
    assert pubsub.published["hvac/eda/status"] == "offline"
    assert pubsub.published["hvac/eda/mode/away"] == "ON"


async def test_poll_loop(
    gwy: Gateway, registers: FakeRegisterTransport, pubsub: FakePubSubTransport
) -> None:
    gwy.config["poll_interval"] = 0.01
    registers.fail_reads = True

    task = asyncio.create_task(gwy._poll_loop())
    await asyncio.sleep(0.05)

    assert not task.done()  # a failed cycle is not fatal
    assert pubsub.published == {}

    registers.fail_reads = False
    await asyncio.sleep(0.05)

    task.cancel()
    assert pubsub.published["eda/status"] == "online"


async def test_poll_loop_other_error(
    gwy: Gateway, pubsub: FakePubSubTransport, monkeypatch: pytest.MonkeyPatch
) -> None:
    gwy.config["poll_interval"] = 0.01
    publish_all = gwy.publish_all
    cycles: list[int] = []

    async def flaky_publish_all() -> None:
        cycles.append(len(cycles))
        if len(cycles) == 1:
            raise exc.DecodeRangeError("Invalid value: 0x1234")
        await publish_all()

    monkeypatch.setattr(gwy, "publish_all", flaky_publish_all)

    task = asyncio.create_task(gwy._poll_loop())
    await asyncio.sleep(0.05)

    assert not task.done()  # is logged, and polling carries on
    assert len(cycles) > 1
    assert pubsub.published["eda/status"] == "online"

    task.cancel()
