#!/usr/bin/env python3
"""EDA bridge - the gateway between a unit's registers and its MQTT topics.

After every write, the full state of the unit is (re-)published, as a write to one
register (e.g. a mode) may change others (e.g. enabling one mode may disable another).
"""

from __future__ import annotations

import asyncio
import json
import logging
import math
from typing import Any

from eda_tx.helpers import set_flag
from eda_tx.transport import PubSubTransport, RegisterTransport

from . import exceptions as exc
from .catalog import EDA_REGISTER_MAP, RegisterMap, ValueT
from .const import (
    SZ_DISABLE_DISCOVERY,
    SZ_DISCOVERY_PREFIX,
    SZ_MODE,
    SZ_OFF,
    SZ_OFFLINE,
    SZ_ON,
    SZ_ONLINE,
    SZ_POLL_INTERVAL,
    SZ_READINGS,
    SZ_SET,
    SZ_SETTINGS,
    SZ_STATUS,
    SZ_TOPIC_PREFIX,
)
from .device import DeviceIdentity, read_device_identity
from .discovery import discovery_configs
from .schemas import SCH_BRIDGE_CONFIG, BridgeConfigT

_LOGGER = logging.getLogger(__name__)


class Gateway:
    """The synchronization engine between a register transport & a pub/sub transport.

    Writes (and the publishing of state that follows each write) are serialized.
    """

    def __init__(
        self,
        registers: RegisterTransport,
        pubsub: PubSubTransport,
        /,
        *,
        config: dict[str, Any] | None = None,
        register_map: RegisterMap = EDA_REGISTER_MAP,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self.config: BridgeConfigT = SCH_BRIDGE_CONFIG(config or {})

        self._registers = registers
        self._pubsub = pubsub
        self._map = register_map
        self._loop = loop or asyncio.get_running_loop()

        self._prefix = self.config[SZ_TOPIC_PREFIX]
        self._lock = asyncio.Lock()  # one sync cycle at a time

        self.identity: DeviceIdentity | None = None

        self._del_msg_handler: Any = None
        self._poller: asyncio.Task[None] | None = None
        self._tasks: list[asyncio.Task[None]] = []

    def __str__(self) -> str:
        return f"{self.__class__.__name__}({self._prefix})"

    def topic(self, *levels: str) -> str:
        """Return a topic under this gateway's prefix, e.g. eda/mode/away."""
        return "/".join((self._prefix, *levels))

    async def start(self) -> None:
        """Publish the unit's state, then keep it synchronized (poll & subscribe)."""

        self.identity = await read_device_identity(self._registers)

        if not self.config[SZ_DISABLE_DISCOVERY]:
            await self.publish_discovery()

        await self.subscribe_for_writes()
        await self.publish_all()

        self._poller = self._loop.create_task(self._poll_loop())

    async def stop(self) -> None:
        """Stop synchronizing, mark the unit as offline and close the transports."""

        if self._del_msg_handler:
            self._del_msg_handler()
            self._del_msg_handler = None

        tasks = [t for t in (self._poller, *self._tasks) if t and not t.done()]
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

        try:
            await self._pubsub.publish(self.topic(SZ_STATUS), SZ_OFFLINE)
        except exc.TransportError as err:
            _LOGGER.warning("%s: unable to mark the unit as offline: %s", self, err)

        self._pubsub.close()
        self._registers.close()

    async def _poll_loop(self) -> None:
        """Publish the unit's state periodically (a failed cycle is not fatal)."""

        while True:
            await asyncio.sleep(self.config[SZ_POLL_INTERVAL])

            try:
                await self.publish_all()
            except exc.TransportError as err:
                _LOGGER.error("%s: sync cycle failed: %s", self, err)
            except (exc.BridgeException, LookupError, TypeError, ValueError) as err:
                _LOGGER.exception("%s: sync cycle failed: %s", self, err)

    async def read_state(self) -> dict[str, dict[str, ValueT]]:
        """Read & decode every register in the register map."""

        return await self._map.read_state(self._registers)

    async def publish_all(self) -> None:
        """Read the unit's full state, and publish every value (a sync cycle).

        Raise TransportError if any register could not be read, or PublishFailed
        (after all other topics have been published) if any topic failed.
        """

        async with self._lock:
            await self._publish_all()

    async def _publish_all(self) -> None:
        state = await self.read_state()

        topic_map = {self.topic(SZ_STATUS): SZ_ONLINE}

        # ON/OFF are the default payloads for MQTT switches in Home Assistant
        topic_map.update(
            {
                self.topic(SZ_MODE, k): SZ_ON if v else SZ_OFF
                for k, v in state[SZ_MODE].items()
            }
        )
        for category in (SZ_READINGS, SZ_SETTINGS):
            topic_map.update(
                {
                    self.topic(category, k): json.dumps(v)
                    for k, v in state[category].items()
                }
            )

        await self._publish_batch(topic_map)

    async def _publish_batch(
        self, topic_map: dict[str, str], retain: bool = False
    ) -> None:
        """Publish all the topics concurrently, then report any that failed."""

        results = await asyncio.gather(
            *(self._pubsub.publish(t, p, retain=retain) for t, p in topic_map.items()),
            return_exceptions=True,
        )

        failures = {
            topic: result
            for topic, result in zip(topic_map, results)
            if isinstance(result, BaseException)
        }
        if not failures:
            return

        for topic, err in failures.items():
            _LOGGER.error("%s: failed to publish %s: %s", self, topic, err)
        raise exc.PublishFailed(failures)

    async def publish_discovery(self) -> None:
        """Publish the Home Assistant discovery config of every entity."""

        if self.identity is None:
            self.identity = await read_device_identity(self._registers)

        configs = discovery_configs(
            self._map,
            self.identity,
            self._prefix,
            self.config[SZ_DISCOVERY_PREFIX],
        )

        _LOGGER.info(
            "%s: publishing discovery config for %s entities", self, len(configs)
        )
        await self._publish_batch(
            {topic: json.dumps(config) for topic, config in configs.items()},
            retain=True,
        )

    async def subscribe_for_writes(self) -> None:
        """Subscribe to the write requests (/set) of all settings and modes."""

        if self._del_msg_handler is None:
            self._del_msg_handler = self._pubsub.add_msg_handler(self._handle_msg)

        for category in (SZ_MODE, SZ_SETTINGS):
            topic = self.topic(category, "+", SZ_SET)
            _LOGGER.info("%s: subscribing to topic(s) %s", self, topic)
            await self._pubsub.subscribe(topic)

    def _handle_msg(self, topic: str, payload: bytes) -> None:
        """Process an inbound message (a callback), by scheduling a write."""

        prefix, suffix = self.topic(""), f"/{SZ_SET}"
        if not topic.startswith(prefix) or not topic.endswith(suffix):
            return

        target = topic[len(prefix) : -len(suffix)]  # e.g. settings/temperatureTarget

        task = self._loop.create_task(self._apply_write_request(target, payload))
        self._tasks = [t for t in self._tasks if not t.done()]
        self._tasks.append(task)

    async def _apply_write_request(self, target: str, payload: bytes) -> None:
        try:
            await self.apply_write(target, payload)
        except exc.TransportError as err:
            _LOGGER.error("%s: failed to apply %s = %s: %s", self, target, payload, err)
        except exc.BridgeException as err:
            _LOGGER.exception(
                "%s: failed to apply %s = %s: %s", self, target, payload, err
            )

    async def apply_write(self, target: str, payload: str | bytes) -> None:
        """Write a value to the unit, then publish the unit's (full) state.

        The target is either mode/<flag> (payload is ON/OFF), or settings/<setting>.
        An unknown target, or an invalid payload, is logged and otherwise ignored.
        """

        if isinstance(payload, bytes):
            payload = payload.decode("utf-8", errors="replace")

        async with self._lock:
            try:
                await self._write(target, payload)
            except (exc.UnknownTarget, exc.PayloadInvalid) as err:
                _LOGGER.warning("%s: ignoring %s = %s: %s", self, target, payload, err)

            await self._publish_all()

    async def _write(self, target: str, payload: str) -> None:
        category, _, name = target.partition("/")

        if category == SZ_MODE:
            flag = self._map.get_flag(name)
            if not flag.writable:
                raise exc.TargetNotWritable(f"Flag is read-only: {name}")

            if payload not in (SZ_ON, SZ_OFF):
                raise exc.PayloadInvalid(f"Invalid payload: {payload!r} (not ON/OFF)")

            _LOGGER.info("%s: updating mode %s to %s", self, name, payload)

            # read-modify-write, as the status word has other flags
            word = await self._registers.read_register(flag.address)
            await self._registers.write_register(
                flag.address, set_flag(word, name, payload == SZ_ON)
            )

        elif category == SZ_SETTINGS:
            setting = self._map.get_setting(name)

            try:
                value: ValueT = float(payload)
            except ValueError:
                value = math.nan
            if not math.isfinite(value):
                raise exc.PayloadInvalid(f"Invalid payload: {payload!r} (not a number)")

            try:
                raw = setting.codec.encode(value)
            except (OverflowError, ValueError) as err:
                raise exc.PayloadInvalid(
                    f"Invalid payload: {payload!r} (out of range)"
                ) from err

            _LOGGER.info("%s: updating setting %s to %s", self, name, value)

            await self._registers.write_register(setting.address, raw)

        else:
            raise exc.UnknownTarget(f"Unknown target: {target}")
