#!/usr/bin/env python3
"""A CLI for the eda_bridge library."""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from typing import Any, Final

import click
import voluptuous as vol
from colorama import Fore, Style, init as colorama_init

from eda_bridge import (
    EDA_REGISTER_MAP,
    Gateway,
    GracefulExit,
    read_alarm_history,
    read_device_identity,
)
from eda_bridge import exceptions as exc
from eda_bridge.const import (
    SZ_CONFIG,
    SZ_DISABLE_DISCOVERY,
    SZ_OFFLINE,
    SZ_POLL_INTERVAL,
    SZ_STATUS,
    SZ_TOPIC_PREFIX,
)
from eda_bridge.schemas import SCH_GLOBAL_CONFIG
from eda_tx import pubsub_transport_factory, register_transport_factory, set_logging
from eda_tx.schemas import (
    SZ_MODBUS_CONFIG,
    SZ_MODBUS_DEVICE,
    SZ_MQTT_BROKER,
    SZ_MQTT_CONFIG,
)
from eda_tx.transport import RegisterTransport

ALARMS: Final = "alarms"
DUMP: Final = "dump"
IDENTITY: Final = "identity"
RUN: Final = "run"

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])

LIB_CFG_KEYS = (SZ_TOPIC_PREFIX, SZ_POLL_INTERVAL, SZ_DISABLE_DISCOVERY)


def deep_merge(src: dict[str, Any], dst: dict[str, Any]) -> dict[str, Any]:
    """Deep merge a src dict (precedent) into a dst dict and return the result."""

    result = dict(dst)
    for key, value in src.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = deep_merge(value, result[key])
        else:
            result[key] = value
    return result


def split_kwargs(obj: tuple[dict, dict], kwargs: dict) -> tuple[dict, dict]:
    """Split kwargs into cli/library kwargs (None means: not set via the CLI)."""
    cli_kwargs, lib_kwargs = obj

    cli_kwargs.update({k: v for k, v in kwargs.items() if k not in LIB_CFG_KEYS})
    lib_kwargs[SZ_CONFIG].update(
        {k: v for k, v in kwargs.items() if k in LIB_CFG_KEYS and v is not None}
    )

    return cli_kwargs, lib_kwargs


@click.group(context_settings=CONTEXT_SETTINGS)
@click.option("-c", "--config-file", type=click.File("r"), help="a JSON config file")
@click.option("-v", "--verbose", count=True, help="-v for INFO, -vv for DEBUG")
@click.option("-o", "--log-file", type=click.Path(), help="also log to this file")
@click.option("--color/--no-color", default=True, help="colour the console output")
@click.pass_context
def cli(ctx, config_file=None, **kwargs: Any) -> None:
    """A bridge between an Enervent (EDA) ventilation unit and MQTT."""

    kwargs, lib_kwargs = split_kwargs(({}, {SZ_CONFIG: {}}), kwargs)

    if config_file:  # CLI takes precedence
        lib_kwargs = deep_merge(lib_kwargs, json.load(config_file))

    ctx.obj = kwargs, lib_kwargs


# Args/Params for all commands that read registers
class ModbusCommand(click.Command):  # client.py <command> <modbus_device>
    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.params.insert(0, click.Argument(("modbus-device",)))


#
# 1/4: RUN (synchronize the unit with the broker, until stopped)
@click.command(cls=ModbusCommand)
@click.argument("mqtt-broker")
@click.option("-p", "--topic-prefix", type=click.STRING, help="default: eda")
@click.option("-i", "--poll-interval", type=click.FLOAT, help="seconds, default: 10")
@click.option(
    "-d/-nd",
    "--discovery/--no-discovery",
    default=None,
    help="publish Home Assistant discovery configs (default: yes)",
)
@click.pass_obj
def run(obj, discovery: bool | None = None, **kwargs: Any):
    """Synchronize a unit's registers with an MQTT broker."""
    if discovery is not None:
        kwargs[SZ_DISABLE_DISCOVERY] = not discovery
    config, lib_config = split_kwargs(obj, kwargs)
    return RUN, lib_config, config


#
# 2/4: DUMP (read & decode all the registers, once)
@click.command(cls=ModbusCommand)
@click.pass_obj
def dump(obj, **kwargs: Any):
    """Print the (decoded) state of a unit as JSON."""
    config, lib_config = split_kwargs(obj, kwargs)
    return DUMP, lib_config, config


#
# 3/4: IDENTITY (read the model, versions)
@click.command(cls=ModbusCommand)
@click.pass_obj
def identity(obj, **kwargs: Any):
    """Print the identity (model, software version) of a unit."""
    config, lib_config = split_kwargs(obj, kwargs)
    return IDENTITY, lib_config, config


#
# 4/4: ALARMS (read the alarm history)
@click.command(cls=ModbusCommand)
@click.pass_obj
def alarms(obj, **kwargs: Any):
    """Print the alarm history of a unit, newest first."""
    config, lib_config = split_kwargs(obj, kwargs)
    return ALARMS, lib_config, config


async def print_state(registers: RegisterTransport) -> None:
    """Print the (decoded) state of the unit, one category at a time."""

    state = await EDA_REGISTER_MAP.read_state(registers)

    for category, values in state.items():
        print(f"{Style.BRIGHT}{category}{Style.RESET_ALL}")
        print(json.dumps(values, indent=4))


async def async_main(command: str, lib_kwargs: dict, **kwargs: Any) -> None:
    """Do certain things."""

    registers = await register_transport_factory(
        kwargs[SZ_MODBUS_DEVICE], config=lib_kwargs[SZ_MODBUS_CONFIG]
    )

    if command == IDENTITY:
        try:
            unit = await read_device_identity(registers)
        finally:
            registers.close()
        print(f"{Style.BRIGHT}{unit.model_name}{Style.RESET_ALL} ({unit.device_key})")
        print(f" - software version: {unit.software_version}")
        return

    if command == ALARMS:
        try:
            entries = await read_alarm_history(registers)
        finally:
            registers.close()
        if not entries:
            print("No alarms.")
        for entry in entries:
            print(f"{Fore.YELLOW}{entry}")
        return

    if command == DUMP:
        try:
            await print_state(registers)
        finally:
            registers.close()
        return

    prefix = lib_kwargs[SZ_CONFIG][SZ_TOPIC_PREFIX]
    try:
        pubsub = await pubsub_transport_factory(
            kwargs[SZ_MQTT_BROKER],
            config=lib_kwargs[SZ_MQTT_CONFIG],
            will=(f"{prefix}/{SZ_STATUS}", SZ_OFFLINE),
        )
    except exc.TransportError:
        registers.close()
        raise

    gwy = Gateway(registers, pubsub, config=lib_kwargs[SZ_CONFIG])

    print("\r\nclient.py: Starting bridge...")

    try:  # main code here
        await gwy.start()
        await asyncio.Event().wait()  # until cancelled

    except asyncio.CancelledError:
        msg = "ended via: CancelledError (e.g. SIGINT)"
    except GracefulExit:
        msg = "ended via: GracefulExit"
    except exc.BridgeException as err:
        msg = f"ended via: BridgeException: {err}"
    else:  # if no Exceptions raised
        msg = "ended without error"
    finally:
        await gwy.stop()

    print(f"\r\nclient.py: Bridge stopped: {msg}")


cli.add_command(run)
cli.add_command(dump)
cli.add_command(identity)
cli.add_command(alarms)


def main() -> None:
    try:
        result = cli(standalone_mode=False)
    except (click.ClickException, click.exceptions.Abort) as err:
        print(f"Error: {err}")
        sys.exit(-1)

    if isinstance(result, int):
        sys.exit(result)

    (command, lib_kwargs, kwargs) = result

    try:
        lib_kwargs = SCH_GLOBAL_CONFIG(lib_kwargs)
    except vol.Invalid as err:
        print(f"Error: invalid configuration: {err}")
        sys.exit(-1)

    level = (logging.WARNING, logging.INFO, logging.DEBUG)[min(kwargs["verbose"], 2)]
    set_logging(
        logging.getLogger(),
        level=level,
        use_color=kwargs["color"],
        file_name=kwargs["log_file"],
    )
    colorama_init(autoreset=True, strip=not kwargs["color"])

    try:
        asyncio.run(async_main(command, lib_kwargs, **kwargs))
    except KeyboardInterrupt:
        print("\r\nclient.py: Bridge stopped: ended via: KeyboardInterrupt")
    except exc.BridgeException as err:
        print(f"Error: {err}")
        sys.exit(1)


if __name__ == "__main__":
    main()
