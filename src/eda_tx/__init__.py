#!/usr/bin/env python3
"""EDA bridge - the codec & transport (lower) layer."""

from __future__ import annotations

from .helpers import (  # noqa: F401
    FLAG_NAMES,
    STATE_BITFIELD_FLAGS,
    FlagSummaryT,
    RegisterT,
    decode_alarm_timestamp,
    decode_coefficient,
    decode_flags,
    decode_minutes,
    decode_percentage,
    decode_temperature,
    encode_coefficient,
    encode_minutes,
    encode_percentage,
    encode_temperature,
    set_flag,
)
from .logger import set_logging  # noqa: F401
from .transport import (  # noqa: F401
    ModbusTransport,
    MqttTransport,
    PubSubTransport,
    RegisterTransport,
    pubsub_transport_factory,
    register_transport_factory,
)
from .version import VERSION  # noqa: F401
