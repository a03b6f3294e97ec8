#!/usr/bin/env python3
"""EDA bridge - an Enervent EDA (Modbus) to MQTT bridge.

Works with (amongst others):
- Pingvin, Pandion, Pegasus (incl. eco)
- LTR-3, LTR-6, LTR-7
"""

from __future__ import annotations

import logging

from eda_tx import VERSION  # noqa: F401

from .catalog import EDA_REGISTER_MAP, RegisterMap  # noqa: F401
from .device import (  # noqa: F401
    AlarmEntry,
    DeviceIdentity,
    read_alarm_history,
    read_device_identity,
)
from .gateway import Gateway  # noqa: F401

_LOGGER = logging.getLogger(__name__)


class GracefulExit(SystemExit):
    code = 1
