#!/usr/bin/env python3
"""EDA bridge - exceptions above the transport layer."""

from __future__ import annotations

from eda_tx.exceptions import (  # noqa: F401
    BridgeException as BridgeException,
    DecodeRangeError as DecodeRangeError,
    PayloadInvalid as PayloadInvalid,
    PublishFailed as PublishFailed,
    TargetNotWritable as TargetNotWritable,
    TransportError as TransportError,
    TransportSourceInvalid as TransportSourceInvalid,
    UnknownFlag as UnknownFlag,
    UnknownSetting as UnknownSetting,
    UnknownTarget as UnknownTarget,
)
