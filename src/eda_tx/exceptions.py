#!/usr/bin/env python3
"""EDA bridge - exceptions within the codec/transport layer."""

from __future__ import annotations


class _BridgeBaseException(Exception):
    """Base class for all eda_tx exceptions."""

    pass


class BridgeException(_BridgeBaseException):
    """Base class for all eda_tx exceptions."""

    HINT: None | str = None

    def __init__(self, *args: object):
        super().__init__(*args)
        self.message: str | None = args[0] if args else None  # type: ignore[assignment]

    def __str__(self) -> str:
        if self.message and self.HINT:
            return f"{self.message} (hint: {self.HINT})"
        if self.message:
            return self.message
        if self.HINT:
            return f"Hint: {self.HINT}"
        return ""


########################################################################################
# Errors at/below the transport layer (registers and pub/sub)


class TransportError(BridgeException):
    """An error when reading/writing registers, or publishing/subscribing topics."""


class TransportSourceInvalid(TransportError):
    """The transport's URL or configuration is not a valid type/configuration."""


class PublishFailed(TransportError):
    """One or more topics of a publish batch were not published."""

    def __init__(self, failures: dict[str, BaseException]) -> None:
        super().__init__(
            f"Failed to publish {len(failures)} topic(s): {', '.join(failures)}"
        )
        self.failures = failures


########################################################################################
# Errors in the translation layer (decoding, encoding, write targets)


class DecodeRangeError(BridgeException):
    """A raw value is outside any modelled range (this shouldn't happen)."""


class UnknownTarget(BridgeException):
    """The write target is not in the register map (it may be malformed or stale)."""


class UnknownFlag(UnknownTarget):
    """The flag is not in the status bitfield."""


class UnknownSetting(UnknownTarget):
    """The setting is not in the register map."""


class TargetNotWritable(UnknownTarget):
    """The target is in the register map, but is read-only."""

    HINT = "only settings and the writable modes accept /set"


class PayloadInvalid(BridgeException):
    """The payload of a write request cannot be encoded for its target."""
