"""Custom exception hierarchy for pyjsonstate."""

from __future__ import annotations


class JsonStateError(Exception):
    """Base exception for all pyjsonstate errors."""


class JsonStateConfigError(JsonStateError):
    """Invalid or missing configuration."""


class PayloadDecodeError(JsonStateError):
    """A base64 or embedded JSON fragment could not be decoded.

    Raised by the payload sniffer. The flattener catches it, logs a
    warning and keeps the original value.
    """

    def __init__(self, message: str, *, path: str = "") -> None:
        self.path = path
        super().__init__(message)


class StoreError(JsonStateError):
    """A store backend operation failed."""

    def __init__(self, message: str, *, path: str = "") -> None:
        self.path = path
        super().__init__(message)


class IngestionError(JsonStateError):
    """Transport-level failure while receiving a payload (network, non-200, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        source: str = "",
        status_code: int | None = None,
    ) -> None:
        self.source = source
        self.status_code = status_code
        super().__init__(message)
