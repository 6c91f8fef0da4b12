"""Display role inference for scalar leaves."""

from __future__ import annotations

from typing import Any

from pyjsonstate._constants import (
    EPOCH_MS_DIGITS,
    EPOCH_MS_MAX,
    EPOCH_MS_MIN,
    EPOCH_S_DIGITS,
    EPOCH_S_MAX,
    EPOCH_S_MIN,
)
from pyjsonstate.models.objects import Role


def looks_like_epoch(value: int | float) -> bool:
    """Return True for Unix epoch seconds or milliseconds in a plausible window."""
    digits = len(str(abs(value))) if isinstance(value, int) else len(f"{abs(value):.0f}")
    if digits == EPOCH_MS_DIGITS:
        return EPOCH_MS_MIN <= value < EPOCH_MS_MAX
    if digits == EPOCH_S_DIGITS:
        return EPOCH_S_MIN <= value < EPOCH_S_MAX
    return False


def infer_role(value: Any, write: bool) -> Role:
    """Derive a display role from a scalar's type, value and writability.

    Writable numbers are always ``level``, even when they look like a
    timestamp; only read-only numbers are promoted to ``value.time``.
    """
    if isinstance(value, bool):
        return Role.SWITCH if write else Role.INDICATOR
    if isinstance(value, (int, float)):
        if write:
            return Role.LEVEL
        if value and looks_like_epoch(value):
            return Role.VALUE_TIME
        return Role.VALUE
    if isinstance(value, str):
        return Role.TEXT
    return Role.STATE
