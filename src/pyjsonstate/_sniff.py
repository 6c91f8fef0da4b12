"""Payload sniffing: opportunistic base64 and embedded JSON decoding.

Both helpers raise :class:`PayloadDecodeError` when a candidate fails to
decode; the flattener is responsible for logging and keeping the
original value.
"""

from __future__ import annotations

import base64
import binascii
import json
from typing import Any

from pyjsonstate._constants import BASE64_RE
from pyjsonstate.exceptions import PayloadDecodeError
from pyjsonstate.models.options import ParseOptions


def _reject_constant(token: str) -> Any:
    raise ValueError(f"{token} is not valid JSON")


def loads_strict(text: str) -> Any:
    """Parse JSON text, rejecting the ``NaN`` and ``Infinity`` extensions."""
    return json.loads(text, parse_constant=_reject_constant)


def is_base64(value: Any) -> bool:
    if not value or not isinstance(value, str):
        return False
    return BASE64_RE.fullmatch(value) is not None


def is_json_string(value: Any) -> bool:
    """Return True if *value* is a string holding valid JSON."""
    if not isinstance(value, str):
        return False
    try:
        loads_strict(value)
    except ValueError:
        return False
    return True


def decode_base64(value: str, *, to_hex: bool = False) -> Any:
    """Decode base64 text; parse the result when it is valid JSON."""
    try:
        raw = base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError, TypeError) as exc:
        raise PayloadDecodeError(f"invalid base64: {exc}") from exc
    if to_hex:
        return raw.hex()
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise PayloadDecodeError(f"base64 payload is not UTF-8: {exc}") from exc
    try:
        return loads_strict(text)
    except ValueError:
        return text


def should_decode_base64(value: Any, options: ParseOptions, *names: str) -> bool:
    if options.base64_mode(*names) is not None:
        return True
    return options.parse_base64 and is_base64(value)


def maybe_decode_base64(value: Any, options: ParseOptions, *names: str) -> Any:
    """Decode *value* if base64 decoding is enabled globally or for one of *names*.

    *names* are the key and/or full path the value lives at. Non-string
    values are returned unchanged.
    """
    if not isinstance(value, str) or not should_decode_base64(value, options, *names):
        return value
    return decode_base64(value, to_hex=options.base64_mode(*names) == "hex")


def maybe_auto_cast(value: Any) -> Any:
    """Replace a JSON-looking string by its parsed form."""
    if not isinstance(value, str):
        return value
    try:
        return loads_strict(value)
    except ValueError:
        return value
