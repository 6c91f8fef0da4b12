"""Helpers for safe payload logging.

Payloads arriving from producers routinely carry credentials and large
encoded blobs. Error logs include a dump of the failing subtree, so it
goes through :func:`dump_for_log` to redact sensitive fields and bound
its size.
"""

from __future__ import annotations

import json
from typing import Any

from pyjsonstate._nodes import NodeKind, classify

_SENSITIVE_KEY_MARKERS: tuple[str, ...] = (
    "password",
    "passwd",
    "secret",
    "token",
    "authorization",
    "cookie",
    "apikey",
    "api_key",
)


def is_sensitive_key(key: str) -> bool:
    lowered = key.lower()
    return any(marker in lowered for marker in _SENSITIVE_KEY_MARKERS)


def redact_for_log(value: Any, *, max_string: int = 512, _depth: int = 0) -> Any:
    """Return a copy of a JSON *value* with sensitive members and long strings cut."""
    if _depth > 20:
        return "<max-depth>"
    kind = classify(value)
    if kind is NodeKind.OBJECT:
        return {
            str(key): "<redacted>"
            if is_sensitive_key(str(key))
            else redact_for_log(member, max_string=max_string, _depth=_depth + 1)
            for key, member in value.items()
        }
    if kind is NodeKind.ARRAY:
        return [redact_for_log(item, max_string=max_string, _depth=_depth + 1) for item in value]
    if isinstance(value, str) and len(value) > max_string:
        return f"{value[:max_string]}…<truncated>"
    if kind is NodeKind.OTHER:
        return repr(value)
    return value


def dump_for_log(value: Any, *, max_chars: int = 512) -> str:
    """Serialise a redacted *value* to at most *max_chars* characters."""
    try:
        text = json.dumps(redact_for_log(value, max_string=max_chars), ensure_ascii=False, default=str)
    except Exception:
        return f"<unprintable {type(value).__name__}>"
    if len(text) > max_chars:
        return f"{text[:max_chars]}…<truncated>"
    return text
