"""Path sanitizing helpers."""

from __future__ import annotations

import re

from pyjsonstate._constants import FORBIDDEN_CHARS_RE, PATH_SEPARATOR


def sanitize_path(path: str, pattern: re.Pattern[str] = FORBIDDEN_CHARS_RE) -> str:
    """Replace forbidden characters in a full dotted path with ``_``."""
    return pattern.sub("_", str(path))


def sanitize_segment(segment: object, pattern: re.Pattern[str] = FORBIDDEN_CHARS_RE) -> str:
    """Normalize one path segment: drop separators, replace forbidden characters."""
    return sanitize_path(str(segment).replace(PATH_SEPARATOR, ""), pattern)


def join_path(*segments: str) -> str:
    """Join non-empty segments with the path separator."""
    return PATH_SEPARATOR.join(segment for segment in segments if segment)


def last_segment(path: str) -> str:
    return path.rsplit(PATH_SEPARATOR, 1)[-1]


def is_within(path: str, prefix: str) -> bool:
    """Return True if *path* equals *prefix* or lies below it."""
    return path == prefix or path.startswith(prefix + PATH_SEPARATOR)
