"""Upfront classification of JSON nodes."""

from __future__ import annotations

from enum import Enum
from typing import Any


class NodeKind(Enum):
    NULL = "null"
    SCALAR = "scalar"
    ARRAY = "array"
    OBJECT = "object"
    OTHER = "other"


def classify(value: Any) -> NodeKind:
    if value is None:
        return NodeKind.NULL
    if isinstance(value, (str, bool, int, float)):
        return NodeKind.SCALAR
    if isinstance(value, (list, tuple)):
        return NodeKind.ARRAY
    if isinstance(value, dict):
        return NodeKind.OBJECT
    return NodeKind.OTHER


def is_scalar(value: Any) -> bool:
    return classify(value) is NodeKind.SCALAR
