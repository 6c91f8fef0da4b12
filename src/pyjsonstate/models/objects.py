"""Store object metadata: leaf types, display roles and ``common`` records."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import ConfigDict, Field

from pyjsonstate.models._base import JsonStateBaseModel


class LeafType(StrEnum):
    """Declared value type of a leaf."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    MIXED = "mixed"


class Role(StrEnum):
    """Display role of a leaf. Informational only."""

    INDICATOR = "indicator"
    SWITCH = "switch"
    LEVEL = "level"
    VALUE = "value"
    VALUE_TIME = "value.time"
    TEXT = "text"
    JSON = "json"
    STATE = "state"


class ObjectKind(StrEnum):
    CONTAINER = "container"
    LEAF = "leaf"


def runtime_type(value: Any) -> LeafType | None:
    """Return the concrete leaf type of a scalar, or ``None`` for non-scalars.

    ``bool`` is checked first because it subclasses ``int``.
    """
    if isinstance(value, bool):
        return LeafType.BOOLEAN
    if isinstance(value, (int, float)):
        return LeafType.NUMBER
    if isinstance(value, str):
        return LeafType.STRING
    return None


class ContainerCommon(JsonStateBaseModel):
    """Metadata of a container node."""

    model_config = ConfigDict(frozen=True)

    name: str = ""


class LeafCommon(JsonStateBaseModel):
    """Metadata of a leaf node.

    ``states`` is the enumerated value → label map, if the caller
    configured one for this leaf.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    role: Role
    type: LeafType
    write: bool = False
    read: bool = True
    unit: str | None = None
    states: dict[str, str] | None = Field(default=None)
