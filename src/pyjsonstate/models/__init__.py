"""Data models for store metadata and parse options."""

from pyjsonstate.models._base import JsonStateBaseModel
from pyjsonstate.models.objects import (
    ContainerCommon,
    LeafCommon,
    LeafType,
    ObjectKind,
    Role,
    runtime_type,
)
from pyjsonstate.models.options import ParseOptions

__all__ = [
    "ContainerCommon",
    "JsonStateBaseModel",
    "LeafCommon",
    "LeafType",
    "ObjectKind",
    "ParseOptions",
    "Role",
    "runtime_type",
]
