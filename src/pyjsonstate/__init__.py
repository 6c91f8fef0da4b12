"""pyjsonstate - Async engine mirroring schema-less JSON into a path-addressed state tree."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pyjsonstate")
except PackageNotFoundError:
    __version__ = "0+local"
from pyjsonstate._arrays import DEFAULT_NAMING_RULES, ArrayKeyResolver, NamingRule
from pyjsonstate._roles import infer_role
from pyjsonstate._sanitize import sanitize_path, sanitize_segment
from pyjsonstate.config import JsonStateConfig, MqttSettings
from pyjsonstate.exceptions import (
    IngestionError,
    JsonStateConfigError,
    JsonStateError,
    PayloadDecodeError,
    StoreError,
)
from pyjsonstate.flattener import JsonFlattener
from pyjsonstate.models import (
    ContainerCommon,
    LeafCommon,
    LeafType,
    ObjectKind,
    ParseOptions,
    Role,
)
from pyjsonstate.store import MemoryStore, StateStoreBackend

__all__ = [
    "__version__",
    "ArrayKeyResolver",
    "ContainerCommon",
    "DEFAULT_NAMING_RULES",
    "IngestionError",
    "JsonFlattener",
    "JsonStateConfig",
    "JsonStateConfigError",
    "JsonStateError",
    "LeafCommon",
    "LeafType",
    "MemoryStore",
    "MqttSettings",
    "NamingRule",
    "ObjectKind",
    "ParseOptions",
    "PayloadDecodeError",
    "Role",
    "StateStoreBackend",
    "StoreError",
    "infer_role",
    "sanitize_path",
    "sanitize_segment",
]
