"""Store layer.

The flattener talks to any backend implementing
:class:`~pyjsonstate.store.base.StateStoreBackend`. :class:`MemoryStore`
is the bundled in-process implementation.
"""

from pyjsonstate.store.base import StateStoreBackend
from pyjsonstate.store.memory import MemoryStore, StoredObject, StoredState

__all__ = ["MemoryStore", "StateStoreBackend", "StoredObject", "StoredState"]
