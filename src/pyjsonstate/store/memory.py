"""In-memory hierarchical store.

Containers and leaves are kept in flat ``path -> record`` tables; the
hierarchy is implied by the dotted paths. Last write wins.
"""

from __future__ import annotations

import copy
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict

from pyjsonstate._constants import PATH_SEPARATOR
from pyjsonstate._sanitize import is_within
from pyjsonstate.exceptions import StoreError
from pyjsonstate.models.objects import ContainerCommon, LeafCommon, ObjectKind


def _utcnow() -> datetime:
    return datetime.now(UTC)


class StoredObject(BaseModel):
    model_config = ConfigDict(extra="forbid")

    path: str
    kind: ObjectKind
    common: ContainerCommon | LeafCommon


class StoredState(BaseModel):
    model_config = ConfigDict(extra="forbid")

    value: Any = None
    ack: bool = True
    updated_at: datetime


class MemoryStore:
    """Dictionary-backed implementation of the store protocol."""

    def __init__(self, *, clock: Callable[[], datetime] = _utcnow) -> None:
        self._clock = clock
        self._objects: dict[str, StoredObject] = {}
        self._states: dict[str, StoredState] = {}

    @staticmethod
    def _check_path(path: str) -> None:
        if not path or path.startswith(PATH_SEPARATOR) or path.endswith(PATH_SEPARATOR) or ".." in path:
            raise StoreError(f"invalid path {path!r}", path=path)

    async def create_or_update_container(self, path: str, name: str) -> None:
        self._check_path(path)
        self._objects[path] = StoredObject(
            path=path,
            kind=ObjectKind.CONTAINER,
            common=ContainerCommon(name=name),
        )

    async def create_or_update_leaf(self, path: str, common: LeafCommon) -> None:
        self._check_path(path)
        existing = self._objects.get(path)
        if existing is not None and existing.kind == ObjectKind.LEAF and isinstance(existing.common, LeafCommon):
            # Extend semantics: a re-creation without a unit keeps the known one.
            if common.unit is None and existing.common.unit is not None:
                common = common.model_copy(update={"unit": existing.common.unit})
        self._objects[path] = StoredObject(path=path, kind=ObjectKind.LEAF, common=common)

    async def write_value(self, path: str, value: Any, ack: bool) -> None:
        self._check_path(path)
        self._states[path] = StoredState(value=copy.deepcopy(value), ack=ack, updated_at=self._clock())

    async def delete_subtree(self, path: str) -> None:
        for table in (self._objects, self._states):
            for key in [key for key in table if is_within(key, path)]:
                del table[key]

    def get_object(self, path: str) -> StoredObject | None:
        return self._objects.get(path)

    def get_state(self, path: str) -> StoredState | None:
        return self._states.get(path)

    def get_value(self, path: str, default: Any = None) -> Any:
        state = self._states.get(path)
        return default if state is None else state.value

    def children(self, path: str) -> list[str]:
        """Return the direct child paths of *path*, sorted."""
        depth = path.count(PATH_SEPARATOR) + 1
        return sorted(
            key
            for key in self._objects
            if key != path and is_within(key, path) and key.count(PATH_SEPARATOR) == depth
        )

    def snapshot(self, prefix: str | None = None) -> dict[str, Any]:
        """Return ``{path: value}`` for every written leaf, optionally under *prefix*."""
        return {
            path: copy.deepcopy(state.value)
            for path, state in sorted(self._states.items())
            if prefix is None or is_within(path, prefix)
        }

    def __contains__(self, path: object) -> bool:
        return path in self._objects
