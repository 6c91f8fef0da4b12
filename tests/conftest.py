from __future__ import annotations

from typing import Any

import pytest

from pyjsonstate.flattener import JsonFlattener
from pyjsonstate.models.objects import LeafCommon
from pyjsonstate.store.memory import MemoryStore


class RecordingStore(MemoryStore):
    """Memory store that records every call and can be told to fail."""

    def __init__(self) -> None:
        super().__init__()
        self.calls: list[tuple[str, str, Any]] = []
        self.fail_paths: set[str] = set()

    def _maybe_fail(self, path: str) -> None:
        if path in self.fail_paths:
            raise RuntimeError(f"backend unavailable for {path}")

    async def create_or_update_container(self, path: str, name: str) -> None:
        self.calls.append(("container", path, name))
        self._maybe_fail(path)
        await super().create_or_update_container(path, name)

    async def create_or_update_leaf(self, path: str, common: LeafCommon) -> None:
        self.calls.append(("leaf", path, common))
        self._maybe_fail(path)
        await super().create_or_update_leaf(path, common)

    async def write_value(self, path: str, value: Any, ack: bool) -> None:
        self.calls.append(("write", path, value))
        self._maybe_fail(path)
        await super().write_value(path, value, ack)

    async def delete_subtree(self, path: str) -> None:
        self.calls.append(("delete", path, None))
        await super().delete_subtree(path)

    def paths(self, kind: str) -> list[str]:
        return [path for call_kind, path, _ in self.calls if call_kind == kind]

    def leaf(self, path: str) -> LeafCommon:
        obj = self.get_object(path)
        assert obj is not None, path
        assert isinstance(obj.common, LeafCommon)
        return obj.common


@pytest.fixture
def store() -> RecordingStore:
    return RecordingStore()


@pytest.fixture
def flattener(store: RecordingStore) -> JsonFlattener:
    return JsonFlattener(store)
