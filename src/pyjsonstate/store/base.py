"""Structural interface of the hierarchical store."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from pyjsonstate.models.objects import LeafCommon


@runtime_checkable
class StateStoreBackend(Protocol):
    """Path-addressed store of containers and leaves.

    Test doubles and adapters to real backends implement it structurally.
    Every operation is independent; implementations signal failure by
    raising (preferably :class:`pyjsonstate.exceptions.StoreError`).
    """

    async def create_or_update_container(self, path: str, name: str) -> None: ...

    async def create_or_update_leaf(self, path: str, common: LeafCommon) -> None: ...

    async def write_value(self, path: str, value: Any, ack: bool) -> None: ...

    async def delete_subtree(self, path: str) -> None: ...
