"""Per-leaf runtime type tracking with sticky ``mixed`` drift detection."""

from __future__ import annotations

import logging
from typing import NamedTuple

from pyjsonstate.models.objects import LeafType

_logger = logging.getLogger(__name__)


class TypeObservation(NamedTuple):
    declared: LeafType
    changed: bool


class ConflictTracker:
    """Remember the last concrete type seen per leaf path.

    Once two observations at one path disagree, the path is declared
    ``mixed`` for the lifetime of the tracker.
    """

    def __init__(self) -> None:
        self._types: dict[str, LeafType] = {}
        self._mixed: set[str] = set()

    def observe(self, path: str, observed: LeafType) -> TypeObservation:
        """Record *observed* for *path* and return the type to declare.

        ``changed`` is True when the observation differs from the previous
        one, which means the leaf metadata must be re-created.
        """
        previous = self._types.get(path)
        self._types[path] = observed
        if previous is None:
            return TypeObservation(LeafType.MIXED if path in self._mixed else observed, False)
        if previous != observed:
            self._mixed.add(path)
            _logger.debug("Type changed for %s from %s to %s", path, previous, observed)
            return TypeObservation(LeafType.MIXED, True)
        if path in self._mixed:
            return TypeObservation(LeafType.MIXED, False)
        return TypeObservation(observed, False)

    def last_type(self, path: str) -> LeafType | None:
        return self._types.get(path)

    def declared_type(self, path: str) -> LeafType | None:
        if path in self._mixed:
            return LeafType.MIXED
        return self._types.get(path)

    def is_mixed(self, path: str) -> bool:
        return path in self._mixed

    def __len__(self) -> int:
        return len(self._types)
