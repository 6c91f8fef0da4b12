"""Object cache: which paths already have structural metadata in the store."""

from __future__ import annotations

import logging

from pyjsonstate._sanitize import is_within

_logger = logging.getLogger(__name__)


class ObjectCache:
    """Flat set of created container/leaf paths.

    Entries are only removed by :meth:`evict_prefix`, used when a subtree
    is wiped and must be recreated.
    """

    def __init__(self) -> None:
        self._created: set[str] = set()

    def __contains__(self, path: object) -> bool:
        return path in self._created

    def __len__(self) -> int:
        return len(self._created)

    def add(self, path: str) -> None:
        self._created.add(path)

    def discard(self, path: str) -> None:
        self._created.discard(path)

    def evict_prefix(self, prefix: str) -> int:
        """Drop *prefix* and every cached path below it. Returns the count."""
        stale = [path for path in self._created if is_within(path, prefix)]
        for path in stale:
            self._created.discard(path)
        if stale:
            _logger.debug("Evicted %d cached objects under %s", len(stale), prefix)
        return len(stale)
