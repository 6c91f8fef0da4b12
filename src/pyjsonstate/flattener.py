"""Recursive JSON flattener.

Walks an arbitrary JSON value and mirrors it into a hierarchical store:
mappings and arrays become containers, scalars become typed leaves. The
flattener owns two pieces of instance-lifetime state:

* an :class:`~pyjsonstate._cache.ObjectCache` so container and leaf
  metadata is created once per path instead of on every update, and
* a :class:`~pyjsonstate._conflicts.ConflictTracker` so a leaf whose
  runtime type drifts is declared ``mixed`` for good.

Values are written on every call regardless of the cache. Failures are
contained: a failing store call aborts only that call, and an unexpected
error while walking a subtree is logged and skips that subtree.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Awaitable, Callable, Mapping, Sequence
from typing import Any

from pydantic import ValidationError

from pyjsonstate._arrays import ArrayKeyResolver
from pyjsonstate._cache import ObjectCache
from pyjsonstate._conflicts import ConflictTracker
from pyjsonstate._constants import PASSWORD_MARKER
from pyjsonstate._nodes import NodeKind, classify
from pyjsonstate._redact import dump_for_log
from pyjsonstate._roles import infer_role
from pyjsonstate._sanitize import join_path, last_segment, sanitize_path, sanitize_segment
from pyjsonstate._sniff import is_json_string, maybe_auto_cast, maybe_decode_base64
from pyjsonstate.config import JsonStateConfig
from pyjsonstate.exceptions import JsonStateConfigError, PayloadDecodeError
from pyjsonstate.models.objects import LeafCommon, LeafType, Role, runtime_type
from pyjsonstate.models.options import ParseOptions
from pyjsonstate.store.base import StateStoreBackend

_logger = logging.getLogger(__name__)


class JsonFlattener:
    """Map JSON payloads onto a :class:`StateStoreBackend`.

    Parameters
    ----------
    store : StateStoreBackend
        Backend receiving container/leaf creation and value writes.
    config : JsonStateConfig, optional
        Engine configuration. Defaults to ``JsonStateConfig()``.
    resolver : ArrayKeyResolver, optional
        Array element naming strategy.
    """

    def __init__(
        self,
        store: StateStoreBackend,
        config: JsonStateConfig | None = None,
        *,
        resolver: ArrayKeyResolver | None = None,
    ) -> None:
        if store is None:
            raise JsonStateConfigError("store backend is not defined")
        self._store = store
        self._config = config or JsonStateConfig()
        self._forbidden_chars = self._config.forbidden_chars()
        self._resolver = resolver or ArrayKeyResolver(forbidden_chars=self._forbidden_chars)
        self._cache = ObjectCache()
        self._types = ConflictTracker()
        self._enum_maps: dict[str, dict[str, str]] = {}

    @property
    def store(self) -> StateStoreBackend:
        return self._store

    @property
    def cache(self) -> ObjectCache:
        return self._cache

    @property
    def conflicts(self) -> ConflictTracker:
        return self._types

    async def parse(
        self,
        path: str,
        element: Any,
        options: ParseOptions | Mapping[str, Any] | None = None,
    ) -> None:
        """Mirror *element* into the store below *path*.

        Never raises for payload or store problems; those are logged.
        ``channel_name`` and ``delete_before_update`` apply to the first
        container created by this call only. Enumerated ``states`` maps
        are extended in place with newly seen values.
        """
        try:
            opts = ParseOptions.coerce(options).model_copy()
        except ValidationError as exc:
            _logger.error("Invalid parse options for %s: %s", path, exc)
            return
        await self._parse(str(path), element, opts)

    async def write_snapshot(self, path: str, data: Any, *, name: str | None = None) -> None:
        """Store *data* serialised as one JSON string leaf at *path*."""
        path = sanitize_path(path, self._forbidden_chars)
        text = json.dumps(data, ensure_ascii=False, default=str)
        if path not in self._cache:
            common = LeafCommon(
                name=name or last_segment(path),
                role=Role.JSON,
                type=LeafType.STRING,
                write=False,
                read=True,
            )
            if await self._store_call("create leaf", path, self._store.create_or_update_leaf, path, common):
                self._cache.add(path)
        await self._store_call("write", path, self._store.write_value, path, text, self._config.ack_writes)

    # ------------------------------------------------------------------
    # Traversal
    # ------------------------------------------------------------------

    async def _parse(self, path: str, element: Any, options: ParseOptions) -> None:
        try:
            if element is None:
                _logger.debug("Cannot extract empty: %s", path)
                return

            path = sanitize_path(path, self._forbidden_chars).rstrip(".")
            key = last_segment(path)
            if options.remove_passwords and PASSWORD_MARKER in path.lower():
                _logger.debug("skip password : %s", path)
                return
            element = self._sniff_base64(element, options, path, key)

            kind = classify(element)
            if kind is NodeKind.SCALAR:
                name = options.lookup(options.descriptions, path, key) or key
                await self._write_leaf(path, element, options, name=name, key=key)
                return
            if kind is NodeKind.NULL or kind is NodeKind.OTHER:
                _logger.debug("Skip unsupported value at %s: %s", path, type(element).__name__)
                return

            scoped = await self._ensure_container(path, element, options)
            if scoped is None:
                return
            if kind is NodeKind.ARRAY:
                await self._extract_array(path, "", element, scoped)
                return
            await self._parse_members(path, element, scoped)
        except Exception:
            _logger.error(
                "Error extracting keys: %s %s",
                path,
                dump_for_log(element, max_chars=self._config.log_value_max_chars),
                exc_info=True,
            )

    async def _parse_members(self, path: str, element: Mapping[str, Any], options: ParseOptions) -> None:
        for raw_key, raw_value in element.items():
            key = str(raw_key)
            if options.remove_passwords and PASSWORD_MARKER in key.lower():
                _logger.debug("skip password : %s.%s", path, key)
                continue
            if callable(raw_value):
                _logger.debug("Skip function: %s.%s", path, key)
                continue

            value = "" if raw_value is None else raw_value
            if options.auto_cast:
                value = maybe_auto_cast(value)
            child = join_path(path, sanitize_segment(key.replace(".", "_"), self._forbidden_chars))
            value = self._sniff_base64(value, options, child, key)

            kind = classify(value)
            if kind is NodeKind.ARRAY:
                await self._extract_array(path, key, value, options)
            elif kind is NodeKind.OBJECT:
                await self._parse(child, value, options)
            elif kind is NodeKind.SCALAR:
                name = options.lookup(options.descriptions, child, key) or key
                await self._write_leaf(child, value, options, name=name, key=key)
            else:
                _logger.debug("Skip unsupported value at %s: %s", child, type(value).__name__)

    async def _extract_array(self, path: str, key: str, items: Sequence[Any], options: ParseOptions) -> None:
        key = sanitize_segment(key.replace(".", "_"), self._forbidden_chars) if key else ""
        base = join_path(path, key)
        try:
            for position, item in enumerate(items):
                if item is None:
                    _logger.debug("Cannot extract empty: %s.%s", base, position)
                    continue
                if options.auto_cast and is_json_string(item):
                    item = maybe_auto_cast(item)

                if isinstance(item, str) and key:
                    await self._ensure_named_container(base, key, options)
                    segment = sanitize_segment(item, self._forbidden_chars)
                    if not segment:
                        segment = self._resolver.resolve(key, position, item, options)
                    await self._parse(join_path(base, segment), item, options)
                    continue

                if self._resolver.is_flat_pair(item, options):
                    await self._write_pair(path, key, item, options)
                    continue

                segment = self._resolver.resolve(key, position, item, options)
                await self._parse(join_path(path, segment), item, options)
        except Exception:
            _logger.error(
                "Cannot extract array %s %s",
                base,
                dump_for_log(items, max_chars=self._config.log_value_max_chars),
                exc_info=True,
            )

    async def _write_pair(self, path: str, key: str, item: Mapping[str, Any], options: ParseOptions) -> None:
        """Store a two-key scalar record as a single leaf named after its first value."""
        (first_key, first_value), (second_key, second_value) = item.items()
        base = path
        if key:
            base = join_path(path, key)
            await self._ensure_named_container(base, key, options)

        label = first_value if first_value else first_key
        segment = sanitize_segment(label, self._forbidden_chars) or sanitize_segment(first_key, self._forbidden_chars)
        leaf_path = join_path(base, segment)
        value = self._sniff_base64(second_value, options, leaf_path, str(first_value))

        if classify(value) is not NodeKind.SCALAR:
            await self._parse(leaf_path, value, options)
            return
        name = options.lookup(options.descriptions, leaf_path, segment) or f"{first_key} {second_key}"
        await self._write_leaf(leaf_path, value, options, name=name, key=segment)

    # ------------------------------------------------------------------
    # Store interaction
    # ------------------------------------------------------------------

    async def _ensure_container(self, path: str, element: Any, options: ParseOptions) -> ParseOptions | None:
        """Create the container for *path* unless cached.

        Returns the options to use for the subtree, or ``None`` when the
        subtree is excluded.
        """
        if any(path.endswith(ending) for ending in options.exclude_state_with_ending):
            _logger.debug("skip state with ending : %s", path)
            return None
        writable = any(path.lower().endswith(ending) for ending in options.make_state_writable_with_ending)

        if path not in self._cache or options.delete_before_update:
            if options.delete_before_update:
                _logger.debug("Deleting %s before update", path)
                self._cache.evict_prefix(path)
                await self._store_call("delete", path, self._store.delete_subtree, path)

            name = options.channel_name or ""
            desc_key = options.preferred_array_desc
            if desc_key and isinstance(element, Mapping) and element.get(desc_key):
                name = str(element[desc_key])

            if await self._store_call("create container", path, self._store.create_or_update_container, path, name):
                if not options.dont_save_created_objects:
                    self._cache.add(path)
                options.channel_name = None
                options.delete_before_update = False

        if writable and not options.write:
            _logger.debug("make state with ending writable : %s", path)
            return options.with_write()
        return options

    async def _ensure_named_container(self, path: str, name: str, options: ParseOptions) -> None:
        if path in self._cache:
            return
        if await self._store_call("create container", path, self._store.create_or_update_container, path, name):
            if not options.dont_save_created_objects:
                self._cache.add(path)

    async def _write_leaf(self, path: str, value: Any, options: ParseOptions, *, name: str, key: str) -> None:
        path = path.rstrip(".")
        if options.remove_passwords and PASSWORD_MARKER in path.lower():
            _logger.debug("skip password : %s", path)
            return
        last = last_segment(path)
        if any(last.endswith(ending) for ending in options.exclude_state_with_ending):
            _logger.debug("skip state with ending : %s", path)
            return

        write = options.write
        if not write and any(last.lower().endswith(ending) for ending in options.make_state_writable_with_ending):
            _logger.debug("make state with ending writable : %s", path)
            write = True

        observed = runtime_type(value)
        if observed is None:
            _logger.debug("Skip non-scalar leaf value at %s", path)
            return
        observation = self._types.observe(path, observed)

        enum_map: dict[str, str] | None = None
        enum_extended = False
        if not isinstance(value, bool):
            table = options.lookup(options.states, path, key)
            if isinstance(table, dict):
                table.setdefault(str(value), str(value))
                known = self._enum_maps.get(path)
                enum_map = {**(known or {}), **table}
                enum_extended = enum_map != known

        if path not in self._cache or observation.changed or enum_extended:
            unit = options.lookup(options.units, path, key)
            common = LeafCommon(
                name=str(name),
                role=infer_role(value, write),
                type=observation.declared,
                write=write,
                read=True,
                unit=str(unit) if unit is not None else None,
                states=enum_map,
            )
            created = await self._store_call("create leaf", path, self._store.create_or_update_leaf, path, common)
            if created:
                if enum_map is not None:
                    self._enum_maps[path] = enum_map
                if not options.dont_save_created_objects:
                    self._cache.add(path)
            else:
                # Metadata is stale; re-create it on the next write.
                self._cache.discard(path)

        await self._store_call("write", path, self._store.write_value, path, value, self._config.ack_writes)

    def _sniff_base64(self, value: Any, options: ParseOptions, path: str, key: str) -> Any:
        try:
            return maybe_decode_base64(value, options, key, path)
        except PayloadDecodeError as exc:
            _logger.warning("Cannot parse base64 for %s: %s", path, exc)
            return value

    @staticmethod
    async def _store_call(action: str, path: str, call: Callable[..., Awaitable[None]], *args: Any) -> bool:
        try:
            await call(*args)
        except Exception:
            _logger.error("Store %s failed for %s", action, path, exc_info=True)
            return False
        return True
