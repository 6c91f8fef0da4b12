"""Parse options record.

Options are accepted either as a :class:`ParseOptions` instance or as a
plain mapping using the camelCase names (``{"forceIndex": True}``) or
their snake_case equivalents. Unknown keys are ignored so callers can
share one configuration dict across several producers.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import Field, field_validator

from pyjsonstate.models._base import JsonStateBaseModel


class ParseOptions(JsonStateBaseModel):
    """Options controlling how one ``parse()`` call maps JSON onto the store.

    Parameters
    ----------
    write : bool
        Declare every leaf writable.
    force_index : bool
        Name array elements by position instead of by heuristics.
    disable_pad_index : bool
        With ``force_index``, do not zero-pad indices below 10.
    zero_based_array_index : bool
        With ``force_index``, count from 0 instead of 1.
    channel_name : str or None
        Display name of the first container created by the call.
    preferred_array_name : str or None
        Field used to name array elements. Supports ``"a+b"`` and
        ``"a/b"`` compound forms.
    preferred_array_desc : str or None
        Field used as the container display name of array elements.
    auto_cast : bool
        Parse string values that hold valid JSON.
    descriptions : dict
        Path or key → display name overrides.
    states : dict
        Path or key → enumerated value/label map. Newly seen values are
        added to the map in place.
    units : dict
        Path or key → unit string.
    parse_base64 : bool
        Decode every string that looks like padded base64.
    parse_base64by_ids : list[str]
        Keys or paths that are always base64 decoded to UTF-8.
    parse_base64by_ids_to_hex : list[str]
        Keys or paths that are always base64 decoded to hex.
    delete_before_update : bool
        Wipe the target subtree before recreating it.
    remove_passwords : bool
        Skip every key (and its subtree) containing ``password``.
    exclude_state_with_ending : list[str]
        Skip nodes whose last segment ends with one of these suffixes.
    make_state_writable_with_ending : list[str]
        Make nodes writable whose last segment ends with one of these.
    dont_save_created_objects : bool
        Create structure but never memoize it in the object cache.
    """

    write: bool = False
    force_index: bool = False
    disable_pad_index: bool = False
    zero_based_array_index: bool = False
    channel_name: str | None = None
    preferred_array_name: str | None = None
    preferred_array_desc: str | None = None
    auto_cast: bool = False
    descriptions: dict[str, str] = Field(default_factory=dict)
    states: dict[str, dict[str, str]] = Field(default_factory=dict)
    units: dict[str, str] = Field(default_factory=dict)
    parse_base64: bool = False
    # Explicit aliases keep the upstream spelling ("byIds", not "ByIds").
    parse_base64by_ids: list[str] = Field(default_factory=list, alias="parseBase64byIds")
    parse_base64by_ids_to_hex: list[str] = Field(default_factory=list, alias="parseBase64byIdsToHex")
    delete_before_update: bool = False
    remove_passwords: bool = False
    exclude_state_with_ending: list[str] = Field(default_factory=list)
    make_state_writable_with_ending: list[str] = Field(default_factory=list)
    dont_save_created_objects: bool = False

    @field_validator("descriptions", "units", mode="before")
    @classmethod
    def _stringify_keys(cls, value: Any) -> Any:
        if isinstance(value, Mapping):
            return {str(key): item for key, item in value.items()}
        return value

    @field_validator("states", mode="before")
    @classmethod
    def _stringify_states(cls, value: Any) -> Any:
        # Enum maps are commonly keyed by the raw int value.
        if not isinstance(value, Mapping):
            return value
        return {
            str(key): {str(raw): str(label) for raw, label in table.items()} if isinstance(table, Mapping) else table
            for key, table in value.items()
        }

    @classmethod
    def coerce(cls, value: ParseOptions | Mapping[str, Any] | None) -> ParseOptions:
        """Build an options record from ``None``, a mapping or an instance."""
        if value is None:
            return cls()
        if isinstance(value, ParseOptions):
            return value
        return cls.model_validate(dict(value))

    def with_write(self) -> ParseOptions:
        """Return a shallow copy with ``write`` enabled."""
        return self.model_copy(update={"write": True})

    def base64_mode(self, *names: str) -> str | None:
        """Return ``"hex"``, ``"utf8"`` or ``None`` for the explicit id lists."""
        if any(name in self.parse_base64by_ids_to_hex for name in names if name):
            return "hex"
        if any(name in self.parse_base64by_ids for name in names if name):
            return "utf8"
        return None

    def lookup(self, table: Mapping[str, Any], path: str, key: str) -> Any:
        """Look a path-keyed table up by full path first, then by key."""
        if path in table:
            return table[path]
        if key and key in table:
            return table[key]
        return None
