"""Array element naming.

Arrays from external producers carry no guaranteed stable identity. Each
element gets a child path segment from an ordered list of naming rules
evaluated against the element; the last applicable rule wins. Callers
can override the heuristics with ``preferred_array_name`` or switch to
positional names with ``force_index``.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping, Sequence
from typing import Any, NamedTuple

from pyjsonstate._constants import FORBIDDEN_CHARS_RE, INDEX_PAD_LIMIT
from pyjsonstate._nodes import is_scalar
from pyjsonstate._sanitize import sanitize_segment
from pyjsonstate.models.options import ParseOptions


class NamingRule(NamedTuple):
    """One step of the element naming chain."""

    name: str
    applies: Callable[[Mapping[str, Any]], bool]
    extract: Callable[[Mapping[str, Any]], Any]


def _first_value(element: Mapping[str, Any]) -> Any:
    return next(iter(element.values()), None)


def _last_suffixed(suffix: str) -> NamingRule:
    def matches(element: Mapping[str, Any]) -> list[str]:
        return [key for key, value in element.items() if key.endswith(suffix) and value is not None]

    return NamingRule(
        name=f"*{suffix}",
        applies=lambda element: bool(matches(element)),
        extract=lambda element: element[matches(element)[-1]],
    )


def _truthy_key(key: str) -> NamingRule:
    return NamingRule(
        name=key,
        applies=lambda element: bool(element.get(key)),
        extract=lambda element: element[key],
    )


DEFAULT_NAMING_RULES: tuple[NamingRule, ...] = (
    NamingRule(
        name="first-string",
        applies=lambda element: isinstance(_first_value(element), str),
        extract=_first_value,
    ),
    _last_suffixed("Id"),
    _last_suffixed("Name"),
    _truthy_key("id"),
    _truthy_key("name"),
    _truthy_key("label"),
    _truthy_key("labelText"),
    _truthy_key("start_date_time"),
)


def format_index(number: int, *, pad: bool = True) -> str:
    if pad and number < INDEX_PAD_LIMIT:
        return f"0{number}"
    return str(number)


def _compact(value: Any) -> str:
    return str(value).replace(".", "").replace(" ", "")


def preferred_name(element: Mapping[str, Any], preferred: str) -> str | None:
    """Resolve ``preferred_array_name`` against *element*.

    Supports ``"a+b"`` (``"<a>-<b>"``, where ``b`` may itself be
    ``"sub/field"``), ``"a/b"`` (``element[a][b]``) and a plain field name.
    Returns ``None`` when the referenced fields are missing.
    """
    if "+" in preferred:
        first, _, second = preferred.partition("+")
        if element.get(first) is None:
            return None
        head = _compact(element[first])
        tail: Any = ""
        if "/" in second:
            sub_key, _, field = second.partition("/")
            sub = element.get(sub_key)
            if isinstance(sub, Mapping) and sub.get(field) is not None:
                tail = sub[field]
            elif element.get(field) is not None:
                tail = element[field]
        elif element.get(second) is not None:
            tail = _compact(element[second])
        return f"{head}-{tail}"
    if "/" in preferred:
        sub_key, _, field = preferred.partition("/")
        sub = element.get(sub_key)
        if isinstance(sub, Mapping) and sub.get(field) is not None:
            return _compact(sub[field])
        return None
    if element.get(preferred):
        return str(element[preferred]).replace(".", "")
    return None


class ArrayKeyResolver:
    """Choose a child path segment for each array element."""

    def __init__(
        self,
        rules: Sequence[NamingRule] = DEFAULT_NAMING_RULES,
        *,
        forbidden_chars: re.Pattern[str] = FORBIDDEN_CHARS_RE,
    ) -> None:
        self._rules = tuple(rules)
        self._forbidden_chars = forbidden_chars

    @property
    def rules(self) -> tuple[NamingRule, ...]:
        return self._rules

    def heuristic_name(self, element: Mapping[str, Any]) -> Any:
        """Apply the naming rules in order; the last applicable one wins."""
        chosen: Any = None
        for rule in self._rules:
            if rule.applies(element):
                chosen = rule.extract(element)
        return chosen

    def resolve(self, key: str, position: int, element: Any, options: ParseOptions) -> str:
        """Return the path segment for the element at 0-based *position*."""
        number = position + 1
        default = f"{key}{format_index(number)}"
        segment: Any = default

        if isinstance(element, Mapping):
            named = self.heuristic_name(element)
            if named is not None and str(named).replace(".", ""):
                segment = named
            if options.preferred_array_name:
                preferred = preferred_name(element, options.preferred_array_name)
                if preferred is not None:
                    segment = preferred

        if options.force_index:
            if options.zero_based_array_index:
                number -= 1
            segment = f"{key}{format_index(number, pad=not options.disable_pad_index)}"

        return sanitize_segment(segment, self._forbidden_chars) or default

    @staticmethod
    def is_flat_pair(element: Any, options: ParseOptions) -> bool:
        """Return True for two-key scalar records that collapse into one leaf."""
        if options.force_index or not isinstance(element, Mapping) or len(element) != 2:
            return False
        first, second = element.values()
        return is_scalar(first) and is_scalar(second) and first != "null"
