from __future__ import annotations

from typing import Any

import pytest

from pyjsonstate._arrays import (
    DEFAULT_NAMING_RULES,
    ArrayKeyResolver,
    NamingRule,
    format_index,
    preferred_name,
)
from pyjsonstate.models.options import ParseOptions


@pytest.fixture
def resolver() -> ArrayKeyResolver:
    return ArrayKeyResolver()


def test_default_rule_order() -> None:
    assert [rule.name for rule in DEFAULT_NAMING_RULES] == [
        "first-string",
        "*Id",
        "*Name",
        "id",
        "name",
        "label",
        "labelText",
        "start_date_time",
    ]


def test_format_index() -> None:
    assert format_index(1) == "01"
    assert format_index(9) == "09"
    assert format_index(10) == "10"
    assert format_index(0) == "00"
    assert format_index(3, pad=False) == "3"


def test_default_segment_is_padded_one_based(resolver: ArrayKeyResolver) -> None:
    options = ParseOptions()
    assert resolver.resolve("key", 0, {}, options) == "key01"
    assert resolver.resolve("key", 9, {}, options) == "key10"
    assert resolver.resolve("", 2, 42, options) == "03"


@pytest.mark.parametrize(
    ("element", "expected"),
    [
        ({"foo": "abc", "n": 1, "m": 2}, "abc"),
        ({"a": 1, "deviceId": "d.1", "x": 2}, "d1"),
        ({"n": 1, "aId": "first", "bId": "second"}, "second"),
        ({"n": 1, "deviceId": "dev", "friendlyName": "Kitchen"}, "Kitchen"),
        ({"n": 1, "friendlyName": "Kitchen", "id": 7}, "7"),
        ({"id": "x", "name": "y"}, "y"),
        ({"n": 1, "name": "a", "label": "b", "labelText": "c"}, "c"),
        ({"n": 1, "labelText": "c", "start_date_time": "2024-01-01 10.00"}, "2024-01-01 1000"),
        ({"id": "a b*c"}, "a b_c"),
    ],
)
def test_heuristic_naming(resolver: ArrayKeyResolver, element: dict[str, Any], expected: str) -> None:
    assert resolver.resolve("k", 0, element, ParseOptions()) == expected


def test_unusable_names_fall_back_to_default(resolver: ArrayKeyResolver) -> None:
    options = ParseOptions()
    assert resolver.resolve("k", 0, {"n": 1, "id": 0, "x": 2}, options) == "k01"
    assert resolver.resolve("k", 0, {"id": "..."}, options) == "k01"
    assert resolver.resolve("k", 0, {"aId": None, "v": 1}, options) == "k01"


def test_preferred_array_name_forms() -> None:
    assert preferred_name({"id": "x", "title": "T.v"}, "title") == "Tv"
    assert preferred_name({"camera": "front door", "type": "motion"}, "camera+type") == "frontdoor-motion"
    assert preferred_name({"camera": "cam", "data": {"label": "person"}}, "camera+data/label") == "cam-person"
    assert preferred_name({"camera": "cam", "label": "car"}, "camera+data/label") == "cam-car"
    assert preferred_name({"data": {"label": "person"}}, "data/label") == "person"
    assert preferred_name({"data": {}}, "data/label") is None
    assert preferred_name({"type": "motion"}, "camera+type") is None
    assert preferred_name({"title": ""}, "title") is None


def test_preferred_array_name_overrides_heuristics(resolver: ArrayKeyResolver) -> None:
    options = ParseOptions(preferred_array_name="title")
    assert resolver.resolve("k", 0, {"id": "x", "title": "Front"}, options) == "Front"
    # Missing preferred field keeps the heuristic result.
    assert resolver.resolve("k", 0, {"id": "x", "other": 1}, options) == "x"


def test_force_index_variants(resolver: ArrayKeyResolver) -> None:
    element = {"id": "x"}
    assert resolver.resolve("k", 0, element, ParseOptions(force_index=True)) == "k01"
    assert resolver.resolve("k", 11, element, ParseOptions(force_index=True)) == "k12"
    zero_based = ParseOptions(force_index=True, zero_based_array_index=True)
    assert resolver.resolve("k", 0, element, zero_based) == "k00"
    unpadded = ParseOptions(force_index=True, zero_based_array_index=True, disable_pad_index=True)
    assert resolver.resolve("k", 0, element, unpadded) == "k0"
    assert resolver.resolve("k", 2, element, unpadded) == "k2"


def test_is_flat_pair() -> None:
    options = ParseOptions()
    assert ArrayKeyResolver.is_flat_pair({"k": "color", "v": "red"}, options)
    assert ArrayKeyResolver.is_flat_pair({"k": 1, "v": True}, options)
    assert not ArrayKeyResolver.is_flat_pair({"k": "null", "v": 1}, options)
    assert not ArrayKeyResolver.is_flat_pair({"k": 1, "v": None}, options)
    assert not ArrayKeyResolver.is_flat_pair({"k": 1, "v": {"x": 1}}, options)
    assert not ArrayKeyResolver.is_flat_pair({"a": 1, "b": 2, "c": 3}, options)
    assert not ArrayKeyResolver.is_flat_pair(["a", "b"], options)
    assert not ArrayKeyResolver.is_flat_pair({"k": "color", "v": "red"}, ParseOptions(force_index=True))


def test_custom_rules_replace_defaults() -> None:
    serial = NamingRule(
        name="serial",
        applies=lambda element: "serial" in element,
        extract=lambda element: element["serial"],
    )
    resolver = ArrayKeyResolver([serial])
    options = ParseOptions()
    assert resolver.rules == (serial,)
    assert resolver.resolve("dev", 0, {"serial": "SN-1", "id": "x"}, options) == "SN-1"
    assert resolver.resolve("dev", 0, {"id": "x"}, options) == "dev01"
