from __future__ import annotations

import base64

import pytest

from pyjsonstate._sniff import (
    decode_base64,
    is_base64,
    is_json_string,
    maybe_auto_cast,
    maybe_decode_base64,
)
from pyjsonstate.exceptions import PayloadDecodeError
from pyjsonstate.models.options import ParseOptions


def _b64(raw: bytes) -> str:
    return base64.b64encode(raw).decode("ascii")


def test_is_base64_requires_padding() -> None:
    assert is_base64(_b64(b'{"a":1}'))
    assert is_base64(_b64(b"hi there"))
    assert not is_base64("abcd")
    assert not is_base64("hello world")
    assert not is_base64("")
    assert not is_base64(5)


def test_decode_base64_json_and_text() -> None:
    assert decode_base64(_b64(b'{"a":1}')) == {"a": 1}
    assert decode_base64(_b64(b"hi there")) == "hi there"


def test_decode_base64_to_hex() -> None:
    assert decode_base64(_b64(b"\x01\xff"), to_hex=True) == "01ff"


def test_decode_base64_rejects_non_utf8() -> None:
    with pytest.raises(PayloadDecodeError):
        decode_base64(_b64(b"\xff\xfe"))


def test_decode_base64_rejects_garbage() -> None:
    with pytest.raises(PayloadDecodeError):
        decode_base64("not base64!")


def test_maybe_decode_base64_respects_options() -> None:
    encoded = _b64(b'{"a":1}')
    assert maybe_decode_base64(encoded, ParseOptions(), "blob") == encoded
    assert maybe_decode_base64(encoded, ParseOptions(parse_base64=True), "blob") == {"a": 1}
    assert maybe_decode_base64(encoded, ParseOptions(parse_base64by_ids=["blob"]), "blob") == {"a": 1}
    assert maybe_decode_base64(encoded, ParseOptions(parse_base64by_ids=["other"]), "blob") == encoded


def test_maybe_decode_base64_by_id_to_hex() -> None:
    options = ParseOptions(parse_base64by_ids_to_hex=["raw"])
    assert maybe_decode_base64(_b64(b"\x01\xff"), options, "raw", "dev.raw") == "01ff"
    by_path = ParseOptions(parse_base64by_ids_to_hex=["dev.raw"])
    assert maybe_decode_base64(_b64(b"\x01\xff"), by_path, "x", "dev.raw") == "01ff"


def test_maybe_decode_base64_leaves_non_strings() -> None:
    options = ParseOptions(parse_base64=True, parse_base64by_ids=["blob"])
    assert maybe_decode_base64(12, options, "blob") == 12
    assert maybe_decode_base64({"a": 1}, options, "blob") == {"a": 1}


def test_auto_cast_and_json_check() -> None:
    assert maybe_auto_cast("42") == 42
    assert maybe_auto_cast('{"x": true}') == {"x": True}
    assert maybe_auto_cast("abc") == "abc"
    assert maybe_auto_cast(5) == 5
    assert is_json_string("[1, 2]")
    assert not is_json_string("abc")
    assert not is_json_string(1)


def test_non_json_constants_are_rejected() -> None:
    for token in ("NaN", "Infinity", "-Infinity"):
        assert not is_json_string(token)
        assert maybe_auto_cast(token) == token
    assert maybe_auto_cast('{"v": NaN}') == '{"v": NaN}'
    assert decode_base64(base64.b64encode(b"NaN").decode("ascii")) == "NaN"
