from __future__ import annotations

from pyjsonstate._redact import dump_for_log, is_sensitive_key, redact_for_log


def test_redact_for_log_redacts_sensitive_keys() -> None:
    payload = {
        "user": "bob",
        "password": "pw",
        "auth": {"accessToken": "TOKEN", "expires": 10},
        "nested": [{"clientSecret": "s"}],
    }

    redacted = redact_for_log(payload)
    assert redacted["user"] == "bob"
    assert redacted["password"] == "<redacted>"
    assert redacted["auth"]["accessToken"] == "<redacted>"
    assert redacted["auth"]["expires"] == 10
    assert redacted["nested"][0]["clientSecret"] == "<redacted>"


def test_redact_for_log_truncates_long_strings() -> None:
    long_value = "x" * 600
    redacted = redact_for_log({"value": long_value}, max_string=10)
    assert redacted["value"].startswith("x" * 10)
    assert "<truncated>" in redacted["value"]


def test_is_sensitive_key() -> None:
    assert is_sensitive_key("myPassword")
    assert is_sensitive_key("API_KEY")
    assert not is_sensitive_key("temperature")


def test_dump_for_log_is_bounded() -> None:
    text = dump_for_log({"items": list(range(1000))}, max_chars=50)
    assert text.endswith("<truncated>")
    assert len(text) < 80


def test_dump_for_log_never_raises() -> None:
    class Broken(dict):
        def items(self):  # type: ignore[override]
            raise RuntimeError("boom")

    assert dump_for_log(Broken(a=1)) == "<unprintable Broken>"


def test_redact_for_log_keeps_scalars_and_reprs_other_objects() -> None:
    redacted = redact_for_log({"n": 1, "ok": True, "none": None, "items": ("a", 2), "obj": object})
    assert redacted["n"] == 1
    assert redacted["ok"] is True
    assert redacted["none"] is None
    assert redacted["items"] == ["a", 2]
    assert redacted["obj"] == repr(object)
