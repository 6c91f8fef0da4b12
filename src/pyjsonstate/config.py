"""Engine and collaborator configuration for pyjsonstate."""

from __future__ import annotations

import dataclasses
import os
import re
from typing import Any

from pyjsonstate._constants import FORBIDDEN_CHARS_RE
from pyjsonstate.exceptions import JsonStateConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_number(env_key: str, value: str, cast: type[int] | type[float]) -> int | float:
    try:
        return cast(value)
    except ValueError as exc:
        raise JsonStateConfigError(f"{env_key} must be a number, got {value!r}") from exc


def _env_list(value: str) -> tuple[str, ...]:
    return tuple(item.strip() for item in value.split(",") if item.strip())


@dataclasses.dataclass(frozen=True)
class MqttSettings:
    """Broker connection used by :class:`pyjsonstate.ingestion.mqtt.MqttIngestor`.

    ``root_path`` is prepended to every path derived from a topic.
    Topics whose last level is listed in ``writable_suffixes`` are parsed
    with ``write=True``.
    """

    host: str = "localhost"
    port: int = 1883
    topics: tuple[str, ...] = ("#",)
    keepalive: int = 60
    client_id: str = ""
    username: str | None = None
    password: str | None = None
    root_path: str = ""
    writable_suffixes: tuple[str, ...] = ("state",)


@dataclasses.dataclass(frozen=True)
class JsonStateConfig:
    """Flattener configuration.

    Parameters
    ----------
    log_value_max_chars : int
        Upper bound for payload dumps in error logs.
    forbidden_chars_pattern : str or None
        Regular expression matching runs of characters that are not
        allowed in path segments. ``None`` uses the built-in set.
    ack_writes : bool
        Acknowledgement flag passed with every value write.
    http_timeout : float
        Total timeout in seconds for HTTP snapshot requests.
    mqtt : MqttSettings
        Broker connection for MQTT ingestion.
    """

    log_value_max_chars: int = 512
    forbidden_chars_pattern: str | None = None
    ack_writes: bool = True
    http_timeout: float = 3 * 60
    mqtt: MqttSettings = dataclasses.field(default_factory=MqttSettings)

    def forbidden_chars(self) -> re.Pattern[str]:
        if not self.forbidden_chars_pattern:
            return FORBIDDEN_CHARS_RE
        try:
            return re.compile(self.forbidden_chars_pattern)
        except re.error as exc:
            raise JsonStateConfigError(f"invalid forbidden_chars_pattern: {exc}") from exc

    @classmethod
    def from_env(cls, **overrides: Any) -> JsonStateConfig:
        """Create configuration from ``JSONSTATE_*`` environment variables.

        Explicit keyword arguments override environment values. ``mqtt``
        may be overridden with a :class:`MqttSettings` or a dict of its
        fields.
        """
        env = os.environ

        mqtt_kwargs: dict[str, Any] = {}
        _ENV_MQTT_MAP = {
            "JSONSTATE_MQTT_HOST": "host",
            "JSONSTATE_MQTT_CLIENT_ID": "client_id",
            "JSONSTATE_MQTT_USERNAME": "username",
            "JSONSTATE_MQTT_PASSWORD": "password",
            "JSONSTATE_MQTT_ROOT_PATH": "root_path",
        }
        for env_key, field_name in _ENV_MQTT_MAP.items():
            val = env.get(env_key)
            if val is not None:
                mqtt_kwargs[field_name] = val
        for env_key, field_name in (("JSONSTATE_MQTT_PORT", "port"), ("JSONSTATE_MQTT_KEEPALIVE", "keepalive")):
            val = env.get(env_key)
            if val is not None:
                mqtt_kwargs[field_name] = _env_number(env_key, val, int)
        for env_key, field_name in (
            ("JSONSTATE_MQTT_TOPICS", "topics"),
            ("JSONSTATE_MQTT_WRITABLE_SUFFIXES", "writable_suffixes"),
        ):
            val = env.get(env_key)
            if val is not None:
                mqtt_kwargs[field_name] = _env_list(val)

        mqtt_overrides = overrides.pop("mqtt", None)
        if isinstance(mqtt_overrides, dict):
            mqtt_kwargs.update(mqtt_overrides)
        elif isinstance(mqtt_overrides, MqttSettings):
            mqtt_kwargs = dataclasses.asdict(mqtt_overrides)

        config_kwargs: dict[str, Any] = {"mqtt": MqttSettings(**mqtt_kwargs)}

        max_chars = env.get("JSONSTATE_LOG_VALUE_MAX_CHARS")
        if max_chars is not None and "log_value_max_chars" not in overrides:
            config_kwargs["log_value_max_chars"] = _env_number("JSONSTATE_LOG_VALUE_MAX_CHARS", max_chars, int)

        pattern = env.get("JSONSTATE_FORBIDDEN_CHARS")
        if pattern and "forbidden_chars_pattern" not in overrides:
            config_kwargs["forbidden_chars_pattern"] = pattern

        if "ack_writes" not in overrides:
            config_kwargs["ack_writes"] = _env_bool(env.get("JSONSTATE_ACK_WRITES"), True)

        timeout = env.get("JSONSTATE_HTTP_TIMEOUT")
        if timeout is not None and "http_timeout" not in overrides:
            config_kwargs["http_timeout"] = _env_number("JSONSTATE_HTTP_TIMEOUT", timeout, float)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
