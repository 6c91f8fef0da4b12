"""MQTT ingestion.

Each message becomes one ``parse()`` call: the topic levels become the
store path and the JSON payload becomes the element.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, cast

import paho.mqtt.client as mqtt

from pyjsonstate._redact import dump_for_log
from pyjsonstate._sanitize import join_path
from pyjsonstate._sniff import loads_strict
from pyjsonstate.config import MqttSettings
from pyjsonstate.exceptions import IngestionError
from pyjsonstate.flattener import JsonFlattener
from pyjsonstate.models.options import ParseOptions

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MqttMessage:
    """One received message after payload decoding."""

    topic: str
    path: str
    data: Any
    write: bool


def topic_to_path(topic: str, root_path: str = "") -> str:
    """Convert ``a/b/c`` into ``root.a.b.c``, dropping empty topic levels."""
    levels = [level for level in topic.split("/") if level]
    return join_path(root_path, *levels)


def decode_payload(payload: bytes) -> Any:
    """Decode a message body: JSON when parseable, else text, ``None`` when empty."""
    text = payload.decode("utf-8", errors="replace").strip()
    if not text:
        return None
    try:
        return loads_strict(text)
    except ValueError:
        _logger.debug("Payload is not JSON, keeping text: %s", text[:64])
        return text


class MqttIngestor:
    """Threaded paho-mqtt client that feeds messages into a flattener.

    The paho network loop runs in its own thread; every message hops onto
    the asyncio loop with ``call_soon_threadsafe`` and is parsed in its
    own task. Tasks are tracked until they finish so none is dropped.
    """

    def __init__(
        self,
        flattener: JsonFlattener,
        settings: MqttSettings,
        *,
        loop: asyncio.AbstractEventLoop,
        options: ParseOptions | Mapping[str, Any] | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._flattener = flattener
        self._settings = settings
        self._loop = loop
        self._options = ParseOptions.coerce(options)
        self._logger = logger or _logger
        self._client: mqtt.Client | None = None
        self._running = False
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def is_running(self) -> bool:
        """Whether the MQTT network loop is active."""
        return self._running

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def to_message(self, topic: str, payload: bytes) -> MqttMessage:
        last_level = topic.rstrip("/").rsplit("/", 1)[-1]
        return MqttMessage(
            topic=topic,
            path=topic_to_path(topic, self._settings.root_path),
            data=decode_payload(payload),
            write=last_level in self._settings.writable_suffixes,
        )

    async def handle_message(self, topic: str, payload: bytes) -> None:
        """Parse one message into the store."""
        message = self.to_message(topic, payload)
        if not message.path:
            self._logger.debug("Ignoring message without topic levels: %r", topic)
            return
        self._logger.debug("publish %s %s", topic, dump_for_log(message.data, max_chars=256))
        options = self._options.with_write() if message.write else self._options
        await self._flattener.parse(message.path, message.data, options)

    def _schedule(self, topic: str, payload: bytes) -> None:
        task = self._loop.create_task(self.handle_message(topic, payload))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def start(self) -> None:
        """Connect, subscribe to the configured topics and start the network loop."""
        self.stop()
        settings = self._settings
        self._logger.debug(
            "MQTT ingestion start requested host=%s port=%s topics=%s",
            settings.host,
            settings.port,
            settings.topics,
        )

        client = mqtt.Client(
            callback_api_version=cast(Any, mqtt).CallbackAPIVersion.VERSION2,
            client_id=settings.client_id,
        )
        client.enable_logger(self._logger)
        if settings.username:
            client.username_pw_set(settings.username, settings.password)

        def on_connect(
            c: mqtt.Client,
            _userdata: Any,
            _flags: Any,
            reason_code: Any,
            _properties: Any,
        ) -> None:
            if reason_code.value != 0:
                self._logger.warning("MQTT connect failed: %s", reason_code)
                return
            for topic in settings.topics:
                self._logger.debug("MQTT subscribing topic=%s", topic)
                c.subscribe(topic, qos=0)

        def on_message(_c: mqtt.Client, _userdata: Any, msg: mqtt.MQTTMessage) -> None:
            self._loop.call_soon_threadsafe(self._schedule, msg.topic, bytes(msg.payload))

        def on_disconnect(
            _client: mqtt.Client,
            _userdata: Any,
            _disconnect_flags: Any,
            reason_code: Any,
            _properties: Any,
        ) -> None:
            if self._running:
                self._logger.debug("MQTT disconnected: %s", reason_code)

        client.on_connect = on_connect
        client.on_message = on_message
        client.on_disconnect = on_disconnect

        try:
            client.connect(settings.host, settings.port, keepalive=settings.keepalive)
        except OSError as exc:
            raise IngestionError(
                f"cannot connect to MQTT broker {settings.host}:{settings.port}: {exc}",
                source="mqtt",
            ) from exc
        client.loop_start()

        self._client = client
        self._running = True
        self._logger.debug("MQTT network loop started")

    def stop(self) -> None:
        """Stop and disconnect the client if running."""
        client = self._client
        self._client = None
        was_running = self._running
        self._running = False

        if client is None:
            return
        try:
            if was_running:
                client.disconnect()
        finally:
            client.loop_stop()
            self._logger.debug("MQTT network loop stopped")

    async def drain(self) -> None:
        """Wait for every scheduled parse task to finish."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
