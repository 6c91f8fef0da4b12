from __future__ import annotations

import asyncio
import json
from typing import TYPE_CHECKING

import pytest

from pyjsonstate.config import MqttSettings
from pyjsonstate.flattener import JsonFlattener
from pyjsonstate.ingestion.mqtt import MqttIngestor, decode_payload, topic_to_path
from pyjsonstate.models.objects import Role

if TYPE_CHECKING:
    from conftest import RecordingStore


def test_topic_to_path() -> None:
    assert topic_to_path("frigate/cam1/person") == "frigate.cam1.person"
    assert topic_to_path("frigate/cam1/person", "mqtt") == "mqtt.frigate.cam1.person"
    assert topic_to_path("/frigate//stats/") == "frigate.stats"
    assert topic_to_path("") == ""


def test_decode_payload() -> None:
    assert decode_payload(b'{"cpu": 12.5}') == {"cpu": 12.5}
    assert decode_payload(b"42") == 42
    assert decode_payload(b"ON") == "ON"
    assert decode_payload(b"NaN") == "NaN"
    assert decode_payload(b"  ") is None
    assert decode_payload(b"") is None


def _ingestor(flattener: JsonFlattener, **settings: object) -> MqttIngestor:
    return MqttIngestor(
        flattener,
        MqttSettings(**settings),  # type: ignore[arg-type]
        loop=asyncio.get_running_loop(),
    )


@pytest.mark.asyncio
async def test_to_message_marks_writable_suffixes(flattener: JsonFlattener) -> None:
    ingestor = _ingestor(flattener, root_path="mqtt")

    message = ingestor.to_message("frigate/cam1/detect/state", b"ON")
    assert message.path == "mqtt.frigate.cam1.detect.state"
    assert message.data == "ON"
    assert message.write

    assert not ingestor.to_message("frigate/stats", b"{}").write


@pytest.mark.asyncio
async def test_handle_message_parses_into_store(flattener: JsonFlattener, store: RecordingStore) -> None:
    ingestor = _ingestor(flattener)

    await ingestor.handle_message("frigate/stats", json.dumps({"cpu": 12.5, "cams": {"front": {"fps": 5}}}).encode())
    await ingestor.handle_message("frigate/cam1/detect/state", b"ON")

    assert store.get_value("frigate.stats.cpu") == 12.5
    assert store.get_value("frigate.stats.cams.front.fps") == 5
    assert not store.leaf("frigate.stats.cpu").write

    assert store.get_value("frigate.cam1.detect.state") == "ON"
    assert store.leaf("frigate.cam1.detect.state").write
    assert store.leaf("frigate.cam1.detect.state").role == Role.TEXT


@pytest.mark.asyncio
async def test_handle_message_uses_configured_options(store: RecordingStore) -> None:
    flattener = JsonFlattener(store)
    ingestor = MqttIngestor(
        flattener,
        MqttSettings(),
        loop=asyncio.get_running_loop(),
        options={"forceIndex": True},
    )

    await ingestor.handle_message("zigbee/devices", b'[{"id": "lamp", "on": true}]')

    assert store.get_value("zigbee.devices.01.id") == "lamp"


@pytest.mark.asyncio
async def test_empty_topic_is_ignored(flattener: JsonFlattener, store: RecordingStore) -> None:
    ingestor = _ingestor(flattener)
    await ingestor.handle_message("/", b"1")
    assert store.calls == []


@pytest.mark.asyncio
async def test_scheduled_messages_are_drained(flattener: JsonFlattener, store: RecordingStore) -> None:
    ingestor = _ingestor(flattener)

    for value in range(5):
        ingestor._schedule("sensors/temp", str(value).encode())
    assert ingestor.pending == 5

    await ingestor.drain()

    assert ingestor.pending == 0
    assert store.paths("write") == ["sensors.temp"] * 5
    assert store.paths("leaf") == ["sensors.temp"]


@pytest.mark.asyncio
async def test_stop_without_start_is_noop(flattener: JsonFlattener) -> None:
    ingestor = _ingestor(flattener)
    ingestor.stop()
    assert not ingestor.is_running
