"""Ingestion layer.

Adapters that receive JSON payloads (MQTT, HTTP polling) and feed them
into :class:`pyjsonstate.flattener.JsonFlattener`.
"""

__all__: list[str] = []
