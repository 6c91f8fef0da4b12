#!/usr/bin/env python3
"""Mirror MQTT traffic into an in-memory state tree.

Subscribes to the configured broker topics, parses each message into a
:class:`MemoryStore` and prints the resulting snapshot on exit (Ctrl+C
or ``--duration`` elapsed).

Broker settings come from ``JSONSTATE_MQTT_*`` environment variables and
can be overridden on the command line::

    export JSONSTATE_MQTT_HOST=192.168.1.10
    python scripts/mqtt_bridge.py --topic 'frigate/#' --root-path mqtt
"""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import json
import logging
import signal
import sys
from pathlib import Path
from typing import Any

# Allow running from repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pyjsonstate import IngestionError, JsonFlattener, JsonStateConfig, MemoryStore  # noqa: E402
from pyjsonstate.ingestion.mqtt import MqttIngestor  # noqa: E402

_LOG = logging.getLogger("mqtt_bridge")


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Mirror MQTT messages into a state tree and print it.")
    parser.add_argument("--host", help="Broker host (default: JSONSTATE_MQTT_HOST or localhost)")
    parser.add_argument("--port", type=int, help="Broker port")
    parser.add_argument("--topic", action="append", dest="topics", help="Topic filter (repeatable)")
    parser.add_argument("--root-path", help="Path prefix for every topic")
    parser.add_argument("--options", help="ParseOptions as a JSON object")
    parser.add_argument("--duration", type=float, default=0.0, help="Stop after N seconds (0 = until Ctrl+C)")
    parser.add_argument("--output", "-o", help="Write the final snapshot as JSON to FILE")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    return parser.parse_args()


def _mqtt_overrides(args: argparse.Namespace) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    if args.host:
        overrides["host"] = args.host
    if args.port:
        overrides["port"] = args.port
    if args.topics:
        overrides["topics"] = tuple(args.topics)
    if args.root_path is not None:
        overrides["root_path"] = args.root_path
    return overrides


async def run(args: argparse.Namespace) -> int:
    config = JsonStateConfig.from_env(mqtt=_mqtt_overrides(args))
    store = MemoryStore()
    flattener = JsonFlattener(store, config)
    loop = asyncio.get_running_loop()
    options = json.loads(args.options) if args.options else None
    ingestor = MqttIngestor(flattener, config.mqtt, loop=loop, options=options, logger=_LOG)

    stop = asyncio.Event()
    for sig in (signal.SIGINT, signal.SIGTERM):
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(sig, stop.set)

    try:
        ingestor.start()
    except IngestionError as exc:
        print(str(exc), file=sys.stderr)
        return 1

    _LOG.info("Listening on %s:%s topics=%s", config.mqtt.host, config.mqtt.port, config.mqtt.topics)
    try:
        if args.duration > 0:
            with contextlib.suppress(asyncio.TimeoutError):
                await asyncio.wait_for(stop.wait(), timeout=args.duration)
        else:
            await stop.wait()
    finally:
        ingestor.stop()
        await ingestor.drain()

    snapshot = store.snapshot()
    payload = json.dumps(snapshot, indent=2, ensure_ascii=False, default=str)
    if args.output:
        Path(args.output).write_text(payload, encoding="utf-8")
        print(f"Snapshot with {len(snapshot)} states written to {args.output}", file=sys.stderr)
    else:
        print(payload)
    return 0


def main() -> None:
    args = _parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    raise SystemExit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
