#!/usr/bin/env python3
"""Flatten JSON documents into an in-memory state tree and print it.

Handy for checking how a producer's payload will be mapped before
wiring it into a live store.

Usage
-----
::

    python scripts/flatten_file.py events.json --path frigate.events
    cat payload.json | python scripts/flatten_file.py - --path dev --force-index

Options::

    --path PATH          Root path the document is parsed into (default: file stem)
    --options JSON       ParseOptions as a JSON object (camelCase or snake_case)
    --force-index        Name array elements by position
    --parse-base64       Decode base64 strings
    --json               Output the snapshot as JSON instead of a table
    --objects            Also print container/leaf metadata
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

# Allow running from repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pyjsonstate import JsonFlattener, JsonStateConfig, MemoryStore, ParseOptions  # noqa: E402


def _load(source: str) -> Any:
    if source == "-":
        return json.load(sys.stdin)
    return json.loads(Path(source).read_text(encoding="utf-8"))


def _build_options(args: argparse.Namespace) -> ParseOptions:
    raw: dict[str, Any] = json.loads(args.options) if args.options else {}
    if args.force_index:
        raw["forceIndex"] = True
    if args.parse_base64:
        raw["parseBase64"] = True
    return ParseOptions.coerce(raw)


def _print_table(store: MemoryStore, *, objects: bool) -> None:
    snapshot = store.snapshot()
    width = max((len(path) for path in snapshot), default=0)
    for path, value in snapshot.items():
        line = f"{path:<{width}}  {json.dumps(value, ensure_ascii=False)}"
        if objects:
            obj = store.get_object(path)
            if obj is not None:
                common = obj.common.model_dump(exclude_none=True, exclude={"name"})
                line += f"  {common}"
        print(line)


async def run(args: argparse.Namespace) -> int:
    store = MemoryStore()
    flattener = JsonFlattener(store, JsonStateConfig.from_env())
    options = _build_options(args)

    for source in args.files:
        try:
            document = _load(source)
        except (OSError, ValueError) as exc:
            print(f"Cannot read {source}: {exc}", file=sys.stderr)
            return 1
        root = args.path or ("stdin" if source == "-" else Path(source).stem)
        await flattener.parse(root, document, options)

    if args.json_mode:
        print(json.dumps(store.snapshot(), indent=2, ensure_ascii=False, default=str))
    else:
        _print_table(store, objects=args.objects)
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description="Flatten JSON files into a path-addressed state tree.")
    parser.add_argument("files", nargs="+", help="JSON files to flatten ('-' reads stdin)")
    parser.add_argument("--path", help="Root path (default: file stem)")
    parser.add_argument("--options", help="ParseOptions as a JSON object")
    parser.add_argument("--force-index", action="store_true", help="Name array elements by position")
    parser.add_argument("--parse-base64", action="store_true", help="Decode base64 strings")
    parser.add_argument("--json", action="store_true", dest="json_mode", help="Output snapshot as JSON")
    parser.add_argument("--objects", action="store_true", help="Also print leaf metadata")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)

    raise SystemExit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
