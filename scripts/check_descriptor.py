#!/usr/bin/env python3
"""Validate an exported surface descriptor file.

Checks the shape of every surface record, reports duplicate chunks and
prints per-surface chunk bounds and tag counts.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from chunkmaps.descriptor import DescriptorError, descriptor_bounds, validate_descriptors


def load_json(path: Path) -> object:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except Exception as exc:  # noqa: BLE001
        raise SystemExit(f"Failed to read JSON from {path}: {exc}")


def find_duplicates(descriptor: dict) -> list[tuple[int, int]]:
    seen: set[tuple[int, int]] = set()
    dupes: list[tuple[int, int]] = []
    for chunk in descriptor.get("chunks", []):
        coord = (chunk["x"], chunk["y"])
        if coord in seen:
            dupes.append(coord)
        seen.add(coord)
    return dupes


def main() -> None:
    parser = argparse.ArgumentParser(description="Validate a surface descriptor file.")
    parser.add_argument(
        "path",
        nargs="?",
        default="output/info.json",
        help="Path to descriptor JSON (default: output/info.json)",
    )
    args = parser.parse_args()

    path = Path(args.path)
    if not path.exists():
        raise SystemExit(f"File not found: {path}")

    try:
        descriptors = validate_descriptors(load_json(path))
    except DescriptorError as exc:
        raise SystemExit(f"Invalid descriptor: {exc}")

    problems = 0
    for descriptor in descriptors:
        name = descriptor["name"]
        dupes = find_duplicates(descriptor)
        if dupes:
            problems += 1
            print(f"{name}: duplicate chunks {dupes}")
        tag_count = sum(len(tags) for tags in descriptor.get("tags", {}).values())
        print(
            f"{name}: {len(descriptor['chunks'])} chunks, {tag_count} tags, "
            f"bounds {descriptor_bounds(descriptor)}"
        )

    if problems:
        raise SystemExit(f"{problems} surface(s) with problems.")
    print("Descriptor OK.")


if __name__ == "__main__":
    main()
