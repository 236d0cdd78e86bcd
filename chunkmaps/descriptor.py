from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Tuple

from .classifier import ClassificationResult
from .world_source import SurfaceSnapshot


DESCRIPTOR_FILENAME = "info.json"


class DescriptorError(ValueError):
    pass


def _position(pos: Tuple[float, float]) -> Dict[str, float]:
    return {"x": pos[0], "y": pos[1]}


def build_surface_descriptor(
    surface: SurfaceSnapshot,
    result: ClassificationResult,
) -> Dict[str, Any]:
    """Per-surface export record: name, chart tags grouped by force, included chunks."""
    tags: Dict[str, List[Dict[str, Any]]] = {}
    for force, force_tags in sorted(surface.tags_by_force().items()):
        if not force_tags:
            continue
        tags[force] = [
            {"position": _position(tag.position), "text": tag.text} for tag in force_tags
        ]
    chunks = [{"x": x, "y": y} for x, y in sorted(result.included)]
    return {"name": surface.name, "tags": tags, "chunks": chunks}


def build_descriptors(
    pairs: Iterable[Tuple[SurfaceSnapshot, ClassificationResult]],
) -> List[Dict[str, Any]]:
    descriptors = []
    for surface, result in pairs:
        descriptor = build_surface_descriptor(surface, result)
        # Surfaces without a single visible chunk are left out.
        if not descriptor["chunks"]:
            continue
        descriptors.append(descriptor)
    return descriptors


def descriptor_bounds(descriptor: Dict[str, Any]) -> Tuple[int, int, int, int] | None:
    chunks = descriptor.get("chunks", [])
    if not chunks:
        return None
    xs = [c["x"] for c in chunks]
    ys = [c["y"] for c in chunks]
    return (min(xs), min(ys), max(xs), max(ys))


def validate_descriptors(data: Any) -> List[Dict[str, Any]]:
    if not isinstance(data, list):
        raise DescriptorError("Expected a list of surface descriptors.")
    for idx, item in enumerate(data):
        if not isinstance(item, dict):
            raise DescriptorError(f"Descriptor {idx} must be an object.")
        name = item.get("name")
        if not isinstance(name, str) or not name:
            raise DescriptorError(f"Descriptor {idx} has no surface name.")
        chunks = item.get("chunks")
        if not isinstance(chunks, list):
            raise DescriptorError(f"Descriptor '{name}' chunks must be a list.")
        for chunk in chunks:
            if not isinstance(chunk, dict) or not all(
                isinstance(chunk.get(k), int) and not isinstance(chunk.get(k), bool)
                for k in ("x", "y")
            ):
                raise DescriptorError(f"Descriptor '{name}' has a malformed chunk: {chunk!r}")
        tags = item.get("tags", {})
        if not isinstance(tags, dict):
            raise DescriptorError(f"Descriptor '{name}' tags must be an object keyed by force.")
        for force, force_tags in tags.items():
            if not isinstance(force_tags, list):
                raise DescriptorError(f"Descriptor '{name}' tags for {force} must be a list.")
            for tag in force_tags:
                pos = tag.get("position") if isinstance(tag, dict) else None
                if not isinstance(pos, dict) or "x" not in pos or "y" not in pos:
                    raise DescriptorError(
                        f"Descriptor '{name}' tag for {force} has no position: {tag!r}"
                    )
    return data


def write_descriptors(path: Path | str, descriptors: List[Dict[str, Any]]) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(descriptors, indent=2) + "\n", encoding="utf-8")
    return path


def load_descriptors(path: Path | str) -> List[Dict[str, Any]]:
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise DescriptorError(f"Failed to read JSON from {path}: {exc}") from exc
    return validate_descriptors(data)
