from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Set, Tuple

from .chunk_grid import ChunkIndex, Coord, build_chunk_index, chunk_of


Position = Tuple[float, float]


class WorldSnapshotError(ValueError):
    pass


@dataclass(frozen=True)
class Entity:
    position: Position
    force: str


@dataclass(frozen=True)
class ChartTag:
    position: Position
    text: str
    force: str


@dataclass
class SurfaceSnapshot:
    name: str
    chunks: List[Coord] = field(default_factory=list)
    entities: List[Entity] = field(default_factory=list)
    tags: List[ChartTag] = field(default_factory=list)

    def entity_chunks(self, force: str) -> Set[Coord]:
        """Chunks holding at least one entity owned by ``force``."""
        return {chunk_of(e.position) for e in self.entities if e.force == force}

    def tag_chunks(self) -> Set[Coord]:
        """Chunks holding a chart tag of any force."""
        return {chunk_of(t.position) for t in self.tags}

    def tags_by_force(self) -> Dict[str, List[ChartTag]]:
        grouped: Dict[str, List[ChartTag]] = {}
        for tag in self.tags:
            grouped.setdefault(tag.force, []).append(tag)
        return grouped


@dataclass
class WorldSnapshot:
    surfaces: List[SurfaceSnapshot] = field(default_factory=list)

    def surface(self, name: str) -> SurfaceSnapshot:
        for surface in self.surfaces:
            if surface.name == name:
                return surface
        raise KeyError(f"Unknown surface: {name}")


def surface_chunk_index(surface: SurfaceSnapshot, *, force: str) -> ChunkIndex:
    return build_chunk_index(
        surface.chunks,
        entity_coords=surface.entity_chunks(force),
        tag_coords=surface.tag_chunks(),
    )


def _parse_position(raw: Any, *, where: str) -> Position:
    if isinstance(raw, dict):
        raw = [raw.get("x"), raw.get("y")]
    if not isinstance(raw, (list, tuple)) or len(raw) != 2:
        raise WorldSnapshotError(f"{where}: position must be [x, y] or {{x, y}}, got {raw!r}")
    try:
        return (float(raw[0]), float(raw[1]))
    except (TypeError, ValueError):
        raise WorldSnapshotError(f"{where}: position is not numeric: {raw!r}") from None


def _parse_chunk(raw: Any, *, where: str) -> Coord:
    if isinstance(raw, dict):
        raw = [raw.get("x"), raw.get("y")]
    if not isinstance(raw, (list, tuple)) or len(raw) != 2:
        raise WorldSnapshotError(f"{where}: chunk must be [x, y] or {{x, y}}, got {raw!r}")
    x, y = raw
    if isinstance(x, bool) or isinstance(y, bool) or not isinstance(x, int) or not isinstance(y, int):
        raise WorldSnapshotError(f"{where}: chunk coordinates must be integers, got {raw!r}")
    return (x, y)


def _parse_surface(raw: Any, idx: int) -> SurfaceSnapshot:
    if not isinstance(raw, dict):
        raise WorldSnapshotError(f"surfaces[{idx}] must be an object")
    name = raw.get("name")
    if not isinstance(name, str) or not name:
        raise WorldSnapshotError(f"surfaces[{idx}].name must be a non-empty string")

    chunks = [
        _parse_chunk(c, where=f"{name}.chunks[{i}]")
        for i, c in enumerate(raw.get("chunks", []))
    ]

    entities: List[Entity] = []
    for i, item in enumerate(raw.get("entities", [])):
        if not isinstance(item, dict):
            raise WorldSnapshotError(f"{name}.entities[{i}] must be an object")
        entities.append(
            Entity(
                position=_parse_position(item.get("position"), where=f"{name}.entities[{i}]"),
                force=str(item.get("force", "player")),
            )
        )

    tags: List[ChartTag] = []
    for i, item in enumerate(raw.get("tags", [])):
        if not isinstance(item, dict):
            raise WorldSnapshotError(f"{name}.tags[{i}] must be an object")
        text = item.get("text") or ""
        tags.append(
            ChartTag(
                position=_parse_position(item.get("position"), where=f"{name}.tags[{i}]"),
                text=str(text),
                force=str(item.get("force", "player")),
            )
        )

    return SurfaceSnapshot(name=name, chunks=chunks, entities=entities, tags=tags)


def parse_world_snapshot(data: Any) -> WorldSnapshot:
    if not isinstance(data, dict):
        raise WorldSnapshotError("Expected top-level object in world snapshot.")
    surfaces_raw = data.get("surfaces", [])
    if not isinstance(surfaces_raw, list):
        raise WorldSnapshotError("'surfaces' must be a list.")
    surfaces = [_parse_surface(raw, idx) for idx, raw in enumerate(surfaces_raw)]
    names = [s.name for s in surfaces]
    if len(set(names)) != len(names):
        raise WorldSnapshotError(f"Duplicate surface names: {sorted(names)}")
    return WorldSnapshot(surfaces=surfaces)


def load_world_snapshot(path: Path | str) -> WorldSnapshot:
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise WorldSnapshotError(f"Failed to parse JSON from {path}: {exc}") from exc
    return parse_world_snapshot(data)
