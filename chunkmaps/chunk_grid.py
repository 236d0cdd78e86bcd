from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Set, Tuple


Coord = Tuple[int, int]

# Tiles per chunk edge.
CHUNK_SIZE = 32

_OFFSETS: Tuple[Coord, ...] = ((0, -1), (0, 1), (-1, 0), (1, 0))


@dataclass
class Chunk:
    x: int
    y: int
    contains_entities: bool = False
    contains_tags: bool = False
    distance: Optional[int] = None
    within_horizon: bool = False
    component_id: Optional[int] = None
    is_edge_component: Optional[bool] = None

    @property
    def coord(self) -> Coord:
        return (self.x, self.y)

    @property
    def has_seed_marker(self) -> bool:
        return self.contains_entities or self.contains_tags


ChunkIndex = Dict[Coord, Chunk]


def _adjacent(coord: Coord) -> List[Coord]:
    x, y = coord
    return [(x + dx, y + dy) for dx, dy in _OFFSETS]


def neighbors(index: ChunkIndex, coord: Coord) -> List[Chunk]:
    """Present 4-connected neighbours of ``coord``; absent coordinates are skipped."""
    found: List[Chunk] = []
    for neighbor_coord in _adjacent(coord):
        neighbor = index.get(neighbor_coord)
        if neighbor is None:
            continue
        found.append(neighbor)
    return found


def touches_boundary(index: ChunkIndex, coord: Coord) -> bool:
    """True when at least one of the four neighbour coordinates is missing from the index."""
    return any(adj not in index for adj in _adjacent(coord))


def chunk_of(position: Tuple[float, float]) -> Coord:
    """Chunk coordinate containing a tile-space position."""
    x, y = position
    return (int(x // CHUNK_SIZE), int(y // CHUNK_SIZE))


def chunk_center(coord: Coord) -> Tuple[int, int]:
    x, y = coord
    return (x * CHUNK_SIZE + CHUNK_SIZE // 2, y * CHUNK_SIZE + CHUNK_SIZE // 2)


def build_chunk_index(
    coords: Iterable[Coord],
    *,
    seed_coords: Iterable[Coord] = (),
    has_seed_marker: Callable[[Coord], bool] | None = None,
    entity_coords: Iterable[Coord] = (),
    tag_coords: Iterable[Coord] = (),
) -> ChunkIndex:
    """Build a fresh index from present chunk coordinates.

    Seeds can be given as a plain coordinate set, as a predicate, or split into
    entity and tag coordinates (kept apart for diagnostics). Seed coordinates
    that are not present chunks are ignored.
    """
    seeds: Set[Coord] = {(int(x), int(y)) for x, y in seed_coords}
    entities: Set[Coord] = {(int(x), int(y)) for x, y in entity_coords}
    tags: Set[Coord] = {(int(x), int(y)) for x, y in tag_coords}

    index: ChunkIndex = {}
    for raw in coords:
        coord = (int(raw[0]), int(raw[1]))
        if coord in index:
            continue
        chunk = Chunk(x=coord[0], y=coord[1])
        chunk.contains_entities = coord in entities
        chunk.contains_tags = coord in tags
        if coord in seeds or (has_seed_marker is not None and has_seed_marker(coord)):
            # Seeds without a known source count as entity markers.
            if not chunk.contains_tags:
                chunk.contains_entities = True
        index[coord] = chunk
    return index


def seed_count(index: ChunkIndex) -> int:
    return sum(1 for chunk in index.values() if chunk.has_seed_marker)
