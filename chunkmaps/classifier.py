"""Chunk visibility classifier.

Two stages run over the same chunk index:

1. ``compute_distances`` seeds distance 0 on marked chunks and relaxes
   distances outward for exactly ``horizon`` passes over 4-connected neighbours.
2. ``classify_regions`` groups every chunk outside the horizon into connected
   components and flags the ones that reach a missing neighbour coordinate as
   edge components.

A chunk is included when it is within the horizon, or when its component never
touches the boundary of the known chunk set (an enclosed island).
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Set

from .chunk_grid import (
    Chunk,
    ChunkIndex,
    Coord,
    build_chunk_index,
    neighbors,
    seed_count,
    touches_boundary,
)


DEFAULT_HORIZON = 5


class InvalidHorizonError(ValueError):
    pass


@dataclass
class ClassificationResult:
    index: ChunkIndex
    horizon: int
    included: Set[Coord] = field(default_factory=set)
    # component id -> is edge component
    components: Dict[int, bool] = field(default_factory=dict)

    @property
    def edge_components(self) -> List[int]:
        return sorted(cid for cid, edge in self.components.items() if edge)

    @property
    def island_components(self) -> List[int]:
        return sorted(cid for cid, edge in self.components.items() if not edge)

    @property
    def excluded(self) -> Set[Coord]:
        return set(self.index.keys()) - self.included

    def summary(self) -> Dict[str, int]:
        within = sum(1 for chunk in self.index.values() if chunk.within_horizon)
        return {
            "chunks": len(self.index),
            "seeds": seed_count(self.index),
            "within_horizon": within,
            "components": len(self.components),
            "edge_components": len(self.edge_components),
            "island_components": len(self.island_components),
            "included": len(self.included),
        }


def _log(log_fn, msg: str) -> None:
    if log_fn is not None:
        log_fn(msg)


def validate_horizon(horizon: Any) -> int:
    if isinstance(horizon, bool) or not isinstance(horizon, int):
        raise InvalidHorizonError(f"horizon must be an integer, got {horizon!r}")
    if horizon < 0:
        raise InvalidHorizonError(f"horizon must be non-negative, got {horizon}")
    return horizon


def compute_distances(index: ChunkIndex, horizon: int = DEFAULT_HORIZON) -> None:
    """Bounded relaxation of distances to the nearest seed chunk.

    Each pass reads the distances left by the previous pass, so after ``k``
    passes a chunk has a distance exactly when a seed lies within ``k`` steps.
    Chunks farther than ``horizon`` keep ``None``.
    """
    horizon = validate_horizon(horizon)
    for chunk in index.values():
        chunk.distance = 0 if chunk.has_seed_marker else None

    for _ in range(horizon):
        previous = {coord: chunk.distance for coord, chunk in index.items()}
        for coord, chunk in index.items():
            best: Optional[int] = None
            for neighbor in neighbors(index, coord):
                dist = previous[neighbor.coord]
                if dist is None:
                    continue
                if best is None or dist < best:
                    best = dist
            if best is None:
                continue
            if chunk.distance is None or best + 1 < chunk.distance:
                chunk.distance = best + 1


def mark_within_horizon(index: ChunkIndex, horizon: int = DEFAULT_HORIZON) -> int:
    """Set ``within_horizon`` on every chunk; returns how many are within."""
    horizon = validate_horizon(horizon)
    count = 0
    for chunk in index.values():
        chunk.within_horizon = chunk.distance is not None and chunk.distance < horizon
        if chunk.within_horizon:
            count += 1
    return count


def classify_regions(index: ChunkIndex) -> Dict[int, bool]:
    """Partition out-of-horizon chunks into components and flag edge components.

    A component is an edge component when any member has a neighbour
    coordinate absent from the full index. Neighbours that are present but
    within the horizon do not count as boundary.
    """
    for chunk in index.values():
        chunk.component_id = None
        chunk.is_edge_component = None if not chunk.within_horizon else False

    queue = deque(coord for coord, chunk in index.items() if not chunk.within_horizon)
    assigned: Set[Coord] = set()
    components: Dict[int, bool] = {}
    next_id = 0

    while queue:
        start = queue.popleft()
        if start in assigned:
            continue
        next_id += 1
        visited: Set[Coord] = {start}
        frontier = [start]
        edge = False

        while frontier:
            coord = frontier.pop()
            if touches_boundary(index, coord):
                edge = True
            for neighbor in neighbors(index, coord):
                if neighbor.within_horizon or neighbor.coord in visited:
                    continue
                visited.add(neighbor.coord)
                frontier.append(neighbor.coord)

        for coord in visited:
            chunk = index[coord]
            chunk.component_id = next_id
            chunk.is_edge_component = edge
        assigned |= visited
        components[next_id] = edge

    return components


def is_included(chunk: Chunk) -> bool:
    if chunk.within_horizon:
        return True
    return chunk.is_edge_component is False


def included_coords(index: ChunkIndex) -> Set[Coord]:
    return {coord for coord, chunk in index.items() if is_included(chunk)}


def classify_chunks(
    index: ChunkIndex,
    *,
    horizon: int = DEFAULT_HORIZON,
    log_fn: Callable[[str], None] | None = None,
) -> ClassificationResult:
    """Run both stages in place on ``index`` and collect the inclusion set."""
    horizon = validate_horizon(horizon)
    compute_distances(index, horizon)
    within = mark_within_horizon(index, horizon)
    _log(log_fn, f"Distance field: {within}/{len(index)} chunks within horizon {horizon}")

    components = classify_regions(index)
    edges = sum(1 for edge in components.values() if edge)
    _log(
        log_fn,
        f"Regions: {len(components)} components ({edges} edge, {len(components) - edges} island)",
    )

    result = ClassificationResult(
        index=index,
        horizon=horizon,
        included=included_coords(index),
        components=components,
    )
    _log(log_fn, f"Included chunks: {len(result.included)}")
    return result


def classify(
    coords: Iterable[Coord],
    seed_coords: Iterable[Coord],
    *,
    horizon: int = DEFAULT_HORIZON,
    log_fn: Callable[[str], None] | None = None,
) -> ClassificationResult:
    """Convenience wrapper: build an index from coordinates and classify it."""
    horizon = validate_horizon(horizon)
    index = build_chunk_index(coords, seed_coords=seed_coords)
    return classify_chunks(index, horizon=horizon, log_fn=log_fn)
