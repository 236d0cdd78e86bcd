"""Chunk visibility classification and map export planning."""

from .chunk_grid import CHUNK_SIZE, Chunk, build_chunk_index, chunk_of
from .classifier import (
    DEFAULT_HORIZON,
    ClassificationResult,
    InvalidHorizonError,
    classify,
    classify_chunks,
    classify_regions,
    compute_distances,
    included_coords,
    mark_within_horizon,
)
from .config import ConfigError, ExportConfig, load_export_config
from .world_source import WorldSnapshotError, load_world_snapshot, surface_chunk_index

__all__ = [
    "CHUNK_SIZE",
    "Chunk",
    "ClassificationResult",
    "ConfigError",
    "DEFAULT_HORIZON",
    "ExportConfig",
    "InvalidHorizonError",
    "MapExportEngine",
    "WorldSnapshotError",
    "build_chunk_index",
    "chunk_of",
    "classify",
    "classify_chunks",
    "classify_regions",
    "compute_distances",
    "included_coords",
    "load_export_config",
    "load_world_snapshot",
    "mark_within_horizon",
    "surface_chunk_index",
]


def __getattr__(name: str):
    if name == "MapExportEngine":
        from .engine import MapExportEngine

        return MapExportEngine
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
