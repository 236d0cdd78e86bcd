from __future__ import annotations

import datetime as dt
import os
from typing import Any, Dict, List

from .classifier import ClassificationResult, classify_chunks
from .config import ExportConfig
from .descriptor import build_descriptors
from .world_source import SurfaceSnapshot, WorldSnapshot, surface_chunk_index


class MapExportEngine:
    """Classifies every surface of a world snapshot and records a run log."""

    def __init__(
        self,
        *,
        config: ExportConfig | None = None,
        run_label: str = "export",
        log_dir: str = "logs",
    ) -> None:
        self.config = config or ExportConfig()
        self.run_label = run_label
        self.log_dir = log_dir
        self._ensure_dirs()
        run_id = dt.datetime.now(dt.timezone.utc).strftime("%Y%m%d_%H%M%S")
        self.log_path = os.path.join(log_dir, f"{run_label}_{run_id}.log")
        self._log_fp = open(self.log_path, "w", encoding="utf-8")
        self.results: Dict[str, ClassificationResult] = {}

    def __enter__(self) -> "MapExportEngine":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        if not self._log_fp.closed:
            self._log_fp.close()

    def log(self, msg: str) -> None:
        self._log_fp.write(msg + "\n")
        self._log_fp.flush()

    def log_config(self) -> None:
        self.log(f"Config: {self.config.to_dict()}")

    def classify_surface(self, surface: SurfaceSnapshot) -> ClassificationResult:
        self.log(f"Surface {surface.name} start")
        index = surface_chunk_index(surface, force=self.config.force)
        result = classify_chunks(index, horizon=self.config.horizon, log_fn=self.log)
        self.log(f"Surface {surface.name} summary: {result.summary()}")
        self.results[surface.name] = result
        return result

    def export(self, world: WorldSnapshot) -> List[Dict[str, Any]]:
        """Classify all surfaces and return descriptors for those with visible chunks."""
        self.log_config()
        pairs = [(surface, self.classify_surface(surface)) for surface in world.surfaces]
        descriptors = build_descriptors(pairs)
        kept = {d["name"] for d in descriptors}
        for surface, _ in pairs:
            if surface.name not in kept:
                self.log(f"Surface {surface.name} omitted (no visible chunks)")
        return descriptors

    def _ensure_dirs(self) -> None:
        os.makedirs(self.log_dir, exist_ok=True)
