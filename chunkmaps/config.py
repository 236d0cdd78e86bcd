from __future__ import annotations

import json
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Tuple

from .capture import CaptureSettings
from .classifier import DEFAULT_HORIZON, validate_horizon


class ConfigError(ValueError):
    pass


@dataclass(frozen=True)
class ExportConfig:
    horizon: int = DEFAULT_HORIZON
    force: str = "player"
    resolution: Tuple[int, int] = (1024, 1024)
    zoom: float = 1
    show_entity_info: bool = True
    debug_render: bool = False

    def capture_settings(self) -> CaptureSettings:
        return CaptureSettings(
            resolution=self.resolution,
            zoom=self.zoom,
            show_entity_info=self.show_entity_info,
        )

    def with_overrides(self, **overrides: Any) -> "ExportConfig":
        values = {k: v for k, v in overrides.items() if v is not None}
        return parse_export_config({**self.to_dict(), **values})

    def to_dict(self) -> Dict[str, Any]:
        return {
            "horizon": self.horizon,
            "force": self.force,
            "resolution": list(self.resolution),
            "zoom": self.zoom,
            "show_entity_info": self.show_entity_info,
            "debug_render": self.debug_render,
        }


def _parse_resolution(raw: Any) -> Tuple[int, int]:
    if not isinstance(raw, (list, tuple)) or len(raw) != 2:
        raise ConfigError(f"resolution must be [width, height], got {raw!r}")
    width, height = raw
    for value in (width, height):
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            raise ConfigError(f"resolution values must be positive integers, got {raw!r}")
    return (width, height)


def parse_export_config(data: Mapping[str, Any]) -> ExportConfig:
    """Build a validated config; unknown keys are ignored."""
    if not isinstance(data, Mapping):
        raise ConfigError("Expected top-level object in export config.")
    config = ExportConfig()

    if "horizon" in data:
        config = replace(config, horizon=validate_horizon(data["horizon"]))
    if "force" in data:
        force = data["force"]
        if not isinstance(force, str) or not force:
            raise ConfigError(f"force must be a non-empty string, got {force!r}")
        config = replace(config, force=force)
    if "resolution" in data:
        config = replace(config, resolution=_parse_resolution(data["resolution"]))
    if "zoom" in data:
        zoom = data["zoom"]
        if isinstance(zoom, bool) or not isinstance(zoom, (int, float)) or zoom <= 0:
            raise ConfigError(f"zoom must be a positive number, got {zoom!r}")
        config = replace(config, zoom=zoom)
    for key in ("show_entity_info", "debug_render"):
        if key in data:
            if not isinstance(data[key], bool):
                raise ConfigError(f"{key} must be true or false, got {data[key]!r}")
            config = replace(config, **{key: data[key]})
    return config


def load_export_config(path: Path | str) -> ExportConfig:
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Failed to read JSON from {path}: {exc}") from exc
    return parse_export_config(data)
