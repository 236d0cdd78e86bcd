from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import List

from chunkmaps.capture import plan_captures
from chunkmaps.config import ConfigError, ExportConfig, load_export_config
from chunkmaps.debug_render import render_classification_png
from chunkmaps.descriptor import DESCRIPTOR_FILENAME, write_descriptors
from chunkmaps.engine import MapExportEngine
from chunkmaps.world_source import WorldSnapshotError, load_world_snapshot


CAPTURE_PLAN_FILENAME = "capture_plan.json"


def _parse_args(argv: List[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Classify visible chunks and plan map captures.")
    parser.add_argument("world", help="Path to world snapshot JSON")
    parser.add_argument("--config", type=str, default=None, help="Path to export config JSON")
    parser.add_argument("--horizon", type=int, default=None, help="Chunks kept around seeds")
    parser.add_argument("--force", type=str, default=None, help="Force whose entities seed chunks")
    parser.add_argument("--out", type=str, default="output", help="Output directory")
    parser.add_argument("--log-dir", type=str, default="logs", help="Directory for run logs")
    parser.add_argument(
        "--debug-png",
        action="store_true",
        default=None,
        help="Render a classification overlay per surface",
    )
    return parser.parse_args(argv)


def main(argv: List[str] | None = None) -> int:
    args = _parse_args(sys.argv[1:] if argv is None else argv)

    try:
        config = load_export_config(args.config) if args.config else ExportConfig()
        config = config.with_overrides(
            horizon=args.horizon,
            force=args.force,
            debug_render=args.debug_png,
        )
        world = load_world_snapshot(args.world)
    except (ConfigError, WorldSnapshotError, ValueError, OSError) as exc:
        print(f"Error: {exc}")
        return 2

    out_dir = Path(args.out)
    with MapExportEngine(config=config, run_label="export", log_dir=args.log_dir) as engine:
        descriptors = engine.export(world)
        info_path = write_descriptors(out_dir / DESCRIPTOR_FILENAME, descriptors)

        plan = [req.to_dict() for req in plan_captures(descriptors, config.capture_settings())]
        plan_path = out_dir / CAPTURE_PLAN_FILENAME
        plan_path.write_text(json.dumps(plan, indent=2) + "\n", encoding="utf-8")
        engine.log(f"Wrote {len(plan)} capture requests to {plan_path}")

        if config.debug_render:
            for name, result in engine.results.items():
                png_path = out_dir / "debug" / f"{name}.png"
                if render_classification_png(result.index, out_path=png_path, title=name):
                    engine.log(f"Wrote debug overlay {png_path}")
                else:
                    engine.log(f"Skipped debug overlay for {name} (no chunks)")

        for name, result in engine.results.items():
            summary = result.summary()
            print(
                f"{name}: {summary['included']}/{summary['chunks']} chunks included "
                f"({summary['island_components']} islands, {summary['edge_components']} edge regions)"
            )

    print(f"Surface descriptors written to {info_path}")
    print(f"Capture plan written to {plan_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
