from __future__ import annotations

import io
import os
from pathlib import Path
from typing import Dict, Tuple

import numpy as np
from PIL import Image

from .chunk_grid import Chunk, ChunkIndex, Coord


ABSENT = -1
EDGE = 0
ISLAND = 1
WITHIN = 2
SEED = 3

CLASS_COLORS: Dict[int, str] = {
    ABSENT: "#1d1b1a",
    EDGE: "#4caf50",
    ISLAND: "#e53935",
    WITHIN: "#d9d2c5",
    SEED: "#3b0a57",
}


def _hex_to_rgb(color: str) -> tuple[int, int, int]:
    color = color.lstrip("#")
    return tuple(int(color[i : i + 2], 16) for i in (0, 2, 4))


def chunk_class(chunk: Chunk) -> int:
    if chunk.has_seed_marker and chunk.within_horizon:
        return SEED
    if chunk.within_horizon:
        return WITHIN
    if chunk.is_edge_component:
        return EDGE
    return ISLAND


def classification_grid(index: ChunkIndex) -> Tuple[np.ndarray, Coord]:
    """Dense (rows=y, cols=x) array of class codes plus the (min_x, min_y) origin."""
    if not index:
        return np.zeros((0, 0), dtype=np.int8), (0, 0)
    xs = [x for x, _ in index]
    ys = [y for _, y in index]
    min_x, min_y = min(xs), min(ys)
    grid = np.full((max(ys) - min_y + 1, max(xs) - min_x + 1), ABSENT, dtype=np.int8)
    for (x, y), chunk in index.items():
        grid[y - min_y, x - min_x] = chunk_class(chunk)
    return grid, (min_x, min_y)


def classification_mask_png(index: ChunkIndex, *, scale: int = 8) -> bytes:
    grid, _ = classification_grid(index)
    if not grid.size:
        grid = np.full((1, 1), ABSENT, dtype=np.int8)
    rgb = np.zeros(grid.shape + (3,), dtype=np.uint8)
    for code, color in CLASS_COLORS.items():
        rgb[grid == code] = _hex_to_rgb(color)
    image = Image.fromarray(rgb).resize(
        (grid.shape[1] * scale, grid.shape[0] * scale), Image.Resampling.NEAREST
    )
    buf = io.BytesIO()
    image.save(buf, format="PNG")
    return buf.getvalue()


def render_classification_png(
    index: ChunkIndex,
    *,
    out_path: Path,
    title: str | None = None,
    label_components: bool = True,
) -> bool:
    """Draw each chunk as a coloured square; out-of-horizon chunks carry their component id.

    Returns False without writing anything when the index is empty.
    """
    os.environ.setdefault("MPLCONFIGDIR", "/tmp/mpl")
    import matplotlib

    matplotlib.use("Agg")
    import matplotlib.pyplot as plt
    from matplotlib.patches import Rectangle

    if not index:
        return False

    xs = [x for x, _ in index]
    ys = [y for _, y in index]
    min_x, max_x = min(xs), max(xs)
    min_y, max_y = min(ys), max(ys)

    span = max(max_x - min_x, max_y - min_y) + 1
    size = min(16, max(4, span * 0.4))
    fig, ax = plt.subplots(figsize=(size, size))
    ax.set_aspect("equal")

    for (x, y), chunk in index.items():
        ax.add_patch(
            Rectangle(
                (x, y),
                1,
                1,
                facecolor=CLASS_COLORS[chunk_class(chunk)],
                edgecolor="#5a4f4b",
                linewidth=0.4,
            )
        )
        if label_components and chunk.component_id is not None:
            ax.text(
                x + 0.5,
                y + 0.5,
                str(chunk.component_id),
                ha="center",
                va="center",
                fontsize=6,
                color="#ffffff",
            )

    ax.set_xlim(min_x - 1, max_x + 2)
    # Chunk y grows southward.
    ax.set_ylim(max_y + 2, min_y - 1)
    if title:
        ax.set_title(title)
    ax.axis("off")

    out_path.parent.mkdir(parents=True, exist_ok=True)
    fig.tight_layout()
    fig.savefig(out_path, dpi=120)
    plt.close(fig)
    return True
