"""Outline and preview rendering of a solved grid."""

from __future__ import annotations

import colorsys
from typing import List, Tuple

import numpy as np
from PIL import Image, ImageDraw

Segment = Tuple[int, int, int, int]

OUTLINE_COLOR = (0, 0, 0)
BACKGROUND_COLOR = (255, 255, 255)


def outline_segments(grid: np.ndarray) -> List[Segment]:
    """Unit segments, in cell units, separating cells owned by different pieces.

    The outer border of the puzzle comes first as four full-length lines.
    """

    gh, gw = grid.shape
    segments: List[Segment] = [
        (0, 0, gw, 0),
        (0, gh, gw, gh),
        (0, 0, 0, gh),
        (gw, 0, gw, gh),
    ]
    rows, cols = np.nonzero(grid[:, :-1] != grid[:, 1:])
    for row, col in zip(rows.tolist(), cols.tolist()):
        segments.append((col + 1, row, col + 1, row + 1))
    rows, cols = np.nonzero(grid[:-1, :] != grid[1:, :])
    for row, col in zip(rows.tolist(), cols.tolist()):
        segments.append((col, row + 1, col + 1, row + 1))
    return segments


def render_outline_svg(grid: np.ndarray, *, mm_per_finger: int = 10, border: int = 20) -> str:
    """SVG cut lines for the solved puzzle, one finger per ``mm_per_finger`` mm."""

    gh, gw = grid.shape
    width = gw * mm_per_finger + 2 * border
    height = gh * mm_per_finger + 2 * border
    lines = [
        f"<svg xmlns='http://www.w3.org/2000/svg' width='{width}mm' height='{height}mm'",
        f"viewBox='0 0 {width} {height}'",
        "stroke-width='1' stroke='rgb(0,0,0)'>",
        "",
    ]
    for x1, y1, x2, y2 in outline_segments(grid):
        lines.append(
            "<line x1='{}' y1='{}' x2='{}' y2='{}'/>".format(
                border + x1 * mm_per_finger,
                border + y1 * mm_per_finger,
                border + x2 * mm_per_finger,
                border + y2 * mm_per_finger,
            )
        )
    lines.append("</svg>")
    return "\n".join(lines) + "\n"


def piece_color(n: int) -> Tuple[int, int, int]:
    # Spread hues with the golden ratio so neighbours rarely look alike.
    hue = (n * 0.618033988749895) % 1.0
    lightness = 0.55 if n % 2 == 0 else 0.7
    r, g, b = colorsys.hls_to_rgb(hue, lightness, 0.6)
    return int(r * 255), int(g * 255), int(b * 255)


def render_preview(grid: np.ndarray, *, cell_size: int = 24) -> Image.Image:
    """Raster image of the solved puzzle with one colour per piece."""

    if cell_size < 2:
        raise ValueError("cell_size must be at least 2")
    gh, gw = grid.shape
    piece_count = int(grid.max()) + 1 if grid.size else 0
    palette = np.array([piece_color(n) for n in range(max(piece_count, 1))], dtype=np.uint8)
    colored = np.where(grid[..., None] >= 0, palette[np.clip(grid, 0, None)], np.array(BACKGROUND_COLOR, dtype=np.uint8))
    image = Image.fromarray(colored.astype(np.uint8))
    image = image.resize((gw * cell_size, gh * cell_size), Image.Resampling.NEAREST)

    draw = ImageDraw.Draw(image)
    for x1, y1, x2, y2 in outline_segments(grid):
        x1, y1 = min(x1 * cell_size, image.width - 1), min(y1 * cell_size, image.height - 1)
        x2, y2 = min(x2 * cell_size, image.width - 1), min(y2 * cell_size, image.height - 1)
        draw.line((x1, y1, x2, y2), fill=OUTLINE_COLOR, width=2)
    return image


__all__ = ["outline_segments", "render_outline_svg", "render_preview", "piece_color"]
