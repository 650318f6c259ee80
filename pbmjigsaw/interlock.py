"""Randomly interlock neighbouring pieces on the expanded grid.

Every seam column and seam row between two pieces is shared by both of their
bitmaps. A seam cell is handed to one side by a coin flip; a cell where four
pieces meet copies one of its four orthogonal neighbours.
"""

from __future__ import annotations

import logging
import random
from typing import Sequence

import numpy as np

from .grid import UNCLAIMED, PuzzleGeometry, ensure_complete, format_grid

logger = logging.getLogger(__name__)


def init_grid(geometry: PuzzleGeometry) -> np.ndarray:
    """Fill in every cell that does not sit on a shared seam.

    Piece interiors and the outer border of the puzzle get their owner; the
    seam columns and rows between pieces stay unclaimed.
    """

    grid = geometry.new_grid()
    edge = geometry.edge
    last = edge - 1
    for j in range(geometry.height):
        js = j * geometry.step
        for i in range(geometry.width):
            is_ = i * geometry.step
            n = geometry.piece_index(i, j)
            for jk in range(edge):
                if jk == 0 and j != 0:
                    continue
                if jk == last and j != geometry.height - 1:
                    continue
                for ik in range(edge):
                    if ik == 0 and i != 0:
                        continue
                    if ik == last and i != geometry.width - 1:
                        continue
                    grid[js + jk, is_ + ik] = n
    return grid


def _interior_lines(size: int, step: int) -> range:
    return range(step, size - 1, step)


def _piece_column(geometry: PuzzleGeometry, col: int) -> int:
    return min(col // geometry.step, geometry.width - 1)


def _piece_row(geometry: PuzzleGeometry, row: int) -> int:
    return min(row // geometry.step, geometry.height - 1)


def resolve_vertical_seams(grid: np.ndarray, geometry: PuzzleGeometry, rng: random.Random) -> None:
    """Give each vertical seam cell to the piece on its left or right."""

    gw, gh = geometry.grid_width, geometry.grid_height
    seam_rows = set(_interior_lines(gh, geometry.step))
    for col in _interior_lines(gw, geometry.step):
        right = col // geometry.step
        for row in range(gh):
            if row in seam_rows:
                continue
            j = _piece_row(geometry, row)
            i = right - 1 if rng.randrange(2) == 0 else right
            grid[row, col] = geometry.piece_index(i, j)


def resolve_horizontal_seams(grid: np.ndarray, geometry: PuzzleGeometry, rng: random.Random) -> None:
    """Give each horizontal seam cell to the piece above or below."""

    gw, gh = geometry.grid_width, geometry.grid_height
    seam_cols = set(_interior_lines(gw, geometry.step))
    for row in _interior_lines(gh, geometry.step):
        below = row // geometry.step
        for col in range(gw):
            if col in seam_cols:
                continue
            i = _piece_column(geometry, col)
            j = below - 1 if rng.randrange(2) == 0 else below
            grid[row, col] = geometry.piece_index(i, j)


def _copy_neighbour(
    grid: np.ndarray,
    row: int,
    col: int,
    candidates: Sequence[int],
    rng: random.Random,
) -> int:
    value = int(grid[row, col])
    if value != UNCLAIMED and value in candidates:
        return value
    # With edge == 2 the neighbour is another intersection, not a seam cell.
    return rng.choice(candidates)


def resolve_intersections(grid: np.ndarray, geometry: PuzzleGeometry, rng: random.Random) -> None:
    """Give each four-way corner the owner of one of its orthogonal neighbours."""

    gw, gh = geometry.grid_width, geometry.grid_height
    for row in _interior_lines(gh, geometry.step):
        j = row // geometry.step
        for col in _interior_lines(gw, geometry.step):
            i = col // geometry.step
            top_left = geometry.piece_index(i - 1, j - 1)
            top_right = geometry.piece_index(i, j - 1)
            bottom_left = geometry.piece_index(i - 1, j)
            bottom_right = geometry.piece_index(i, j)
            direction = rng.randrange(4)
            if direction == 0:
                owner = _copy_neighbour(grid, row, col - 1, (top_left, bottom_left), rng)
            elif direction == 1:
                owner = _copy_neighbour(grid, row, col + 1, (top_right, bottom_right), rng)
            elif direction == 2:
                owner = _copy_neighbour(grid, row - 1, col, (top_left, top_right), rng)
            else:
                owner = _copy_neighbour(grid, row + 1, col, (bottom_left, bottom_right), rng)
            grid[row, col] = owner


def build_grid(geometry: PuzzleGeometry, rng: random.Random) -> np.ndarray:
    """Return a fully resolved grid for ``geometry``.

    The phases run in a fixed order: vertical seams, horizontal seams, then
    intersections. Intersections read seam cells, so they must come last.
    """

    grid = init_grid(geometry)
    resolve_vertical_seams(grid, geometry, rng)
    resolve_horizontal_seams(grid, geometry, rng)
    resolve_intersections(grid, geometry, rng)
    ensure_complete(grid)
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("Resolved %dx%d grid:\n%s", geometry.grid_width, geometry.grid_height, format_grid(grid))
    return grid


__all__ = [
    "init_grid",
    "resolve_vertical_seams",
    "resolve_horizontal_seams",
    "resolve_intersections",
    "build_grid",
]
