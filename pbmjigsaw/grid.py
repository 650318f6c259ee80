"""Expanded sample grid shared by the generator and the validator.

Pieces of ``edge`` x ``edge`` samples overlap their neighbours by one sample,
so a puzzle ``width`` pieces wide is ``width * (edge - 1) + 1`` samples wide.
Every cell of the grid holds the row-major index of the piece that owns it,
or :data:`UNCLAIMED` while nobody does.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from .errors import ConfigurationError, IncompleteCoverageError

UNCLAIMED = -1

MIN_PIECES = 2
MAX_WIDTH = 500
MAX_HEIGHT = 500
MIN_EDGE = 2
MAX_EDGE = 8


def grid_width(width: int, edge: int) -> int:
    return width * (edge - 1) + 1


def grid_height(height: int, edge: int) -> int:
    return height * (edge - 1) + 1


def cell_offset(i: int, j: int, gw: int) -> int:
    """Linear offset of column ``i``, row ``j`` in a grid ``gw`` cells wide."""

    return i + j * gw


def cell_coordinates(offset: int, gw: int) -> Tuple[int, int]:
    row, col = divmod(int(offset), gw)
    return col, row


@dataclass(frozen=True)
class PuzzleGeometry:
    """Puzzle size in pieces plus the bitmap side length of one piece."""

    width: int
    height: int
    edge: int

    def __post_init__(self) -> None:
        if not MIN_PIECES <= self.width <= MAX_WIDTH:
            raise ConfigurationError(f"width must be between {MIN_PIECES} and {MAX_WIDTH}, got {self.width}")
        if not MIN_PIECES <= self.height <= MAX_HEIGHT:
            raise ConfigurationError(f"height must be between {MIN_PIECES} and {MAX_HEIGHT}, got {self.height}")
        if not MIN_EDGE <= self.edge <= MAX_EDGE:
            raise ConfigurationError(f"edge must be between {MIN_EDGE} and {MAX_EDGE}, got {self.edge}")

    @property
    def step(self) -> int:
        return self.edge - 1

    @property
    def grid_width(self) -> int:
        return grid_width(self.width, self.edge)

    @property
    def grid_height(self) -> int:
        return grid_height(self.height, self.edge)

    @property
    def piece_count(self) -> int:
        return self.width * self.height

    def piece_index(self, i: int, j: int) -> int:
        return i + j * self.width

    def piece_position(self, n: int) -> Tuple[int, int]:
        """Column and row of canonical piece ``n``."""

        return n % self.width, n // self.width

    def piece_origin(self, n: int) -> Tuple[int, int]:
        """Grid column and row of the top-left sample of piece ``n``."""

        i, j = self.piece_position(n)
        return i * self.step, j * self.step

    def is_valid_piece_index(self, n: int) -> bool:
        return 0 <= n < self.piece_count

    def new_grid(self) -> np.ndarray:
        return np.full((self.grid_height, self.grid_width), UNCLAIMED, dtype=np.int32)

    def to_dict(self) -> dict:
        return {"width": self.width, "height": self.height, "edge": self.edge}


def find_unclaimed(grid: np.ndarray) -> Optional[Tuple[int, int]]:
    """Return ``(col, row)`` of the first unclaimed cell in row-major order."""

    flat = np.flatnonzero(grid.ravel() == UNCLAIMED)
    if flat.size == 0:
        return None
    return cell_coordinates(flat[0], grid.shape[1])


def ensure_complete(grid: np.ndarray) -> None:
    missing = find_unclaimed(grid)
    if missing is not None:
        raise IncompleteCoverageError(missing)


def format_grid(grid: np.ndarray) -> str:
    width = max(2, len(str(int(grid.max()))) if grid.size else 2)
    lines = []
    for row in grid:
        lines.append(" ".join(f"{int(value):>{width}}" for value in row))
    return "\n".join(lines)


__all__ = [
    "UNCLAIMED",
    "PuzzleGeometry",
    "grid_width",
    "grid_height",
    "cell_offset",
    "cell_coordinates",
    "find_unclaimed",
    "ensure_complete",
    "format_grid",
]
