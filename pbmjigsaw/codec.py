"""Piece bitmap encoding and decoding against the expanded grid."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Union

import numpy as np

from .errors import CollisionError, MalformedPieceError, MissingPieceFileError
from .grid import UNCLAIMED, PuzzleGeometry
from .transform import rotation_map

PBM_MAGIC = "P1"
PIECE_NAME_FORMAT = "p{:04d}.pbm"

PathLike = Union[str, Path]


def piece_file_name(file_id: int) -> str:
    return PIECE_NAME_FORMAT.format(file_id)


def _piece_cells(geometry: PuzzleGeometry, n: int, angle: int):
    cols, rows = rotation_map(angle, geometry.edge)
    is_, js = geometry.piece_origin(n)
    return rows + js, cols + is_


def serialize_piece(grid: np.ndarray, geometry: PuzzleGeometry, n: int, angle: int) -> np.ndarray:
    """Bitmap of piece ``n`` as stored under ``angle``; 1 where the piece owns the sample."""

    if not geometry.is_valid_piece_index(n):
        raise IndexError(f"piece index {n} outside 0..{geometry.piece_count - 1}")
    rows, cols = _piece_cells(geometry, n, angle)
    return (grid[rows, cols] == n).astype(np.uint8)


def deserialize_piece(
    bitmap: np.ndarray,
    grid: np.ndarray,
    geometry: PuzzleGeometry,
    n: int,
    angle: int,
    *,
    source: Optional[PathLike] = None,
) -> int:
    """Claim the grid cells marked in ``bitmap`` for piece ``n``.

    Returns the number of cells claimed. The grid is left partially written
    when a collision is detected.
    """

    if not geometry.is_valid_piece_index(n):
        raise IndexError(f"piece index {n} outside 0..{geometry.piece_count - 1}")
    bitmap = np.asarray(bitmap)
    edge = geometry.edge
    if bitmap.shape != (edge, edge):
        raise MalformedPieceError(f"expected {edge}x{edge} bitmap, got shape {bitmap.shape}", source=source)
    if not np.isin(bitmap, (0, 1)).all():
        raise MalformedPieceError("bitmap holds values other than 0 and 1", source=source)

    rows, cols = _piece_cells(geometry, n, angle)
    claimed = 0
    for jk in range(edge):
        for ik in range(edge):
            if not bitmap[jk, ik]:
                continue
            row, col = int(rows[jk, ik]), int(cols[jk, ik])
            current = int(grid[row, col])
            if current != UNCLAIMED and current != n:
                raise CollisionError((col, row), current, n)
            grid[row, col] = n
            claimed += 1
    return claimed


def format_pbm(bitmap: np.ndarray, name: str) -> str:
    rows, cols = bitmap.shape
    lines = [PBM_MAGIC, f"# {name}", f"{cols} {rows}"]
    lines.extend("".join("1" if bit else "0" for bit in row) for row in bitmap)
    return "\n".join(lines) + "\n"


def parse_pbm(text: str, edge: int, *, source: Optional[PathLike] = None) -> np.ndarray:
    """Read a plain ``P1`` bitmap of ``edge`` x ``edge`` samples.

    Comment lines are skipped and whitespace between bits is ignored. Any
    other character in the raster is rejected.
    """

    lines = [line.strip() for line in text.splitlines()]
    content = [line for line in lines if line and not line.startswith("#")]
    if not content or content[0] != PBM_MAGIC:
        raise MalformedPieceError(f"missing {PBM_MAGIC} format tag", source=source)
    if len(content) < 2:
        raise MalformedPieceError("missing dimension line", source=source)
    try:
        dims = [int(value) for value in content[1].split()]
    except ValueError:
        raise MalformedPieceError(f"unreadable dimension line {content[1]!r}", source=source) from None
    if dims != [edge, edge]:
        raise MalformedPieceError(f"expected dimensions {edge} {edge}, got {content[1]!r}", source=source)

    raster = content[2:]
    if len(raster) != edge:
        raise MalformedPieceError(f"expected {edge} rows, got {len(raster)}", source=source)
    rows: List[List[int]] = []
    for row_number, line in enumerate(raster):
        bits = "".join(line.split())
        if len(bits) != edge:
            raise MalformedPieceError(f"row {row_number} has {len(bits)} samples, expected {edge}", source=source)
        if set(bits) - {"0", "1"}:
            raise MalformedPieceError(f"row {row_number} holds characters other than 0 and 1", source=source)
        rows.append([int(bit) for bit in bits])
    return np.array(rows, dtype=np.uint8)


def write_piece_file(path: PathLike, bitmap: np.ndarray) -> Path:
    target = Path(path)
    target.write_text(format_pbm(bitmap, target.name), encoding="ascii")
    return target


def read_piece_file(path: PathLike, edge: int) -> np.ndarray:
    source = Path(path)
    try:
        text = source.read_text(encoding="ascii")
    except FileNotFoundError as exc:
        raise MissingPieceFileError(source) from exc
    except UnicodeDecodeError as exc:
        raise MalformedPieceError("file is not plain text", source=source) from exc
    except OSError as exc:
        raise MissingPieceFileError(source) from exc
    return parse_pbm(text, edge, source=source)


__all__ = [
    "PBM_MAGIC",
    "PIECE_NAME_FORMAT",
    "piece_file_name",
    "serialize_piece",
    "deserialize_piece",
    "format_pbm",
    "parse_pbm",
    "write_piece_file",
    "read_piece_file",
]
