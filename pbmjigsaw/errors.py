"""Exception types raised while building or replaying a jigsaw grid."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Tuple, Union

Cell = Tuple[int, int]


class JigsawError(Exception):
    """Base class for every error reported by the toolkit."""


class ConfigurationError(JigsawError, ValueError):
    """Puzzle dimensions or edge resolution are out of range."""


class CollisionError(JigsawError):
    """Two pieces claim the same grid cell."""

    def __init__(self, cell: Cell, existing: int, incoming: int) -> None:
        self.cell = cell
        self.existing = existing
        self.incoming = incoming
        col, row = cell
        super().__init__(
            f"Collision between pieces {existing} and {incoming} at grid location j={row} i={col}"
        )


class IncompleteCoverageError(JigsawError):
    """A grid cell was never claimed by any piece."""

    def __init__(self, cell: Cell) -> None:
        self.cell = cell
        col, row = cell
        super().__init__(f"missing bit at grid location j={row} i={col}")


class MalformedPieceError(JigsawError, ValueError):
    """A piece bitmap is truncated, wrongly sized or holds bits other than 0/1."""

    def __init__(self, message: str, *, source: Optional[Union[str, Path]] = None) -> None:
        self.source = None if source is None else str(source)
        if self.source:
            message = f"Error processing file {self.source}: {message}"
        super().__init__(message)


class MalformedLedgerError(JigsawError, ValueError):
    """A solution ledger line cannot be understood."""

    def __init__(self, message: str, *, line_number: Optional[int] = None) -> None:
        self.line_number = line_number
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)


class MissingPieceFileError(JigsawError, FileNotFoundError):
    """The ledger names a piece file that cannot be opened."""

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)
        super().__init__(f"No piece file for {self.path}")


__all__ = [
    "JigsawError",
    "ConfigurationError",
    "CollisionError",
    "IncompleteCoverageError",
    "MalformedPieceError",
    "MalformedLedgerError",
    "MissingPieceFileError",
]
