"""Replay a solution ledger onto an empty grid and report whether it tiles it."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import List, Optional, Set, Tuple, Union

import numpy as np

from .base import AbstractPuzzleEvaluator, PathLike
from .codec import deserialize_piece, read_piece_file
from .errors import CollisionError, IncompleteCoverageError, JigsawError, MalformedLedgerError
from .grid import PuzzleGeometry, ensure_complete
from .ledger import LedgerEntry, SolutionLedger

logger = logging.getLogger(__name__)

EXIT_VALID = 0
EXIT_INVALID = 1
EXIT_ERROR = 2


class ValidatorState(Enum):
    READING = "reading"
    CHECKED = "checked"


@dataclass
class ValidationResult:
    valid: bool
    message: str
    pieces_placed: int
    missing_cell: Optional[Tuple[int, int]] = None
    collision: Optional[Tuple[int, int]] = None
    collision_cell: Optional[Tuple[int, int]] = None
    puzzle_id: Optional[str] = None

    @property
    def verdict(self) -> str:
        return "valid" if self.valid else "invalid"

    def report(self) -> str:
        if self.valid:
            return self.verdict
        return f"{self.verdict} -- {self.message}"

    def to_dict(self) -> dict:
        return {
            "puzzle_id": self.puzzle_id,
            "verdict": self.verdict,
            "valid": self.valid,
            "message": self.message,
            "pieces_placed": self.pieces_placed,
            "missing_cell": list(self.missing_cell) if self.missing_cell else None,
            "collision": list(self.collision) if self.collision else None,
            "collision_cell": list(self.collision_cell) if self.collision_cell else None,
        }


class JigsawValidator:
    """Place every ledger entry on a fresh grid, then look for gaps.

    While READING each entry claims the cells its bitmap marks; a cell already
    held by another piece raises :class:`CollisionError`. Once the ledger is
    exhausted the validator moves to CHECKED and scans for unclaimed cells.
    Missing or malformed piece files and unreadable ledger lines propagate.
    """

    def __init__(self, geometry: PuzzleGeometry, piece_dir: PathLike) -> None:
        self.geometry = geometry
        self.piece_dir = Path(piece_dir)
        self.reset()

    def reset(self) -> None:
        self.grid: np.ndarray = self.geometry.new_grid()
        self.state = ValidatorState.READING
        self.pieces_placed = 0
        self._positions: Set[int] = set()

    def place(self, position: int, entry: LedgerEntry) -> int:
        if self.state is not ValidatorState.READING:
            raise RuntimeError("validator already checked; call reset() first")
        if not self.geometry.is_valid_piece_index(position):
            raise MalformedLedgerError(
                f"position {position} outside 0..{self.geometry.piece_count - 1} for {entry.file_name}",
                line_number=entry.line_number,
            )
        if position in self._positions:
            raise MalformedLedgerError(
                f"position {position} listed more than once ({entry.file_name})",
                line_number=entry.line_number,
            )
        self._positions.add(position)
        path = self.piece_dir / entry.file_name
        bitmap = read_piece_file(path, self.geometry.edge)
        claimed = deserialize_piece(bitmap, self.grid, self.geometry, position, entry.angle, source=path)
        self.pieces_placed += 1
        logger.debug("Placed %s at position %d rotated %d (%d cells)", entry.file_name, position, entry.angle, claimed)
        return claimed

    def replay(self, ledger: SolutionLedger) -> np.ndarray:
        for position, entry in ledger.placements():
            self.place(position, entry)
        return self.grid

    def check(self) -> ValidationResult:
        self.state = ValidatorState.CHECKED
        try:
            ensure_complete(self.grid)
        except IncompleteCoverageError as exc:
            logger.info("Grid incomplete after %d piece(s): %s", self.pieces_placed, exc)
            return ValidationResult(
                valid=False,
                message=str(exc),
                pieces_placed=self.pieces_placed,
                missing_cell=exc.cell,
            )
        return ValidationResult(
            valid=True,
            message="every grid cell claimed exactly once",
            pieces_placed=self.pieces_placed,
        )

    def validate(self, ledger: SolutionLedger) -> ValidationResult:
        self.reset()
        try:
            self.replay(ledger)
        except CollisionError as exc:
            self.state = ValidatorState.CHECKED
            logger.info("Collision while replaying ledger: %s", exc)
            return ValidationResult(
                valid=False,
                message=str(exc),
                pieces_placed=self.pieces_placed,
                collision=(exc.existing, exc.incoming),
                collision_cell=exc.cell,
            )
        return self.check()


class JigsawEvaluator(AbstractPuzzleEvaluator):
    """Validate candidate ledgers against puzzles listed in ``puzzles.json``."""

    def geometry_for(self, puzzle_id: str) -> PuzzleGeometry:
        record = self.get_record(puzzle_id)
        width, height = map(int, record["grid_size"])
        return PuzzleGeometry(width, height, int(record["edge"]))

    def evaluate(
        self,
        puzzle_id: str,
        candidate: Optional[Union[PathLike, SolutionLedger]] = None,
    ) -> ValidationResult:
        record = self.get_record(puzzle_id)
        if candidate is None:
            ledger = SolutionLedger.read(self.resolve_path(record["solution_path"]))
        elif isinstance(candidate, SolutionLedger):
            ledger = candidate
        else:
            candidate_path = Path(candidate)
            if not candidate_path.exists():
                raise FileNotFoundError(f"Candidate solution not found: {candidate_path}")
            ledger = SolutionLedger.read(candidate_path)

        validator = JigsawValidator(self.geometry_for(puzzle_id), self.resolve_path(record["piece_dir"]))
        result = validator.validate(ledger)
        result.puzzle_id = puzzle_id
        return result


__all__ = [
    "JigsawValidator",
    "JigsawEvaluator",
    "ValidationResult",
    "ValidatorState",
]


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Check that a jigsaw solution covers the grid with no gaps or overlaps")
    parser.add_argument("width", type=int, help="Puzzle width in pieces")
    parser.add_argument("height", type=int, help="Puzzle height in pieces")
    parser.add_argument("edge", type=int, help="Samples along one piece edge")
    parser.add_argument("--solution", type=Path, default=Path("solution.txt"), help="Ledger to validate")
    parser.add_argument(
        "--piece-dir",
        type=Path,
        default=None,
        help="Directory holding the piece files (defaults to the ledger's directory)",
    )
    parser.add_argument("--json", action="store_true", help="Print the full result as JSON")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    piece_dir = args.piece_dir if args.piece_dir is not None else args.solution.parent
    try:
        geometry = PuzzleGeometry(args.width, args.height, args.edge)
        ledger = SolutionLedger.read(args.solution)
        result = JigsawValidator(geometry, piece_dir).validate(ledger)
    except (OSError, JigsawError) as exc:
        print(f"error -- {exc}", file=sys.stderr)
        return EXIT_ERROR

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        print(result.report())
    return EXIT_VALID if result.valid else EXIT_INVALID


if __name__ == "__main__":
    sys.exit(main())
