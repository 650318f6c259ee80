"""Interlocking jigsaw puzzles as PBM piece bitmaps, with an answer-key validator."""

__all__ = [
    "AbstractPuzzleGenerator",
    "AbstractPuzzleEvaluator",
    "PuzzleGeometry",
    "UNCLAIMED",
    "ROTATIONS",
    "build_grid",
    "serialize_piece",
    "deserialize_piece",
    "LedgerEntry",
    "SolutionLedger",
    "assign_pieces",
    "JigsawGenerator",
    "JigsawPuzzle",
    "JigsawPuzzleRecord",
    "build_puzzle",
    "JigsawValidator",
    "JigsawEvaluator",
    "ValidationResult",
    "JigsawError",
    "ConfigurationError",
    "CollisionError",
    "IncompleteCoverageError",
    "MalformedPieceError",
    "MalformedLedgerError",
    "MissingPieceFileError",
]

from .base import AbstractPuzzleGenerator, AbstractPuzzleEvaluator
from .codec import deserialize_piece, serialize_piece
from .errors import (
    CollisionError,
    ConfigurationError,
    IncompleteCoverageError,
    JigsawError,
    MalformedLedgerError,
    MalformedPieceError,
    MissingPieceFileError,
)
from .generator import JigsawGenerator, JigsawPuzzle, JigsawPuzzleRecord, build_puzzle
from .grid import UNCLAIMED, PuzzleGeometry
from .interlock import build_grid
from .ledger import LedgerEntry, SolutionLedger, assign_pieces
from .transform import ROTATIONS
from .validator import JigsawEvaluator, JigsawValidator, ValidationResult
