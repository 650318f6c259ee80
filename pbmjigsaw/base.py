"""Shared plumbing for puzzle generators and validators.

Generators write every puzzle into its own directory below ``output_dir`` and
describe it with a record that serializes into a JSON list (``puzzles.json``).
Evaluators load that list back and resolve asset paths relative to it.
"""

from __future__ import annotations

import json
import logging
import random
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Generic, Iterable, List, Optional, TypeVar, Union

PathLike = Union[str, Path]
RecordT = TypeVar("RecordT")

logger = logging.getLogger(__name__)


class AbstractPuzzleGenerator(ABC, Generic[RecordT]):
    """Base class for generators that emit one directory per puzzle."""

    def __init__(self, output_dir: PathLike, *, seed: Optional[int] = None) -> None:
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.seed = seed
        self._rng = random.Random(seed)

    @property
    def rng(self) -> random.Random:
        return self._rng

    def puzzle_dir(self, puzzle_id: str) -> Path:
        directory = self.output_dir / puzzle_id
        directory.mkdir(parents=True, exist_ok=True)
        return directory

    @abstractmethod
    def create_puzzle(self, *args, **kwargs) -> RecordT:
        """Create a single puzzle and write its assets."""

    def create_random_puzzle(self) -> RecordT:
        return self.create_puzzle()

    def generate_dataset(
        self,
        count: int,
        *,
        metadata_path: Optional[PathLike] = None,
        append: bool = True,
    ) -> List[RecordT]:
        records = [self.create_random_puzzle() for _ in range(count)]
        logger.info("Generated %d puzzle(s) in %s", len(records), self.output_dir)
        if metadata_path is not None:
            self.write_metadata(records, metadata_path, append=append)
        return records

    def write_metadata(
        self,
        records: Iterable[RecordT],
        metadata_path: PathLike,
        *,
        append: bool = True,
    ) -> Path:
        """Write records as a JSON list; with ``append`` existing ids are replaced."""

        path = Path(metadata_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        payload = [self.record_to_dict(record) for record in records]
        existing: List[Dict[str, Any]] = []
        if append and path.exists():
            existing = json.loads(path.read_text(encoding="utf-8"))
            fresh_ids = {item["id"] for item in payload}
            existing = [item for item in existing if item.get("id") not in fresh_ids]
        path.write_text(json.dumps(existing + payload, indent=2), encoding="utf-8")
        logger.debug("Wrote %d record(s) to %s", len(existing) + len(payload), path)
        return path

    def record_to_dict(self, record: RecordT) -> Dict[str, Any]:
        if hasattr(record, "to_dict"):
            return getattr(record, "to_dict")()
        raise TypeError("Puzzle record must implement to_dict() or override record_to_dict()")

    def relativize_path(self, path: Path) -> str:
        try:
            return path.relative_to(self.output_dir).as_posix()
        except ValueError:
            return path.as_posix()


class AbstractPuzzleEvaluator(ABC):
    """Base class for evaluators driven by a ``puzzles.json`` metadata file."""

    def __init__(
        self,
        metadata_path: PathLike,
        *,
        base_dir: Optional[PathLike] = None,
    ) -> None:
        self.metadata_path = Path(metadata_path)
        if not self.metadata_path.exists():
            raise FileNotFoundError(f"Metadata file not found: {self.metadata_path}")
        self.base_dir = Path(base_dir) if base_dir is not None else self.metadata_path.parent
        self._records = self._load_metadata()

    @property
    def records(self) -> Dict[str, Dict[str, Any]]:
        return self._records

    def _load_metadata(self) -> Dict[str, Dict[str, Any]]:
        raw = json.loads(self.metadata_path.read_text(encoding="utf-8"))
        if not isinstance(raw, list):
            raise ValueError("Puzzle metadata must be a list of records")
        records: Dict[str, Dict[str, Any]] = {}
        for record in raw:
            puzzle_id = record.get("id")
            if not puzzle_id:
                raise ValueError("Each puzzle record must include an 'id'")
            records[str(puzzle_id)] = record
        return records

    def get_record(self, puzzle_id: str) -> Dict[str, Any]:
        try:
            return self._records[puzzle_id]
        except KeyError as exc:
            raise KeyError(f"Puzzle id '{puzzle_id}' not found in metadata") from exc

    def resolve_path(self, path_value: object) -> Path:
        candidate = Path(str(path_value))
        if not candidate.is_absolute():
            candidate = self.base_dir / candidate
        return candidate

    @abstractmethod
    def evaluate(self, puzzle_id: str, *args, **kwargs):
        """Evaluate a candidate solution for the given puzzle."""


__all__ = [
    "AbstractPuzzleGenerator",
    "AbstractPuzzleEvaluator",
    "PathLike",
]
