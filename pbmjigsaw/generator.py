"""Jigsaw puzzle generator writing one PBM bitmap per piece plus the answer key."""

from __future__ import annotations

import argparse
import json
import logging
import random
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import numpy as np

from .base import AbstractPuzzleGenerator, PathLike
from .codec import serialize_piece, write_piece_file
from .grid import PuzzleGeometry
from .interlock import build_grid
from .ledger import SolutionLedger, assign_pieces
from .render import render_outline_svg, render_preview

logger = logging.getLogger(__name__)

SOLUTION_FILE = "solution.txt"
OUTLINE_FILE = "solution.svg"
PREVIEW_FILE = "solution.png"

SEED_RANGE = 2**32


@dataclass
class JigsawPuzzle:
    """In-memory puzzle: the resolved grid, its answer key and every piece bitmap."""

    geometry: PuzzleGeometry
    seed: int
    grid: np.ndarray
    ledger: SolutionLedger
    bitmaps: Dict[int, np.ndarray]


@dataclass
class JigsawPuzzleRecord:
    id: str
    seed: int
    grid_size: Tuple[int, int]
    edge: int
    sample_grid_size: Tuple[int, int]
    piece_count: int
    piece_dir: str
    piece_files: List[str]
    solution_path: str
    outline_path: str
    preview_image_path: str
    explicit_positions: bool

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "seed": self.seed,
            "grid_size": list(self.grid_size),
            "edge": self.edge,
            "sample_grid_size": list(self.sample_grid_size),
            "piece_count": self.piece_count,
            "piece_dir": self.piece_dir,
            "piece_files": list(self.piece_files),
            "solution_path": self.solution_path,
            "outline_path": self.outline_path,
            "preview_image_path": self.preview_image_path,
            "explicit_positions": self.explicit_positions,
        }


def build_puzzle(geometry: PuzzleGeometry, seed: int) -> JigsawPuzzle:
    """Build a puzzle without touching the filesystem.

    One random stream drives, in order, the seam coin flips, the file
    identifier shuffle and the per-piece rotations.
    """

    rng = random.Random(seed)
    grid = build_grid(geometry, rng)
    ledger = assign_pieces(geometry.piece_count, rng)
    bitmaps: Dict[int, np.ndarray] = {}
    for position, entry in ledger.placements():
        bitmaps[entry.file_id] = serialize_piece(grid, geometry, position, entry.angle)
    return JigsawPuzzle(geometry=geometry, seed=seed, grid=grid, ledger=ledger, bitmaps=bitmaps)


class JigsawGenerator(AbstractPuzzleGenerator[JigsawPuzzleRecord]):
    """Generate interlocking jigsaw puzzles as sets of PBM piece files."""

    def __init__(
        self,
        output_dir: PathLike = "data/jigsaw",
        *,
        width: int = 3,
        height: int = 3,
        edge: int = 5,
        seed: Optional[int] = None,
        explicit_positions: bool = False,
        cell_size: int = 24,
        render: bool = True,
    ) -> None:
        self.geometry = PuzzleGeometry(width, height, edge)
        if cell_size < 2:
            raise ValueError("cell_size must be at least 2")
        super().__init__(output_dir, seed=seed)
        self.explicit_positions = explicit_positions
        self.cell_size = cell_size
        self.render = render

    def create_puzzle(
        self,
        *,
        puzzle_id: Optional[str] = None,
        seed: Optional[int] = None,
    ) -> JigsawPuzzleRecord:
        puzzle_uuid = puzzle_id or str(uuid.uuid4())
        puzzle_seed = seed if seed is not None else self.rng.randrange(SEED_RANGE)
        puzzle = build_puzzle(self.geometry, puzzle_seed)
        directory = self.puzzle_dir(puzzle_uuid)

        piece_paths = []
        for entry in puzzle.ledger:
            path = write_piece_file(directory / entry.file_name, puzzle.bitmaps[entry.file_id])
            piece_paths.append(path)
        solution_path = puzzle.ledger.write(directory / SOLUTION_FILE, explicit_positions=self.explicit_positions)

        outline_path = directory / OUTLINE_FILE
        preview_path = directory / PREVIEW_FILE
        if self.render:
            outline_path.write_text(render_outline_svg(puzzle.grid), encoding="utf-8")
            render_preview(puzzle.grid, cell_size=self.cell_size).save(preview_path)

        logger.info(
            "Puzzle %s: %d pieces (%dx%d, edge %d, seed %d) written to %s",
            puzzle_uuid,
            self.geometry.piece_count,
            self.geometry.width,
            self.geometry.height,
            self.geometry.edge,
            puzzle_seed,
            directory,
        )

        return JigsawPuzzleRecord(
            id=puzzle_uuid,
            seed=puzzle_seed,
            grid_size=(self.geometry.width, self.geometry.height),
            edge=self.geometry.edge,
            sample_grid_size=(self.geometry.grid_width, self.geometry.grid_height),
            piece_count=self.geometry.piece_count,
            piece_dir=self.relativize_path(directory),
            piece_files=sorted(path.name for path in piece_paths),
            solution_path=self.relativize_path(solution_path),
            outline_path=self.relativize_path(outline_path) if self.render else "",
            preview_image_path=self.relativize_path(preview_path) if self.render else "",
            explicit_positions=self.explicit_positions,
        )


__all__ = ["JigsawGenerator", "JigsawPuzzleRecord", "JigsawPuzzle", "build_puzzle"]


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate interlocking jigsaw puzzles as PBM piece files")
    parser.add_argument("width", type=int, help="Puzzle width in pieces")
    parser.add_argument("height", type=int, help="Puzzle height in pieces")
    parser.add_argument("edge", type=int, help="Samples along one piece edge (finger resolution)")
    parser.add_argument("--count", type=int, default=1, help="Number of puzzles to generate")
    parser.add_argument("--output-dir", type=Path, default=Path("data/jigsaw"), help="Where to save assets")
    parser.add_argument("--puzzle-id", type=str, default=None, help="Directory name for a single puzzle")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument(
        "--explicit-positions",
        action="store_true",
        help="Append the canonical position to every solution line",
    )
    parser.add_argument("--cell-size", type=int, default=24, help="Pixels per sample in the preview image")
    parser.add_argument("--no-render", action="store_true", help="Skip the SVG outline and PNG preview")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    generator = JigsawGenerator(
        output_dir=args.output_dir,
        width=args.width,
        height=args.height,
        edge=args.edge,
        seed=args.seed,
        explicit_positions=args.explicit_positions,
        cell_size=args.cell_size,
        render=not args.no_render,
    )
    metadata_path = generator.output_dir / "puzzles.json"
    if args.puzzle_id is not None:
        records = [generator.create_puzzle(puzzle_id=args.puzzle_id)]
        generator.write_metadata(records, metadata_path)
    else:
        records = generator.generate_dataset(args.count, metadata_path=metadata_path)
    print(json.dumps([record.to_dict() for record in records], indent=2))


if __name__ == "__main__":
    main()
