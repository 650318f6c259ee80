#!/usr/bin/env python3
"""Generate puzzles over a range of sizes and validate each against its own answer key."""

from __future__ import annotations

import argparse
import itertools
import sys
import tempfile
from pathlib import Path
from typing import List

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from pbmjigsaw import JigsawEvaluator, JigsawGenerator


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--widths", type=int, nargs="+", default=[2, 3, 5])
    parser.add_argument("--heights", type=int, nargs="+", default=[2, 4])
    parser.add_argument("--edges", type=int, nargs="+", default=[2, 3, 5, 8])
    parser.add_argument("--per-size", type=int, default=3, help="Puzzles generated for every size")
    parser.add_argument("--seed", type=int, default=0)
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=None,
        help="Keep the generated puzzles here instead of a temporary directory",
    )
    return parser.parse_args()


def main() -> int:
    args = _parse_args()
    with tempfile.TemporaryDirectory() as scratch:
        output_root = args.output_dir or Path(scratch)
        sizes = list(itertools.product(args.widths, args.heights, args.edges))
        failures: List[str] = []
        for index, (width, height, edge) in enumerate(sizes, start=1):
            output_dir = output_root / f"{width}x{height}e{edge}"
            generator = JigsawGenerator(
                output_dir,
                width=width,
                height=height,
                edge=edge,
                seed=args.seed + index,
                render=False,
            )
            metadata_path = output_dir / "puzzles.json"
            records = generator.generate_dataset(args.per_size, metadata_path=metadata_path, append=False)
            evaluator = JigsawEvaluator(metadata_path)
            for record in records:
                result = evaluator.evaluate(record.id)
                if not result.valid:
                    failures.append(f"{width}x{height} edge {edge} seed {record.seed}: {result.report()}")
            print(f"[{index}/{len(sizes)}] {width}x{height} edge {edge}: {len(records)} puzzle(s) checked")

    for failure in failures:
        print(f"FAILED {failure}")
    print(f"{len(failures)} failure(s)")
    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
