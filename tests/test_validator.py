import io
import json
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path

import numpy as np

from pbmjigsaw.errors import (
    CollisionError,
    MalformedLedgerError,
    MalformedPieceError,
    MissingPieceFileError,
)
from pbmjigsaw.generator import JigsawGenerator, build_puzzle
from pbmjigsaw.grid import PuzzleGeometry
from pbmjigsaw.ledger import LedgerEntry, SolutionLedger
from pbmjigsaw.transform import compose
from pbmjigsaw.validator import (
    EXIT_ERROR,
    EXIT_INVALID,
    EXIT_VALID,
    JigsawEvaluator,
    JigsawValidator,
    ValidatorState,
    main,
)


class GeneratedPuzzleValidationTests(unittest.TestCase):
    def setUp(self) -> None:
        self.tmp = tempfile.TemporaryDirectory()
        self.output_dir = Path(self.tmp.name) / "jigsaw"
        self.geometry = PuzzleGeometry(3, 3, 5)
        self.generator = JigsawGenerator(output_dir=self.output_dir, width=3, height=3, edge=5, seed=321)
        self.record = self.generator.create_puzzle(puzzle_id="validate-me")
        self.puzzle_dir = self.output_dir / self.record.piece_dir
        self.solution_path = self.output_dir / self.record.solution_path
        self.ledger = SolutionLedger.read(self.solution_path)
        self.validator = JigsawValidator(self.geometry, self.puzzle_dir)

    def tearDown(self) -> None:
        self.tmp.cleanup()

    def test_generator_answer_key_is_valid(self) -> None:
        result = self.validator.validate(self.ledger)
        self.assertTrue(result.valid)
        self.assertEqual(result.report(), "valid")
        self.assertEqual(result.pieces_placed, 9)
        self.assertIs(self.validator.state, ValidatorState.CHECKED)

    def test_replayed_grid_matches_the_generated_grid(self) -> None:
        puzzle = build_puzzle(self.geometry, self.record.seed)
        grid = self.validator.replay(self.ledger)
        np.testing.assert_array_equal(grid, puzzle.grid)

    def test_omitted_entry_leaves_a_named_gap(self) -> None:
        truncated = SolutionLedger(self.ledger.entries[:-1])
        result = self.validator.validate(truncated)
        self.assertFalse(result.valid)
        self.assertIsNotNone(result.missing_cell)
        col, row = result.missing_cell
        puzzle = build_puzzle(self.geometry, self.record.seed)
        self.assertEqual(puzzle.grid[row, col], 8)
        self.assertTrue(result.report().startswith("invalid -- missing bit at grid location"))

    def test_puzzle_turned_upside_down_is_still_valid(self) -> None:
        count = self.geometry.piece_count
        turned = SolutionLedger(
            [
                LedgerEntry(file_id=entry.file_id, angle=compose(entry.angle, 180))
                for entry in reversed(self.ledger.entries)
            ]
        )
        self.assertEqual(len(turned), count)
        self.assertTrue(self.validator.validate(turned).valid)

    def test_explicit_positions_allow_any_line_order(self) -> None:
        generator = JigsawGenerator(
            output_dir=self.output_dir,
            width=4,
            height=2,
            edge=4,
            seed=5,
            explicit_positions=True,
            render=False,
        )
        record = generator.create_puzzle(puzzle_id="explicit")
        ledger = SolutionLedger.read(self.output_dir / record.solution_path)
        shuffled = SolutionLedger(list(reversed(ledger.entries)))
        validator = JigsawValidator(PuzzleGeometry(4, 2, 4), self.output_dir / record.piece_dir)
        self.assertTrue(validator.validate(shuffled).valid)

    def test_duplicate_explicit_position_is_malformed(self) -> None:
        first = self.ledger[0]
        duplicated = SolutionLedger(
            [LedgerEntry(first.file_id, first.angle, 0), LedgerEntry(first.file_id, first.angle, 0)]
        )
        with self.assertRaises(MalformedLedgerError):
            self.validator.validate(duplicated)

    def test_ledger_longer_than_the_puzzle_is_malformed(self) -> None:
        padded = SolutionLedger(self.ledger.entries + [self.ledger[0]])
        with self.assertRaises(MalformedLedgerError):
            self.validator.validate(padded)

    def test_missing_piece_file_aborts(self) -> None:
        broken = SolutionLedger([LedgerEntry(file_id=99, angle=0)])
        with self.assertRaises(MissingPieceFileError):
            self.validator.validate(broken)

    def test_place_after_check_is_refused(self) -> None:
        self.validator.validate(self.ledger)
        with self.assertRaises(RuntimeError):
            self.validator.place(0, self.ledger[0])

    def test_evaluator_reads_geometry_from_metadata(self) -> None:
        metadata_path = self.output_dir / "puzzles.json"
        self.generator.write_metadata([self.record], metadata_path)
        evaluator = JigsawEvaluator(metadata_path)
        self.assertTrue(evaluator.evaluate(self.record.id).valid)
        self.assertTrue(evaluator.evaluate(self.record.id, self.solution_path).valid)

        candidate = Path(self.tmp.name) / "candidate.txt"
        SolutionLedger(self.ledger.entries[:4]).write(candidate)
        result = evaluator.evaluate(self.record.id, candidate)
        self.assertFalse(result.valid)
        self.assertEqual(result.to_dict()["puzzle_id"], self.record.id)

    def test_command_line_reports_verdict_and_exit_status(self) -> None:
        args = ["3", "3", "5", "--solution", str(self.solution_path)]
        out = io.StringIO()
        with redirect_stdout(out):
            self.assertEqual(main(args), EXIT_VALID)
        self.assertEqual(out.getvalue().strip(), "valid")

        truncated = Path(self.tmp.name) / "truncated.txt"
        SolutionLedger(self.ledger.entries[:-1]).write(truncated)
        out = io.StringIO()
        with redirect_stdout(out):
            code = main(["3", "3", "5", "--solution", str(truncated), "--piece-dir", str(self.puzzle_dir), "--json"])
        self.assertEqual(code, EXIT_INVALID)
        self.assertEqual(json.loads(out.getvalue())["verdict"], "invalid")

        err = io.StringIO()
        with redirect_stderr(err):
            self.assertEqual(main(["3", "3", "9", "--solution", str(self.solution_path)]), EXIT_ERROR)
        self.assertIn("edge", err.getvalue())

    def test_command_line_treats_unreadable_ledger_as_an_error(self) -> None:
        binary = Path(self.tmp.name) / "binary.txt"
        binary.write_bytes(b"\xff\xfe p0000.pbm 0\n")
        for solution in (binary, self.puzzle_dir):
            with self.subTest(solution=solution.name):
                err = io.StringIO()
                with redirect_stderr(err), redirect_stdout(io.StringIO()):
                    code = main(["3", "3", "5", "--solution", str(solution), "--piece-dir", str(self.puzzle_dir)])
                self.assertEqual(code, EXIT_ERROR)
                self.assertTrue(err.getvalue().startswith("error -- "))

    def test_position_errors_name_the_ledger_line(self) -> None:
        first = self.ledger[0]
        text = f"{first.file_name} {first.angle} 0\n\n{first.file_name} {first.angle} 0\n"
        with self.assertRaises(MalformedLedgerError) as ctx:
            self.validator.validate(SolutionLedger.parse(text))
        self.assertEqual(ctx.exception.line_number, 3)

        with self.assertRaises(MalformedLedgerError) as ctx:
            self.validator.validate(SolutionLedger.parse(f"{first.file_name} {first.angle} 9\n"))
        self.assertEqual(ctx.exception.line_number, 1)
        self.assertIn("line 1:", str(ctx.exception))


class HandMadePieceTests(unittest.TestCase):
    def setUp(self) -> None:
        self.tmp = tempfile.TemporaryDirectory()
        self.root = Path(self.tmp.name)
        self.geometry = PuzzleGeometry(2, 2, 3)
        full = "P1\n# full\n3 3\n111\n111\n111\n"
        (self.root / "p0000.pbm").write_text(full, encoding="ascii")
        (self.root / "p0001.pbm").write_text(full, encoding="ascii")
        (self.root / "p0002.pbm").write_text("P1\n# bad\n3 3\n111\n1x1\n111\n", encoding="ascii")
        self.validator = JigsawValidator(self.geometry, self.root)

    def tearDown(self) -> None:
        self.tmp.cleanup()

    def test_overlapping_pieces_raise_collision_during_replay(self) -> None:
        ledger = SolutionLedger.parse("p0000.pbm 0\np0001.pbm 0\n")
        with self.assertRaises(CollisionError) as ctx:
            self.validator.replay(ledger)
        self.assertEqual(ctx.exception.cell, (2, 0))
        self.assertEqual((ctx.exception.existing, ctx.exception.incoming), (0, 1))

    def test_collision_is_an_invalid_verdict(self) -> None:
        result = self.validator.validate(SolutionLedger.parse("p0000.pbm 0\np0001.pbm 90\n"))
        self.assertFalse(result.valid)
        self.assertEqual(result.collision, (0, 1))
        self.assertIn("Collision between pieces 0 and 1", result.report())

    def test_malformed_bitmap_aborts(self) -> None:
        with self.assertRaises(MalformedPieceError) as ctx:
            self.validator.validate(SolutionLedger.parse("p0002.pbm 0\n"))
        self.assertIn("p0002.pbm", str(ctx.exception))


if __name__ == "__main__":
    unittest.main()
