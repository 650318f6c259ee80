import itertools
import unittest

from pbmjigsaw.transform import ROTATIONS, compose, local_to_global, rotation_map, validate_angle


class LocalToGlobalTests(unittest.TestCase):
    def test_table_values_for_one_sample(self) -> None:
        origin = (4, 8)
        expected = {
            0: (5, 8),
            90: (4, 11),
            180: (7, 12),
            270: (8, 9),
        }
        for angle, cell in expected.items():
            with self.subTest(angle=angle):
                self.assertEqual(local_to_global(1, 0, angle, 5, origin), cell)

    def test_every_rotation_covers_the_piece_window_once(self) -> None:
        edge = 6
        window = set(itertools.product(range(edge), repeat=2))
        for angle in ROTATIONS:
            with self.subTest(angle=angle):
                cells = {local_to_global(ik, jk, angle, edge) for ik in range(edge) for jk in range(edge)}
                self.assertEqual(cells, window)

    def test_rotation_map_matches_scalar_table(self) -> None:
        edge = 5
        for angle in ROTATIONS:
            cols, rows = rotation_map(angle, edge)
            for jk in range(edge):
                for ik in range(edge):
                    with self.subTest(angle=angle, ik=ik, jk=jk):
                        self.assertEqual(
                            (int(cols[jk, ik]), int(rows[jk, ik])),
                            local_to_global(ik, jk, angle, edge),
                        )

    def test_applying_the_table_twice_follows_angle_arithmetic(self) -> None:
        edge = 4
        for first, second in itertools.product(ROTATIONS, repeat=2):
            combined = compose(first, second)
            for ik in range(edge):
                for jk in range(edge):
                    with self.subTest(first=first, second=second, ik=ik, jk=jk):
                        once = local_to_global(ik, jk, first, edge)
                        twice = local_to_global(once[0], once[1], second, edge)
                        self.assertEqual(twice, local_to_global(ik, jk, combined, edge))

    def test_ninety_twice_is_one_eighty(self) -> None:
        self.assertEqual(compose(90, 90), 180)
        self.assertEqual(compose(270, 90), 0)
        self.assertEqual(compose(180, 270), 90)

    def test_unknown_angle_is_rejected(self) -> None:
        for angle in (45, -90, 360):
            with self.subTest(angle=angle):
                with self.assertRaises(ValueError):
                    validate_angle(angle)
                with self.assertRaises(ValueError):
                    local_to_global(0, 0, angle, 3)
                with self.assertRaises(ValueError):
                    rotation_map(angle, 3)


if __name__ == "__main__":
    unittest.main()
