import random
import unittest

import numpy as np

from pbmjigsaw.grid import PuzzleGeometry
from pbmjigsaw.interlock import build_grid
from pbmjigsaw.render import outline_segments, piece_color, render_outline_svg, render_preview


class OutlineTests(unittest.TestCase):
    def test_two_halves_have_border_plus_one_cut_per_row(self) -> None:
        grid = np.array(
            [
                [0, 0, 1],
                [0, 0, 1],
            ],
            dtype=np.int32,
        )
        segments = outline_segments(grid)
        self.assertEqual(segments[:4], [(0, 0, 3, 0), (0, 2, 3, 2), (0, 0, 0, 2), (3, 0, 3, 2)])
        self.assertEqual(sorted(segments[4:]), [(2, 0, 2, 1), (2, 1, 2, 2)])

    def test_svg_scales_segments_to_millimetres(self) -> None:
        grid = np.zeros((2, 2), dtype=np.int32)
        svg = render_outline_svg(grid, mm_per_finger=10, border=20)
        self.assertIn("width='60mm' height='60mm'", svg)
        self.assertIn("<line x1='20' y1='20' x2='40' y2='20'/>", svg)
        self.assertEqual(svg.count("<line"), 4)
        self.assertTrue(svg.rstrip().endswith("</svg>"))


class PreviewTests(unittest.TestCase):
    def test_preview_has_one_colour_block_per_sample(self) -> None:
        geometry = PuzzleGeometry(3, 2, 4)
        grid = build_grid(geometry, random.Random(0))
        image = render_preview(grid, cell_size=10)
        self.assertEqual(image.size, (geometry.grid_width * 10, geometry.grid_height * 10))
        self.assertEqual(image.mode, "RGB")
        owner = int(grid[1, 1])
        self.assertEqual(image.getpixel((15, 15)), piece_color(owner))

    def test_tiny_cells_are_rejected(self) -> None:
        with self.assertRaises(ValueError):
            render_preview(np.zeros((3, 3), dtype=np.int32), cell_size=1)


if __name__ == "__main__":
    unittest.main()
