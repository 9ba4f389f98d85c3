import unittest

from cadtext.assembler import Glyph, RecognizedLine, assemble_lines, join_glyphs, row_key
from cadtext.exceptions import ValidationError
from cadtext.geometry import Extents, Point


def glyph(text, min_x, min_y, max_x, max_y):
    return Glyph(Extents(min_x, min_y, max_x, max_y), text)


class AssembleLinesTests(unittest.TestCase):
    def test_adjacent_glyphs_join_without_space(self):
        glyphs = [glyph("A", 0, 0, 5, 10), glyph("B", 6, 0, 11, 10), glyph("C", 12, 0, 17, 10)]
        lines = assemble_lines(glyphs, 4.0)
        self.assertEqual(len(lines), 1)
        self.assertEqual(lines[0].text, "ABC")
        self.assertEqual(lines[0].anchor, Point(0, 0))
        self.assertAlmostEqual(lines[0].height, 10.0)

    def test_wide_gap_becomes_space(self):
        glyphs = [glyph("A", 0, 0, 5, 10), glyph("B", 11, 0, 16, 10), glyph("C", 17, 0, 22, 10)]
        self.assertEqual(assemble_lines(glyphs, 4.0)[0].text, "A BC")

    def test_gap_equal_to_threshold_is_not_a_space(self):
        glyphs = [glyph("A", 0, 0, 5, 10), glyph("B", 7, 0, 12, 10)]
        self.assertEqual(assemble_lines(glyphs, 4.0)[0].text, "AB")

    def test_input_order_does_not_matter(self):
        glyphs = [glyph("C", 12, 0, 17, 10), glyph("A", 0, 0, 5, 10), glyph("B", 6, 0, 11, 10)]
        self.assertEqual(assemble_lines(glyphs, 4.0)[0].text, "ABC")

    def test_rows_ordered_top_to_bottom(self):
        glyphs = [
            glyph("L", 0, 0, 5, 10),
            glyph("U", 0, 20, 5, 30),
            glyph("P", 6, 20, 11, 30),
        ]
        lines = assemble_lines(glyphs, 4.0)
        self.assertEqual([ln.text for ln in lines], ["UP", "L"])
        ys = [ln.anchor.y for ln in lines]
        self.assertEqual(ys, sorted(ys, reverse=True))

    def test_small_jitter_shares_row(self):
        glyphs = [glyph("A", 0, 0.3, 5, 10.3), glyph("B", 6, -0.2, 11, 9.8)]
        lines = assemble_lines(glyphs, 4.0)
        self.assertEqual(len(lines), 1)
        self.assertEqual(lines[0].text, "AB")
        self.assertEqual(lines[0].anchor, Point(0, 0.3))

    def test_height_is_mean_of_glyph_heights(self):
        glyphs = [glyph("a", 0, 0, 4, 6), glyph("B", 5, 0, 10, 10)]
        self.assertAlmostEqual(assemble_lines(glyphs, 4.0)[0].height, 8.0)

    def test_blank_and_invalid_glyphs_are_dropped(self):
        glyphs = [
            glyph("A", 0, 0, 5, 10),
            glyph("  ", 6, 0, 11, 10),
            glyph("", 12, 0, 17, 10),
            Glyph(Extents.invalid(), "Z"),
        ]
        lines = assemble_lines(glyphs, 4.0)
        self.assertEqual([ln.text for ln in lines], ["A"])

    def test_no_glyphs_no_lines(self):
        self.assertEqual(assemble_lines([], 1.0), [])

    def test_rejects_bad_tolerance(self):
        with self.assertRaises(ValidationError):
            assemble_lines([glyph("A", 0, 0, 5, 10)], 0.0)


class HelperTests(unittest.TestCase):
    def test_row_key_rounds(self):
        self.assertEqual(row_key(glyph("A", 0, 9.9, 1, 12), 4.0), 2)
        self.assertEqual(row_key(glyph("A", 0, -5.0, 1, 0), 4.0), -1)

    def test_join_single_glyph(self):
        self.assertEqual(join_glyphs([glyph("7", 0, 0, 5, 10)]), "7")

    def test_position_is_three_dimensional(self):
        line = RecognizedLine("X", Point(1.5, 2.5), 3.0)
        self.assertEqual(line.position, (1.5, 2.5, 0.0))


if __name__ == "__main__":
    unittest.main()
