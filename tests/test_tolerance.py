import unittest

from cadtext.geometry import Point, Polyline, Segment
from cadtext.tolerance import DEFAULT_TOLERANCE, estimate_tolerance, estimate_tolerance_mean


def vline(x, y0, y1):
    return Segment(Point(x, y0), Point(x, y1))


def hline(y, x0, x1):
    return Segment(Point(x0, y), Point(x1, y))


class MedianToleranceTests(unittest.TestCase):
    def test_empty_input_returns_default(self):
        self.assertEqual(estimate_tolerance([]), DEFAULT_TOLERANCE)
        self.assertEqual(DEFAULT_TOLERANCE, 1.0)

    def test_all_degenerate_returns_default(self):
        prims = [hline(0, 0, 5), hline(3, 1, 9), Polyline(())]
        self.assertEqual(estimate_tolerance(prims), 1.0)

    def test_median_height_times_scale(self):
        prims = [vline(0, 0, 10), vline(5, 0, 10), vline(9, 2, 12)]
        self.assertAlmostEqual(estimate_tolerance(prims), 4.0)

    def test_outlier_does_not_move_median(self):
        prims = [vline(0, 0, 10), vline(5, 0, 10), vline(9, 0, 10), vline(20, -50, 50)]
        self.assertAlmostEqual(estimate_tolerance(prims), 4.0)

    def test_flat_primitives_are_ignored(self):
        prims = [hline(0, 0, 100), vline(0, 0, 10)]
        self.assertAlmostEqual(estimate_tolerance(prims), 4.0)

    def test_custom_scale(self):
        self.assertAlmostEqual(estimate_tolerance([vline(0, 0, 10)], height_scale=0.5), 5.0)

    def test_always_positive(self):
        cases = [[], [hline(0, 0, 1)], [vline(0, 0, 1e-9)], [vline(0, 0, 0.001)]]
        for prims in cases:
            self.assertGreater(estimate_tolerance(prims), 0)


class MeanToleranceTests(unittest.TestCase):
    def test_mean_height_times_one_and_a_half(self):
        prims = [vline(0, 0, 10), vline(1, 0, 10), vline(2, 0, 100)]
        self.assertAlmostEqual(estimate_tolerance_mean(prims), 60.0)

    def test_flat_primitives_count_towards_mean(self):
        prims = [vline(0, 0, 10), hline(0, 0, 10)]
        self.assertAlmostEqual(estimate_tolerance_mean(prims), 7.5)

    def test_empty_or_flat_returns_default(self):
        self.assertEqual(estimate_tolerance_mean([]), 1.0)
        self.assertEqual(estimate_tolerance_mean([hline(0, 0, 3)]), 1.0)


if __name__ == "__main__":
    unittest.main()
