from __future__ import annotations

import unittest

import numpy as np

from chartcanvas_layout.curve import fit_curve
from chartcanvas_layout.errors import InvalidArgumentError
from chartcanvas_layout.histogram import Histogram, bin_frequencies, compute_bins, sturges_bin_count


class BinningTests(unittest.TestCase):
    def test_explicit_width(self) -> None:
        bins = compute_bins(0.0, 100.0, 50, bin_width=10.0)
        self.assertEqual(bins.count, 10)
        self.assertEqual(bins.edges, tuple(float(v) for v in range(0, 101, 10)))
        self.assertEqual(bins.centers[0], 5.0)

    def test_explicit_count(self) -> None:
        bins = compute_bins(0.0, 10.0, 3, bin_count=4)
        self.assertEqual(bins.edges, (0.0, 2.5, 5.0, 7.5, 10.0))
        self.assertEqual(bins.width, 2.5)

    def test_width_takes_precedence_over_count(self) -> None:
        bins = compute_bins(0.0, 100.0, 50, bin_width=25.0, bin_count=3)
        self.assertEqual(bins.count, 4)

    def test_sturges_rule(self) -> None:
        self.assertEqual(sturges_bin_count(1), 1)
        self.assertEqual(sturges_bin_count(8), 4)
        self.assertEqual(sturges_bin_count(100), 8)
        with self.assertRaises(InvalidArgumentError):
            sturges_bin_count(0)

    def test_auto_bins_cover_axis_scale(self) -> None:
        hist = Histogram()
        hist.add_series("scores").add_values(range(100))
        bins = hist.bins()
        self.assertEqual(bins.count, 8)
        self.assertEqual(bins.edges[0], 0.0)
        self.assertEqual(bins.edges[-1], 100.0)
        self.assertEqual(bins.width, 12.5)

    def test_empty_histogram_uses_default_range(self) -> None:
        bins = Histogram().bins()
        self.assertEqual(bins.count, 10)
        self.assertEqual(bins.width, 10.0)
        self.assertEqual((bins.edges[0], bins.edges[-1]), (0.0, 100.0))

    def test_zero_span_data_still_bins(self) -> None:
        bins = compute_bins(5.0, 5.0, 3, bin_width=1.0)
        self.assertEqual(bins.count, 1)
        self.assertGreater(bins.axis.max_tick, bins.axis.min_tick)

    def test_invalid_inputs(self) -> None:
        with self.assertRaises(InvalidArgumentError):
            compute_bins(10.0, 0.0, 1)
        with self.assertRaises(InvalidArgumentError):
            Histogram().set_bin_width(0)
        with self.assertRaises(InvalidArgumentError):
            Histogram().set_bin_count(2.5)  # type: ignore[arg-type]


class FrequencyTests(unittest.TestCase):
    def test_last_bin_is_closed(self) -> None:
        edges = [float(v) for v in range(0, 101, 10)]
        counts = bin_frequencies([0, 5, 10, 99.9, 100, 150, -1], edges)
        self.assertEqual(counts[0], 2)
        self.assertEqual(counts[1], 1)
        self.assertEqual(counts[9], 2)
        self.assertEqual(int(counts.sum()), 5)

    def test_maximum_value_kept_when_count_divides_awkwardly(self) -> None:
        bins = compute_bins(0.0, 0.9, 3, bin_count=3)
        self.assertEqual(bins.edges[-1], 0.9)
        self.assertEqual(int(bin_frequencies([0.0, 0.3, 0.9], bins.edges).sum()), 3)

        hist = Histogram().set_bin_count(3)
        hist.add_series().add_values([0.0, 0.3, 0.9])
        self.assertEqual(int(hist.frequencies()[0].sum()), 3)

    def test_closing_edge_reaches_maximum_on_every_rule(self) -> None:
        by_width = compute_bins(0.0, 0.3, 3, bin_width=0.1)
        self.assertEqual(by_width.count, 3)
        self.assertGreaterEqual(by_width.edges[-1], 0.3)
        self.assertEqual(int(bin_frequencies([0.0, 0.1, 0.3], by_width.edges).sum()), 3)

        auto = compute_bins(0.0, 1000.0, 2**18)
        self.assertEqual(auto.count, 19)
        self.assertEqual(auto.edges[-1], 1000.0)
        self.assertEqual(int(bin_frequencies([0.0, 1000.0], auto.edges).sum()), 2)

    def test_frequencies_sum_to_values_in_range(self) -> None:
        rng = np.random.default_rng(7)
        values = rng.normal(50.0, 15.0, size=500)
        hist = Histogram()
        hist.add_series().add_values(values)
        bins = hist.bins()
        counts = hist.frequencies(bins)[0]
        inside = np.count_nonzero((values >= bins.edges[0]) & (values <= bins.edges[-1]))
        self.assertEqual(int(counts.sum()), inside)

    def test_non_numeric_values_are_skipped(self) -> None:
        series = Histogram().add_series()
        series.add_values([1, "x", None, 3, float("nan")])
        self.assertEqual(len(series), 2)
        self.assertEqual(series.values.tolist(), [1.0, 3.0])

    def test_frequency_scale(self) -> None:
        hist = Histogram().set_bin_width(1)
        hist.add_series().add_values([0, 1, 1, 2, 2, 2])
        counts = hist.frequencies()[0]
        self.assertEqual(counts.tolist(), [1, 5])
        scale = hist.frequency_scale()
        self.assertEqual((scale.interval, scale.max), (1.0, 5.0))

    def test_curves_follow_bin_centers(self) -> None:
        hist = Histogram().set_bin_width(1).set_curve_mode(True)
        hist.add_series().add_values([0, 1, 1, 2, 2, 2])
        (curve,) = hist.curves()
        self.assertEqual(len(curve.segments), 1)
        self.assertAlmostEqual(curve.start[0], 0.25)
        self.assertAlmostEqual(curve.start[1], 0.2)
        self.assertAlmostEqual(curve.segments[0].end[0], 0.75)
        self.assertAlmostEqual(curve.segments[0].end[1], 1.0)


class CurveFitTests(unittest.TestCase):
    def test_control_points(self) -> None:
        curve = fit_curve([5, 15, 25], [1, 3, 2], x_min=0.0, x_max=30.0, max_frequency=3.0)
        self.assertAlmostEqual(curve.start[0], 5 / 30)
        self.assertAlmostEqual(curve.start[1], 1 / 3)
        first, second = curve.segments
        self.assertAlmostEqual(first.control1[0], 8 / 30)
        self.assertAlmostEqual(first.control1[1], 1.6 / 3)
        self.assertAlmostEqual(first.control2[0], 0.3)
        self.assertAlmostEqual(first.control2[1], 0.9)
        self.assertAlmostEqual(first.end[0], 0.5)
        self.assertAlmostEqual(first.end[1], 1.0)
        self.assertAlmostEqual(second.control1[0], 0.7)
        self.assertAlmostEqual(second.control1[1], 1.1)
        self.assertAlmostEqual(second.control2[0], 22 / 30)
        self.assertAlmostEqual(second.control2[1], 2.3 / 3)
        self.assertAlmostEqual(second.end[0], 25 / 30)

    def test_degenerate_inputs(self) -> None:
        self.assertIsNone(fit_curve([], [], x_min=0, x_max=1, max_frequency=1).start)
        single = fit_curve([0.5], [2], x_min=0, x_max=1, max_frequency=0)
        self.assertEqual(single.start, (0.5, 0.0))
        self.assertEqual(single.segments, ())
        with self.assertRaises(InvalidArgumentError):
            fit_curve([1, 2], [1], x_min=0, x_max=1, max_frequency=1)

    def test_plot_projection_flips_y(self) -> None:
        curve = fit_curve([5, 15, 25], [1, 3, 2], x_min=0.0, x_max=30.0, max_frequency=3.0)
        plotted = curve.to_plot(origin_x=10.0, origin_y=110.0, width=100.0, height=100.0)
        self.assertAlmostEqual(plotted.start[0], 10.0 + 100.0 / 6)
        self.assertAlmostEqual(plotted.start[1], 110.0 - 100.0 / 3)
        self.assertAlmostEqual(plotted.segments[0].end[1], 10.0)


if __name__ == "__main__":
    unittest.main()
