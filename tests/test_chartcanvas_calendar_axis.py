from __future__ import annotations

import datetime as dt
import unittest

from chartcanvas_layout.calendar_axis import (
    build_calendar_axis,
    day_index,
    parse_date,
    thin_dates,
    thinning_mode,
)
from chartcanvas_layout.errors import InvalidArgumentError


def _days(start: dt.date, count: int) -> list[dt.date]:
    return [start + dt.timedelta(days=i) for i in range(count)]


class DateParsingTests(unittest.TestCase):
    def test_accepts_compact_and_dashed_forms(self) -> None:
        self.assertEqual(parse_date("20240305"), dt.date(2024, 3, 5))
        self.assertEqual(parse_date("2024-03-05"), dt.date(2024, 3, 5))
        self.assertEqual(parse_date(dt.datetime(2024, 3, 5, 12, 30)), dt.date(2024, 3, 5))

    def test_rejects_malformed_dates(self) -> None:
        for bad in ("2024/03/05", "240305", "20240230", ""):
            with self.subTest(value=bad):
                with self.assertRaises(InvalidArgumentError):
                    parse_date(bad)
        with self.assertRaises(InvalidArgumentError):
            parse_date(20240305)  # type: ignore[arg-type]

    def test_day_index_counts_from_epoch(self) -> None:
        self.assertEqual(day_index("20000101"), 0)
        self.assertEqual(day_index("2000-01-02"), 1)
        self.assertEqual(day_index("19991231"), -1)


class ThinningTests(unittest.TestCase):
    def test_mode_thresholds(self) -> None:
        self.assertEqual(thinning_mode(0), "daily")
        self.assertEqual(thinning_mode(59), "daily")
        self.assertEqual(thinning_mode(60), "weekly_monthly")
        self.assertEqual(thinning_mode(120), "weekly_monthly")
        self.assertEqual(thinning_mode(121), "monthly")

    def test_short_span_keeps_every_date(self) -> None:
        axis = build_calendar_axis(_days(dt.date(2024, 1, 1), 46))
        self.assertEqual(axis.span_days, 45)
        self.assertEqual(axis.mode, "daily")
        self.assertEqual(len(axis.ticks), 46)

    def test_long_span_keeps_month_starts_and_ends(self) -> None:
        axis = build_calendar_axis(_days(dt.date(2024, 1, 10), 201))
        self.assertEqual(axis.span_days, 200)
        self.assertEqual(axis.mode, "monthly")
        dates = [tick.date for tick in axis.ticks]
        self.assertEqual(dates[0], dt.date(2024, 1, 10))
        self.assertEqual(dates[-1], dt.date(2024, 7, 28))
        self.assertEqual(len(dates), 8)
        self.assertTrue(all(d.day == 1 for d in dates[1:-1]))

    def test_medium_span_keeps_sundays_and_month_starts(self) -> None:
        axis = build_calendar_axis(_days(dt.date(2024, 1, 1), 91))
        self.assertEqual(axis.mode, "weekly_monthly")
        dates = [tick.date for tick in axis.ticks]
        self.assertEqual(len(dates), 16)
        self.assertIn(dt.date(2024, 2, 1), dates)
        self.assertIn(dt.date(2024, 3, 1), dates)
        self.assertIn(dt.date(2024, 1, 7), dates)
        for d in dates[1:-1]:
            self.assertTrue(d.day == 1 or d.weekday() == 6)

    def test_thin_dates_keeps_both_ends(self) -> None:
        dates = [dt.date(2024, 1, 2), dt.date(2024, 1, 3), dt.date(2024, 1, 4)]
        self.assertEqual(thin_dates(dates, "monthly"), [dates[0], dates[-1]])


class CalendarAxisTests(unittest.TestCase):
    def test_single_date_axis(self) -> None:
        axis = build_calendar_axis(["20240305"])
        self.assertEqual(len(axis.ticks), 1)
        tick = axis.ticks[0]
        self.assertEqual(tick.first_line, "05")
        self.assertEqual(tick.second_line, "2024/03/05")
        self.assertAlmostEqual(tick.ratio, 0.5)
        self.assertEqual(axis.extended_span, 1.0)

    def test_empty_axis(self) -> None:
        axis = build_calendar_axis([])
        self.assertEqual(axis.ticks, ())
        self.assertEqual(axis.ratio_for("20240101"), 0.0)

    def test_domain_is_padded_by_half_a_day(self) -> None:
        axis = build_calendar_axis(["20240101", "20240102"])
        self.assertEqual(axis.extended_span, 2.0)
        self.assertAlmostEqual(axis.ticks[0].ratio, 0.25)
        self.assertAlmostEqual(axis.ticks[1].ratio, 0.75)
        self.assertAlmostEqual(axis.ratio_for("2024-01-02"), 0.75)

    def test_duplicate_positions_collapse(self) -> None:
        axis = build_calendar_axis(["20240101", "2024-01-01", dt.date(2024, 1, 1)])
        self.assertEqual(axis.dates, (dt.date(2024, 1, 1),))

    def test_second_line_marks_month_and_year_changes(self) -> None:
        axis = build_calendar_axis(["20231230", "20231231", "20240101", "20240102", "20240201"])
        lines = [tick.second_line for tick in axis.ticks]
        self.assertEqual(lines, ["2023/12/30", "", "2024/01/01", "", "02/01"])
        self.assertEqual([tick.first_line for tick in axis.ticks], ["30", "31", "01", "02", "01"])


if __name__ == "__main__":
    unittest.main()
