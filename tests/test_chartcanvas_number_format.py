from __future__ import annotations

import unittest

from chartcanvas_layout.errors import InvalidArgumentError
from chartcanvas_layout.number_format import NumberFormat, format_number


class NumberFormatTests(unittest.TestCase):
    def test_patterns_resolve_to_closed_kinds(self) -> None:
        self.assertEqual(NumberFormat.parse("#,##0").kind, "grouped")
        self.assertEqual(NumberFormat.parse("#,##0%").kind, "percent_grouped")
        self.assertEqual(NumberFormat.parse("0%").kind, "percent_plain")
        self.assertEqual(NumberFormat.parse("0").kind, "plain")
        self.assertEqual(NumberFormat.parse("").kind, "raw")
        self.assertEqual(NumberFormat.parse(None).kind, "raw")

    def test_grouping(self) -> None:
        self.assertEqual(format_number(1234567, "#,##0"), "1,234,567")
        self.assertEqual(format_number(-1234.4, "#,##0"), "-1,234")
        self.assertEqual(format_number(999, "#,##0"), "999")

    def test_plain_rounds_half_up(self) -> None:
        self.assertEqual(format_number(12.5, "0"), "13")
        self.assertEqual(format_number(1234567, "0"), "1234567")

    def test_percent_scales_by_one_hundred(self) -> None:
        self.assertEqual(format_number(0.256, "#,##0%"), "26%")
        self.assertEqual(format_number(12345.6, "#,##0%"), "1,234,560%")
        self.assertEqual(format_number(12345.6, "0%"), "1234560%")

    def test_raw_keeps_value_text(self) -> None:
        self.assertEqual(format_number(2.5, ""), "2.5")
        self.assertEqual(format_number(3.0, None), "3")

    def test_percentage_flag(self) -> None:
        self.assertTrue(NumberFormat.parse("#,##0%").is_percentage)
        self.assertFalse(NumberFormat.parse("#,##0").is_percentage)

    def test_unknown_pattern_rejected(self) -> None:
        with self.assertRaises(InvalidArgumentError):
            NumberFormat.parse("yyyy/MM")


if __name__ == "__main__":
    unittest.main()
