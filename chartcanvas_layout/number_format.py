from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
import math
from typing import Literal

from chartcanvas_layout.errors import InvalidArgumentError


NumberFormatKind = Literal["raw", "plain", "grouped", "percent_plain", "percent_grouped"]

DEFAULT_NUMBER_FORMAT = "#,##0"
_PATTERN_CHARS = frozenset("#0,.%")


@dataclass(frozen=True)
class NumberFormat:
    """Number format resolved once from an Excel-like pattern.

    `%` scales by 100 and appends a percent sign, `,` turns on thousands
    grouping, and anything else yields a plain rounded integer. An empty
    pattern keeps the value's own text.
    """

    kind: NumberFormatKind = "grouped"
    pattern: str = DEFAULT_NUMBER_FORMAT

    @classmethod
    def parse(cls, pattern: str | None) -> "NumberFormat":
        if pattern is None or pattern == "":
            return cls(kind="raw", pattern="")
        if not isinstance(pattern, str):
            raise InvalidArgumentError(f"number format must be a string, got {type(pattern)!r}")
        unknown = set(pattern) - _PATTERN_CHARS
        if unknown:
            raise InvalidArgumentError(f"unsupported characters in number format {pattern!r}: {''.join(sorted(unknown))}")
        grouped = "," in pattern
        if "%" in pattern:
            kind: NumberFormatKind = "percent_grouped" if grouped else "percent_plain"
        else:
            kind = "grouped" if grouped else "plain"
        return cls(kind=kind, pattern=pattern)

    @property
    def is_percentage(self) -> bool:
        return self.kind in ("percent_plain", "percent_grouped")

    @property
    def is_grouped(self) -> bool:
        return self.kind in ("grouped", "percent_grouped")

    def format(self, value: float) -> str:
        if self.kind == "raw":
            return format_plain_number(value)
        if self.is_percentage:
            return _rounded_text(float(value) * 100.0, grouped=self.is_grouped) + "%"
        return _rounded_text(float(value), grouped=self.is_grouped)


def format_number(value: float, pattern: str | None) -> str:
    return NumberFormat.parse(pattern).format(value)


def format_plain_number(value: float) -> str:
    if not math.isfinite(value):
        return str(value)
    if float(value).is_integer():
        return str(int(value))
    try:
        out = format(Decimal(repr(float(value))), "f")
    except InvalidOperation:
        return str(value)
    # Only trim trailing zeros for fractional values.
    if "." in out:
        out = out.rstrip("0").rstrip(".")
    return out


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _rounded_text(value: float, *, grouped: bool) -> str:
    if not math.isfinite(value):
        return str(value)
    rounded = round_half_up(value)
    if grouped:
        return f"{rounded:,}"
    return str(rounded)
