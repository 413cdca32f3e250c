from __future__ import annotations

from dataclasses import dataclass, field
import datetime as dt
from typing import Literal, Sequence

from chartcanvas_layout.calendar_axis import CalendarAxis, DateLike, build_calendar_axis, parse_date
from chartcanvas_layout.errors import InvalidArgumentError
from chartcanvas_layout.number_format import DEFAULT_NUMBER_FORMAT, NumberFormat
from chartcanvas_layout.scales import TickScale, compute_tick_scale


SeriesKind = Literal["line", "bar"]


@dataclass(frozen=True)
class SeriesPoint:
    position: dt.date
    value: float
    annotation: str = ""


@dataclass
class Series:
    title: str = ""
    kind: SeriesKind = "line"
    secondary_axis: bool = False
    color: str = "black"
    points: list[SeriesPoint] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.kind not in ("line", "bar"):
            raise InvalidArgumentError(f"unsupported series kind: {self.kind}")

    def add(self, position: DateLike, value: float, annotation: str = "") -> "Series":
        self.points.append(SeriesPoint(position=parse_date(position), value=float(value), annotation=annotation))
        return self

    def add_ratio(self, position: DateLike, numerator: float, denominator: float, annotation: str = "") -> "Series":
        value = float(numerator) / float(denominator) if denominator != 0 else 0.0
        return self.add(position, value, annotation)

    def sorted_points(self) -> list[SeriesPoint]:
        return sorted(self.points, key=lambda point: point.position)

    @property
    def values(self) -> list[float]:
        return [point.value for point in self.points]


def fill_missing_dates(points: Sequence[SeriesPoint]) -> list[SeriesPoint]:
    """One point per day from the first to the last date, carrying the last seen value into gaps."""
    if not points:
        return []
    by_date = {point.position: point for point in points}
    ordered = sorted(by_date)
    current = ordered[0]
    end = ordered[-1]
    filled: list[SeriesPoint] = []
    last_value: float | None = None
    while current <= end:
        existing = by_date.get(current)
        if existing is not None:
            filled.append(existing)
            last_value = existing.value
        elif last_value is not None:
            filled.append(SeriesPoint(position=current, value=last_value))
        current += dt.timedelta(days=1)
    return filled


@dataclass
class DateChart:
    x_axis_title: str = ""
    y_axis_title: str = ""
    second_axis_title: str = ""
    x_grid: bool = False
    y_grid: bool = False
    y_axis_format: NumberFormat = field(default_factory=lambda: NumberFormat.parse(DEFAULT_NUMBER_FORMAT))
    second_axis_format: NumberFormat = field(default_factory=lambda: NumberFormat.parse(DEFAULT_NUMBER_FORMAT))
    series: list[Series] = field(default_factory=list)

    def add_line(self, title: str = "", *, secondary_axis: bool = False, color: str = "black") -> Series:
        line = Series(title=title, kind="line", secondary_axis=secondary_axis, color=color)
        self.series.append(line)
        return line

    def add_bar(self, title: str = "", *, secondary_axis: bool = False, color: str = "blue") -> Series:
        bar = Series(title=title, kind="bar", secondary_axis=secondary_axis, color=color)
        self.series.append(bar)
        return bar

    def set_y_axis_format(self, pattern: str | None) -> "DateChart":
        self.y_axis_format = NumberFormat.parse(pattern)
        return self

    def set_second_axis_format(self, pattern: str | None) -> "DateChart":
        self.second_axis_format = NumberFormat.parse(pattern)
        return self

    def set_grid(self, *, x: bool | None = None, y: bool | None = None) -> "DateChart":
        if x is not None:
            self.x_grid = bool(x)
        if y is not None:
            self.y_grid = bool(y)
        return self

    @property
    def has_second_axis(self) -> bool:
        return any(s.secondary_axis for s in self.series)

    def axis_format(self, secondary: bool = False) -> NumberFormat:
        return self.second_axis_format if secondary else self.y_axis_format

    def y_axis_scale(self, secondary: bool = False) -> TickScale:
        values: list[float] = []
        for s in self.series:
            if s.secondary_axis == secondary:
                values.extend(s.values)
        return compute_tick_scale(values, percentage=self.axis_format(secondary).is_percentage)

    def format_y_label(self, value: float, secondary: bool = False) -> str:
        return self.axis_format(secondary).format(value)

    def calendar_axis(self) -> CalendarAxis:
        return build_calendar_axis(point.position for s in self.series for point in s.points)
