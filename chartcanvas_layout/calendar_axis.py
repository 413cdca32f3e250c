from __future__ import annotations

from dataclasses import dataclass
import datetime as dt
import re
from typing import Iterable, Literal, Sequence, Union

from chartcanvas_layout.errors import InvalidArgumentError


DateLike = Union[dt.date, str]
ThinningMode = Literal["daily", "weekly_monthly", "monthly"]

EPOCH = dt.date(2000, 1, 1)
DOMAIN_PAD_DAYS = 0.5
DAILY_SPAN_LIMIT = 60
WEEKLY_SPAN_LIMIT = 120

_COMPACT_DATE = re.compile(r"^\d{8}$")
_DASHED_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


@dataclass(frozen=True)
class CalendarTick:
    date: dt.date
    day_index: int
    ratio: float
    first_line: str
    second_line: str


@dataclass(frozen=True)
class CalendarAxis:
    """Date domain of an X axis with its thinned, two-line tick labels.

    `ratio` on each tick is the position inside the padded domain, 0.0 at
    `extended_min` and 1.0 at `extended_max`.
    """

    dates: tuple[dt.date, ...]
    extended_min: float
    extended_max: float
    span_days: int
    mode: ThinningMode
    ticks: tuple[CalendarTick, ...]

    @property
    def extended_span(self) -> float:
        return self.extended_max - self.extended_min

    def ratio_for(self, when: DateLike) -> float:
        span = self.extended_span
        if span <= 0:
            return 0.0
        return (day_index(when) - self.extended_min) / span


def parse_date(value: DateLike) -> dt.date:
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    if not isinstance(value, str):
        raise InvalidArgumentError(f"unsupported date value: {value!r}")
    text = value.strip()
    if _DASHED_DATE.match(text):
        text = text.replace("-", "")
    if not _COMPACT_DATE.match(text):
        raise InvalidArgumentError(f"date must be YYYYMMDD or YYYY-MM-DD: {value!r}")
    try:
        return dt.date(int(text[0:4]), int(text[4:6]), int(text[6:8]))
    except ValueError as exc:
        raise InvalidArgumentError(f"invalid calendar date: {value!r}") from exc


def day_index(value: DateLike) -> int:
    return (parse_date(value) - EPOCH).days


def thinning_mode(span_days: int) -> ThinningMode:
    if span_days < DAILY_SPAN_LIMIT:
        return "daily"
    if span_days <= WEEKLY_SPAN_LIMIT:
        return "weekly_monthly"
    return "monthly"


def thin_dates(sorted_dates: Sequence[dt.date], mode: ThinningMode) -> list[dt.date]:
    if not sorted_dates or mode == "daily":
        return list(sorted_dates)
    first = sorted_dates[0]
    last = sorted_dates[-1]
    out = [first]
    for date in sorted_dates[1:-1]:
        if date.day == 1:
            out.append(date)
        elif mode == "weekly_monthly" and date.weekday() == 6:
            out.append(date)
    if last != first:
        out.append(last)
    return out


def build_calendar_axis(positions: Iterable[DateLike]) -> CalendarAxis:
    dates = tuple(sorted({parse_date(p) for p in positions}))
    if not dates:
        return CalendarAxis(dates=(), extended_min=0.0, extended_max=0.0, span_days=0, mode="daily", ticks=())

    min_index = day_index(dates[0])
    max_index = day_index(dates[-1])
    span = max_index - min_index
    extended_min = min_index - DOMAIN_PAD_DAYS
    extended_max = max_index + DOMAIN_PAD_DAYS
    extended_span = extended_max - extended_min
    mode = thinning_mode(span)

    ticks: list[CalendarTick] = []
    prev: dt.date | None = None
    for date in thin_dates(dates, mode):
        index = day_index(date)
        ticks.append(
            CalendarTick(
                date=date,
                day_index=index,
                ratio=(index - extended_min) / extended_span,
                first_line=f"{date.day:02d}",
                second_line=_second_line(date, prev),
            )
        )
        prev = date

    return CalendarAxis(
        dates=dates,
        extended_min=float(extended_min),
        extended_max=float(extended_max),
        span_days=span,
        mode=mode,
        ticks=tuple(ticks),
    )


def _second_line(date: dt.date, prev: dt.date | None) -> str:
    if prev is None or date.year != prev.year:
        return f"{date.year:04d}/{date.month:02d}/{date.day:02d}"
    if date.month != prev.month:
        return f"{date.month:02d}/{date.day:02d}"
    return ""
