from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Any, Callable

import numpy as np

from chartcanvas_layout.adapters.normalize import coerce_values
from chartcanvas_layout.number_format import NumberFormat


UNIT_INTERVAL_MAX_RANGE = 30.0
IDEAL_TICK_COUNT = 10
PERCENT_INTERVAL = 10.0
PERCENT_MIN_CEILING = 100.0


@dataclass(frozen=True)
class TickScale:
    max: float
    interval: float
    labels: tuple[float, ...]

    @property
    def tick_count(self) -> int:
        return len(self.labels)

    @property
    def min(self) -> float:
        return self.labels[0] if self.labels else 0.0


@dataclass(frozen=True)
class NumericAxisScale:
    min_tick: float
    max_tick: float
    interval: float
    labels: tuple[float, ...]

    @property
    def span(self) -> float:
        return self.max_tick - self.min_tick


EMPTY_TICK_SCALE = TickScale(max=0.0, interval=0.0, labels=())


def nice_interval(span: float, target: int = IDEAL_TICK_COUNT) -> float:
    """Round `span / target` down to a power of ten, widened to 2x or 5x when the ideal step is larger."""
    if target <= 0:
        raise ValueError("target must be > 0")
    ideal = span / target
    if not math.isfinite(ideal) or ideal <= 0:
        return 1.0
    magnitude = 10.0 ** math.floor(math.log10(ideal))
    ratio = ideal / magnitude
    if ratio > 5:
        return magnitude * 5
    if ratio > 2:
        return magnitude * 2
    return magnitude


def compute_tick_scale(values: Any, *, percentage: bool = False) -> TickScale:
    finite = _finite_values(values)
    if finite.size == 0:
        return EMPTY_TICK_SCALE

    min_value = float(np.min(finite))
    max_value = float(np.max(finite))
    range_min = min(0.0, min_value)
    span = max_value - range_min

    if percentage:
        interval = PERCENT_INTERVAL
        max_tick = max(PERCENT_MIN_CEILING, math.ceil(max_value / interval) * interval)
    elif span <= UNIT_INTERVAL_MAX_RANGE:
        interval = 1.0
        max_tick = float(math.ceil(max_value))
    else:
        interval = nice_interval(span)
        max_tick = math.ceil(max_value / interval) * interval

    labels = _step_labels(range_min, max_tick, interval)
    if not labels or labels[-1] < max_value:
        labels.append(float(max_tick))
    return TickScale(max=float(max_tick), interval=float(interval), labels=tuple(labels))


def compute_axis_scale(vmin: float, vmax: float) -> NumericAxisScale:
    """Axis scale with both ends snapped outward to the interval, as used by histogram X axes."""
    span = vmax - vmin
    if span <= UNIT_INTERVAL_MAX_RANGE:
        interval = 1.0
        min_tick = float(math.floor(vmin))
        max_tick = float(math.ceil(vmax))
    else:
        interval = nice_interval(span)
        min_tick = math.floor(vmin / interval) * interval
        max_tick = math.ceil(vmax / interval) * interval
    if max_tick <= min_tick:
        max_tick = min_tick + interval
    labels = _step_labels(min_tick, max_tick, interval)
    return NumericAxisScale(
        min_tick=float(min_tick),
        max_tick=float(max_tick),
        interval=float(interval),
        labels=tuple(labels),
    )


def max_label_width(
    values: Any,
    number_format: NumberFormat,
    measure: Callable[[str, float], float],
    font_size: float,
) -> float:
    widest = 0.0
    for value in _finite_values(values).tolist():
        widest = max(widest, float(measure(number_format.format(value), font_size)))
    return widest


def _step_labels(start: float, stop: float, interval: float) -> list[float]:
    # Multiply instead of accumulating so long axes don't drift.
    count = int(math.floor((stop - start) / interval + 1e-9)) + 1
    if count <= 0:
        return []
    return [float(start + i * interval) for i in range(count)]


def _finite_values(values: Any) -> np.ndarray:
    arr = coerce_values(values, label="values")
    return arr[np.isfinite(arr)]
