from __future__ import annotations

from dataclasses import dataclass, field
import logging
import math
from typing import Any

import numpy as np

from chartcanvas_layout.adapters.normalize import coerce_values
from chartcanvas_layout.curve import CurvePath, fit_curve
from chartcanvas_layout.errors import InvalidArgumentError
from chartcanvas_layout.number_format import DEFAULT_NUMBER_FORMAT, NumberFormat
from chartcanvas_layout.scales import NumericAxisScale, TickScale, compute_axis_scale, compute_tick_scale


LOGGER = logging.getLogger(__name__)

DEFAULT_DATA_RANGE = (0.0, 100.0)
EMPTY_MIN_BIN_COUNT = 10
EMPTY_MAX_BIN_COUNT = 20


@dataclass(frozen=True)
class BinSet:
    edges: tuple[float, ...]
    width: float
    axis: NumericAxisScale

    @property
    def count(self) -> int:
        return len(self.edges) - 1

    @property
    def centers(self) -> tuple[float, ...]:
        return tuple((self.edges[i] + self.edges[i + 1]) / 2 for i in range(self.count))


def sturges_bin_count(data_count: int) -> int:
    if data_count <= 0:
        raise InvalidArgumentError("data_count must be > 0")
    return int(math.ceil(math.log2(data_count) + 1))


def compute_bins(
    vmin: float,
    vmax: float,
    data_count: int,
    *,
    bin_width: float | None = None,
    bin_count: int | None = None,
) -> BinSet:
    """Bin edges for [vmin, vmax], by explicit width, explicit count, or Sturges' rule in that order."""
    if vmax < vmin:
        raise InvalidArgumentError(f"vmax must be >= vmin: {vmax} < {vmin}")
    axis = compute_axis_scale(vmin, vmax)
    span = vmax - vmin
    if span <= 0:
        span = 1.0

    if bin_width is not None:
        if bin_width <= 0:
            raise InvalidArgumentError("bin_width must be > 0")
        count = max(1, int(math.ceil(span / bin_width - 1e-9)))
        LOGGER.debug("explicit bin width %s -> %d bins", bin_width, count)
        stop = max(vmax, vmin + count * bin_width)
        return BinSet(edges=_edges(vmin, bin_width, count, stop), width=float(bin_width), axis=axis)

    if bin_count is not None:
        if bin_count <= 0:
            raise InvalidArgumentError("bin_count must be > 0")
        width = span / bin_count
        LOGGER.debug("explicit bin count %d -> width %s", bin_count, width)
        stop = vmax if vmax > vmin else vmin + span
        return BinSet(edges=_edges(vmin, width, bin_count, stop), width=width, axis=axis)

    if data_count <= 0:
        count = min(EMPTY_MAX_BIN_COUNT, max(EMPTY_MIN_BIN_COUNT, int(math.floor(axis.span / axis.interval))))
    else:
        count = sturges_bin_count(data_count)
    width = axis.span / count
    LOGGER.debug("auto bins over [%s, %s]: %d bins of %s", axis.min_tick, axis.max_tick, count, width)
    return BinSet(edges=_edges(axis.min_tick, width, count, axis.max_tick), width=width, axis=axis)


def bin_frequencies(values: Any, edges: Any) -> np.ndarray:
    """Count values per bin; bins are half-open except the last, which also takes its upper edge."""
    edge_arr = np.asarray(edges, dtype=np.float64)
    if edge_arr.ndim != 1 or edge_arr.size < 2:
        raise InvalidArgumentError("edges must contain at least two values")
    count = edge_arr.size - 1
    data = coerce_values(values, label="values", strict=False)
    data = data[np.isfinite(data)]
    inside = (data >= edge_arr[0]) & (data <= edge_arr[-1])
    idx = np.searchsorted(edge_arr, data[inside], side="right") - 1
    np.clip(idx, 0, count - 1, out=idx)
    return np.bincount(idx, minlength=count).astype(np.int64)


def _edges(start: float, width: float, count: int, stop: float) -> tuple[float, ...]:
    edges = start + np.arange(count + 1, dtype=np.float64) * width
    # The closing edge is pinned so the maximum value always lands in the last bin.
    edges[-1] = stop
    return tuple(float(v) for v in edges)


@dataclass
class HistogramSeries:
    title: str = ""
    color: str = "blue"
    opacity: float = 0.7
    _values: list[float] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.opacity < 0 or self.opacity > 1:
            raise InvalidArgumentError("opacity must be in [0, 1]")

    def add(self, value: Any) -> "HistogramSeries":
        return self.add_values([value])

    def add_values(self, values: Any) -> "HistogramSeries":
        arr = coerce_values(values, label="values", strict=False)
        self._values.extend(float(v) for v in arr[np.isfinite(arr)])
        return self

    @property
    def values(self) -> np.ndarray:
        return np.asarray(self._values, dtype=np.float64)

    def __len__(self) -> int:
        return len(self._values)


@dataclass
class Histogram:
    x_axis_title: str = ""
    y_axis_title: str = "頻度"
    x_axis_format: NumberFormat = field(default_factory=lambda: NumberFormat.parse(DEFAULT_NUMBER_FORMAT))
    y_axis_format: NumberFormat = field(default_factory=lambda: NumberFormat.parse(DEFAULT_NUMBER_FORMAT))
    bin_count: int | None = None
    bin_width: float | None = None
    curve_mode: bool = False
    x_grid: bool = False
    y_grid: bool = False
    series: list[HistogramSeries] = field(default_factory=list)

    def add_series(self, title: str = "", *, color: str = "blue", opacity: float = 0.7) -> HistogramSeries:
        s = HistogramSeries(title=title, color=color, opacity=opacity)
        self.series.append(s)
        return s

    def set_bin_count(self, count: int | None) -> "Histogram":
        if count is not None and (int(count) != count or count <= 0):
            raise InvalidArgumentError("bin count must be a positive integer")
        self.bin_count = None if count is None else int(count)
        return self

    def set_bin_width(self, width: float | None) -> "Histogram":
        if width is not None and (not math.isfinite(width) or width <= 0):
            raise InvalidArgumentError("bin width must be > 0")
        self.bin_width = None if width is None else float(width)
        return self

    def set_curve_mode(self, enabled: bool) -> "Histogram":
        self.curve_mode = bool(enabled)
        return self

    def set_x_axis_format(self, pattern: str | None) -> "Histogram":
        self.x_axis_format = NumberFormat.parse(pattern)
        return self

    def set_y_axis_format(self, pattern: str | None) -> "Histogram":
        self.y_axis_format = NumberFormat.parse(pattern)
        return self

    @property
    def data_count(self) -> int:
        return sum(len(s) for s in self.series)

    def data_range(self) -> tuple[float, float]:
        arrays = [s.values for s in self.series if len(s)]
        if not arrays:
            return DEFAULT_DATA_RANGE
        merged = np.concatenate(arrays)
        return (float(np.min(merged)), float(np.max(merged)))

    def bins(self) -> BinSet:
        vmin, vmax = self.data_range()
        return compute_bins(vmin, vmax, self.data_count, bin_width=self.bin_width, bin_count=self.bin_count)

    def frequencies(self, bins: BinSet | None = None) -> list[np.ndarray]:
        bin_set = bins if bins is not None else self.bins()
        return [bin_frequencies(s.values, bin_set.edges) for s in self.series]

    def frequency_scale(self, bins: BinSet | None = None) -> TickScale:
        counts = self.frequencies(bins)
        if not counts:
            return compute_tick_scale([])
        return compute_tick_scale(np.concatenate(counts), percentage=self.y_axis_format.is_percentage)

    def curves(self, bins: BinSet | None = None) -> list[CurvePath]:
        bin_set = bins if bins is not None else self.bins()
        counts = self.frequencies(bin_set)
        max_frequency = max((int(c.max()) for c in counts if c.size), default=0)
        return [
            fit_curve(
                bin_set.centers,
                c,
                x_min=bin_set.edges[0],
                x_max=bin_set.edges[-1],
                max_frequency=max_frequency,
            )
            for c in counts
        ]
