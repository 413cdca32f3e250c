from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np

from chartcanvas_layout.errors import InvalidArgumentError


DEFAULT_SMOOTHING = 0.3

Point = tuple[float, float]


@dataclass(frozen=True)
class BezierSegment:
    control1: Point
    control2: Point
    end: Point


@dataclass(frozen=True)
class CurvePath:
    """Cubic Bezier path in normalised plot coordinates (x and y in [0, 1], y up)."""

    start: Point | None
    segments: tuple[BezierSegment, ...]

    def to_plot(self, *, origin_x: float, origin_y: float, width: float, height: float) -> "CurvePath":
        # Screen space: y grows downward from the plot origin.
        def project(point: Point) -> Point:
            return (origin_x + point[0] * width, origin_y - point[1] * height)

        if self.start is None:
            return self
        return CurvePath(
            start=project(self.start),
            segments=tuple(
                BezierSegment(control1=project(s.control1), control2=project(s.control2), end=project(s.end))
                for s in self.segments
            ),
        )


def fit_curve(
    centers: Any,
    frequencies: Any,
    *,
    x_min: float,
    x_max: float,
    max_frequency: float,
    smoothing: float = DEFAULT_SMOOTHING,
) -> CurvePath:
    xs = np.asarray(centers, dtype=np.float64)
    ys = np.asarray(frequencies, dtype=np.float64)
    if xs.shape != ys.shape or xs.ndim != 1:
        raise InvalidArgumentError(f"centers and frequencies length mismatch: {xs.size} != {ys.size}")
    if xs.size == 0:
        return CurvePath(start=None, segments=())

    points = np.column_stack([xs, ys])
    start = _normalise(points[:1], x_min, x_max, max_frequency)[0]
    if xs.size == 1:
        return CurvePath(start=(float(start[0]), float(start[1])), segments=())

    n = points.shape[0]
    i = np.arange(n - 1)
    p0 = points[np.maximum(i - 1, 0)]
    p1 = points[i]
    p2 = points[i + 1]
    p3 = points[np.minimum(i + 2, n - 1)]

    control1 = _normalise(p1 + (p2 - p0) * smoothing, x_min, x_max, max_frequency)
    control2 = _normalise(p2 - (p3 - p1) * smoothing, x_min, x_max, max_frequency)
    ends = _normalise(p2, x_min, x_max, max_frequency)

    segments = tuple(
        BezierSegment(
            control1=(float(c1[0]), float(c1[1])),
            control2=(float(c2[0]), float(c2[1])),
            end=(float(e[0]), float(e[1])),
        )
        for c1, c2, e in zip(control1, control2, ends)
    )
    return CurvePath(start=(float(start[0]), float(start[1])), segments=segments)


def _normalise(points: np.ndarray, x_min: float, x_max: float, max_frequency: float) -> np.ndarray:
    x_span = x_max - x_min
    out = np.zeros_like(points)
    if x_span > 0:
        out[:, 0] = (points[:, 0] - x_min) / x_span
    if max_frequency > 0:
        out[:, 1] = points[:, 1] / max_frequency
    return out
