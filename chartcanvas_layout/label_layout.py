from __future__ import annotations

from dataclasses import dataclass
import logging
import math
from typing import Sequence

from chartcanvas_layout.errors import InvalidArgumentError
from chartcanvas_layout.pie import PieChart, PieSnapshot
from chartcanvas_layout.text_metrics import LINE_HEIGHT_MULTIPLIER, TextMeasurer


LOGGER = logging.getLogger(__name__)

DEFAULT_LABEL_PADDING = 5.0
ARC_CENTER_LABEL_GAP = 20.0
LEADER_LINE_LABEL_GAP = 30.0
DEFAULT_TOP_MAX_ITERATIONS = 10
DEFAULT_TOP_HALF_WIDTH = 20.0
DEFAULT_BOTTOM_MAX_ITERATIONS = 20
DEFAULT_BOTTOM_WINDOW = 30.0
DEFAULT_BOTTOM_STEP_ANGLE = 2.0


@dataclass(frozen=True)
class PieGeometry:
    center_x: float
    center_y: float
    radius: float
    font_size: float

    def __post_init__(self) -> None:
        if self.radius <= 0:
            raise InvalidArgumentError("radius must be > 0")
        if self.font_size <= 0:
            raise InvalidArgumentError("font_size must be > 0")


@dataclass(frozen=True)
class LabelBound:
    """Axis-aligned label box centred on its anchor point."""

    x: float
    y: float
    width: float
    height: float
    angle: float
    segment_index: int
    text: str = ""

    @property
    def left(self) -> float:
        return self.x - self.width / 2

    @property
    def right(self) -> float:
        return self.x + self.width / 2

    @property
    def top(self) -> float:
        return self.y - self.height / 2

    @property
    def bottom(self) -> float:
        return self.y + self.height / 2

    def collides(self, other: "LabelBound", padding: float = DEFAULT_LABEL_PADDING) -> bool:
        horizontal = not (self.right + padding < other.left or other.right + padding < self.left)
        vertical = not (self.bottom + padding < other.top or other.bottom + padding < self.top)
        return horizontal and vertical


@dataclass(frozen=True)
class NearTopMergeSettings:
    max_iterations: int = DEFAULT_TOP_MAX_ITERATIONS
    half_width: float = DEFAULT_TOP_HALF_WIDTH
    padding: float = DEFAULT_LABEL_PADDING

    def __post_init__(self) -> None:
        _check_iterations(self.max_iterations)
        if not 0 <= self.half_width <= 180:
            raise InvalidArgumentError("half_width must be in [0, 180]")
        if self.padding < 0:
            raise InvalidArgumentError("padding must be >= 0")


@dataclass(frozen=True)
class NearBottomOffsetSettings:
    max_iterations: int = DEFAULT_BOTTOM_MAX_ITERATIONS
    window: float = DEFAULT_BOTTOM_WINDOW
    step_angle: float = DEFAULT_BOTTOM_STEP_ANGLE
    padding: float = DEFAULT_LABEL_PADDING

    def __post_init__(self) -> None:
        _check_iterations(self.max_iterations)
        if not 0 <= self.window <= 360:
            raise InvalidArgumentError("window must be in [0, 360]")
        if self.step_angle <= 0 or self.step_angle >= 360:
            raise InvalidArgumentError("step_angle must be in (0, 360)")
        if self.padding < 0:
            raise InvalidArgumentError("padding must be >= 0")


@dataclass(frozen=True)
class ResolveResult:
    success: bool
    iterations: int
    snapshot: PieSnapshot | None = None
    offsets: tuple[float, ...] = ()


def normalize_angle(angle: float) -> float:
    return angle % 360.0


def in_seam_window(angle: float, half_width: float = DEFAULT_TOP_HALF_WIDTH) -> bool:
    a = normalize_angle(angle)
    return a >= 360.0 - half_width or a <= half_width


def in_bottom_window(angle: float, window: float = DEFAULT_BOTTOM_WINDOW) -> bool:
    diff = abs(normalize_angle(angle) - 180.0)
    return diff <= window / 2 or diff >= 360.0 - window / 2


def label_bounds(
    chart: PieChart,
    geometry: PieGeometry,
    measure: TextMeasurer,
    offsets: Sequence[float] | None = None,
) -> tuple[LabelBound, ...]:
    bounds: list[LabelBound] = []
    height = geometry.font_size * LINE_HEIGHT_MULTIPLIER
    for segment in chart.segments():
        i = segment.index
        angle = segment.mid_angle
        if offsets is not None and i < len(offsets):
            angle += offsets[i]
        gap = ARC_CENTER_LABEL_GAP if chart.resolved_label_position(i) == "arc-center" else LEADER_LINE_LABEL_GAP
        label_radius = geometry.radius + gap
        # Angles run clockwise from 12 o'clock; screen space needs a -90 degree rotation.
        rad = math.radians(angle - 90.0)
        text = chart.label_text(i)
        bounds.append(
            LabelBound(
                x=geometry.center_x + label_radius * math.cos(rad),
                y=geometry.center_y + label_radius * math.sin(rad),
                width=float(measure(text, geometry.font_size)),
                height=height,
                angle=angle,
                segment_index=i,
                text=text,
            )
        )
    return tuple(bounds)


def find_collisions(
    bounds: Sequence[LabelBound],
    padding: float = DEFAULT_LABEL_PADDING,
) -> list[tuple[LabelBound, LabelBound]]:
    pairs: list[tuple[LabelBound, LabelBound]] = []
    for i in range(len(bounds)):
        for j in range(i + 1, len(bounds)):
            if bounds[i].collides(bounds[j], padding):
                pairs.append((bounds[i], bounds[j]))
    return pairs


def resolve_near_top_collisions(
    chart: PieChart,
    geometry: PieGeometry,
    measure: TextMeasurer,
    settings: NearTopMergeSettings | None = None,
) -> ResolveResult:
    """Merge colliding labels around the 0/360 degree seam into the Others category.

    Each round folds the smaller member of every colliding seam pair into
    Others and rebuilds the layout from scratch. The data before the first
    merge is returned as `snapshot` so the caller can restore it.
    """
    cfg = settings if settings is not None else NearTopMergeSettings()
    snapshot = chart.snapshot()
    iterations = 0
    resolved = False

    while iterations < cfg.max_iterations:
        iterations += 1
        pairs = [
            (a, b)
            for a, b in find_collisions(label_bounds(chart, geometry, measure), cfg.padding)
            if in_seam_window(a.angle, cfg.half_width) or in_seam_window(b.angle, cfg.half_width)
        ]
        if not pairs:
            resolved = True
            break

        percentages = chart.percentages()
        to_merge: set[int] = set()
        for a, b in pairs:
            i, j = a.segment_index, b.segment_index
            if chart.is_others(i) and chart.is_others(j):
                continue
            if chart.is_others(i):
                to_merge.add(j)
            elif chart.is_others(j):
                to_merge.add(i)
            elif percentages[i] < percentages[j]:
                to_merge.add(i)
            else:
                to_merge.add(j)
        LOGGER.debug("near-top pass %d: %d seam collisions, merging %s", iterations, len(pairs), sorted(to_merge))
        if not to_merge:
            resolved = True
            break
        chart.merge_into_others(to_merge)

    if not resolved:
        LOGGER.info("near-top pass left seam collisions after %d iterations", iterations)
    return ResolveResult(success=resolved, iterations=iterations, snapshot=snapshot)


def resolve_near_bottom_collisions(
    chart: PieChart,
    geometry: PieGeometry,
    measure: TextMeasurer,
    settings: NearBottomOffsetSettings | None = None,
) -> ResolveResult:
    """Rotate colliding labels near 180 degrees clockwise by accumulating angular offsets.

    Offsets are reset on entry, so repeated calls give the same result. The
    final offsets are returned and stored on `chart.label_angle_offsets`.
    """
    cfg = settings if settings is not None else NearBottomOffsetSettings()
    offsets = [0.0] * len(chart.data)
    iterations = 0
    resolved = False

    while iterations < cfg.max_iterations:
        iterations += 1
        pairs = [
            (a, b)
            for a, b in find_collisions(label_bounds(chart, geometry, measure, offsets), cfg.padding)
            if in_bottom_window(a.angle, cfg.window) or in_bottom_window(b.angle, cfg.window)
        ]
        if not pairs:
            resolved = True
            break
        for a, b in pairs:
            offsets[_clockwise_member(a, b)] += cfg.step_angle
        LOGGER.debug("near-bottom pass %d: %d collisions in window", iterations, len(pairs))

    if not resolved:
        LOGGER.info("near-bottom pass left collisions after %d iterations", iterations)
    chart.label_angle_offsets = tuple(offsets)
    return ResolveResult(success=resolved, iterations=iterations, offsets=tuple(offsets))


def _clockwise_member(a: LabelBound, b: LabelBound) -> int:
    # Bounds already carry offset-adjusted angles.
    angle_a = normalize_angle(a.angle)
    angle_b = normalize_angle(b.angle)
    if angle_a > angle_b:
        return a.segment_index
    if angle_b > angle_a:
        return b.segment_index
    if _distance_to_bottom(angle_a) < _distance_to_bottom(angle_b):
        return a.segment_index
    return b.segment_index


def _distance_to_bottom(angle: float) -> float:
    diff = abs(angle - 180.0)
    return min(diff, 360.0 - diff)


def _check_iterations(value: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise InvalidArgumentError("max_iterations must be a positive integer")
