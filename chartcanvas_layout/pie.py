from __future__ import annotations

from dataclasses import dataclass, field
import logging
import math
from typing import Any, Iterable, Literal, Sequence

from chartcanvas_layout.errors import InvalidArgumentError


LOGGER = logging.getLogger(__name__)

LabelFormat = Literal[
    "category",
    "percentage",
    "value",
    "category-percentage",
    "category-value",
    "category-value-percentage",
]
LabelPosition = Literal["auto", "arc-center", "leader-line"]

LABEL_FORMATS: tuple[str, ...] = (
    "category",
    "percentage",
    "value",
    "category-percentage",
    "category-value",
    "category-value-percentage",
)
LABEL_POSITIONS: tuple[str, ...] = ("auto", "arc-center", "leader-line")

DEFAULT_OTHERS_LABEL = "その他"
OTHERS_FALLBACK_LABELS = ("Others", "その他")
DEFAULT_SMALL_SEGMENT_THRESHOLD = 5.0
DEFAULT_OTHERS_THRESHOLD = 5.0
FULL_TURN = 360.0


@dataclass(frozen=True)
class PieSegment:
    index: int
    value: float
    label: str
    start_angle: float
    end_angle: float
    percentage: float

    @property
    def sweep(self) -> float:
        return self.end_angle - self.start_angle

    @property
    def mid_angle(self) -> float:
        return (self.start_angle + self.end_angle) / 2


@dataclass(frozen=True)
class PieSnapshot:
    data: tuple[float, ...]
    labels: tuple[str, ...]


def is_others_label(label: str, others_label: str = DEFAULT_OTHERS_LABEL) -> bool:
    return label == others_label or label in OTHERS_FALLBACK_LABELS


def order_categories(
    values: Sequence[Any],
    labels: Sequence[str],
    *,
    others_label: str = DEFAULT_OTHERS_LABEL,
) -> tuple[tuple[float, ...], tuple[str, ...]]:
    """Drop negative and non-numeric values, then sort descending with Others entries last."""
    if len(values) != len(labels):
        raise InvalidArgumentError(f"data and labels must have the same length: {len(values)} != {len(labels)}")
    kept: list[tuple[float, str]] = []
    for raw, label in zip(values, labels):
        value = _to_number(raw)
        if value is None or value < 0:
            continue
        kept.append((value, str(label)))
    kept.sort(key=lambda item: (is_others_label(item[1], others_label), -item[0]))
    return tuple(v for v, _ in kept), tuple(lbl for _, lbl in kept)


def layout_segments(
    values: Sequence[float],
    labels: Sequence[str],
    *,
    start_angle: float = 0.0,
) -> tuple[PieSegment, ...]:
    total = math.fsum(values)
    if total <= 0:
        return ()
    segments: list[PieSegment] = []
    running = 0.0
    current = start_angle
    for i, (value, label) in enumerate(zip(values, labels)):
        running += value
        # Sweep derives from the running total so the last edge lands on exactly one full turn.
        end = start_angle + FULL_TURN if i == len(values) - 1 else start_angle + running * FULL_TURN / total
        segments.append(
            PieSegment(
                index=i,
                value=value,
                label=label,
                start_angle=current,
                end_angle=end,
                percentage=value / total * 100.0,
            )
        )
        current = end
    return tuple(segments)


def merge_categories(
    values: Sequence[float],
    labels: Sequence[str],
    indices: Iterable[int],
    others_label: str,
) -> tuple[tuple[float, ...], tuple[str, ...]]:
    """Fold the given categories into the existing Others entry, or append `others_label` when there is none."""
    chosen = sorted(set(indices))
    if not chosen:
        return tuple(values), tuple(labels)
    for index in chosen:
        if index < 0 or index >= len(values):
            raise InvalidArgumentError(f"segment index out of range: {index}")
    merged_value = math.fsum(values[i] for i in chosen)
    keep = [i for i in range(len(values)) if i not in chosen]
    new_values = [values[i] for i in keep]
    new_labels = [labels[i] for i in keep]
    existing = next((k for k, label in enumerate(new_labels) if is_others_label(label, others_label)), None)
    if existing is not None:
        new_values[existing] += merged_value
    else:
        new_values.append(merged_value)
        new_labels.append(others_label)
    return tuple(new_values), tuple(new_labels)


@dataclass
class PieChart:
    title: str = ""
    subtitle: str = ""
    label_format: LabelFormat = "category-percentage"
    label_position: LabelPosition = "auto"
    label_threshold: float = DEFAULT_SMALL_SEGMENT_THRESHOLD
    others_enabled: bool = False
    others_threshold: float = DEFAULT_OTHERS_THRESHOLD
    others_label: str = DEFAULT_OTHERS_LABEL
    legend_visible: bool = True
    start_angle: float = 0.0
    inner_radius: float = 0.0
    _data: tuple[float, ...] = ()
    _labels: tuple[str, ...] = ()
    label_angle_offsets: tuple[float, ...] = ()
    merge_snapshot: PieSnapshot | None = None
    _segments: tuple[PieSegment, ...] | None = field(default=None, repr=False)

    @property
    def data(self) -> tuple[float, ...]:
        return self._data

    @property
    def labels(self) -> tuple[str, ...]:
        return self._labels

    def set_data(self, values: Sequence[Any], labels: Sequence[str]) -> "PieChart":
        self._data, self._labels = order_categories(values, labels, others_label=self.others_label)
        self.label_angle_offsets = (0.0,) * len(self._data)
        self._segments = None
        return self

    def set_label_format(self, label_format: str) -> "PieChart":
        if label_format not in LABEL_FORMATS:
            raise InvalidArgumentError(
                f"invalid label format: {label_format}. valid formats: {', '.join(LABEL_FORMATS)}"
            )
        self.label_format = label_format  # type: ignore[assignment]
        return self

    def set_label_position(self, position: str) -> "PieChart":
        if position not in LABEL_POSITIONS:
            raise InvalidArgumentError(
                f"invalid label position: {position}. valid positions: {', '.join(LABEL_POSITIONS)}"
            )
        self.label_position = position  # type: ignore[assignment]
        return self

    def set_label_threshold(self, threshold: float) -> "PieChart":
        self.label_threshold = _check_percentage(threshold, "threshold")
        return self

    def set_others_category(
        self,
        enabled: bool,
        threshold: float | None = None,
        label: str | None = None,
    ) -> "PieChart":
        self.others_enabled = bool(enabled)
        if threshold is not None:
            self.others_threshold = _check_percentage(threshold, "threshold")
        if label is not None:
            if not label:
                raise InvalidArgumentError("others label must be non-empty")
            self.others_label = label
        return self

    def set_start_angle(self, angle: float) -> "PieChart":
        if not math.isfinite(angle):
            raise InvalidArgumentError("start angle must be finite")
        self.start_angle = float(angle)
        self._segments = None
        return self

    def set_inner_radius(self, radius: float) -> "PieChart":
        if radius < 0:
            raise InvalidArgumentError("inner radius must be >= 0")
        self.inner_radius = float(radius)
        return self

    def set_legend_visible(self, visible: bool) -> "PieChart":
        self.legend_visible = bool(visible)
        return self

    def total(self) -> float:
        return math.fsum(self._data)

    def percentages(self) -> tuple[float, ...]:
        total = self.total()
        if total == 0:
            return (0.0,) * len(self._data)
        return tuple(value / total * 100.0 for value in self._data)

    def segments(self) -> tuple[PieSegment, ...]:
        if self._segments is None:
            self._segments = layout_segments(self._data, self._labels, start_angle=self.start_angle)
        return self._segments

    def is_others(self, index: int) -> bool:
        return is_others_label(self._labels[index], self.others_label)

    def is_small_segment(self, index: int) -> bool:
        return self.percentages()[index] <= self.label_threshold

    def resolved_label_position(self, index: int) -> Literal["arc-center", "leader-line"]:
        if self.label_position != "auto":
            return self.label_position  # type: ignore[return-value]
        return "leader-line" if self.is_small_segment(index) else "arc-center"

    def label_text(self, index: int) -> str:
        if index < 0 or index >= len(self._labels):
            return ""
        label = self._labels[index]
        value = format_value(self._data[index])
        percent = f"{self.percentages()[index]:.1f}%"
        if self.label_format == "category":
            return label
        if self.label_format == "percentage":
            return percent
        if self.label_format == "value":
            return value
        if self.label_format == "category-value":
            return f"{label}: {value}"
        if self.label_format == "category-value-percentage":
            return f"{label}: {value} ({percent})"
        return f"{label} ({percent})"

    def snapshot(self) -> PieSnapshot:
        return PieSnapshot(data=self._data, labels=self._labels)

    def restore(self, snapshot: PieSnapshot | None = None) -> "PieChart":
        source = snapshot if snapshot is not None else self.merge_snapshot
        if source is None:
            raise InvalidArgumentError("no snapshot to restore")
        self._data = tuple(source.data)
        self._labels = tuple(source.labels)
        self.label_angle_offsets = (0.0,) * len(self._data)
        self._segments = None
        if snapshot is None or snapshot == self.merge_snapshot:
            self.merge_snapshot = None
        return self

    def merge_into_others(self, indices: Iterable[int], others_label: str | None = None) -> "PieChart":
        """Fold categories into the Others segment and rebuild the layout; the first merge keeps a snapshot."""
        chosen = sorted(set(indices))
        if not chosen:
            return self
        if self.merge_snapshot is None:
            self.merge_snapshot = self.snapshot()
        target = others_label if others_label is not None else self.others_label
        values, labels = merge_categories(self._data, self._labels, chosen, target)
        LOGGER.debug("merged %d categories into %r", len(chosen), target)
        return self.set_data(values, labels)

    def apply_others_threshold(self) -> int:
        if not self.others_enabled:
            return 0
        small = [
            i
            for i, pct in enumerate(self.percentages())
            if pct < self.others_threshold and not self.is_others(i)
        ]
        self.merge_into_others(small)
        return len(small)


def format_value(value: float) -> str:
    if float(value).is_integer():
        return f"{int(value):,}"
    return f"{value:,.3f}".rstrip("0").rstrip(".")


def _check_percentage(value: float, name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not 0 <= value <= 100:
        raise InvalidArgumentError(f"{name} must be a number between 0 and 100")
    return float(value)


def _to_number(raw: Any) -> float | None:
    if raw is None or isinstance(raw, bool):
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(value):
        return None
    return value
