from chartcanvas_layout.calendar_axis import CalendarAxis, CalendarTick, build_calendar_axis, day_index, parse_date
from chartcanvas_layout.curve import BezierSegment, CurvePath, fit_curve
from chartcanvas_layout.errors import InvalidArgumentError
from chartcanvas_layout.histogram import BinSet, Histogram, HistogramSeries, bin_frequencies, compute_bins
from chartcanvas_layout.label_layout import (
    LabelBound,
    NearBottomOffsetSettings,
    NearTopMergeSettings,
    PieGeometry,
    ResolveResult,
    find_collisions,
    label_bounds,
    resolve_near_bottom_collisions,
    resolve_near_top_collisions,
)
from chartcanvas_layout.number_format import NumberFormat, format_number
from chartcanvas_layout.pie import PieChart, PieSegment, PieSnapshot, layout_segments, order_categories
from chartcanvas_layout.scales import NumericAxisScale, TickScale, compute_axis_scale, compute_tick_scale
from chartcanvas_layout.series import DateChart, Series, SeriesPoint, fill_missing_dates
from chartcanvas_layout.text_metrics import (
    ApproximateTextMeasurer,
    FontMetrics,
    FontMetricsCache,
    PillowTextMeasurer,
    approximate_text_width,
)

__all__ = [
    "ApproximateTextMeasurer",
    "BezierSegment",
    "BinSet",
    "CalendarAxis",
    "CalendarTick",
    "CurvePath",
    "DateChart",
    "FontMetrics",
    "FontMetricsCache",
    "Histogram",
    "HistogramSeries",
    "InvalidArgumentError",
    "LabelBound",
    "NearBottomOffsetSettings",
    "NearTopMergeSettings",
    "NumberFormat",
    "NumericAxisScale",
    "PieChart",
    "PieGeometry",
    "PieSegment",
    "PieSnapshot",
    "PillowTextMeasurer",
    "ResolveResult",
    "Series",
    "SeriesPoint",
    "TickScale",
    "approximate_text_width",
    "bin_frequencies",
    "build_calendar_axis",
    "compute_axis_scale",
    "compute_bins",
    "compute_tick_scale",
    "day_index",
    "fill_missing_dates",
    "find_collisions",
    "fit_curve",
    "format_number",
    "label_bounds",
    "layout_segments",
    "order_categories",
    "parse_date",
    "resolve_near_bottom_collisions",
    "resolve_near_top_collisions",
]
