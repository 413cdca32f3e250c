from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Protocol

from PIL import ImageFont

from chartcanvas_layout.errors import InvalidArgumentError


FONT_SIZE_NORMAL = 14.0
FONT_SIZE_SMALL = 10.0
HALF_WIDTH_RATIO = 0.6
FULL_WIDTH_RATIO = 1.0
LINE_HEIGHT_MULTIPLIER = 1.2

DEFAULT_FONT_FAMILY = "MS Gothic"
MONO_FONT_FALLBACK_PATTERNS = (
    "msgothic",
    "ms gothic",
    "notosansmonocjk",
    "notosanscjk",
    "ipagothic",
    "courier new",
    "courier",
    "dejavusansmono",
    "dejavu sans mono",
)

# Code point ranges rendered at full width (CJK, kana, hangul, full-width forms, wide emoji).
_FULL_WIDTH_RANGES = (
    (0x1100, 0x115F),
    (0x2E80, 0x303E),
    (0x3041, 0x33FF),
    (0x3400, 0x4DBF),
    (0x4E00, 0x9FFF),
    (0xA000, 0xA4CF),
    (0xAC00, 0xD7A3),
    (0xF900, 0xFAFF),
    (0xFE30, 0xFE4F),
    (0xFF00, 0xFF60),
    (0xFFE0, 0xFFE6),
    (0x1F300, 0x1F64F),
    (0x1F900, 0x1F9FF),
    (0x20000, 0x3FFFD),
)


class TextMeasurer(Protocol):
    def __call__(self, text: str, font_size: float) -> float:
        ...


@dataclass(frozen=True)
class FontMetrics:
    height: float
    half_width: float
    full_width: float


def is_full_width(char: str) -> bool:
    code = ord(char)
    for start, end in _FULL_WIDTH_RANGES:
        if code < start:
            return False
        if code <= end:
            return True
    return False


@dataclass
class FontMetricsCache:
    """Per-font-size glyph metrics, computed on first use and then only read."""

    half_width_ratio: float = HALF_WIDTH_RATIO
    full_width_ratio: float = FULL_WIDTH_RATIO
    line_height_multiplier: float = LINE_HEIGHT_MULTIPLIER
    _metrics: dict[float, FontMetrics] = field(default_factory=dict)

    def metrics(self, font_size: float) -> FontMetrics:
        size = float(font_size)
        cached = self._metrics.get(size)
        if cached is not None:
            return cached
        if size <= 0:
            raise InvalidArgumentError("font_size must be > 0")
        metrics = FontMetrics(
            height=size * self.line_height_multiplier,
            half_width=size * self.half_width_ratio,
            full_width=size * self.full_width_ratio,
        )
        self._metrics[size] = metrics
        return metrics

    def __len__(self) -> int:
        return len(self._metrics)


@dataclass
class ApproximateTextMeasurer:
    """Fixed-width text measurement for when no real font is available."""

    cache: FontMetricsCache = field(default_factory=FontMetricsCache)

    def __call__(self, text: str, font_size: float) -> float:
        if not text:
            return 0.0
        metrics = self.cache.metrics(font_size)
        width = 0.0
        for char in text:
            width += metrics.full_width if is_full_width(char) else metrics.half_width
        return width


@dataclass
class PillowTextMeasurer:
    font_family: str = DEFAULT_FONT_FAMILY

    def __call__(self, text: str, font_size: float) -> float:
        if not text:
            return 0.0
        if font_size <= 0:
            raise InvalidArgumentError("font_size must be > 0")
        font = _load_font(self.font_family, float(font_size))
        return float(font.getlength(text))

    def metrics(self, font_size: float) -> FontMetrics:
        font = _load_font(self.font_family, float(font_size))
        ascent, descent = font.getmetrics()
        return FontMetrics(
            height=float(max(1, ascent + descent)),
            half_width=float(font.getlength("M")),
            full_width=float(font.getlength("あ")),
        )


def approximate_text_width(text: str, font_size: float) -> float:
    return _DEFAULT_MEASURER(text, font_size)


_DEFAULT_MEASURER = ApproximateTextMeasurer()


@lru_cache(maxsize=64)
def _load_font(font_family: str, font_size_px: float) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    size = max(1, int(round(font_size_px)))
    font_path = _resolve_font_path(font_family)
    if font_path is None:
        return ImageFont.load_default(size=size)
    try:
        return ImageFont.truetype(str(font_path), size=size)
    except OSError:
        return ImageFont.load_default(size=size)


@lru_cache(maxsize=16)
def _resolve_font_path(font_family: str) -> Path | None:
    wanted = font_family.strip().lower() if font_family.strip() else DEFAULT_FONT_FAMILY.lower()
    patterns = (wanted,) + MONO_FONT_FALLBACK_PATTERNS

    font_dirs = [
        Path.home() / "Library" / "Fonts",
        Path("/Library/Fonts"),
        Path("/System/Library/Fonts"),
        Path("/usr/share/fonts"),
        Path("/usr/local/share/fonts"),
        Path("C:/Windows/Fonts"),
    ]

    candidates: list[Path] = []
    for base in font_dirs:
        if not base.exists():
            continue
        for ext in ("*.ttf", "*.otf", "*.ttc"):
            candidates.extend(base.rglob(ext))

    for pattern in patterns:
        p = pattern.replace(" ", "")
        for path in candidates:
            stem = path.stem.lower().replace(" ", "")
            name = path.name.lower().replace(" ", "")
            if p in stem or p in name:
                return path
    return None
