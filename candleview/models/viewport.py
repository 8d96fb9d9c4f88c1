"""
Viewport, slice and highlight models

All of these are session-transient UI state owned by one chart instance.
They are immutable: every gesture or layout change produces new instances.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .candle import Candle, IndicatorDefinition, TrendValues


@dataclass(frozen=True)
class ViewportState:
    """
    Continuous pan/zoom state.

    Attributes:
        candle_width: Pixels per candle (> 0 once initialized)
        start_offset: Pixel-space scroll position of the left edge (>= 0)
        visible_count: Drawable width / candle_width
    """

    candle_width: float
    start_offset: float
    visible_count: float

    @classmethod
    def derive(cls, candle_width: float, start_offset: float, chart_width: float) -> "ViewportState":
        """Build state with visible_count derived from the drawable width."""
        if chart_width > 0 and candle_width > 0:
            visible = chart_width / candle_width
        else:
            visible = 0.0
        return cls(candle_width=candle_width, start_offset=start_offset, visible_count=visible)


@dataclass(frozen=True)
class ViewportSlice:
    """
    Candles visible in the viewport plus one trailing candle of overscan.

    Attributes:
        candles: Visible candles (+1 overscan candle when more data follows)
        start_index: Index of candles[0] in the full sequence
        end_index: Exclusive end of the strictly visible range
        leading_trends: Trend values just before start_index
        trailing_trends: Trend values just after end_index
        definitions: Indicator lines the trend values belong to
    """

    candles: List[Candle] = field(default_factory=list)
    start_index: int = 0
    end_index: int = 0
    leading_trends: Optional[TrendValues] = None
    trailing_trends: Optional[TrendValues] = None
    definitions: List[IndicatorDefinition] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.candles


@dataclass(frozen=True)
class PriceExtremes:
    """Price range of a candle subset (axis scaling)."""

    max_price: float
    min_price: float


@dataclass(frozen=True)
class VolumeExtremes:
    """Volume range of a candle subset (axis scaling)."""

    max_volume: float
    min_volume: float


@dataclass(frozen=True)
class HighlightState:
    """
    Candle under an active pointer contact.

    Attributes:
        index: Index into the slice's candles
        global_index: Index into the full candle sequence
        candle: Highlighted candle
        local_x: Candle center in slice-local pixels
        screen_x: Candle center in drawable-area pixels
        y: Pointer y coordinate
        fields: Formatted overlay key/value pairs, in display order
    """

    index: int
    global_index: int
    candle: Candle
    local_x: float
    screen_x: float
    y: float
    fields: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class OverlayPosition:
    """Top-left corner of the tap overlay panel."""

    left: float
    top: float


@dataclass(frozen=True)
class CandleSelection:
    """Notification emitted when a pointer is released over a candle."""

    candle: Candle
    global_index: int
