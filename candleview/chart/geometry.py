"""
Pixel geometry handed to a renderer.

Coordinates for candles and trend lines are slice-local: slice candle i
sits at x = i * candle_width, and the renderer translates everything by
the slice's x_shift. Nothing here depends on a drawing API.
"""

import math
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from candleview.chart.formatters import TimeLabelFormatter, default_time_label
from candleview.chart.slicer import x_shift
from candleview.models.viewport import PriceExtremes, ViewportSlice, ViewportState, VolumeExtremes

Point = Tuple[float, float]

# Volume bars stay clear of the price area and the bottom edge
VOLUME_GAP = 12.0
VOLUME_PADDING = 2.0

GRID_RATIOS = (0.0, 0.25, 0.5, 0.75, 1.0)

# Body and wick stroke widths as a share of the candle slot
BODY_WIDTH_RATIO = 0.8
WICK_WIDTH_RATIO = 0.2

INDICATOR_PANEL_HEIGHT = 140.0
INDICATOR_PANEL_PADDING = 12.0


@dataclass(frozen=True)
class GridLevel:
    """Horizontal grid line at a price (or indicator value)."""

    price: float
    y: float


@dataclass(frozen=True)
class TimeLabel:
    """Time axis label anchored to a drawable-area x position."""

    x: float
    timestamp: int
    text: str


@dataclass(frozen=True)
class CandleGeometry:
    """
    Stroke coordinates for one candle, its wick and its volume bar.

    Each part is drawn as a vertical line at x. A part whose inputs are
    missing has None coordinates and is not drawn.

    Attributes:
        index: Index of the candle in the full batch
        x: Slice-local x of the candle
        is_bullish: Selects the gain/loss colour for all three parts
        body_width / wick_width: Stroke widths
        body_y1 / body_y2: y of open and close
        wick_y1 / wick_y2: y of high and low
        volume_top / volume_bottom: Volume bar extent
    """

    index: int
    timestamp: int
    x: float
    is_bullish: bool
    body_width: float
    wick_width: float
    volume_bottom: float
    body_y1: Optional[float] = None
    body_y2: Optional[float] = None
    wick_y1: Optional[float] = None
    wick_y2: Optional[float] = None
    volume_top: Optional[float] = None


@dataclass(frozen=True)
class IndicatorPanel:
    """
    A stand-alone indicator chart, e.g. RSI with 30/70 guides under the candles.

    Line and reference coordinates are relative to the padded inner area;
    the renderer translates them by (padding, padding). Nothing is drawn
    when the inner area is empty.
    """

    width: float
    height: float
    padding: float
    inner_width: float
    inner_height: float
    min_value: float
    max_value: float
    step: float
    lines: Dict[str, List[List[Point]]] = field(default_factory=dict)
    reference_levels: List[GridLevel] = field(default_factory=list)

    @property
    def is_drawable(self) -> bool:
        return self.inner_width > 0 and self.inner_height > 0

    def value_to_y(self, value: float) -> float:
        """y of a value, clamped into [min_value, max_value]."""
        clamped = min(max(value, self.min_value), self.max_value)
        span = (self.max_value - self.min_value) or 1.0
        return self.inner_height - (clamped - self.min_value) / span * self.inner_height


def price_mapper(extremes: PriceExtremes, price_height: float) -> Callable[[float], float]:
    """Price -> y within the price band (max price at y=0)."""
    max_price = extremes.max_price
    span = (extremes.max_price - extremes.min_price) or 1.0
    return lambda price: price_height * (max_price - price) / span


def volume_mapper(
    extremes: VolumeExtremes,
    price_height: float,
    volume_height: float,
) -> Callable[[float], float]:
    """Volume -> y of the bar top within the volume band below the prices."""
    if extremes.max_volume == extremes.min_volume:
        midpoint = price_height + volume_height / 2
        return lambda volume: midpoint

    min_volume = extremes.min_volume
    scale = (volume_height - VOLUME_PADDING - VOLUME_GAP) / (extremes.max_volume - min_volume)
    base = price_height + volume_height - VOLUME_PADDING
    return lambda volume: base - (volume - min_volume) * scale


def price_grid_levels(extremes: PriceExtremes, price_height: float) -> List[GridLevel]:
    """Five evenly spaced grid lines from min to max price."""
    to_y = price_mapper(extremes, price_height)
    levels = []
    for ratio in GRID_RATIOS:
        price = (extremes.max_price - extremes.min_price) * ratio + extremes.min_price
        levels.append(GridLevel(price=price, y=to_y(price)))
    return levels


def time_labels(
    viewport_slice: ViewportSlice,
    viewport: ViewportState,
    chart_width: float,
    spacing: float = 90.0,
    formatter: Optional[TimeLabelFormatter] = None,
) -> List[TimeLabel]:
    """
    Evenly spaced time labels, one per `spacing` pixels of chart width.

    Each label shows the candle under its x position.
    """
    candle_width = viewport.candle_width
    if viewport_slice.is_empty or chart_width <= 0 or candle_width <= 0 or spacing <= 0:
        return []

    formatter = formatter or default_time_label
    shift = x_shift(viewport_slice, viewport)
    line_count = math.floor(chart_width / spacing)
    gap = 1 / (line_count + 1)
    last = len(viewport_slice.candles) - 1

    labels = []
    for i in range(line_count):
        x = (i + 1) * gap * chart_width
        index = math.floor((x - shift + candle_width / 2) / candle_width)
        candle = viewport_slice.candles[min(max(index, 0), last)]
        text = formatter(candle.timestamp, len(viewport_slice.candles))
        labels.append(TimeLabel(x=x, timestamp=candle.timestamp, text=text))
    return labels


def _line_ids(viewport_slice: ViewportSlice) -> List[str]:
    if viewport_slice.definitions:
        return [definition.id for definition in viewport_slice.definitions]
    ids: Dict[str, None] = {}
    for candle in viewport_slice.candles:
        ids.update(dict.fromkeys(candle.trends))
    return list(ids)


def trend_polylines(
    viewport_slice: ViewportSlice,
    candle_width: float,
    to_y: Callable[[float], float],
) -> Dict[str, List[List[Point]]]:
    """
    Polyline segments for every indicator line in the slice.

    A line enters from the leading boundary value at x = -candle_width and
    leaves through the trailing boundary value at x = len(candles) *
    candle_width, so it is continuous across the viewport edges. Missing
    values break the line; segments shorter than two points are dropped.
    """
    lines: Dict[str, List[List[Point]]] = {}
    leading = viewport_slice.leading_trends or {}
    trailing = viewport_slice.trailing_trends or {}

    for line_id in _line_ids(viewport_slice):
        segments: List[List[Point]] = []
        current: Optional[List[Point]] = None

        lead_value = leading.get(line_id)
        if lead_value is not None:
            current = [(-candle_width, to_y(lead_value))]

        for index, candle in enumerate(viewport_slice.candles):
            value = candle.trend(line_id)
            if value is None:
                if current is not None:
                    segments.append(current)
                current = None
                continue
            point = (index * candle_width, to_y(value))
            if current is None:
                current = [point]
            else:
                current.append(point)

        trail_value = trailing.get(line_id)
        if trail_value is not None and current is not None:
            current.append((len(viewport_slice.candles) * candle_width, to_y(trail_value)))
        if current is not None:
            segments.append(current)

        lines[line_id] = [segment for segment in segments if len(segment) >= 2]

    return lines


def candle_geometry(
    viewport_slice: ViewportSlice,
    candle_width: float,
    to_price_y: Callable[[float], float],
    to_volume_y: Callable[[float], float],
    volume_bottom: float,
) -> List[CandleGeometry]:
    """Body, wick and volume strokes for every candle in the slice."""
    body_width = max(candle_width * BODY_WIDTH_RATIO, BODY_WIDTH_RATIO)
    wick_width = max(candle_width * WICK_WIDTH_RATIO, WICK_WIDTH_RATIO)

    geometry = []
    for offset, candle in enumerate(viewport_slice.candles):
        body = wick = (None, None)
        if candle.open is not None and candle.close is not None:
            body = (to_price_y(candle.open), to_price_y(candle.close))
        if candle.high is not None and candle.low is not None:
            wick = (to_price_y(candle.high), to_price_y(candle.low))

        geometry.append(
            CandleGeometry(
                index=viewport_slice.start_index + offset,
                timestamp=candle.timestamp,
                x=offset * candle_width,
                is_bullish=candle.is_bullish,
                body_width=body_width,
                wick_width=wick_width,
                volume_bottom=volume_bottom,
                body_y1=body[0],
                body_y2=body[1],
                wick_y1=wick[0],
                wick_y2=wick[1],
                volume_top=to_volume_y(candle.volume) if candle.volume is not None else None,
            )
        )
    return geometry


def _is_number(value: Optional[float]) -> bool:
    return value is not None and math.isfinite(value)


def indicator_value_range(
    series: Mapping[str, Sequence[Optional[float]]],
    min_value: Optional[float] = None,
    max_value: Optional[float] = None,
) -> Tuple[float, float]:
    """
    Vertical range of an indicator panel.

    Fixed bounds win over the data; an open bound comes from the present
    values, or 0 / 1 when there are none. A flat range is widened by 5% of
    its value (by 1 around zero).
    """
    present = [value for values in series.values() for value in values if _is_number(value)]

    low = min_value if min_value is not None else (min(present) if present else None)
    high = max_value if max_value is not None else (max(present) if present else None)
    low = low if _is_number(low) else 0.0
    high = high if _is_number(high) else 1.0
    if low > high:
        low, high = high, low

    if low == high:
        delta = abs(low) * 0.05 or 1.0
        return low - delta, high + delta
    return low, high


def indicator_panel_geometry(
    series: Mapping[str, Sequence[Optional[float]]],
    width: float,
    height: float = INDICATOR_PANEL_HEIGHT,
    padding: float = INDICATOR_PANEL_PADDING,
    min_value: Optional[float] = None,
    max_value: Optional[float] = None,
    reference_lines: Sequence[float] = (),
) -> IndicatorPanel:
    """
    Lay out indicator series across a panel of the given size.

    Point i of every series sits at x = i * step, where step spreads the
    longest series over the inner width. Values outside the range are
    clamped to its edges. Missing or non-finite values break a line, and
    segments shorter than two points are dropped.

    Args:
        series: Line id -> values, aligned by position
        width: Panel width (px)
        height: Panel height (px)
        padding: Inset on every side (px)
        min_value / max_value: Fixed bounds (e.g. 0 and 100 for RSI)
        reference_lines: Values to mark with horizontal guides
    """
    inner_width = max(width - 2 * padding, 0.0)
    inner_height = max(height - 2 * padding, 0.0)
    point_count = max((len(values) for values in series.values()), default=0)
    step = inner_width / (point_count - 1) if point_count > 1 else 0.0
    low, high = indicator_value_range(series, min_value, max_value)

    panel = IndicatorPanel(
        width=width,
        height=height,
        padding=padding,
        inner_width=inner_width,
        inner_height=inner_height,
        min_value=low,
        max_value=high,
        step=step,
    )
    if not panel.is_drawable:
        return panel

    for line_id, values in series.items():
        segments: List[List[Point]] = []
        current: List[Point] = []
        for index, value in enumerate(values):
            if not _is_number(value):
                if current:
                    segments.append(current)
                current = []
                continue
            current.append((index * step, panel.value_to_y(value)))
        if current:
            segments.append(current)
        panel.lines[line_id] = [segment for segment in segments if len(segment) >= 2]

    panel.reference_levels.extend(
        GridLevel(price=value, y=panel.value_to_y(value)) for value in reference_lines
    )
    return panel
