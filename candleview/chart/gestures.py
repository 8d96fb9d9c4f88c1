"""
Gesture interaction: pan, pinch-zoom and tap/drag-to-inspect.

Every gesture phase is a plain function taking the current state plus the
raw event payload and returning the next state. The host stores the result
and schedules re-rendering.

Pan and pinch may run at the same time. Pan reads only its own offset
snapshot; pinch reads its width/offset/focal snapshot. Clamps are always
derived from the chart_width and candle_count passed to the update call,
so a resize landing mid-gesture is honoured.

Out-of-range or non-finite coordinates never raise: they clamp, or clear
the highlight.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional

from candleview.chart.formatters import OverlayFormatter, default_overlay_formatter
from candleview.chart.slicer import x_shift
from candleview.chart.viewport import candle_width_bounds, clamp, clamp_start_offset
from candleview.models.viewport import (
    CandleSelection,
    HighlightState,
    OverlayPosition,
    ViewportSlice,
    ViewportState,
)

logger = logging.getLogger(__name__)

# Gap between the finger and the overlay panel
FINGER_MARGIN = 32.0


@dataclass(frozen=True)
class PanSnapshot:
    """Scroll offset when the pan began."""

    start_offset: float


@dataclass(frozen=True)
class PinchSnapshot:
    """Zoom, scroll and focal point when the pinch began."""

    candle_width: float
    start_offset: float
    focal_x: float


# -----------------------------------------------------------------------------
# Pan
# -----------------------------------------------------------------------------


def pan_begin(viewport: ViewportState) -> PanSnapshot:
    """Snapshot the scroll offset. Callers clear any highlight."""
    return PanSnapshot(start_offset=viewport.start_offset)


def pan_update(
    snapshot: PanSnapshot,
    translation_x: float,
    viewport: ViewportState,
    chart_width: float,
    candle_count: int,
) -> ViewportState:
    """
    Scroll by the finger's total horizontal translation.

    Dragging right (positive translation) reveals older candles.
    """
    target = snapshot.start_offset - translation_x
    start_offset = clamp_start_offset(target, chart_width, viewport.candle_width, candle_count)
    return ViewportState.derive(viewport.candle_width, start_offset, chart_width)


# -----------------------------------------------------------------------------
# Pinch
# -----------------------------------------------------------------------------


def pinch_start(viewport: ViewportState, focal_x: float, chart_width: float) -> PinchSnapshot:
    """Snapshot zoom/scroll and the focal point. Callers clear any highlight."""
    return PinchSnapshot(
        candle_width=viewport.candle_width,
        start_offset=viewport.start_offset,
        focal_x=clamp(focal_x, 0.0, chart_width),
    )


def pinch_update(
    snapshot: PinchSnapshot,
    scale: float,
    focal_x: float,
    viewport: ViewportState,
    chart_width: float,
    candle_count: int,
) -> ViewportState:
    """
    Zoom around the focal point.

    The candle under the focal point stays under it: the offset is scaled
    by the zoom actually applied (after width clamping), shifted by the
    focal point's movement since the pinch began, and corrected for the
    change in visible candle count weighted by the focal point's position
    across the chart.

    Returns:
        New viewport; `viewport` unchanged when there is no usable width
    """
    prev_width = snapshot.candle_width or viewport.candle_width
    if prev_width <= 0 or chart_width <= 0:
        return viewport

    focal = clamp(focal_x, 0.0, chart_width)
    min_width, max_width = candle_width_bounds(chart_width, candle_count)
    candle_width = clamp(prev_width * scale, min_width, max_width)
    effective_scale = candle_width / prev_width

    start_offset = snapshot.start_offset * effective_scale
    start_offset -= focal - snapshot.focal_x

    prev_count = chart_width / prev_width
    next_count = chart_width / candle_width
    zoom_adjustment = (next_count - prev_count) * candle_width
    start_offset -= zoom_adjustment * (focal / chart_width)

    start_offset = clamp_start_offset(start_offset, chart_width, candle_width, candle_count)
    return ViewportState.derive(candle_width, start_offset, chart_width)


# -----------------------------------------------------------------------------
# Tap / drag-to-inspect
# -----------------------------------------------------------------------------


def hit_test(
    viewport_slice: ViewportSlice,
    viewport: ViewportState,
    x: float,
    y: float,
    chart_width: float,
    overlay_formatter: Optional[OverlayFormatter] = None,
) -> Optional[HighlightState]:
    """
    Map a pointer position to the candle beneath it.

    Args:
        viewport_slice: Current slice
        viewport: Current viewport
        x, y: Pointer position relative to the drawable area
        chart_width: Drawable width; x at or past it is on the price axis
        overlay_formatter: Builds the overlay field map (default OHLCV)

    Returns:
        Highlight for the candle, or None when nothing is under the pointer
    """
    candle_width = viewport.candle_width
    if viewport_slice.is_empty or candle_width <= 0:
        return None
    if not (math.isfinite(x) and math.isfinite(y)) or x >= chart_width:
        return None

    shift = x_shift(viewport_slice, viewport)
    index = math.floor((x - shift + candle_width / 2) / candle_width)
    if index < 0 or index >= len(viewport_slice.candles):
        return None

    candle = viewport_slice.candles[index]
    formatter = overlay_formatter or default_overlay_formatter
    local_x = index * candle_width
    return HighlightState(
        index=index,
        global_index=viewport_slice.start_index + index,
        candle=candle,
        local_x=local_x,
        screen_x=local_x + shift,
        y=y,
        fields=dict(formatter(candle)),
    )


def pointer_release(highlight: Optional[HighlightState]) -> Optional[CandleSelection]:
    """Selection to report when the pointer lifts (highlight is then cleared)."""
    if highlight is None:
        return None
    logger.debug(f"Candle selected at index {highlight.global_index}")
    return CandleSelection(candle=highlight.candle, global_index=highlight.global_index)


def overlay_position(
    highlight: HighlightState,
    overlay_width: float,
    overlay_height: float,
    layout_width: float,
    layout_height: float,
    chart_height: float,
    time_label_height: float,
    finger_margin: float = FINGER_MARGIN,
) -> OverlayPosition:
    """
    Place the info panel next to the finger without leaving the chart.

    Horizontally the panel goes right of the finger while it fits in the
    left half, otherwise left of it. Vertically it goes above the finger,
    kept within the price/volume area plus the time-label strip. Both axes
    are finally clamped to the layout.
    """
    screen_x = highlight.screen_x
    half_width = layout_width / 2

    if screen_x + finger_margin <= half_width:
        dx = screen_x + finger_margin
    else:
        dx = screen_x - overlay_width - finger_margin

    if screen_x > half_width:
        dx = max(0.0, dx)
    else:
        dx = min(dx, layout_width - overlay_width)

    dy = max(0.0, highlight.y - overlay_height - finger_margin)
    bottom = chart_height + time_label_height
    if dy + overlay_height > bottom:
        dy = bottom - overlay_height

    return OverlayPosition(
        left=clamp(dx, 0.0, layout_width - overlay_width),
        top=clamp(dy, 0.0, layout_height - overlay_height),
    )
