"""
Viewport model: zoom (pixels per candle) and pan (pixel scroll offset).

Pure derivations over ViewportState. The host keeps the current state and
feeds it back in; nothing here holds hidden state.

Invariants, whenever candle_count > 0 and chart_width > 0:
- candle_width > 0
- 0 <= start_offset <= max_start_offset(chart_width, candle_width, candle_count)
- visible_count == chart_width / candle_width
"""

import logging
import math
from typing import Optional, Tuple

from candleview.models.viewport import ViewportState

logger = logging.getLogger(__name__)

# Maximum zoom-in never shows fewer candles than this
MIN_VISIBLE_CANDLES = 14


def clamp(value: float, lower: float, upper: float) -> float:
    """
    Clamp value into [lower, upper].

    Non-finite input snaps to the nearest bound: NaN and -inf to lower,
    +inf to upper. If lower > upper, upper wins.
    """
    if math.isnan(value) or value == -math.inf:
        return min(lower, upper)
    if value == math.inf:
        return upper
    return min(max(value, lower), upper)


def candle_width_bounds(chart_width: float, candle_count: int) -> Tuple[float, float]:
    """
    Allowed candle width range for the drawable width.

    Minimum shows every candle at once; maximum shows MIN_VISIBLE_CANDLES
    (or all candles, if there are fewer).
    """
    min_width = chart_width / max(candle_count, 1)
    max_width = chart_width / max(min(MIN_VISIBLE_CANDLES, candle_count), 1)
    return min_width, max(min_width, max_width)


def max_start_offset(chart_width: float, candle_width: float, candle_count: int) -> float:
    """Scroll offset beyond which the last candle would leave the right edge."""
    if candle_width <= 0 or not math.isfinite(candle_width):
        return 0.0
    visible = chart_width / candle_width
    return max(0.0, candle_width * (candle_count - visible))


def clamp_start_offset(
    target: float,
    chart_width: float,
    candle_width: float,
    candle_count: int,
) -> float:
    """Clamp a scroll offset into [0, max_start_offset]."""
    return clamp(target, 0.0, max_start_offset(chart_width, candle_width, candle_count))


def resize(
    state: Optional[ViewportState],
    chart_width: float,
    candle_count: int,
    initial_visible_count: int = 90,
) -> Optional[ViewportState]:
    """
    Derive the viewport for a (new) drawable width.

    First layout (state is None) anchors the window to the most recent
    candles, showing min(candle_count, initial_visible_count) of them.
    Later resizes keep the current zoom and scroll, clamped to what the new
    width allows.

    Args:
        state: Current viewport, None before the first layout
        chart_width: Drawable width in pixels (axis-label margin excluded)
        candle_count: Number of candles in the sequence
        initial_visible_count: Candles shown on first layout

    Returns:
        New viewport; `state` unchanged when width or candle count is zero
    """
    if not math.isfinite(chart_width) or chart_width <= 0 or candle_count <= 0:
        return state

    if state is None:
        visible = min(candle_count, initial_visible_count)
        candle_width = chart_width / max(visible, 1)
        start_offset = max(0.0, (candle_count - visible) * candle_width)
        logger.info(
            f"Viewport initialized: {visible}/{candle_count} candles visible, "
            f"candle_width={candle_width:.2f}px"
        )
    else:
        min_width, max_width = candle_width_bounds(chart_width, candle_count)
        candle_width = clamp(state.candle_width, min_width, max_width)
        start_offset = clamp_start_offset(
            state.start_offset, chart_width, candle_width, candle_count
        )
        logger.debug(
            f"Viewport resized: chart_width={chart_width:.1f}, "
            f"candle_width={candle_width:.2f}, start_offset={start_offset:.1f}"
        )

    return ViewportState.derive(candle_width, start_offset, chart_width)
