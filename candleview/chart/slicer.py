"""
Viewport slicer: visible candles plus boundary trend values.
"""

import math
from typing import List, Mapping, Optional

from candleview.models.candle import CandleBatch, IndicatorDefinition, TrendValues
from candleview.models.viewport import ViewportSlice, ViewportState

EPSILON = 1e-6


def _clamp_index(value: float, length: int) -> int:
    if not math.isfinite(value):
        return 0
    return int(min(max(0, math.floor(value)), max(0, length - 1)))


def _clamp_end(candidate: float, start_index: int, total: int) -> int:
    normalized = math.ceil(candidate) if math.isfinite(candidate) else start_index
    return int(min(total, max(start_index, normalized)))


def _resolve_trends(
    trends: Optional[Mapping[str, Optional[float]]],
    definitions: List[IndicatorDefinition],
) -> Optional[TrendValues]:
    """Copy trend values, keyed by the configured indicator ids."""
    if trends is None:
        return None
    if not definitions:
        return dict(trends)
    return {definition.id: trends.get(definition.id) for definition in definitions}


def slice_viewport(batch: CandleBatch, viewport: ViewportState) -> ViewportSlice:
    """
    Extract the candles covered by the viewport.

    start_index = floor(start_offset / candle_width), clamped to [0, n-1]
    end_index = ceil(start_index + visible_count), clamped to [start_index, n]

    One candle past end_index is appended as overscan when it exists, so a
    trend line can be drawn through the right edge. Boundary trend values
    come from candles[start_index - 1] and candles[end_index + 1], or the
    batch's fallbacks when those are out of range.
    """
    total = len(batch.candles)
    if total == 0:
        return ViewportSlice(candles=[], start_index=0, end_index=0, definitions=list(batch.definitions))

    candle_width = max(abs(viewport.candle_width), EPSILON)
    start_index = _clamp_index(viewport.start_offset / candle_width, total)
    visible = viewport.visible_count if math.isfinite(viewport.visible_count) else 0.0
    end_index = _clamp_end(start_index + max(0.0, visible), start_index, total)

    candles = batch.candles[start_index:end_index]
    if end_index < total:
        candles.append(batch.candles[end_index])

    if start_index > 0:
        leading = batch.candles[start_index - 1].trends
    else:
        leading = batch.leading_trends

    trailing_index = end_index + 1
    if trailing_index < total:
        trailing = batch.candles[trailing_index].trends
    else:
        trailing = batch.trailing_trends

    return ViewportSlice(
        candles=candles,
        start_index=start_index,
        end_index=end_index,
        leading_trends=_resolve_trends(leading, batch.definitions),
        trailing_trends=_resolve_trends(trailing, batch.definitions),
        definitions=list(batch.definitions),
    )


def x_shift(viewport_slice: ViewportSlice, viewport: ViewportState) -> float:
    """
    Pixel shift that puts slice-local candle centers onto the drawable area.

    Slice candle i is centered at i * candle_width + x_shift.
    """
    if viewport_slice.is_empty or viewport.candle_width <= 0:
        return 0.0
    half_candle = viewport.candle_width / 2
    fraction = viewport.start_offset - viewport_slice.start_index * viewport.candle_width
    return half_candle - fraction
