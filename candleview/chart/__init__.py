"""
Charting engine: viewport model, slicing, gestures and render geometry
"""

from .controller import ChartFrame, InteractiveChart
from .extents import price_extremes, volume_extremes
from .geometry import (
    CandleGeometry,
    IndicatorPanel,
    candle_geometry,
    indicator_panel_geometry,
)
from .gestures import (
    PanSnapshot,
    PinchSnapshot,
    hit_test,
    overlay_position,
    pan_begin,
    pan_update,
    pinch_start,
    pinch_update,
    pointer_release,
)
from .slicer import slice_viewport, x_shift
from .viewport import (
    MIN_VISIBLE_CANDLES,
    candle_width_bounds,
    clamp,
    max_start_offset,
    resize,
)

__all__ = [
    "ChartFrame",
    "InteractiveChart",
    "price_extremes",
    "volume_extremes",
    "CandleGeometry",
    "IndicatorPanel",
    "candle_geometry",
    "indicator_panel_geometry",
    "PanSnapshot",
    "PinchSnapshot",
    "pan_begin",
    "pan_update",
    "pinch_start",
    "pinch_update",
    "hit_test",
    "pointer_release",
    "overlay_position",
    "slice_viewport",
    "x_shift",
    "MIN_VISIBLE_CANDLES",
    "candle_width_bounds",
    "clamp",
    "max_start_offset",
    "resize",
]
