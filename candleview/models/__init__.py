"""
Data models package
"""

from .candle import Candle, CandleBatch, IndicatorDefinition, TrendValues
from .viewport import (
    CandleSelection,
    HighlightState,
    OverlayPosition,
    PriceExtremes,
    ViewportSlice,
    ViewportState,
    VolumeExtremes,
)

__all__ = [
    "Candle",
    "CandleBatch",
    "IndicatorDefinition",
    "TrendValues",
    "ViewportState",
    "ViewportSlice",
    "HighlightState",
    "OverlayPosition",
    "PriceExtremes",
    "VolumeExtremes",
    "CandleSelection",
]
