"""
Technical indicator library
"""

from .calculations import MacdResult, ema, macd, moving_average, rsi, to_array
from .registry import IndicatorInfo, IndicatorRegistry
from .decorators import register_indicator
from .base import BaseIndicator
from .builtin import MACDIndicator, RSIIndicator, SMAIndicator
from .pipeline import IndicatorSpec, attach_indicators, default_indicator_specs

__all__ = [
    "MacdResult",
    "moving_average",
    "rsi",
    "ema",
    "macd",
    "to_array",
    "IndicatorInfo",
    "IndicatorRegistry",
    "register_indicator",
    "BaseIndicator",
    "SMAIndicator",
    "RSIIndicator",
    "MACDIndicator",
    "IndicatorSpec",
    "attach_indicators",
    "default_indicator_specs",
]
