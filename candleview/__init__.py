"""
candleview - interactive candlestick charting engine
Main package initialization
"""

__version__ = "0.1.0"

from candleview.chart import InteractiveChart
from candleview.config import ChartConfig, ConfigManager
from candleview.models import Candle, CandleBatch, IndicatorDefinition

__all__ = [
    "InteractiveChart",
    "ChartConfig",
    "ConfigManager",
    "Candle",
    "CandleBatch",
    "IndicatorDefinition",
]
