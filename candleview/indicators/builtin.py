"""
Built-in indicators: moving average, RSI and MACD.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from pydantic import BaseModel, Field

from candleview.indicators.base import BaseIndicator
from candleview.indicators.calculations import macd, moving_average, rsi
from candleview.indicators.decorators import register_indicator
from candleview.models.candle import Candle


@register_indicator('sma', description='Simple moving average of closes')
@dataclass
class SMAIndicator(BaseIndicator):
    """Simple moving average (no value until 2 * period candles exist)."""

    class ParamSchema(BaseModel):
        period: int = Field(7, ge=1, le=500, description="Window length")

    @classmethod
    def from_validated_params(cls, params: "SMAIndicator.ParamSchema") -> "SMAIndicator":
        return cls(**params.model_dump())

    period: int = 7

    def compute(self, candles: Sequence[Candle]) -> Dict[str, List[Optional[float]]]:
        return {"value": moving_average(candles, self.period)}


@register_indicator('rsi', description='Relative Strength Index')
@dataclass
class RSIIndicator(BaseIndicator):
    """Relative Strength Index, bounded to [0, 100]."""

    class ParamSchema(BaseModel):
        period: int = Field(14, ge=1, le=500, description="Smoothing period")

    @classmethod
    def from_validated_params(cls, params: "RSIIndicator.ParamSchema") -> "RSIIndicator":
        return cls(**params.model_dump())

    period: int = 14

    def compute(self, candles: Sequence[Candle]) -> Dict[str, List[Optional[float]]]:
        return {"value": rsi(candles, self.period)}


@register_indicator('macd', description='MACD line, signal line and histogram')
@dataclass
class MACDIndicator(BaseIndicator):
    """MACD with outputs 'macd', 'signal' and 'histogram'."""

    primary_output = "macd"

    class ParamSchema(BaseModel):
        fast_period: int = Field(12, ge=1, le=500, description="Fast EMA period")
        slow_period: int = Field(26, ge=1, le=500, description="Slow EMA period")
        signal_period: int = Field(9, ge=1, le=500, description="Signal EMA period")

    @classmethod
    def from_validated_params(cls, params: "MACDIndicator.ParamSchema") -> "MACDIndicator":
        return cls(**params.model_dump())

    fast_period: int = 12
    slow_period: int = 26
    signal_period: int = 9

    def compute(self, candles: Sequence[Candle]) -> Dict[str, List[Optional[float]]]:
        result = macd(candles, self.fast_period, self.slow_period, self.signal_period)
        return {
            "macd": result.macd,
            "signal": result.signal,
            "histogram": result.histogram,
        }
