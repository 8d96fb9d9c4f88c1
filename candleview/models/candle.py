"""
Candlestick data model
"""

from dataclasses import dataclass, field, replace
from typing import Dict, List, Mapping, Optional

# Indicator id -> value at one candle (None = no value)
TrendValues = Dict[str, Optional[float]]


@dataclass(frozen=True)
class Candle:
    """
    One OHLCV sample for a fixed time bucket.

    Any price/volume field may be missing (None). A missing value is never
    represented by a sentinel number: 0.0 is a legitimate price or volume.

    Attributes:
        timestamp: Bucket start, milliseconds since epoch
        open: Opening price
        high: Highest price in period
        low: Lowest price in period
        close: Closing price
        volume: Traded volume
        trends: Indicator id -> indicator value at this candle
    """

    timestamp: int
    open: Optional[float] = None
    high: Optional[float] = None
    low: Optional[float] = None
    close: Optional[float] = None
    volume: Optional[float] = None
    trends: Mapping[str, Optional[float]] = field(default_factory=dict)

    def trend(self, indicator_id: str) -> Optional[float]:
        """Value of one indicator line at this candle (None if absent)."""
        return self.trends.get(indicator_id)

    def with_trends(self, trends: Mapping[str, Optional[float]]) -> "Candle":
        """Create new candle with trend values merged over the existing ones."""
        merged = dict(self.trends)
        merged.update(trends)
        return replace(self, trends=merged)

    @property
    def is_bullish(self) -> bool:
        """True unless open and close are both present and open > close."""
        if self.open is None or self.close is None:
            return True
        return self.close >= self.open


@dataclass(frozen=True)
class IndicatorDefinition:
    """Identifies one trend line drawn over the candles."""

    id: str
    label: Optional[str] = None

    @property
    def display_label(self) -> str:
        return self.label or self.id


@dataclass(frozen=True)
class CandleBatch:
    """
    Candle sequence plus the indicator lines configured over it.

    Candles must be sorted ascending by timestamp without duplicates; this is
    a precondition of the engine, not something it enforces.

    Attributes:
        candles: Ordered candles
        definitions: Indicator lines, in display order
        leading_trends: Fallback trend values left of the first candle
        trailing_trends: Fallback trend values right of the last candle
    """

    candles: List[Candle] = field(default_factory=list)
    definitions: List[IndicatorDefinition] = field(default_factory=list)
    leading_trends: Optional[TrendValues] = None
    trailing_trends: Optional[TrendValues] = None

    def __len__(self) -> int:
        return len(self.candles)

    @property
    def indicator_ids(self) -> List[str]:
        return [definition.id for definition in self.definitions]

    def trend_series(self, indicator_id: str) -> List[Optional[float]]:
        """Values of one indicator across all candles."""
        return [candle.trend(indicator_id) for candle in self.candles]
