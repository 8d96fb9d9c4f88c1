"""
Price and volume extents for axis scaling.
"""

from typing import List, Optional, Sequence

import numpy as np

from candleview.models.candle import Candle
from candleview.models.viewport import PriceExtremes, VolumeExtremes

# Placeholder ranges keep the caller's scale non-degenerate
EMPTY_PRICE_EXTREMES = PriceExtremes(max_price=1.0, min_price=0.0)
EMPTY_VOLUME_EXTREMES = VolumeExtremes(max_volume=0.0, min_volume=0.0)


def _body_bound(candle: Candle, upper: bool) -> Optional[float]:
    """max/min(open, close), or whichever of the two is present."""
    if candle.open is not None and candle.close is not None:
        return max(candle.open, candle.close) if upper else min(candle.open, candle.close)
    return candle.open if candle.open is not None else candle.close


def price_extremes(candles: Sequence[Candle]) -> PriceExtremes:
    """
    Highest high and lowest low over the candles.

    A missing high/low falls back to the candle body (open/close).
    Empty input, or input with no usable prices, yields (max=1, min=0).
    """
    if not candles:
        return EMPTY_PRICE_EXTREMES

    highs: List[float] = []
    lows: List[float] = []
    for candle in candles:
        high = candle.high if candle.high is not None else _body_bound(candle, upper=True)
        low = candle.low if candle.low is not None else _body_bound(candle, upper=False)
        if high is not None:
            highs.append(high)
        if low is not None:
            lows.append(low)

    if not highs or not lows:
        return EMPTY_PRICE_EXTREMES

    return PriceExtremes(max_price=float(np.max(highs)), min_price=float(np.min(lows)))


def volume_extremes(candles: Sequence[Candle]) -> VolumeExtremes:
    """Volume range over the candles; (0, 0) when no volume is present."""
    volumes = [candle.volume for candle in candles if candle.volume is not None]
    if not volumes:
        return EMPTY_VOLUME_EXTREMES

    return VolumeExtremes(max_volume=float(np.max(volumes)), min_volume=float(np.min(volumes)))
