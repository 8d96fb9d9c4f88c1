"""
Tests for price/volume extents
"""

from candleview.chart.extents import (
    EMPTY_PRICE_EXTREMES,
    EMPTY_VOLUME_EXTREMES,
    price_extremes,
    volume_extremes,
)
from candleview.models.candle import Candle
from candleview.models.viewport import PriceExtremes, VolumeExtremes


class TestPriceExtremes:
    """Tests for price_extremes()"""

    def test_empty_yields_placeholder(self):
        assert price_extremes([]) == PriceExtremes(max_price=1.0, min_price=0.0)
        assert price_extremes([]) == EMPTY_PRICE_EXTREMES

    def test_high_low_range(self):
        candles = [
            Candle(timestamp=1, open=10.0, high=12.0, low=9.0, close=11.0),
            Candle(timestamp=2, open=11.0, high=15.0, low=10.5, close=14.0),
            Candle(timestamp=3, open=14.0, high=14.5, low=8.0, close=9.0),
        ]
        assert price_extremes(candles) == PriceExtremes(max_price=15.0, min_price=8.0)

    def test_missing_high_low_fall_back_to_body(self):
        candles = [
            Candle(timestamp=1, open=10.0, close=13.0),
            Candle(timestamp=2, open=12.0, high=12.5, low=None, close=11.0),
        ]
        assert price_extremes(candles) == PriceExtremes(max_price=13.0, min_price=10.0)

    def test_single_body_price(self):
        candles = [Candle(timestamp=1, close=7.0)]
        assert price_extremes(candles) == PriceExtremes(max_price=7.0, min_price=7.0)

    def test_no_prices_yields_placeholder(self):
        candles = [Candle(timestamp=1, volume=5.0), Candle(timestamp=2)]
        assert price_extremes(candles) == EMPTY_PRICE_EXTREMES

    def test_zero_is_a_price(self):
        candles = [Candle(timestamp=1, open=0.0, high=0.0, low=0.0, close=0.0)]
        assert price_extremes(candles) == PriceExtremes(max_price=0.0, min_price=0.0)


class TestVolumeExtremes:
    """Tests for volume_extremes()"""

    def test_empty_yields_zero(self):
        assert volume_extremes([]) == VolumeExtremes(max_volume=0.0, min_volume=0.0)

    def test_range_ignores_missing(self):
        candles = [
            Candle(timestamp=1, volume=300.0),
            Candle(timestamp=2, volume=None),
            Candle(timestamp=3, volume=50.0),
        ]
        assert volume_extremes(candles) == VolumeExtremes(max_volume=300.0, min_volume=50.0)

    def test_all_missing_yields_zero(self):
        assert volume_extremes([Candle(timestamp=1)]) == EMPTY_VOLUME_EXTREMES
