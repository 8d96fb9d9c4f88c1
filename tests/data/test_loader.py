"""
Tests for candle ingestion from payloads and DataFrames
"""

import math

import numpy as np
import pandas as pd
import pytest

from candleview.core.exceptions import InvalidArgumentError
from candleview.data.loader import (
    batch_from_payload,
    candles_from_dataframe,
    normalize_number,
)

JAN_1_2024_MS = 1_704_067_200_000
DAY_MS = 86_400_000


class TestNormalizeNumber:
    """Tests for normalize_number()"""

    @pytest.mark.parametrize(
        "value,expected",
        [(1.5, 1.5), (2, 2.0), ("3.25", 3.25), (0, 0.0), (np.float64(4.0), 4.0)],
    )
    def test_finite_values(self, value, expected):
        assert normalize_number(value) == expected

    @pytest.mark.parametrize("value", [None, "abc", math.nan, math.inf, -math.inf, True, [], np.nan])
    def test_missing_values(self, value):
        assert normalize_number(value) is None


class TestBatchFromPayload:
    """Tests for batch_from_payload()"""

    def test_candles_and_indicators(self):
        payload = {
            "candles": [
                {"t": JAN_1_2024_MS, "o": 1.0, "h": 1.2, "l": 0.9, "c": 1.1, "v": 1000},
                {"t": JAN_1_2024_MS + DAY_MS, "o": 1.1, "h": None, "l": 1.0, "c": 1.15, "v": "NaN"},
            ],
            "indicators": {"ma7": [None, 1.05], "rsi14": [55.0]},
        }

        batch = batch_from_payload(payload)

        assert len(batch) == 2
        assert batch.indicator_ids == ["ma7", "rsi14"]
        first, second = batch.candles
        assert first.timestamp == JAN_1_2024_MS
        assert first.volume == 1000.0
        assert first.trends == {"ma7": None, "rsi14": 55.0}
        assert second.high is None
        assert second.volume is None
        assert second.trends == {"ma7": 1.05, "rsi14": None}

    def test_invalid_timestamp_dropped(self):
        payload = {
            "candles": [
                {"t": None, "c": 1.0},
                {"t": "later", "c": 2.0},
                {"t": JAN_1_2024_MS, "c": 3.0},
            ],
            "indicators": {"ma7": [10.0, 20.0, 30.0]},
        }

        batch = batch_from_payload(payload)

        assert [candle.close for candle in batch.candles] == [3.0]
        assert batch.candles[0].trend("ma7") == 30.0

    def test_empty_payload(self):
        batch = batch_from_payload({})

        assert batch.candles == []
        assert batch.definitions == []


@pytest.fixture
def ohlcv_frame():
    index = pd.date_range("2024-01-01", periods=5, freq="D")
    return pd.DataFrame(
        {
            "Open": [1.0, 2.0, 3.0, 4.0, 5.0],
            "High": [1.5, 2.5, 3.5, 4.5, 5.5],
            "Low": [0.5, 1.5, 2.5, 3.5, 4.5],
            "Close": [1.2, 2.2, np.nan, 4.2, 5.2],
            "Volume": [100, 200, 300, 400, 500],
        },
        index=index,
    )


class TestCandlesFromDataFrame:
    """Tests for candles_from_dataframe()"""

    def test_datetime_index(self, ohlcv_frame):
        batch = candles_from_dataframe(ohlcv_frame)

        assert len(batch) == 5
        assert batch.candles[0].timestamp == JAN_1_2024_MS
        assert batch.candles[1].timestamp == JAN_1_2024_MS + DAY_MS
        assert batch.candles[0].open == 1.0
        assert batch.candles[0].volume == 100.0
        assert batch.candles[2].close is None

    def test_timezone_aware_index_converted_to_utc(self, ohlcv_frame):
        frame = ohlcv_frame.copy()
        frame.index = pd.date_range("2024-01-01 09:00", periods=5, freq="D", tz="Asia/Seoul")

        batch = candles_from_dataframe(frame)

        assert batch.candles[0].timestamp == JAN_1_2024_MS

    def test_sorted_and_deduplicated(self):
        frame = pd.DataFrame(
            {
                "timestamp": [3000, 1000, 2000, 1000],
                "close": [3.0, 1.0, 2.0, 1.5],
            }
        )

        batch = candles_from_dataframe(frame, timestamp_column="timestamp")

        assert [candle.timestamp for candle in batch.candles] == [1000, 2000, 3000]
        assert [candle.close for candle in batch.candles] == [1.5, 2.0, 3.0]
        assert batch.candles[0].volume is None

    def test_max_points_keeps_most_recent(self, ohlcv_frame):
        batch = candles_from_dataframe(ohlcv_frame, max_points=2)

        assert [candle.open for candle in batch.candles] == [4.0, 5.0]

    @pytest.mark.parametrize("max_points", [0, -1])
    def test_invalid_max_points(self, ohlcv_frame, max_points):
        with pytest.raises(InvalidArgumentError, match="max_points"):
            candles_from_dataframe(ohlcv_frame, max_points=max_points)

    def test_column_map(self, ohlcv_frame):
        frame = ohlcv_frame.assign(**{"Adj Close": [9.0, 9.1, 9.2, 9.3, 9.4]})

        batch = candles_from_dataframe(frame, column_map={"close": "Adj Close"})

        assert batch.candles[0].close == 9.0

    def test_missing_mapped_column(self, ohlcv_frame):
        with pytest.raises(InvalidArgumentError, match="Adj Close"):
            candles_from_dataframe(ohlcv_frame, column_map={"close": "Adj Close"})

    def test_unusable_timestamps_dropped(self):
        frame = pd.DataFrame({"t": [1000, None, "bad", 4000], "close": [1.0, 2.0, 3.0, 4.0]})

        batch = candles_from_dataframe(frame, timestamp_column="t")

        assert [candle.timestamp for candle in batch.candles] == [1000, 4000]

    def test_iso_date_strings(self):
        frame = pd.DataFrame(
            {
                "date": ["2024-01-02", "2024-01-03", "2024-01-04"],
                "close": [1.0, 2.0, 3.0],
            }
        )

        batch = candles_from_dataframe(frame, timestamp_column="date")

        assert [candle.timestamp for candle in batch.candles] == [
            JAN_1_2024_MS + DAY_MS,
            JAN_1_2024_MS + 2 * DAY_MS,
            JAN_1_2024_MS + 3 * DAY_MS,
        ]
        assert [candle.close for candle in batch.candles] == [1.0, 2.0, 3.0]

    def test_iso_string_index_with_offset(self):
        frame = pd.DataFrame(
            {"close": [2.0, 1.0]},
            index=["2024-01-02T09:00:00+09:00", "2024-01-01T09:00:00+09:00"],
        )

        batch = candles_from_dataframe(frame)

        assert [candle.timestamp for candle in batch.candles] == [JAN_1_2024_MS, JAN_1_2024_MS + DAY_MS]
        assert [candle.close for candle in batch.candles] == [1.0, 2.0]
