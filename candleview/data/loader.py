"""
Candle ingestion from API payloads and pandas DataFrames.

Fetching is the host's job; these helpers turn what it fetched into a
CandleBatch, normalizing anything non-finite to a missing value.
"""

import logging
import math
from typing import Any, Dict, List, Mapping, Optional, Sequence

import pandas as pd

from candleview.core.exceptions import InvalidArgumentError
from candleview.models.candle import Candle, CandleBatch, IndicatorDefinition

logger = logging.getLogger(__name__)

OHLCV_COLUMNS = ("open", "high", "low", "close", "volume")


def normalize_number(value: Any) -> Optional[float]:
    """Finite float, or None for missing / non-numeric / NaN / infinite input."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def batch_from_payload(payload: Mapping[str, Any]) -> CandleBatch:
    """
    Build a batch from a candles API response.

    Expected shape:
        {
            "candles": [{"t": 1700000000000, "o": 1.0, "h": 1.2, "l": 0.9,
                         "c": 1.1, "v": 1000}, ...],
            "indicators": {"ma7": [null, ..., 1.05], ...}
        }

    Indicator arrays are aligned positionally with the candles; a short
    array leaves the remaining candles without a value. Records whose 't'
    is not a finite number are dropped.
    """
    records: Sequence[Mapping[str, Any]] = payload.get("candles") or []
    indicators: Mapping[str, Sequence[Any]] = payload.get("indicators") or {}

    candles: List[Candle] = []
    for position, record in enumerate(records):
        timestamp = normalize_number(record.get("t"))
        if timestamp is None:
            logger.debug(f"Dropping candle record {position}: invalid timestamp {record.get('t')!r}")
            continue

        trends = {
            indicator_id: normalize_number(values[position]) if position < len(values or []) else None
            for indicator_id, values in indicators.items()
        }
        candles.append(
            Candle(
                timestamp=int(timestamp),
                open=normalize_number(record.get("o")),
                high=normalize_number(record.get("h")),
                low=normalize_number(record.get("l")),
                close=normalize_number(record.get("c")),
                volume=normalize_number(record.get("v")),
                trends=trends,
            )
        )

    definitions = [IndicatorDefinition(id=indicator_id) for indicator_id in indicators]
    return CandleBatch(candles=candles, definitions=definitions)


def _datetimes_to_epoch_ms(series: pd.Series) -> pd.Series:
    if series.dt.tz is None:
        series = series.dt.tz_localize("UTC")
    else:
        series = series.dt.tz_convert("UTC")
    return (series - pd.Timestamp(0, tz="UTC")) // pd.Timedelta(milliseconds=1)


def _to_epoch_ms(values: Any) -> pd.Series:
    """
    Epoch milliseconds from datetimes, epoch numbers or ISO date strings.

    Text that is neither numeric nor ISO 8601 becomes NaN. Date-only
    strings ('2024-01-02') are midnight UTC.
    """
    series = pd.Series(values)
    if pd.api.types.is_datetime64_any_dtype(series):
        return _datetimes_to_epoch_ms(series)

    numeric = pd.to_numeric(series, errors="coerce")
    if not (pd.api.types.is_object_dtype(series) or pd.api.types.is_string_dtype(series)):
        return numeric

    is_text = series.map(lambda value: isinstance(value, str)).astype(bool)
    text = series.where(numeric.isna() & is_text)
    parsed = pd.to_datetime(text, utc=True, errors="coerce", format="ISO8601")
    if parsed.isna().all():
        return numeric
    return numeric.where(parsed.isna(), _datetimes_to_epoch_ms(parsed))


def candles_from_dataframe(
    df: pd.DataFrame,
    timestamp_column: Optional[str] = None,
    column_map: Optional[Dict[str, str]] = None,
    max_points: Optional[int] = None,
) -> CandleBatch:
    """
    Build a batch from an OHLCV DataFrame.

    Column names are matched case-insensitively ('Open', 'open', ...);
    column_map overrides individual fields (e.g. {'close': 'Adj Close'}).
    Rows are sorted by timestamp, duplicate timestamps keep the last row,
    and rows without a usable timestamp are dropped.

    Args:
        df: OHLCV frame
        timestamp_column: Column with datetimes, epoch ms or ISO date strings
            (None = index)
        column_map: Field name -> column name overrides
        max_points: Keep only the most recent N candles

    Raises:
        InvalidArgumentError: If max_points <= 0 or a mapped column is missing
    """
    if max_points is not None and max_points <= 0:
        raise InvalidArgumentError(f"max_points must be greater than zero, got {max_points}")

    lookup = {str(column).lower(): column for column in df.columns}
    mapping = dict(column_map or {})
    for column in mapping.values():
        if column not in df.columns:
            raise InvalidArgumentError(f"Column '{column}' not found in DataFrame")

    source = df[timestamp_column] if timestamp_column is not None else df.index
    frame = pd.DataFrame({"timestamp": _to_epoch_ms(source).to_numpy()})
    for name in OHLCV_COLUMNS:
        column = mapping.get(name, lookup.get(name))
        if column is None:
            frame[name] = None
        else:
            frame[name] = df[column].to_numpy()

    frame = frame.dropna(subset=["timestamp"])
    frame = frame.sort_values("timestamp", kind="stable")
    frame = frame.drop_duplicates(subset="timestamp", keep="last")
    if max_points is not None:
        frame = frame.tail(max_points)

    candles = [
        Candle(
            timestamp=int(row.timestamp),
            open=normalize_number(row.open),
            high=normalize_number(row.high),
            low=normalize_number(row.low),
            close=normalize_number(row.close),
            volume=normalize_number(row.volume),
        )
        for row in frame.itertuples(index=False)
    ]

    logger.debug(f"Loaded {len(candles)} candles from DataFrame ({len(df)} rows)")
    return CandleBatch(candles=candles)
