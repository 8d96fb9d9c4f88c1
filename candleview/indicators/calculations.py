"""
Technical indicator calculations over candle sequences.

Every function returns a list with one entry per input candle; an entry is
either a float or None ("no value yet"). Missing closes never corrupt the
running state kept for the present ones: a gap produces None at the affected
positions and the recurrence resumes on the next usable sample.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np

from candleview.core.exceptions import InvalidArgumentError
from candleview.models.candle import Candle

Series = List[Optional[float]]


@dataclass(frozen=True)
class MacdResult:
    """MACD line, signal line and histogram, aligned with the input candles."""

    macd: Series
    signal: Series
    histogram: Series


def _require_positive(**periods: int) -> None:
    for name, value in periods.items():
        if value <= 0:
            raise InvalidArgumentError(f"{name} must be greater than zero, got {value}")


def _closes(candles: Sequence[Candle]) -> Series:
    return [candle.close for candle in candles]


def moving_average(candles: Sequence[Candle], period: int = 7) -> Series:
    """
    Simple moving average of closing prices.

    No value is emitted unless the sequence holds at least 2 * period
    candles. The average is seeded from the present closes among the first
    `period` candles, then slid forward in O(1) per step. A step whose
    entering or leaving close is missing emits None and leaves the running
    average as it was.

    Args:
        candles: Candles in chronological order
        period: Window length

    Returns:
        One value (or None) per candle

    Raises:
        InvalidArgumentError: If period <= 0
    """
    _require_positive(period=period)
    if not candles:
        return []

    count = len(candles)
    if count < period * 2:
        return [None] * count

    closes = _closes(candles)
    seed = [value for value in closes[:period] if value is not None]
    if not seed:
        return [None] * count

    result: Series = [None] * period
    average = float(np.mean(seed))

    for i in range(period, count):
        current = closes[i]
        dropped = closes[i - period]
        if current is not None and dropped is not None:
            average += (current - dropped) / period
            result.append(average)
        else:
            result.append(None)

    return result


def _rsi_value(avg_gain: float, avg_loss: float) -> float:
    if avg_loss == 0:
        # Flat market reads as neutral
        return 50.0 if avg_gain == 0 else 100.0
    rs = avg_gain / avg_loss
    return 100.0 - 100.0 / (1.0 + rs)


def rsi(candles: Sequence[Candle], period: int = 14) -> Series:
    """
    Relative Strength Index with Wilder smoothing.

    The first `period` usable close-to-close deltas seed the average gain and
    loss; every later delta is blended in with weight 1/period. Deltas with a
    missing endpoint are skipped and do not advance the seed count.

    Raises:
        InvalidArgumentError: If period <= 0
    """
    _require_positive(period=period)
    if not candles:
        return []

    closes = _closes(candles)
    result: Series = [None] * len(closes)
    avg_gain: Optional[float] = None
    avg_loss: Optional[float] = None
    seed_count = 0
    seed_gains = 0.0
    seed_losses = 0.0

    for i in range(1, len(closes)):
        current = closes[i]
        previous = closes[i - 1]
        if current is None or previous is None:
            continue

        change = current - previous
        gain = change if change > 0 else 0.0
        loss = -change if change < 0 else 0.0

        if avg_gain is None or avg_loss is None:
            seed_count += 1
            seed_gains += gain
            seed_losses += loss
            if seed_count >= period:
                avg_gain = seed_gains / period
                avg_loss = seed_losses / period
                result[i] = _rsi_value(avg_gain, avg_loss)
            continue

        avg_gain = (avg_gain * (period - 1) + gain) / period
        avg_loss = (avg_loss * (period - 1) + loss) / period
        result[i] = _rsi_value(avg_gain, avg_loss)

    return result


def ema(values: Sequence[Optional[float]], period: int) -> Series:
    """
    Exponential moving average over optional values.

    Seeded with the arithmetic mean of the first `period` present values;
    missing values are skipped without touching the running state.

    Raises:
        InvalidArgumentError: If period <= 0
    """
    _require_positive(period=period)
    if not values:
        return []

    multiplier = 2.0 / (period + 1)
    result: Series = [None] * len(values)
    current: Optional[float] = None
    seed: List[float] = []

    for i, value in enumerate(values):
        if value is None:
            continue

        if current is None:
            seed.append(value)
            if len(seed) >= period:
                current = float(np.mean(seed))
                result[i] = current
            continue

        current = (value - current) * multiplier + current
        result[i] = current

    return result


def macd(
    candles: Sequence[Candle],
    fast_period: int = 12,
    slow_period: int = 26,
    signal_period: int = 9,
) -> MacdResult:
    """
    Moving Average Convergence Divergence.

    macd = EMA(fast) - EMA(slow), signal = EMA(signal_period) of macd,
    histogram = macd - signal. Each entry is None wherever an operand is.

    Raises:
        InvalidArgumentError: If any period <= 0
    """
    _require_positive(
        fast_period=fast_period,
        slow_period=slow_period,
        signal_period=signal_period,
    )
    if not candles:
        return MacdResult(macd=[], signal=[], histogram=[])

    closes = _closes(candles)
    fast = ema(closes, fast_period)
    slow = ema(closes, slow_period)
    macd_line: Series = [
        f - s if f is not None and s is not None else None
        for f, s in zip(fast, slow)
    ]

    signal_line = ema(macd_line, signal_period)
    histogram: Series = [
        m - s if m is not None and s is not None else None
        for m, s in zip(macd_line, signal_line)
    ]

    return MacdResult(macd=macd_line, signal=signal_line, histogram=histogram)


def to_array(series: Sequence[Optional[float]]) -> np.ndarray:
    """Dense float array with NaN in place of missing values."""
    return np.array(
        [np.nan if value is None else value for value in series],
        dtype=np.float64,
    )
