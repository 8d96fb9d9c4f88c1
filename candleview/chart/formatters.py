"""
Default label and overlay formatters.

Hosts may replace any of these; each receives raw numbers/timestamps and
returns display text.
"""

import math
from datetime import datetime, timezone
from typing import Callable, Dict, Optional

from candleview.models.candle import Candle

TimeLabelFormatter = Callable[[int, int], str]
PriceLabelFormatter = Callable[[float], str]
OverlayFormatter = Callable[[Candle], Dict[str, str]]

MISSING = "-"
VOLUME_SUFFIXES = ["K", "M", "B", "T", "Q"]
MONTH_ABBREVIATIONS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)


def _to_datetime(timestamp: int) -> Optional[datetime]:
    try:
        return datetime.fromtimestamp(timestamp / 1000, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None


def default_time_label(timestamp: int, visible_count: int) -> str:
    """'YYYY-MM' when zoomed out past 20 candles, 'MM-DD' otherwise (UTC)."""
    moment = _to_datetime(timestamp)
    if moment is None:
        return ""
    if visible_count > 20:
        return f"{moment.year}-{moment.month:02d}"
    return f"{moment.month:02d}-{moment.day:02d}"


def default_price_label(price: float) -> str:
    return f"{price:.2f}"


def format_volume(volume: float) -> str:
    """
    Compact volume text.

    Below 1000: three decimals. From 1e18: scientific notation.
    Otherwise scaled to the largest K/M/B/T/Q unit with two decimals.
    """
    if not math.isfinite(volume):
        return MISSING
    if volume < 1000:
        return f"{volume:.3f}"
    if volume >= 1e18:
        return f"{volume:.3e}"

    exponent = (len(str(int(volume))) - 1) // 3
    suffix = VOLUME_SUFFIXES[exponent - 1]
    return f"{volume / 1000 ** exponent:.2f}{suffix}"


def _price_field(value: Optional[float]) -> str:
    return MISSING if value is None else f"{value:.2f}"


def _overlay_date(moment: datetime) -> str:
    """'Jan 2, 2024' in English regardless of the process locale."""
    return f"{MONTH_ABBREVIATIONS[moment.month - 1]} {moment.day}, {moment.year}"


def default_overlay_formatter(candle: Candle) -> Dict[str, str]:
    """Date and OHLCV fields for the tap overlay, '-' where missing."""
    moment = _to_datetime(candle.timestamp)
    return {
        "Date": _overlay_date(moment) if moment else MISSING,
        "Open": _price_field(candle.open),
        "High": _price_field(candle.high),
        "Low": _price_field(candle.low),
        "Close": _price_field(candle.close),
        "Volume": MISSING if candle.volume is None else format_volume(candle.volume),
    }
