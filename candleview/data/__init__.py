"""
Candle ingestion helpers
"""

from .loader import batch_from_payload, candles_from_dataframe, normalize_number

__all__ = ["batch_from_payload", "candles_from_dataframe", "normalize_number"]
