"""
Base indicator interface
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Sequence

from candleview.models.candle import Candle


class BaseIndicator(ABC):
    """
    Abstract base class for registered technical indicators

    An indicator produces one or more named output lines, each aligned
    with the input candles.
    """

    # Output line used when a caller does not name one
    primary_output: str = "value"

    @abstractmethod
    def compute(self, candles: Sequence[Candle]) -> Dict[str, List[Optional[float]]]:
        """
        Calculate indicator lines from candles

        Args:
            candles: Candles in chronological order

        Returns:
            Output name -> one value (or None) per candle
        """
