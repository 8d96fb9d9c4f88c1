"""
Core primitives shared across the charting engine
"""

from .exceptions import CandleViewError, ConfigurationError, InvalidArgumentError

__all__ = ["CandleViewError", "ConfigurationError", "InvalidArgumentError"]
