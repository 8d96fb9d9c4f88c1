"""
Custom exceptions for the charting engine
"""


class CandleViewError(Exception):
    """Base exception for charting engine errors"""


class InvalidArgumentError(CandleViewError, ValueError):
    """Invalid argument passed to an indicator or registry call"""


class ConfigurationError(CandleViewError):
    """Configuration related errors"""
