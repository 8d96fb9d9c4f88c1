"""
Configuration package
"""

from .chart_config import ChartConfig, ConfigManager, LoggingConfig

__all__ = ["ChartConfig", "ConfigManager", "LoggingConfig"]
