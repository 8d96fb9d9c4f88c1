"""
Chart configuration with YAML files and environment overrides

Example chart_config.yaml:
```yaml
chart:
  initial_visible_candle_count: 90
  price_label_width: 48
  time_label_height: 24
  volume_height_factor: 0.2

logging:
  log_level: DEBUG
  log_to_file: true
  log_dir: logs
```
"""

import logging
import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from candleview.core.exceptions import ConfigurationError
from candleview.utils.logger import ChartLogger

LOG_LEVEL_ENV = "CANDLEVIEW_LOG_LEVEL"


@dataclass
class ChartConfig:
    """
    Chart layout and initial zoom configuration

    Attributes:
        initial_visible_candle_count: Candles shown on first layout
        price_label_width: Right-hand price axis inset (px)
        time_label_height: Bottom time axis inset (px)
        volume_height_factor: Share of the chart height used by volume bars
        overlay_finger_margin: Gap between finger and tap overlay (px)
        time_label_spacing: Horizontal pixels per time label
    """
    initial_visible_candle_count: int = 90
    price_label_width: float = 48.0
    time_label_height: float = 24.0
    volume_height_factor: float = 0.2
    overlay_finger_margin: float = 32.0
    time_label_spacing: float = 90.0

    def __post_init__(self):
        if self.initial_visible_candle_count < 1:
            raise ConfigurationError(
                f"initial_visible_candle_count must be >= 1, got {self.initial_visible_candle_count}"
            )
        for name in ("price_label_width", "time_label_height", "overlay_finger_margin"):
            value = getattr(self, name)
            if value < 0:
                raise ConfigurationError(f"{name} must be >= 0, got {value}")
        if not 0 <= self.volume_height_factor < 1:
            raise ConfigurationError(
                f"volume_height_factor must be in [0, 1), got {self.volume_height_factor}"
            )
        if self.time_label_spacing <= 0:
            raise ConfigurationError(
                f"time_label_spacing must be > 0, got {self.time_label_spacing}"
            )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ChartConfig":
        """Build from a mapping, rejecting unknown keys."""
        return cls(**_known_fields(cls, data, "chart"))


@dataclass
class LoggingConfig:
    """Logging system configuration"""
    log_level: str = "INFO"
    log_dir: str = "logs"
    log_to_file: bool = False

    def __post_init__(self):
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if not isinstance(self.log_level, str):
            raise ConfigurationError(
                f"log_level must be a string, got {type(self.log_level).__name__}"
            )
        if not isinstance(self.log_dir, str):
            raise ConfigurationError(
                f"log_dir must be a string, got {type(self.log_dir).__name__}"
            )
        # YAML 'no'/'off' strings would otherwise be truthy
        if not isinstance(self.log_to_file, bool):
            raise ConfigurationError(
                f"log_to_file must be true or false, got {self.log_to_file!r}"
            )
        if self.log_level.upper() not in valid_levels:
            raise ConfigurationError(
                f"Invalid log level: {self.log_level}. "
                f"Must be one of {valid_levels}"
            )


def _known_fields(cls, data: Dict[str, Any], section: str) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise ConfigurationError(f"[{section}] section must be a mapping")
    allowed = {f.name for f in fields(cls)}
    unknown = set(data) - allowed
    if unknown:
        raise ConfigurationError(
            f"Unknown keys in [{section}] section: {sorted(unknown)}"
        )
    return dict(data)


class ConfigManager:
    """
    Loads chart configuration from chart_config.yaml with environment overrides

    Priority: ENV > YAML file > defaults. A missing file yields defaults.
    """

    FILE_NAME = "chart_config.yaml"

    def __init__(self, config_dir: str = "configs"):
        self.config_dir = Path(config_dir)
        self.logger = logging.getLogger(__name__)
        self._chart_config: Optional[ChartConfig] = None
        self._logging_config: Optional[LoggingConfig] = None

        self._load_configs()

    def _load_configs(self):
        """Load all configuration sections"""
        data = self._read_yaml()
        self._chart_config = self._load_chart_config(data)
        self._logging_config = self._load_logging_config(data)

    def _read_yaml(self) -> Dict[str, Any]:
        config_file = self.config_dir / self.FILE_NAME
        if not config_file.exists():
            self.logger.debug(f"{config_file} not found, using defaults")
            return {}

        try:
            with open(config_file, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Failed to parse {config_file}: {e}") from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"Invalid {config_file}: top level must be a mapping")
        return data

    def _load_chart_config(self, data: Dict[str, Any]) -> ChartConfig:
        section = data.get("chart") or {}
        try:
            return ChartConfig.from_dict(section)
        except TypeError as e:
            raise ConfigurationError(f"Invalid [chart] section: {e}") from e

    def _load_logging_config(self, data: Dict[str, Any]) -> LoggingConfig:
        section = dict(_known_fields(LoggingConfig, data.get("logging") or {}, "logging"))

        log_level_env = os.getenv(LOG_LEVEL_ENV)
        if log_level_env:
            section["log_level"] = log_level_env

        return LoggingConfig(**section)

    def setup_logging(self) -> ChartLogger:
        """Install console/file handlers according to the logging section"""
        return ChartLogger(asdict(self.logging_config))

    @property
    def chart_config(self) -> ChartConfig:
        return self._chart_config

    @property
    def logging_config(self) -> LoggingConfig:
        return self._logging_config
