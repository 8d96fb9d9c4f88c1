"""
Logging configuration for hosts embedding the charting engine
"""

import logging
import sys
import time
from contextlib import contextmanager
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Generator, Optional

LOG_FORMAT = '%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s'


class ChartLogger:
    """
    Logging setup for the chart engine

    The engine itself only emits through module loggers
    (logging.getLogger(__name__)); this class wires handlers for hosts
    that want the default console/file layout.

    Features:
    - Console handler (INFO+)
    - Optional rotating file handler (DEBUG+, 10MB x 5 backups)
    - Level applied to the 'candleview' logger hierarchy only
    """

    LOGGER_NAME = 'candleview'

    def __init__(self, config: dict):
        """
        Initialize logging infrastructure

        Args:
            config: Configuration dictionary with keys:
                - log_level: str (DEBUG, INFO, WARNING, ERROR)
                - log_dir: str (directory for log files, relative to cwd)
                - log_to_file: bool (enable rotating file handler)

        Raises:
            OSError: If log directory creation fails
        """
        self.log_level = config.get('log_level', 'INFO')
        self.log_to_file = bool(config.get('log_to_file', False))
        self.log_dir: Optional[Path] = None

        if self.log_to_file:
            self.log_dir = Path(config.get('log_dir', 'logs'))
            self.log_dir.mkdir(parents=True, exist_ok=True)

        self.logger = logging.getLogger(self.LOGGER_NAME)
        self._setup_logging()

    def _setup_logging(self) -> None:
        """
        Configure the package logger with console (and file) handlers

        Existing handlers are cleared so repeated setup does not duplicate
        output.
        """
        self.logger.setLevel(getattr(logging, self.log_level.upper()))
        self.logger.handlers.clear()

        formatter = logging.Formatter(LOG_FORMAT)

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(logging.INFO)
        console_handler.setFormatter(formatter)
        self.logger.addHandler(console_handler)

        if self.log_dir is not None:
            file_handler = RotatingFileHandler(
                self.log_dir / 'candleview.log',
                maxBytes=10*1024*1024,  # 10MB
                backupCount=5
            )
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(formatter)
            self.logger.addHandler(file_handler)


@contextmanager
def log_execution_time(operation: str) -> Generator[None, None, None]:
    """
    Context manager for measuring and logging execution time

    Args:
        operation: Human-readable operation description

    Usage:
        with log_execution_time('indicator:ma7'):
            values = moving_average(candles, 7)

    Logs at DEBUG level: "{operation} completed in {elapsed:.3f}s"
    """
    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed = time.perf_counter() - start
        logging.getLogger(__name__).debug(f"{operation} completed in {elapsed:.3f}s")
