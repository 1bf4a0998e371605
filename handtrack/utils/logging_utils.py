"""
Logging Utilities

Provides consistent logging setup across the project.

Usage:
    from handtrack.utils.logging_utils import setup_logging, get_logger

    setup_logging()
    logger = get_logger(__name__)
    logger.info("Tracking started")
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Union

from tqdm import tqdm


def setup_logging(
    level: Union[int, str] = logging.INFO,
    log_file: Optional[str] = None,
    format_string: Optional[str] = None,
    use_tqdm: bool = False
) -> None:
    """
    Set up logging configuration.

    Args:
        level: Logging level (e.g., logging.INFO or "DEBUG")
        log_file: Optional file path for logging output
        format_string: Custom format string
        use_tqdm: Route console output through tqdm so progress bars stay intact
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            raise ValueError(f"Unknown logging level: {level}")

    if format_string is None:
        format_string = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

    # Create formatter
    formatter = logging.Formatter(format_string, datefmt='%Y-%m-%d %H:%M:%S')

    # Get root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Remove existing handlers
    root_logger.handlers = []

    # Console handler
    console_handler = TqdmLoggingHandler() if use_tqdm else logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # File handler (optional)
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger with the specified name.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


class TqdmLoggingHandler(logging.Handler):
    """
    Logging handler compatible with tqdm progress bars.

    Writes through ``tqdm.write`` so an active bar is redrawn below the
    message instead of being split by it.
    """

    def emit(self, record):
        try:
            tqdm.write(self.format(record))
        except Exception:
            self.handleError(record)
