"""
Logging configuration utility.
"""

import logging
import sys
from typing import Any, Dict

DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(
    level: str = 'INFO',
    format_str: str = None,
    log_file: str = None
) -> logging.Logger:
    """
    Configure logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_str: Log message format
        log_file: Optional file to write logs to

    Returns:
        Configured logger
    """
    if format_str is None:
        format_str = DEFAULT_FORMAT

    numeric_level = getattr(logging, level.upper(), logging.INFO)
    formatter = logging.Formatter(format_str)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    # APScheduler logs every job execution at INFO
    logging.getLogger('apscheduler').setLevel(max(numeric_level, logging.WARNING))

    return root_logger


def setup_logging_from_settings(settings: Dict[str, Any], verbose: bool = False) -> logging.Logger:
    """
    Configure logging from the `logging` section of the settings.

    Args:
        settings: Application settings dictionary
        verbose: Force DEBUG level
    """
    log_settings = settings.get('logging', {}) or {}
    level = 'DEBUG' if verbose else log_settings.get('level', 'INFO')
    return setup_logging(
        level=level,
        format_str=log_settings.get('format'),
        log_file=log_settings.get('file')
    )
