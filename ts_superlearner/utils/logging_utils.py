"""
Logging utilities for ts_superlearner.
"""

import functools
import logging
import sys
import time
from pathlib import Path
from typing import Optional
from datetime import datetime

from ..config.logging_config import get_logging_config, get_quiet_config, apply_logging_config


def setup_logging(log_file_path: Optional[str] = None,
                  format_string: Optional[str] = None,
                  date_format: Optional[str] = None,
                  verbose: bool = False,
                  quiet: bool = False) -> logging.Logger:
    """
    Setup console (and optionally file) logging.

    Args:
        log_file_path: Path to log file. A directory gets a timestamped file inside it.
            If None, only console logging is installed.
        format_string: Custom format string for log messages
        date_format: Custom date format string
        verbose: Enable verbose logging (DEBUG level)
        quiet: Enable minimal logging (WARNING level only)

    Returns:
        Configured logger instance
    """
    if quiet:
        config = get_quiet_config()
    else:
        config = get_logging_config(verbose=verbose)

    # Clear any existing handlers to avoid duplicate output
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    if format_string is None:
        format_string = config['format']
    if date_format is None:
        date_format = config['date_format']
    formatter = logging.Formatter(format_string, datefmt=date_format)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(config['console_level'])
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file_path is not None:
        log_file_path = Path(log_file_path)
        if log_file_path.is_dir() or str(log_file_path).endswith('/'):
            timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
            log_file_path = log_file_path / f'superlearner_run_{timestamp}.log'
        log_file_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file_path, mode='w', encoding='utf-8')
        file_handler.setLevel(config['file_level'])
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    apply_logging_config(config)

    logger = logging.getLogger('ts_superlearner')
    logger.info(f"Logging initialized - File: {log_file_path}, "
                f"Level: {logging.getLevelName(config['root_level'])}")
    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance with the specified name.

    Args:
        name: Logger name

    Returns:
        Logger instance
    """
    return logging.getLogger(name)


def log_execution_time(func):
    """
    Decorator to log function execution time.

    Args:
        func: Function to decorate

    Returns:
        Decorated function
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        logger = logging.getLogger(func.__module__)
        start_time = time.perf_counter()

        logger.debug(f"Starting {func.__qualname__}")

        try:
            result = func(*args, **kwargs)
            execution_time = time.perf_counter() - start_time
            logger.debug(f"Completed {func.__qualname__} in {execution_time:.2f} seconds")
            return result
        except Exception as e:
            execution_time = time.perf_counter() - start_time
            logger.error(f"Failed {func.__qualname__} after {execution_time:.2f} seconds: {str(e)}")
            raise

    return wrapper
