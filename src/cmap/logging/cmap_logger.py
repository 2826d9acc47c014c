"""
Standardized logging setup for the CMAP client.
Uses Python's built-in logging with per-component loggers.
"""

import logging
import sys
import os
from typing import Any, Dict


class ColoredFormatter(logging.Formatter):
    """Colored logging formatter with timestamps."""

    # ANSI color codes
    COLORS = {
        'DEBUG': '\033[36m',    # Cyan
        'INFO': '\033[32m',     # Green
        'WARNING': '\033[33m',  # Yellow
        'ERROR': '\033[31m',    # Red
        'CRITICAL': '\033[35m', # Magenta
        'RESET': '\033[0m'      # Reset
    }

    def __init__(self, use_colors=True):
        # timestamp - component - level - message
        super().__init__(
            fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        self.use_colors = use_colors and sys.stderr.isatty()

    def format(self, record):
        if not self.use_colors:
            return super().format(record)

        level_color = self.COLORS.get(record.levelname, '')
        reset_color = self.COLORS['RESET']

        # Temporarily modify the record to add colors
        original_levelname = record.levelname
        record.levelname = f"{level_color}{record.levelname}{reset_color}"
        try:
            return super().format(record)
        finally:
            record.levelname = original_levelname


class ComponentHandler(logging.StreamHandler):
    """Stream handler used by every CMAP component logger."""

    def __init__(self, use_colors=True):
        super().__init__(sys.stderr)
        self.setFormatter(ColoredFormatter(use_colors=use_colors))


# Get log level from environment variable, default to INFO
log_level = os.getenv('CMAP_LOG_LEVEL', 'INFO').upper()
log_level_value = getattr(logging, log_level, logging.INFO)

# Check if colors should be disabled
use_colors = os.getenv('CMAP_LOG_COLORS', 'true').lower() in ('true', '1', 'yes', 'on')

LOGGER_PREFIX = 'cmap'


def get_logger(name: str) -> logging.Logger:
    """Get a component logger with colored formatting.

    Loggers live under the ``cmap.`` namespace and do not propagate to the
    root logger, so a host application's logging setup is left alone.
    """
    logger = logging.getLogger(f"{LOGGER_PREFIX}.{name}")
    if not any(isinstance(h, ComponentHandler) for h in logger.handlers):
        logger.addHandler(ComponentHandler(use_colors=use_colors))
        logger.propagate = False
        logger.setLevel(log_level_value)
    return logger


def set_log_level(level: str) -> None:
    """Change the level of every CMAP component logger at runtime."""
    value = getattr(logging, level.upper(), None)
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level: {level}")
    for logger_name, logger in logging.Logger.manager.loggerDict.items():
        if logger_name.startswith(f"{LOGGER_PREFIX}.") and isinstance(logger, logging.Logger):
            logger.setLevel(value)


def log_extra(**kwargs) -> Dict[str, Any]:
    """Format extra logging context."""
    return {k: str(v)[:100] for k, v in kwargs.items() if v is not None}


def format_fields(**kwargs) -> str:
    """Render ``key:value`` pairs in the ``action | key:value`` log register."""
    return " | ".join(f"{k}:{v}" for k, v in log_extra(**kwargs).items())


# Component-specific loggers
http_logger = get_logger('HTTP')
query_logger = get_logger('QUERY')
catalog_logger = get_logger('CATALOG')
cruise_logger = get_logger('CRUISE')
match_logger = get_logger('MATCH')
config_logger = get_logger('CONFIG')
