"""
Logging utilities for the CMAP client.
"""

from .cmap_logger import (
    get_logger,
    set_log_level,
    log_extra,
    format_fields,
    http_logger,
    query_logger,
    catalog_logger,
    cruise_logger,
    match_logger,
    config_logger
)

__all__ = [
    'get_logger',
    'set_log_level',
    'log_extra',
    'format_fields',
    'http_logger',
    'query_logger',
    'catalog_logger',
    'cruise_logger',
    'match_logger',
    'config_logger'
]
