"""
Configuration for the stock kernel.

``load_settings()`` is the single entry point.  No other component reads
configuration files or environment variables.
"""

from stock_config.loader import ENV_DATABASE_URL, ENV_LOG_LEVEL, load_settings, parse_settings
from stock_config.schema import DatabaseSettings, LoggingSettings, StockKernelSettings

__all__ = [
    "DatabaseSettings",
    "ENV_DATABASE_URL",
    "ENV_LOG_LEVEL",
    "LoggingSettings",
    "StockKernelSettings",
    "load_settings",
    "parse_settings",
]
