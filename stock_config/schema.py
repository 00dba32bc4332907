"""
Stock kernel settings schema.

Frozen dataclasses that the loader fills from YAML.  Defaults here match
``defaults.yaml``; a missing section in a user file falls back to them.
"""

from __future__ import annotations

from dataclasses import dataclass, field

# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DatabaseSettings:
    """Connection and pool settings for the SQLAlchemy engine."""

    url: str = "sqlite:///stock_kernel.db"
    echo: bool = False
    pool_size: int = 20
    max_overflow: int = 10
    pool_timeout: int = 30
    pool_recycle: int = 1800  # seconds
    pool_pre_ping: bool = True

    @property
    def is_postgres(self) -> bool:
        return self.url.startswith("postgresql")


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LoggingSettings:
    """Level of the ``stock_kernel`` logger hierarchy."""

    level: str = "INFO"


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class StockKernelSettings:
    """Everything the runtime needs to start."""

    database: DatabaseSettings = field(default_factory=DatabaseSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)
