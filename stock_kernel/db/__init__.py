"""Database layer - engine, base classes, and types."""

from stock_kernel.db.base import Base, TrackedBase, UUIDString
from stock_kernel.db.engine import (
    build_session_factory,
    create_engine_from_url,
    create_tables,
    drop_tables,
    session_scope,
)
from stock_kernel.db.types import QUANTITY_TYPE, ZERO, round_quantity, to_quantity

__all__ = [
    "create_engine_from_url",
    "build_session_factory",
    "session_scope",
    "create_tables",
    "drop_tables",
    "Base",
    "TrackedBase",
    "UUIDString",
    "QUANTITY_TYPE",
    "ZERO",
    "round_quantity",
    "to_quantity",
]
