"""Read-only selectors.  They never write and return frozen DTOs."""

from stock_kernel.selectors.base import BaseSelector
from stock_kernel.selectors.count_session_selector import CountSessionSelector
from stock_kernel.selectors.movement_selector import MovementSelector
from stock_kernel.selectors.stock_selector import StockSelector

__all__ = [
    "BaseSelector",
    "CountSessionSelector",
    "MovementSelector",
    "StockSelector",
]
