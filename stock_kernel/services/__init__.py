"""Write services of the stock kernel.  All of them flush; none commits."""

from stock_kernel.services.base import BaseService
from stock_kernel.services.count_session_service import CountSessionService
from stock_kernel.services.movement_ledger import INITIAL_STOCK_REASON, MovementLedger
from stock_kernel.services.sequence_service import SequenceCounter, SequenceService
from stock_kernel.services.stock_aggregate_store import StockAggregateStore

__all__ = [
    "BaseService",
    "CountSessionService",
    "INITIAL_STOCK_REASON",
    "MovementLedger",
    "SequenceCounter",
    "SequenceService",
    "StockAggregateStore",
]
