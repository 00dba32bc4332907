"""ORM models for the stock kernel."""

from stock_kernel.models.count_session import CountDetail, CountSession
from stock_kernel.models.movement import Movement
from stock_kernel.models.stock_balance import StockBalance

__all__ = [
    "Movement",
    "StockBalance",
    "CountSession",
    "CountDetail",
    "import_all_models",
]


def import_all_models() -> None:
    """
    Import every module that declares tables so Base.metadata is complete.

    The sequence counter table lives next to SequenceService.
    """
    import stock_kernel.models.count_session  # noqa: F401
    import stock_kernel.models.movement  # noqa: F401
    import stock_kernel.models.stock_balance  # noqa: F401
    import stock_kernel.services.sequence_service  # noqa: F401
