"""
BaseService -- shared constructor and atomic-operation wrapper.

Responsibility:
    Holds the caller's SQLAlchemy ``Session`` and provides ``_atomic``, the
    savepoint scope every public write operation runs inside.

Architecture position:
    Kernel > Services -- imperative shell.  Every write service in
    ``stock_kernel/services/`` extends this class.

Invariants enforced:
    - Services flush, never commit.  The caller (runtime unit of work, a
      request handler or a test) owns commit and rollback.
    - Each public operation is all-or-nothing: its writes live in a
      savepoint that is released on success and rolled back on any error,
      so the caller's surrounding transaction stays usable.

Failure modes:
    - SQLAlchemyError inside ``_atomic`` is rolled back and re-raised as
      StorageFailureError with the driver error chained.
    - StockKernelError inside ``_atomic`` is rolled back and re-raised
      unchanged.
"""

from abc import ABC
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Generic, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from stock_kernel.db.base import Base
from stock_kernel.exceptions import StockKernelError, StorageFailureError
from stock_kernel.logging_config import get_logger

ModelType = TypeVar("ModelType", bound=Base)

logger = get_logger("services.base")


class BaseService(ABC, Generic[ModelType]):
    """
    Abstract base class for kernel write services.

    Non-goals:
        - Does NOT manage the outer transaction.
        - Does NOT expose read-only queries; those live in selectors/.
    """

    def __init__(self, session: Session):
        self.session = session

    @contextmanager
    def _atomic(self, operation: str) -> Iterator[None]:
        """Run the enclosed block inside a savepoint."""
        try:
            with self.session.begin_nested():
                yield
        except StockKernelError as exc:
            logger.info(
                "operation_rejected",
                extra={"operation": operation, "error_code": exc.code},
            )
            raise
        except SQLAlchemyError as exc:
            logger.error(
                "operation_storage_failure",
                extra={"operation": operation, "error": str(exc)},
            )
            raise StorageFailureError(operation, str(exc)) from exc
