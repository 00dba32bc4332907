"""
StockAggregateStore -- keyed access to the per-article balance rows.

Responsibility:
    Reads, locks, creates and writes StockBalance rows.  This is the only
    code that touches the ``inventarios`` table on the write path;
    MovementLedger and CountSessionService go through it.

Architecture position:
    Kernel > Services.  Flush-only; runs inside the caller's savepoint.

Invariants enforced:
    - At most one balance row per article.  ``lock_or_create`` resolves a
      creation race through a savepoint and the uq_inventario_articulo
      constraint instead of check-then-insert.
    - A balance that is read in order to be rewritten is read under
      ``SELECT ... FOR UPDATE`` so concurrent writers serialize per
      article and no update is lost.
    - ``snapshot`` takes one shared lock over all requested rows in a single
      statement so the count worksheet sees a consistent picture.

Failure modes:
    - IntegrityError from a creation race is absorbed; any other
      SQLAlchemyError propagates to the caller's ``_atomic`` scope.
"""

from collections.abc import Iterable
from datetime import datetime
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from stock_kernel.db.types import ZERO, round_quantity
from stock_kernel.logging_config import get_logger
from stock_kernel.models.stock_balance import StockBalance

logger = get_logger("services.stock_store")


class StockAggregateStore:
    """Balance rows keyed by articulo_id."""

    def __init__(self, session: Session):
        self._session = session

    def get(self, articulo_id: int) -> Decimal | None:
        """Current quantity of an article, or None if it has no balance row."""
        return self._session.execute(
            select(StockBalance.cantidad_actual).where(
                StockBalance.articulo_id == articulo_id
            )
        ).scalar_one_or_none()

    def lock(self, articulo_id: int) -> StockBalance | None:
        """Return the balance row under an exclusive row lock, or None."""
        return self._session.execute(
            select(StockBalance)
            .where(StockBalance.articulo_id == articulo_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def lock_or_create(self, articulo_id: int, timestamp: datetime) -> StockBalance:
        """
        Return the locked balance row, inserting a zero row when missing.

        A missing balance counts as zero.  Two transactions creating the same
        row race on the unique constraint; the loser re-reads the winner's
        row under lock and continues from its value.
        """
        balance = self.lock(articulo_id)
        if balance is not None:
            return balance

        savepoint = self._session.begin_nested()
        try:
            balance = StockBalance(
                articulo_id=articulo_id,
                cantidad_actual=ZERO,
                ultima_actualizacion=timestamp,
            )
            self._session.add(balance)
            self._session.flush()
            savepoint.commit()
            logger.debug("stock_balance_created", extra={"articulo_id": articulo_id})
            return balance
        except IntegrityError:
            logger.debug(
                "stock_balance_create_race_retry",
                extra={"articulo_id": articulo_id},
            )
            savepoint.rollback()
            balance = self.lock(articulo_id)
            if balance is None:
                raise
            return balance

    def write(self, balance: StockBalance, cantidad: Decimal, timestamp: datetime) -> StockBalance:
        """Overwrite a locked balance row with a new quantity."""
        balance.cantidad_actual = round_quantity(cantidad)
        balance.ultima_actualizacion = timestamp
        self._session.flush()
        logger.debug(
            "balance_updated",
            extra={
                "articulo_id": balance.articulo_id,
                "cantidad_actual": balance.cantidad_actual,
            },
        )
        return balance

    def set(self, articulo_id: int, cantidad: Decimal, timestamp: datetime) -> StockBalance:
        """Upsert the balance of an article to ``cantidad``."""
        return self.write(self.lock_or_create(articulo_id, timestamp), cantidad, timestamp)

    def snapshot(self, articulo_ids: Iterable[int]) -> dict[int, Decimal]:
        """
        Read the balances of many articles under one shared lock.

        Articles without a balance row are absent from the result; callers
        treat them as zero.
        """
        ids = sorted(set(articulo_ids))
        if not ids:
            return {}
        rows = self._session.execute(
            select(StockBalance.articulo_id, StockBalance.cantidad_actual)
            .where(StockBalance.articulo_id.in_(ids))
            .with_for_update(read=True)
        ).all()
        return {articulo_id: cantidad for articulo_id, cantidad in rows}
