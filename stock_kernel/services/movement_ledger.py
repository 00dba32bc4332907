"""
MovementLedger -- the only writer of stock movements and balances.

Responsibility:
    Records, edits and deletes stock movements while keeping the stored
    balance of the article equal to the sum of its movement contributions.
    Also seeds the initial stock of a newly registered article.

Architecture position:
    Kernel > Services.  Uses StockAggregateStore for balance rows and the
    pure MovementKind sign rules from domain/.  Never commits.

Invariants enforced:
    - After every successful operation, for the affected article:
      balance == sum(contribution(m) for m in its movements).
    - Record adds the contribution; delete subtracts it before removing the
      row; edit first backs out the old contribution and then applies the
      new one.
    - Editing into ``ajuste_inventario`` treats the new quantity as the
      absolute target; the stored cantidad becomes the delta that reaches it.
    - An ``alta`` movement keeps its kind forever.
    - Balances may go negative; no floor and no flag.
    - Every operation runs in one savepoint; movement and balance writes
      land together or not at all.

Failure modes:
    - ValidationError subclasses for malformed input, raised before any
      write (InvalidArticleIdError, InvalidQuantityError,
      MissingMovementKindError, UnknownMovementKindError,
      ImmutableMovementKindError).
    - MovementNotFoundError / StockBalanceNotFoundError on edit and delete.
    - StorageFailureError wrapping any SQLAlchemy failure.

Concurrency:
    Record locks (or creates) the balance row.  Edit and delete lock the
    movement row and then the balance row.  Concurrent operations on one
    article therefore serialize and the invariant above holds under load.
"""

from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from stock_kernel.db.types import to_quantity
from stock_kernel.domain.clock import Clock, SystemClock
from stock_kernel.domain.dtos import MovementResult
from stock_kernel.domain.identifiers import parse_article_id, parse_uuid
from stock_kernel.domain.movement_kind import (
    MovementKind,
    is_magnitude_kind,
    parse_movement_kind,
    signed_contribution,
)
from stock_kernel.exceptions import (
    ImmutableMovementKindError,
    InvalidQuantityError,
    MovementNotFoundError,
    StockBalanceNotFoundError,
)
from stock_kernel.logging_config import LogContext, get_logger
from stock_kernel.models.movement import Movement
from stock_kernel.models.stock_balance import StockBalance
from stock_kernel.services.base import BaseService
from stock_kernel.services.stock_aggregate_store import StockAggregateStore

logger = get_logger("services.movement_ledger")

INITIAL_STOCK_REASON = "Inventario inicial"


def _check_recorded_quantity(kind: MovementKind, cantidad: Decimal) -> None:
    if is_magnitude_kind(kind):
        if cantidad <= 0:
            raise InvalidQuantityError(cantidad, f"must be greater than zero for {kind.value}")
    elif cantidad == 0:
        raise InvalidQuantityError(cantidad, "adjustment delta must be non-zero")


def _check_edited_quantity(kind: MovementKind, cantidad: Decimal) -> None:
    if is_magnitude_kind(kind):
        if cantidad <= 0:
            raise InvalidQuantityError(cantidad, f"must be greater than zero for {kind.value}")
    elif cantidad < 0:
        raise InvalidQuantityError(cantidad, "adjustment target must not be negative")


class MovementLedger(BaseService[Movement]):
    """
    Service for writing the stock movement ledger.

    Contract:
        Every public method validates its input, then runs one savepoint that
        writes the movement row and the balance row together.  The caller
        commits.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        store: StockAggregateStore | None = None,
    ):
        super().__init__(session)
        self._clock = clock or SystemClock()
        self._store = store or StockAggregateStore(session)

    def _lock_movement(self, movement_id: Any) -> Movement:
        parsed = parse_uuid(movement_id)
        if parsed is None:
            raise MovementNotFoundError(str(movement_id))
        movement = self.session.execute(
            select(Movement)
            .where(Movement.id == parsed)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
        if movement is None:
            raise MovementNotFoundError(str(parsed))
        return movement

    def _lock_existing_balance(self, articulo_id: int) -> StockBalance:
        balance = self._store.lock(articulo_id)
        if balance is None:
            raise StockBalanceNotFoundError(articulo_id)
        return balance

    # ------------------------------------------------------------------
    # Record
    # ------------------------------------------------------------------

    def record_movement(
        self,
        articulo_id: Any,
        tipo_movimiento: Any,
        cantidad: Any,
        motivo: str | None = None,
        usuario: str | None = None,
    ) -> MovementResult:
        """
        Append a movement and apply its contribution to the article balance.

        A missing balance row is created from zero.

        Returns:
            MovementResult with the stored movement and the new balance.
        """
        articulo_id = parse_article_id(articulo_id)
        kind = parse_movement_kind(tipo_movimiento)
        cantidad = to_quantity(cantidad)
        _check_recorded_quantity(kind, cantidad)
        now = self._clock.now()

        with LogContext.bind(articulo_id=articulo_id, actor_id=usuario):
            with self._atomic("record_movement"):
                movement = Movement(
                    articulo_id=articulo_id,
                    tipo_movimiento=kind.value,
                    cantidad=cantidad,
                    motivo=motivo,
                    usuario_nombre=usuario,
                    fecha=now,
                )
                self.session.add(movement)
                self.session.flush()

                balance = self._store.lock_or_create(articulo_id, now)
                self._store.write(
                    balance,
                    balance.cantidad_actual + signed_contribution(kind, cantidad),
                    now,
                )

            logger.info(
                "movement_recorded",
                extra={
                    "movement_id": movement.id,
                    "tipo_movimiento": kind,
                    "cantidad": cantidad,
                    "cantidad_actual": balance.cantidad_actual,
                },
            )
            return MovementResult(
                articulo_id=articulo_id,
                cantidad_actual=balance.cantidad_actual,
                movement=movement.to_dto(),
            )

    # ------------------------------------------------------------------
    # Edit
    # ------------------------------------------------------------------

    def edit_movement(
        self,
        movement_id: UUID | str,
        new_cantidad: Any,
        new_tipo_movimiento: Any = None,
        new_motivo: str | None = None,
    ) -> MovementResult:
        """
        Change the quantity, kind and/or reason of an existing movement.

        The old contribution is backed out of the balance to get the base.
        If the resulting kind is ``ajuste_inventario``, ``new_cantidad`` is
        the absolute quantity the article must end at and the stored delta
        is ``new_cantidad - base``.  Otherwise the new contribution is
        applied on top of the base.  ``fecha`` is set to now.
        """
        new_kind = (
            parse_movement_kind(new_tipo_movimiento)
            if new_tipo_movimiento is not None
            else None
        )
        new_cantidad = to_quantity(new_cantidad)
        now = self._clock.now()

        with LogContext.bind(movement_id=movement_id):
            with self._atomic("edit_movement"):
                movement = self._lock_movement(movement_id)
                original_kind = movement.kind
                target_kind = new_kind if new_kind is not None else original_kind

                if original_kind is MovementKind.ALTA and target_kind is not MovementKind.ALTA:
                    raise ImmutableMovementKindError(
                        str(movement.id), original_kind.value, target_kind.value
                    )
                _check_edited_quantity(target_kind, new_cantidad)

                balance = self._lock_existing_balance(movement.articulo_id)
                old_contribution = signed_contribution(original_kind, movement.cantidad)
                base = balance.cantidad_actual - old_contribution

                if target_kind is MovementKind.ADJUSTMENT:
                    stored = new_cantidad - base
                else:
                    stored = new_cantidad
                updated = base + signed_contribution(target_kind, stored)

                movement.cantidad = stored
                movement.tipo_movimiento = target_kind.value
                if new_motivo is not None:
                    movement.motivo = new_motivo
                movement.fecha = now
                self._store.write(balance, updated, now)

            logger.info(
                "movement_edited",
                extra={
                    "articulo_id": movement.articulo_id,
                    "from_kind": original_kind,
                    "to_kind": target_kind,
                    "old_contribution": old_contribution,
                    "new_cantidad": stored,
                    "cantidad_actual": balance.cantidad_actual,
                },
            )
            return MovementResult(
                articulo_id=movement.articulo_id,
                cantidad_actual=balance.cantidad_actual,
                movement=movement.to_dto(),
            )

    # ------------------------------------------------------------------
    # Delete
    # ------------------------------------------------------------------

    def delete_movement(self, movement_id: UUID | str) -> MovementResult:
        """Back the movement's contribution out of the balance, then remove it."""
        now = self._clock.now()

        with LogContext.bind(movement_id=movement_id):
            with self._atomic("delete_movement"):
                movement = self._lock_movement(movement_id)
                articulo_id = movement.articulo_id
                contribution = movement.contribution

                balance = self._lock_existing_balance(articulo_id)
                self._store.write(balance, balance.cantidad_actual - contribution, now)
                self.session.delete(movement)
                self.session.flush()

            logger.info(
                "movement_deleted",
                extra={
                    "articulo_id": articulo_id,
                    "contribution": contribution,
                    "cantidad_actual": balance.cantidad_actual,
                },
            )
            return MovementResult(
                articulo_id=articulo_id,
                cantidad_actual=balance.cantidad_actual,
            )

    # ------------------------------------------------------------------
    # Initial stock
    # ------------------------------------------------------------------

    def seed_article(
        self,
        articulo_id: Any,
        cantidad_inicial: Any,
        usuario: str | None = None,
    ) -> MovementResult:
        """
        Give a newly registered article its opening stock.

        A positive quantity is recorded as an ``alta`` movement.  Zero only
        creates the balance row so the article shows up in reports.
        """
        articulo_id = parse_article_id(articulo_id)
        cantidad = to_quantity(cantidad_inicial)
        if cantidad < 0:
            raise InvalidQuantityError(cantidad, "initial stock must not be negative")

        if cantidad > 0:
            return self.record_movement(
                articulo_id,
                MovementKind.ALTA,
                cantidad,
                motivo=INITIAL_STOCK_REASON,
                usuario=usuario,
            )

        now = self._clock.now()
        with LogContext.bind(articulo_id=articulo_id, actor_id=usuario):
            with self._atomic("seed_article"):
                balance = self._store.lock_or_create(articulo_id, now)
            logger.info(
                "article_seeded",
                extra={"cantidad_actual": balance.cantidad_actual},
            )
        return MovementResult(
            articulo_id=articulo_id,
            cantidad_actual=balance.cantidad_actual,
        )
