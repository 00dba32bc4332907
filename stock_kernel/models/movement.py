"""
Module: stock_kernel.models.movement
Responsibility: ORM persistence for stock ledger entries (movimientos_inventario).
Architecture position: Kernel > Models.  May import from db/ and the pure
    domain layer only.  MUST NOT import from services/ or selectors/.

Invariants enforced:
    - articulo_id is positive (ck_mov_articulo_positive).
    - tipo_movimiento is stored as the string value of a MovementKind; rows
      are only written through MovementLedger, which validates the kind.
    - cantidad is a magnitude (> 0) for every kind except ajuste_inventario,
      whose cantidad is the signed delta that was applied to the balance.

Failure modes:
    - UnknownMovementKindError from ``kind`` if a row was written outside the
      ledger with a value outside the closed set.

Audit relevance:
    Movement rows are the ledger.  StockBalance.cantidad_actual must always
    equal the sum of ``contribution`` over the existing rows of an article.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import BigInteger, CheckConstraint, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from stock_kernel.db.base import TrackedBase
from stock_kernel.domain.dtos import MovementInfo
from stock_kernel.domain.movement_kind import (
    MovementKind,
    parse_movement_kind,
    signed_contribution,
)


class Movement(TrackedBase):
    """
    One stock-affecting event for one article.

    Contract:
        Immutable once written except through MovementLedger.edit_movement
        (cantidad, tipo_movimiento, motivo, fecha) and removable only through
        MovementLedger.delete_movement.
    """

    __tablename__ = "movimientos_inventario"

    __table_args__ = (
        CheckConstraint("articulo_id > 0", name="ck_mov_articulo_positive"),
        Index("idx_mov_articulo", "articulo_id"),
        Index("idx_mov_tipo", "tipo_movimiento"),
        Index("idx_mov_fecha", "fecha"),
    )

    # Catalog reference (no FK -- articles live in the catalog module)
    articulo_id: Mapped[int] = mapped_column(BigInteger, nullable=False)

    tipo_movimiento: Mapped[str] = mapped_column(String(40), nullable=False)

    cantidad: Mapped[Decimal] = mapped_column(nullable=False)

    motivo: Mapped[str | None] = mapped_column(String(255), nullable=True)
    usuario_nombre: Mapped[str | None] = mapped_column(String(255), nullable=True)

    fecha: Mapped[datetime] = mapped_column(nullable=False)

    @property
    def kind(self) -> MovementKind:
        """The validated movement kind of this row."""
        return parse_movement_kind(self.tipo_movimiento)

    @property
    def contribution(self) -> Decimal:
        """Signed effect of this row on the article balance."""
        return signed_contribution(self.kind, self.cantidad)

    def to_dto(self) -> MovementInfo:
        """Convert ORM row to frozen MovementInfo DTO."""
        return MovementInfo(
            id=self.id,
            articulo_id=self.articulo_id,
            tipo_movimiento=self.kind,
            cantidad=self.cantidad,
            motivo=self.motivo,
            usuario_nombre=self.usuario_nombre,
            fecha=self.fecha,
        )

    def __repr__(self) -> str:
        return (
            f"<Movement {self.id} articulo={self.articulo_id} "
            f"{self.tipo_movimiento} cantidad={self.cantidad}>"
        )
