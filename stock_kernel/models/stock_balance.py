"""
Module: stock_kernel.models.stock_balance
Responsibility: ORM persistence for the derived per-article balance (inventarios).
Architecture position: Kernel > Models.  May import from db/ and the pure
    domain layer only.

Invariants enforced:
    - Exactly one balance row per article (uq_inventario_articulo).
    - cantidad_actual may be negative; no floor is applied.
    - Only MovementLedger writes this table (through StockAggregateStore).
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import BigInteger, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from stock_kernel.db.base import TrackedBase
from stock_kernel.domain.dtos import StockBalanceInfo


class StockBalance(TrackedBase):
    """Current on-hand quantity for one article."""

    __tablename__ = "inventarios"

    __table_args__ = (
        UniqueConstraint("articulo_id", name="uq_inventario_articulo"),
    )

    articulo_id: Mapped[int] = mapped_column(BigInteger, nullable=False)

    cantidad_actual: Mapped[Decimal] = mapped_column(
        nullable=False,
        default=Decimal(0),
    )

    ultima_actualizacion: Mapped[datetime | None] = mapped_column(nullable=True)

    def to_dto(self) -> StockBalanceInfo:
        """Convert ORM row to frozen StockBalanceInfo DTO."""
        return StockBalanceInfo(
            articulo_id=self.articulo_id,
            cantidad_actual=self.cantidad_actual,
            ultima_actualizacion=self.ultima_actualizacion,
        )

    def __repr__(self) -> str:
        return f"<StockBalance articulo={self.articulo_id} cantidad={self.cantidad_actual}>"
