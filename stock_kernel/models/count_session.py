"""
Module: stock_kernel.models.count_session
Responsibility: ORM persistence for physical count sessions (tomafisica) and
    their worksheet rows (tomafisicadetalle).
Architecture position: Kernel > Models.  May import from db/ and the pure
    domain layer only.

Invariants enforced:
    - folio is unique per session (uq_toma_folio); allocated from the
      locked sequence counter, never max()+1.
    - One detail row per (session, article) (uq_toma_detalle_articulo).
    - cantidad_teorica is written once at session open and never updated.
    - Deleting a session deletes its details (ORM cascade plus
      ON DELETE CASCADE on the foreign key).

Audit relevance:
    Count sessions never write StockBalance or Movement rows.  Reconciling
    variances into adjustment movements is done by a separate process.
"""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import BigInteger, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stock_kernel.db.base import TrackedBase, UUIDString
from stock_kernel.domain.dtos import CountDetailInfo, CountSessionInfo, CountSessionStatus


class CountSession(TrackedBase):
    """A physical recount worksheet header."""

    __tablename__ = "tomafisica"

    __table_args__ = (
        UniqueConstraint("folio", name="uq_toma_folio"),
        Index("idx_toma_estado", "estado"),
    )

    folio: Mapped[int] = mapped_column(BigInteger, nullable=False)

    fecha_inicio: Mapped[datetime] = mapped_column(nullable=False)
    fecha_fin: Mapped[datetime | None] = mapped_column(nullable=True)

    estado: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=CountSessionStatus.ABIERTA.value,
    )

    # Optional category filter applied when the snapshot was taken
    categoria_id: Mapped[int | None] = mapped_column(BigInteger, nullable=True)

    usuario_auth0_sub: Mapped[str] = mapped_column(String(255), nullable=False)
    usuario_correo: Mapped[str | None] = mapped_column(String(255), nullable=True)

    detalles: Mapped[list["CountDetail"]] = relationship(
        back_populates="toma",
        cascade="all, delete-orphan",
        order_by="CountDetail.articulo_id",
    )

    def to_dto(self, detail_count: int | None = None) -> CountSessionInfo:
        """Convert ORM row to frozen CountSessionInfo DTO."""
        return CountSessionInfo(
            id=self.id,
            folio=self.folio,
            fecha_inicio=self.fecha_inicio,
            fecha_fin=self.fecha_fin,
            estado=CountSessionStatus(self.estado),
            categoria_id=self.categoria_id,
            usuario_auth0_sub=self.usuario_auth0_sub,
            usuario_correo=self.usuario_correo,
            detail_count=detail_count if detail_count is not None else len(self.detalles),
        )

    def __repr__(self) -> str:
        return f"<CountSession folio={self.folio} estado={self.estado}>"


class CountDetail(TrackedBase):
    """One article row of a count worksheet."""

    __tablename__ = "tomafisicadetalle"

    __table_args__ = (
        UniqueConstraint("toma_id", "articulo_id", name="uq_toma_detalle_articulo"),
        Index("idx_toma_detalle_toma", "toma_id"),
    )

    toma_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("tomafisica.id", ondelete="CASCADE"),
        nullable=False,
    )

    articulo_id: Mapped[int] = mapped_column(BigInteger, nullable=False)

    # Snapshot of StockBalance at open time
    cantidad_teorica: Mapped[Decimal] = mapped_column(nullable=False)

    cantidad_real: Mapped[Decimal] = mapped_column(
        nullable=False,
        default=Decimal(0),
    )

    toma: Mapped["CountSession"] = relationship(back_populates="detalles")

    def to_dto(self) -> CountDetailInfo:
        """Convert ORM row to frozen CountDetailInfo DTO."""
        return CountDetailInfo(
            id=self.id,
            toma_id=self.toma_id,
            articulo_id=self.articulo_id,
            cantidad_teorica=self.cantidad_teorica,
            cantidad_real=self.cantidad_real,
        )

    def __repr__(self) -> str:
        return (
            f"<CountDetail toma={self.toma_id} articulo={self.articulo_id} "
            f"teorica={self.cantidad_teorica} real={self.cantidad_real}>"
        )
