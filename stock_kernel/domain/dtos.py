"""
DTOs -- Pure domain data transfer objects.

Responsibility:
    Defines the immutable records that leave the service and selector layers:
    movements, balances, count sessions and their detail rows, recount
    entries and results, and ledger reconciliation results.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Free of ORM dependencies.  Services convert ORM rows into these DTOs
    at the boundary; callers never receive ORM entities.

Invariants enforced:
    - All quantities are Decimal, never float.
    - CountDetailInfo.diferencia is always cantidad_real - cantidad_teorica.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

from stock_kernel.domain.movement_kind import MovementKind, signed_contribution


class CountSessionStatus(str, Enum):
    """Lifecycle states of a physical count session."""

    ABIERTA = "abierta"
    CERRADA = "cerrada"


@dataclass(frozen=True)
class OperatorIdentity:
    """Authenticated operator opening a count session (from the auth layer)."""

    sub: str
    email: str | None = None


@dataclass(frozen=True)
class ArticleRef:
    """Catalog entry as seen by the count session snapshot."""

    articulo_id: int
    categoria_id: int | None = None


@dataclass(frozen=True)
class MovementInfo:
    """Immutable view of one ledger entry."""

    id: UUID
    articulo_id: int
    tipo_movimiento: MovementKind
    cantidad: Decimal
    motivo: str | None
    usuario_nombre: str | None
    fecha: datetime

    @property
    def contribution(self) -> Decimal:
        """Signed effect of this movement on the article balance."""
        return signed_contribution(self.tipo_movimiento, self.cantidad)


@dataclass(frozen=True)
class StockBalanceInfo:
    """Current on-hand quantity for an article."""

    articulo_id: int
    cantidad_actual: Decimal
    ultima_actualizacion: datetime | None


@dataclass(frozen=True)
class MovementResult:
    """
    Outcome of a ledger write.

    ``movement`` is None after a delete.  ``cantidad_actual`` is the balance
    of the article after the write.
    """

    articulo_id: int
    cantidad_actual: Decimal
    movement: MovementInfo | None = None


@dataclass(frozen=True)
class CountSessionInfo:
    """Header of a physical count session."""

    id: UUID
    folio: int
    fecha_inicio: datetime
    fecha_fin: datetime | None
    estado: CountSessionStatus
    categoria_id: int | None
    usuario_auth0_sub: str
    usuario_correo: str | None
    detail_count: int


@dataclass(frozen=True)
class CountDetailInfo:
    """One worksheet row: snapshot quantity versus recounted quantity."""

    id: UUID
    toma_id: UUID
    articulo_id: int
    cantidad_teorica: Decimal
    cantidad_real: Decimal

    @property
    def diferencia(self) -> Decimal:
        return self.cantidad_real - self.cantidad_teorica


@dataclass(frozen=True)
class CountEntry:
    """
    One operator recount: overwrite cantidad_real of a detail row.

    ``detalle_id`` is kept as received; ids that do not parse or do not
    belong to the session are skipped by the service.
    """

    detalle_id: Any
    cantidad_real: Any

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> CountEntry:
        """Build from a decoded JSON object ``{"detalle_id", "cantidad_real"}``."""
        return cls(
            detalle_id=data.get("detalle_id"),
            cantidad_real=data.get("cantidad_real"),
        )


@dataclass(frozen=True)
class RecordCountsResult:
    """Partial-success result of a recount batch."""

    toma_id: UUID
    updated: tuple[UUID, ...]
    skipped: tuple[Any, ...]

    @property
    def updated_count(self) -> int:
        return len(self.updated)

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)


@dataclass(frozen=True)
class LedgerReconciliation:
    """Stored balance compared against the sum of movement contributions."""

    articulo_id: int
    stored_balance: Decimal | None
    derived_balance: Decimal
    movement_count: int

    @property
    def difference(self) -> Decimal:
        stored = self.stored_balance if self.stored_balance is not None else Decimal(0)
        return stored - self.derived_balance

    @property
    def is_reconciled(self) -> bool:
        if self.stored_balance is None:
            return self.movement_count == 0
        return self.difference == 0
