"""
CountSessionService -- physical inventory recount worksheets.

Responsibility:
    Opens a count session (tomafisica) with a snapshot of the current stock
    of every catalog article, records the quantities operators actually
    counted, and cancels sessions that will not be used.

Architecture position:
    Kernel > Services.  Reads the article list through the ArticleCatalog
    contract, balances through StockAggregateStore and allocates folios
    from SequenceService.

Invariants enforced:
    - At open, each detail row's cantidad_teorica equals the article's
      balance as read by one shared-lock snapshot statement, or zero when
      the article has no balance row.  cantidad_real starts at zero.
    - Folios come from the locked ``toma_fisica_folio`` counter.
    - Recording counts overwrites cantidad_real only; balances and
      movements are never touched by a count session.
    - Cancelling removes the session and all of its detail rows.

Failure modes:
    - InvalidCategoryIdError / MissingOperatorError before open writes.
    - InvalidCountEntryError before any recount is written; the whole
      batch is rejected.
    - CountSessionNotFoundError for unknown session ids.
    - Entries whose detalle_id is malformed or belongs to another session
      are skipped and reported, not raised.
    - StorageFailureError wrapping any SQLAlchemy failure.
"""

from collections.abc import Iterable, Mapping
from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from stock_kernel.db.types import ZERO, to_quantity
from stock_kernel.domain.catalog import ArticleCatalog
from stock_kernel.domain.clock import Clock, SystemClock
from stock_kernel.domain.dtos import (
    CountEntry,
    CountSessionInfo,
    CountSessionStatus,
    OperatorIdentity,
    RecordCountsResult,
)
from stock_kernel.domain.identifiers import parse_category_id, parse_uuid
from stock_kernel.exceptions import (
    CountSessionNotFoundError,
    InvalidCountEntryError,
    InvalidQuantityError,
    MissingOperatorError,
)
from stock_kernel.logging_config import LogContext, get_logger
from stock_kernel.models.count_session import CountDetail, CountSession
from stock_kernel.services.base import BaseService
from stock_kernel.services.sequence_service import SequenceService
from stock_kernel.services.stock_aggregate_store import StockAggregateStore

logger = get_logger("services.count_session")


class CountSessionService(BaseService[CountSession]):
    """Open, fill in and cancel physical count sessions."""

    def __init__(
        self,
        session: Session,
        catalog: ArticleCatalog,
        clock: Clock | None = None,
        store: StockAggregateStore | None = None,
        sequences: SequenceService | None = None,
    ):
        super().__init__(session)
        self._catalog = catalog
        self._clock = clock or SystemClock()
        self._store = store or StockAggregateStore(session)
        self._sequences = sequences or SequenceService(session)

    def _get_count_session(self, toma_id: Any) -> CountSession:
        parsed = parse_uuid(toma_id)
        if parsed is None:
            raise CountSessionNotFoundError(str(toma_id))
        toma = self.session.get(CountSession, parsed)
        if toma is None:
            raise CountSessionNotFoundError(str(parsed))
        return toma

    def open_session(
        self,
        operator: OperatorIdentity,
        categoria_id: Any = None,
    ) -> CountSessionInfo:
        """
        Create a session with one detail row per catalog article.

        With ``categoria_id`` only the articles of that category are listed.
        An empty article list still opens a session, with no detail rows.
        """
        if operator is None or not (operator.sub or "").strip():
            raise MissingOperatorError()
        categoria_id = parse_category_id(categoria_id)

        articles: dict[int, Any] = {}
        for article in self._catalog.list_articles(categoria_id):
            if categoria_id is None or article.categoria_id == categoria_id:
                articles.setdefault(article.articulo_id, article)
        now = self._clock.now()

        with LogContext.bind(actor_id=operator.sub):
            with self._atomic("open_session"):
                folio = self._sequences.next_value(SequenceService.COUNT_SESSION_FOLIO)
                toma = CountSession(
                    folio=folio,
                    fecha_inicio=now,
                    estado=CountSessionStatus.ABIERTA.value,
                    categoria_id=categoria_id,
                    usuario_auth0_sub=operator.sub,
                    usuario_correo=operator.email,
                )
                self.session.add(toma)
                self.session.flush()

                quantities = self._store.snapshot(articles)
                for articulo_id in sorted(articles):
                    toma.detalles.append(
                        CountDetail(
                            articulo_id=articulo_id,
                            cantidad_teorica=quantities.get(articulo_id, ZERO),
                            cantidad_real=ZERO,
                        )
                    )
                self.session.flush()

            logger.info(
                "count_session_opened",
                extra={
                    "toma_id": toma.id,
                    "folio": folio,
                    "categoria_id": categoria_id,
                    "detail_count": len(articles),
                },
            )
            return toma.to_dto(detail_count=len(articles))

    def record_counts(
        self,
        toma_id: UUID | str,
        entries: Iterable[CountEntry | Mapping[str, Any]],
    ) -> RecordCountsResult:
        """
        Overwrite cantidad_real for each entry whose detail belongs to the session.

        Every quantity is validated first; one negative or non-numeric
        quantity rejects the whole batch.  Entries pointing at unknown or
        foreign detail rows are returned in ``skipped``.
        """
        parsed: list[tuple[Any, Any]] = []
        for entry in entries:
            if not isinstance(entry, CountEntry):
                entry = CountEntry.from_mapping(dict(entry))
            try:
                cantidad = to_quantity(entry.cantidad_real)
            except InvalidQuantityError as exc:
                raise InvalidCountEntryError(entry.detalle_id, exc.reason) from exc
            if cantidad < 0:
                raise InvalidCountEntryError(entry.detalle_id, "cantidad_real must not be negative")
            parsed.append((entry.detalle_id, cantidad))

        # keyed by detail id: a repeated detail is counted once, last entry wins
        updated: dict[UUID, None] = {}
        skipped: list[Any] = []

        with LogContext.bind(toma_id=toma_id):
            with self._atomic("record_counts"):
                toma = self._get_count_session(toma_id)
                wanted = {d for d in (parse_uuid(raw) for raw, _ in parsed) if d is not None}
                details: dict[UUID, CountDetail] = {}
                if wanted:
                    details = {
                        d.id: d
                        for d in self.session.execute(
                            select(CountDetail).where(
                                CountDetail.toma_id == toma.id,
                                CountDetail.id.in_(wanted),
                            )
                        ).scalars()
                    }

                for raw_id, cantidad in parsed:
                    detail_id = parse_uuid(raw_id)
                    detail = details.get(detail_id) if detail_id is not None else None
                    if detail is None:
                        skipped.append(raw_id)
                        continue
                    detail.cantidad_real = cantidad
                    updated[detail.id] = None

            logger.info(
                "counts_recorded",
                extra={"updated_count": len(updated), "skipped_count": len(skipped)},
            )
            if skipped:
                logger.warning(
                    "count_entries_skipped",
                    extra={"skipped": [str(s) for s in skipped]},
                )
            return RecordCountsResult(
                toma_id=toma.id,
                updated=tuple(updated),
                skipped=tuple(skipped),
            )

    def cancel_session(self, toma_id: UUID | str) -> None:
        """Delete the session together with all of its detail rows."""
        with LogContext.bind(toma_id=toma_id):
            with self._atomic("cancel_session"):
                toma = self._get_count_session(toma_id)
                folio = toma.folio
                detail_count = len(toma.detalles)
                self.session.delete(toma)
                self.session.flush()

            logger.info(
                "count_session_cancelled",
                extra={"folio": folio, "detail_count": detail_count},
            )
