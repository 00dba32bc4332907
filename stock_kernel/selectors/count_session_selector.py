"""
Module: stock_kernel.selectors.count_session_selector
Responsibility: Read-only views of physical count sessions: the session list
    with detail counts, one session header, and the worksheet rows with
    their variance (diferencia = cantidad_real - cantidad_teorica).
Architecture position: Kernel > Selectors.
"""

from typing import Any

from sqlalchemy import func, select

from stock_kernel.domain.dtos import CountDetailInfo, CountSessionInfo, CountSessionStatus
from stock_kernel.domain.identifiers import parse_uuid
from stock_kernel.exceptions import CountSessionNotFoundError
from stock_kernel.models.count_session import CountDetail, CountSession
from stock_kernel.selectors.base import BaseSelector


class CountSessionSelector(BaseSelector[CountSession]):
    """Selector for count sessions and their worksheets."""

    def list_sessions(self, estado: CountSessionStatus | str | None = None) -> list[CountSessionInfo]:
        """Sessions newest folio first, each with its number of detail rows."""
        detail_count = (
            select(func.count(CountDetail.id))
            .where(CountDetail.toma_id == CountSession.id)
            .correlate(CountSession)
            .scalar_subquery()
        )
        query = select(CountSession, detail_count).order_by(CountSession.folio.desc())
        if estado is not None:
            query = query.where(CountSession.estado == CountSessionStatus(estado).value)

        return [
            toma.to_dto(detail_count=count)
            for toma, count in self.session.execute(query).all()
        ]

    def get_session(self, toma_id: Any) -> CountSessionInfo | None:
        """One session header, or None."""
        parsed = parse_uuid(toma_id)
        if parsed is None:
            return None
        toma = self.session.get(CountSession, parsed)
        return toma.to_dto() if toma else None

    def session_details(self, toma_id: Any) -> list[CountDetailInfo]:
        """
        Worksheet rows of a session ordered by articulo_id.

        Raises:
            CountSessionNotFoundError: If the session does not exist.
        """
        parsed = parse_uuid(toma_id)
        if parsed is None or self.session.get(CountSession, parsed) is None:
            raise CountSessionNotFoundError(str(toma_id))

        rows = self.session.execute(
            select(CountDetail)
            .where(CountDetail.toma_id == parsed)
            .order_by(CountDetail.articulo_id)
        ).scalars()
        return [d.to_dto() for d in rows]
