"""
Module: stock_kernel.selectors.movement_selector
Responsibility: Read-only movement report queries (movements per article and
    per kind, newest first).
Architecture position: Kernel > Selectors.
"""

from typing import Any

from sqlalchemy import select

from stock_kernel.domain.dtos import MovementInfo
from stock_kernel.domain.identifiers import parse_article_id, parse_uuid
from stock_kernel.domain.movement_kind import parse_movement_kind
from stock_kernel.models.movement import Movement
from stock_kernel.selectors.base import BaseSelector


class MovementSelector(BaseSelector[Movement]):
    """Selector for the movement ledger report."""

    def get_movement(self, movement_id: Any) -> MovementInfo | None:
        """Get a movement by id, or None."""
        parsed = parse_uuid(movement_id)
        if parsed is None:
            return None
        movement = self.session.get(Movement, parsed)
        return movement.to_dto() if movement else None

    def list_movements(
        self,
        articulo_id: Any = None,
        tipo: Any = None,
        limit: int | None = None,
    ) -> list[MovementInfo]:
        """
        List movements, newest first.

        Args:
            articulo_id: Restrict to one article.
            tipo: Restrict to one movement kind (validated).
            limit: Maximum number of rows.
        """
        query = select(Movement)
        if articulo_id is not None:
            query = query.where(Movement.articulo_id == parse_article_id(articulo_id))
        if tipo is not None:
            query = query.where(Movement.tipo_movimiento == parse_movement_kind(tipo).value)
        query = query.order_by(Movement.fecha.desc(), Movement.created_at.desc())
        if limit is not None:
            query = query.limit(limit)

        return [m.to_dto() for m in self.session.execute(query).scalars()]

