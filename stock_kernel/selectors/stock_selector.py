"""
Module: stock_kernel.selectors.stock_selector
Responsibility: Read-only balance queries: the inventory report, single
    article balance, and reconciliation of stored balances against the
    movement ledger.
Architecture position: Kernel > Selectors.

Invariants checked:
    The stored balance of an article must equal the sum of the signed
    contributions of its movements.  ``reconcile`` and ``find_drift``
    recompute that sum in SQL from the movement rows and report any
    difference; they never repair it.

Audit relevance:
    ``find_drift`` is the periodic health check for the ledger.  A non-empty
    result means a balance was written outside MovementLedger.
"""

from decimal import Decimal
from typing import Any

from sqlalchemy import case, func, select

from stock_kernel.db.types import ZERO, round_quantity
from stock_kernel.domain.catalog import ArticleCatalog
from stock_kernel.domain.dtos import LedgerReconciliation, StockBalanceInfo
from stock_kernel.domain.identifiers import parse_article_id, parse_category_id
from stock_kernel.domain.movement_kind import MovementKind, SignRule, sign_rule
from stock_kernel.models.movement import Movement
from stock_kernel.models.stock_balance import StockBalance
from stock_kernel.selectors.base import BaseSelector

_DECREASING_KINDS = [k.value for k in MovementKind if sign_rule(k) is SignRule.DECREASE]

# Signed contribution of one movement row, as a SQL expression
_CONTRIBUTION = case(
    (Movement.tipo_movimiento.in_(_DECREASING_KINDS), -Movement.cantidad),
    else_=Movement.cantidad,
)


class StockSelector(BaseSelector[StockBalance]):
    """Selector for current stock and ledger reconciliation."""

    def get_balance(self, articulo_id: Any) -> StockBalanceInfo | None:
        """Balance of one article, or None if it has never had stock."""
        balance = self.session.execute(
            select(StockBalance).where(
                StockBalance.articulo_id == parse_article_id(articulo_id)
            )
        ).scalar_one_or_none()
        return balance.to_dto() if balance else None

    def inventory_report(
        self,
        catalog: ArticleCatalog | None = None,
        categoria_id: Any = None,
    ) -> list[StockBalanceInfo]:
        """
        Current stock ordered by articulo_id.

        Without a catalog, lists every stored balance row.  With a catalog,
        lists the catalog's articles (optionally one category) and reports
        zero for articles that have no balance row yet.
        """
        if catalog is None:
            rows = self.session.execute(
                select(StockBalance).order_by(StockBalance.articulo_id)
            ).scalars()
            return [r.to_dto() for r in rows]

        categoria_id = parse_category_id(categoria_id)
        ids = sorted({a.articulo_id for a in catalog.list_articles(categoria_id)})
        if not ids:
            return []
        stored = {
            r.articulo_id: r
            for r in self.session.execute(
                select(StockBalance).where(StockBalance.articulo_id.in_(ids))
            ).scalars()
        }
        return [
            stored[i].to_dto()
            if i in stored
            else StockBalanceInfo(articulo_id=i, cantidad_actual=ZERO, ultima_actualizacion=None)
            for i in ids
        ]

    def _derived_balances(self, articulo_id: int | None = None) -> dict[int, tuple[Decimal, int]]:
        query = select(
            Movement.articulo_id,
            func.coalesce(func.sum(_CONTRIBUTION), 0).label("derived"),
            func.count(Movement.id).label("movement_count"),
        ).group_by(Movement.articulo_id)
        if articulo_id is not None:
            query = query.where(Movement.articulo_id == articulo_id)

        return {
            row.articulo_id: (round_quantity(Decimal(str(row.derived))), row.movement_count)
            for row in self.session.execute(query)
        }

    def reconcile(self, articulo_id: Any) -> LedgerReconciliation:
        """Compare the stored balance of one article with its movement sum."""
        articulo_id = parse_article_id(articulo_id)
        stored = self.session.execute(
            select(StockBalance.cantidad_actual).where(
                StockBalance.articulo_id == articulo_id
            )
        ).scalar_one_or_none()
        derived, count = self._derived_balances(articulo_id).get(articulo_id, (ZERO, 0))
        return LedgerReconciliation(
            articulo_id=articulo_id,
            stored_balance=stored,
            derived_balance=derived,
            movement_count=count,
        )

    def find_drift(self) -> list[LedgerReconciliation]:
        """Every article whose stored balance disagrees with its ledger."""
        derived = self._derived_balances()
        stored = dict(
            self.session.execute(
                select(StockBalance.articulo_id, StockBalance.cantidad_actual)
            ).all()
        )

        results = []
        for articulo_id in sorted(set(derived) | set(stored)):
            total, count = derived.get(articulo_id, (ZERO, 0))
            check = LedgerReconciliation(
                articulo_id=articulo_id,
                stored_balance=stored.get(articulo_id),
                derived_balance=total,
                movement_count=count,
            )
            if not check.is_reconciled:
                results.append(check)
        return results
