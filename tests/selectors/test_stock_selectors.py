"""Read-side tests: movement report, inventory report, reconciliation, sessions."""

from decimal import Decimal
from uuid import uuid4

import pytest

from stock_kernel.domain.dtos import CountEntry, CountSessionStatus
from stock_kernel.domain.movement_kind import MovementKind
from stock_kernel.exceptions import CountSessionNotFoundError, UnknownMovementKindError
from stock_kernel.models.stock_balance import StockBalance


@pytest.fixture
def history(ledger, deterministic_clock):
    """Three movements on article 1 and one on article 2, one second apart."""
    results = []
    for articulo_id, tipo, cantidad in [
        (1, "alta", 10),
        (1, "venta", 2),
        (2, "compra", 4),
        (1, "ajuste_inventario", -1),
    ]:
        results.append(ledger.record_movement(articulo_id, tipo, cantidad))
        deterministic_clock.advance(1)
    return results


class TestMovementSelector:
    def test_newest_first(self, movement_selector, history):
        movements = movement_selector.list_movements()
        assert [m.id for m in movements] == [r.movement.id for r in reversed(history)]

    def test_filters(self, movement_selector, history):
        assert len(movement_selector.list_movements(articulo_id=1)) == 3
        ventas = movement_selector.list_movements(tipo="venta")
        assert [m.tipo_movimiento for m in ventas] == [MovementKind.VENTA]
        assert movement_selector.list_movements(articulo_id="1", tipo=MovementKind.COMPRA) == []

    def test_limit(self, movement_selector, history):
        assert len(movement_selector.list_movements(limit=2)) == 2

    def test_unknown_kind_filter(self, movement_selector):
        with pytest.raises(UnknownMovementKindError):
            movement_selector.list_movements(tipo="regalo")

    def test_get_movement(self, movement_selector, history):
        assert movement_selector.get_movement(history[0].movement.id).cantidad == Decimal("10")
        assert movement_selector.get_movement(uuid4()) is None
        assert movement_selector.get_movement("nope") is None


class TestStockSelector:
    def test_inventory_report_without_catalog(self, stock_selector, history):
        report = stock_selector.inventory_report()
        assert [(r.articulo_id, r.cantidad_actual) for r in report] == [
            (1, Decimal("7")),
            (2, Decimal("4")),
        ]

    def test_inventory_report_with_catalog(self, stock_selector, catalog, history):
        report = stock_selector.inventory_report(catalog)
        assert [r.articulo_id for r in report] == [1, 2, 3, 4, 5]
        assert report[2].cantidad_actual == Decimal("0")
        assert report[2].ultima_actualizacion is None

        by_category = stock_selector.inventory_report(catalog, categoria_id=20)
        assert [r.articulo_id for r in by_category] == [4, 5]

    def test_get_balance(self, stock_selector, history):
        assert stock_selector.get_balance(2).cantidad_actual == Decimal("4")
        assert stock_selector.get_balance(3) is None

    def test_reconcile(self, stock_selector, history):
        check = stock_selector.reconcile(1)
        assert check.is_reconciled
        assert check.derived_balance == Decimal("7")
        assert check.movement_count == 3

    def test_reconcile_article_without_history(self, stock_selector):
        check = stock_selector.reconcile(42)
        assert check.stored_balance is None
        assert check.is_reconciled

    def test_find_drift_reports_tampered_balance(self, session, stock_selector, history):
        assert stock_selector.find_drift() == []

        session.query(StockBalance).filter_by(articulo_id=2).update({"cantidad_actual": Decimal("9")})
        session.expire_all()

        drift = stock_selector.find_drift()
        assert [d.articulo_id for d in drift] == [2]
        assert drift[0].difference == Decimal("5")


class TestCountSessionSelector:
    def test_list_sessions_newest_folio_first(self, counts, session_selector, operator):
        first = counts.open_session(operator)
        second = counts.open_session(operator, categoria_id=10)

        sessions = session_selector.list_sessions()
        assert [s.id for s in sessions] == [second.id, first.id]
        assert [s.detail_count for s in sessions] == [3, 5]
        assert session_selector.list_sessions(estado=CountSessionStatus.CERRADA) == []
        assert len(session_selector.list_sessions(estado="abierta")) == 2

    def test_session_details_variance(self, counts, ledger, session_selector, operator):
        ledger.seed_article(3, 6)
        toma = counts.open_session(operator, categoria_id=10)
        detail = session_selector.session_details(toma.id)[2]
        counts.record_counts(toma.id, [CountEntry(detail.id, 4)])

        row = session_selector.session_details(toma.id)[2]
        assert row.articulo_id == 3
        assert row.cantidad_teorica == Decimal("6")
        assert row.diferencia == Decimal("-2")

    def test_missing_session(self, session_selector):
        assert session_selector.get_session(uuid4()) is None
        with pytest.raises(CountSessionNotFoundError):
            session_selector.session_details(uuid4())
