"""StockKernelRuntime: settings to engine, unit of work commit/rollback."""

from decimal import Decimal

import pytest

from stock_config import load_settings
from stock_kernel.domain.catalog import InMemoryArticleCatalog
from stock_kernel.domain.dtos import ArticleRef, OperatorIdentity
from stock_kernel.exceptions import UnknownMovementKindError
from stock_kernel.runtime import StockKernelRuntime


@pytest.fixture
def runtime(tmp_path):
    settings = load_settings(env={"STOCK_DATABASE_URL": f"sqlite:///{tmp_path / 'runtime.db'}"})
    catalog = InMemoryArticleCatalog([ArticleRef(1, 10), ArticleRef(2, 10)])
    with StockKernelRuntime.from_settings(settings, catalog) as rt:
        rt.create_tables()
        yield rt


def test_unit_of_work_commits(runtime):
    with runtime.unit_of_work() as uow:
        uow.ledger.record_movement(1, "compra", 5, usuario="ana")

    with runtime.unit_of_work() as uow:
        assert uow.stock.get_balance(1).cantidad_actual == Decimal("5")
        assert len(uow.movements.list_movements(articulo_id=1)) == 1


def test_unit_of_work_rolls_back_on_error(runtime):
    with pytest.raises(UnknownMovementKindError):
        with runtime.unit_of_work() as uow:
            uow.ledger.record_movement(1, "compra", 5)
            uow.ledger.record_movement(1, "regalo", 5)

    with runtime.unit_of_work() as uow:
        assert uow.stock.get_balance(1) is None


def test_count_session_through_runtime(runtime):
    with runtime.unit_of_work() as uow:
        uow.ledger.seed_article(1, 3)
        toma = uow.counts.open_session(OperatorIdentity(sub="auth0|x"))

    with runtime.unit_of_work() as uow:
        details = uow.sessions.session_details(toma.id)
        assert [d.cantidad_teorica for d in details] == [Decimal("3"), Decimal("0")]
        assert uow.sessions.get_session(toma.id).folio == 1
