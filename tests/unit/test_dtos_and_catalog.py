"""Frozen DTO behaviour and the in-memory catalog."""

import dataclasses
from datetime import datetime, timezone
from decimal import Decimal
from uuid import uuid4

import pytest

from stock_kernel.domain.catalog import ArticleCatalog, InMemoryArticleCatalog
from stock_kernel.domain.clock import DeterministicClock
from stock_kernel.domain.dtos import (
    ArticleRef,
    CountDetailInfo,
    CountEntry,
    LedgerReconciliation,
    MovementInfo,
    RecordCountsResult,
)
from stock_kernel.domain.movement_kind import MovementKind


def test_movement_info_contribution_and_frozen():
    info = MovementInfo(
        id=uuid4(),
        articulo_id=1,
        tipo_movimiento=MovementKind.VENTA,
        cantidad=Decimal("4"),
        motivo=None,
        usuario_nombre="ana",
        fecha=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )
    assert info.contribution == Decimal("-4")
    with pytest.raises(dataclasses.FrozenInstanceError):
        info.cantidad = Decimal("1")


def test_count_detail_diferencia():
    detail = CountDetailInfo(
        id=uuid4(),
        toma_id=uuid4(),
        articulo_id=3,
        cantidad_teorica=Decimal("10"),
        cantidad_real=Decimal("7"),
    )
    assert detail.diferencia == Decimal("-3")


def test_count_entry_from_mapping():
    entry = CountEntry.from_mapping({"detalle_id": "abc", "cantidad_real": "5"})
    assert entry == CountEntry(detalle_id="abc", cantidad_real="5")
    assert CountEntry.from_mapping({}).detalle_id is None


def test_record_counts_result_counts():
    result = RecordCountsResult(toma_id=uuid4(), updated=(uuid4(), uuid4()), skipped=("x",))
    assert result.updated_count == 2
    assert result.skipped_count == 1


class TestLedgerReconciliation:
    def test_matching_balance(self):
        check = LedgerReconciliation(1, Decimal("5"), Decimal("5"), 2)
        assert check.is_reconciled
        assert check.difference == 0

    def test_drift(self):
        check = LedgerReconciliation(1, Decimal("8"), Decimal("5"), 2)
        assert not check.is_reconciled
        assert check.difference == Decimal("3")

    def test_missing_balance_with_movements_is_drift(self):
        assert not LedgerReconciliation(1, None, Decimal("0"), 1).is_reconciled
        assert LedgerReconciliation(1, None, Decimal("0"), 0).is_reconciled


class TestInMemoryArticleCatalog:
    def test_satisfies_protocol(self):
        assert isinstance(InMemoryArticleCatalog(), ArticleCatalog)

    def test_lists_sorted_and_filters_by_category(self):
        catalog = InMemoryArticleCatalog(
            [ArticleRef(3, 20), ArticleRef(1, 10), ArticleRef(2, 20)]
        )
        assert [a.articulo_id for a in catalog.list_articles()] == [1, 2, 3]
        assert [a.articulo_id for a in catalog.list_articles(20)] == [2, 3]

    def test_add_and_remove(self):
        catalog = InMemoryArticleCatalog()
        catalog.add(ArticleRef(9))
        assert catalog.list_articles() == [ArticleRef(9)]
        catalog.remove(9)
        catalog.remove(9)
        assert catalog.list_articles() == []


def test_deterministic_clock():
    start = datetime(2024, 1, 1, tzinfo=timezone.utc)
    clock = DeterministicClock(start)
    assert clock.now() == clock.now() == start
    assert (clock.tick() - start).total_seconds() == 1
    clock.advance(9)
    assert (clock.now() - start).total_seconds() == 10
