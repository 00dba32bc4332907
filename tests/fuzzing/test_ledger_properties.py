"""
Property-based tests for the balance invariant.

For any sequence of record / edit / delete calls on one article, the stored
balance equals the sum of the signed contributions of the movements that
still exist, and matches an independent in-memory model of the ledger.
"""

from decimal import Decimal

import pytest
from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from stock_kernel.domain.movement_kind import MovementKind, signed_contribution
from stock_kernel.exceptions import ImmutableMovementKindError

ARTICLE = 11

quantities = st.decimals(
    min_value=Decimal("0.0001"),
    max_value=Decimal("10000"),
    places=4,
    allow_nan=False,
    allow_infinity=False,
)
kinds = st.sampled_from(list(MovementKind))


@st.composite
def operations(draw):
    ops = []
    for _ in range(draw(st.integers(min_value=1, max_value=12))):
        action = draw(st.sampled_from(["record", "record", "edit", "delete"]))
        if action == "record":
            kind = draw(kinds)
            cantidad = draw(quantities)
            if kind is MovementKind.ADJUSTMENT and draw(st.booleans()):
                cantidad = -cantidad
            ops.append(("record", kind, cantidad))
        elif action == "edit":
            ops.append(("edit", draw(st.integers(0, 50)), draw(quantities), draw(st.none() | kinds)))
        else:
            ops.append(("delete", draw(st.integers(0, 50))))
    return ops


@pytest.mark.slow_locks
@given(ops=operations())
@settings(
    max_examples=75,
    deadline=None,
    suppress_health_check=[HealthCheck.too_slow, HealthCheck.function_scoped_fixture],
)
def test_balance_matches_ledger_after_any_sequence(session, ledger, store, stock_selector, ops):
    savepoint = session.begin_nested()
    try:
        model: dict = {}
        expected = Decimal(0)

        for op in ops:
            if op[0] == "record":
                _, kind, cantidad = op
                result = ledger.record_movement(ARTICLE, kind, cantidad)
                model[result.movement.id] = (kind, cantidad)
                expected += signed_contribution(kind, cantidad)

            elif op[0] == "edit" and model:
                _, index, cantidad, new_kind = op
                movement_id = list(model)[index % len(model)]
                old_kind, old_cantidad = model[movement_id]
                target = new_kind if new_kind is not None else old_kind

                if old_kind is MovementKind.ALTA and target is not MovementKind.ALTA:
                    with pytest.raises(ImmutableMovementKindError):
                        ledger.edit_movement(movement_id, cantidad, new_tipo_movimiento=new_kind)
                    continue

                base = expected - signed_contribution(old_kind, old_cantidad)
                stored = cantidad - base if target is MovementKind.ADJUSTMENT else cantidad
                ledger.edit_movement(movement_id, cantidad, new_tipo_movimiento=new_kind)
                model[movement_id] = (target, stored)
                expected = base + signed_contribution(target, stored)

            elif op[0] == "delete" and model:
                movement_id = list(model)[op[1] % len(model)]
                kind, cantidad = model.pop(movement_id)
                ledger.delete_movement(movement_id)
                expected -= signed_contribution(kind, cantidad)

            assert (store.get(ARTICLE) or Decimal(0)) == expected
            check = stock_selector.reconcile(ARTICLE)
            assert check.is_reconciled, check
            assert check.movement_count == len(model)
    finally:
        savepoint.rollback()
