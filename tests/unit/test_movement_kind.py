"""Unit tests for MovementKind parsing and the sign rule."""

from decimal import Decimal

import pytest

from stock_kernel.domain.movement_kind import (
    MovementKind,
    SignRule,
    is_magnitude_kind,
    parse_movement_kind,
    sign_rule,
    signed_contribution,
)
from stock_kernel.exceptions import MissingMovementKindError, UnknownMovementKindError


class TestSignRule:
    @pytest.mark.parametrize(
        "kind",
        [MovementKind.ALTA, MovementKind.COMPRA, MovementKind.TRANSFER_IN],
    )
    def test_increasing_kinds(self, kind):
        assert sign_rule(kind) is SignRule.INCREASE
        assert signed_contribution(kind, Decimal("5")) == Decimal("5")

    @pytest.mark.parametrize(
        "kind",
        [MovementKind.VENTA, MovementKind.BAJA, MovementKind.ROBO, MovementKind.TRANSFER_OUT],
    )
    def test_decreasing_kinds(self, kind):
        assert sign_rule(kind) is SignRule.DECREASE
        assert signed_contribution(kind, Decimal("5")) == Decimal("-5")

    def test_adjustment_adds_signed_delta_as_is(self):
        assert sign_rule(MovementKind.ADJUSTMENT) is SignRule.RAW_DELTA
        assert signed_contribution(MovementKind.ADJUSTMENT, Decimal("-3")) == Decimal("-3")
        assert signed_contribution(MovementKind.ADJUSTMENT, Decimal("4")) == Decimal("4")

    def test_every_kind_has_a_rule(self):
        for kind in MovementKind:
            assert isinstance(sign_rule(kind), SignRule)

    def test_only_adjustment_is_not_a_magnitude(self):
        non_magnitude = [k for k in MovementKind if not is_magnitude_kind(k)]
        assert non_magnitude == [MovementKind.ADJUSTMENT]


class TestParseMovementKind:
    def test_parses_stored_values(self):
        assert parse_movement_kind("transferencia_salida") is MovementKind.TRANSFER_OUT
        assert parse_movement_kind(" compra ") is MovementKind.COMPRA

    def test_passes_enum_through(self):
        assert parse_movement_kind(MovementKind.ROBO) is MovementKind.ROBO

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_missing(self, value):
        with pytest.raises(MissingMovementKindError) as exc_info:
            parse_movement_kind(value)
        assert exc_info.value.code == "MISSING_MOVEMENT_KIND"

    @pytest.mark.parametrize("value", ["teletransporte", "COMPRA", "ajuste"])
    def test_unknown(self, value):
        with pytest.raises(UnknownMovementKindError) as exc_info:
            parse_movement_kind(value)
        assert exc_info.value.tipo_movimiento == value
        assert exc_info.value.kind == "validation"
