"""
MovementKind -- the closed set of stock movement kinds and their sign rule.

Responsibility:
    Replaces free-text movement types with a closed enumeration and maps
    every kind to exactly one SignRule.  The ledger derives every balance
    change from ``signed_contribution()``; no other code decides the sign
    of a movement.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - Increasing kinds: alta, compra, transferencia_entrada.
    - Decreasing kinds: venta, baja, robo, transferencia_salida.
    - ajuste_inventario stores an already-signed delta that is added as-is.
    - Any other string is rejected by ``parse_movement_kind`` before any
      arithmetic happens.

Failure modes:
    - MissingMovementKindError for empty / None input.
    - UnknownMovementKindError for values outside the closed set.
"""

from __future__ import annotations

from decimal import Decimal
from enum import Enum

from stock_kernel.exceptions import MissingMovementKindError, UnknownMovementKindError


class MovementKind(str, Enum):
    """Kinds of stock movements recorded in the ledger."""

    ALTA = "alta"  # Initial stock intake when an article is created
    COMPRA = "compra"
    VENTA = "venta"
    BAJA = "baja"
    ROBO = "robo"
    TRANSFER_IN = "transferencia_entrada"
    TRANSFER_OUT = "transferencia_salida"
    ADJUSTMENT = "ajuste_inventario"


class SignRule(str, Enum):
    """How a movement's stored cantidad contributes to the balance."""

    INCREASE = "increase"
    DECREASE = "decrease"
    RAW_DELTA = "raw_delta"


_SIGN_RULES: dict[MovementKind, SignRule] = {
    MovementKind.ALTA: SignRule.INCREASE,
    MovementKind.COMPRA: SignRule.INCREASE,
    MovementKind.TRANSFER_IN: SignRule.INCREASE,
    MovementKind.VENTA: SignRule.DECREASE,
    MovementKind.BAJA: SignRule.DECREASE,
    MovementKind.ROBO: SignRule.DECREASE,
    MovementKind.TRANSFER_OUT: SignRule.DECREASE,
    MovementKind.ADJUSTMENT: SignRule.RAW_DELTA,
}


def parse_movement_kind(value: str | MovementKind | None) -> MovementKind:
    """
    Validate a boundary value into a MovementKind.

    Matching is exact on the stored string value; surrounding whitespace
    is ignored.

    Raises:
        MissingMovementKindError: If value is None or blank.
        UnknownMovementKindError: If value is not a known kind.
    """
    if isinstance(value, MovementKind):
        return value
    if value is None or not str(value).strip():
        raise MissingMovementKindError()
    try:
        return MovementKind(str(value).strip())
    except ValueError:
        raise UnknownMovementKindError(str(value)) from None


def sign_rule(kind: MovementKind) -> SignRule:
    """Return the sign rule for a movement kind."""
    return _SIGN_RULES[kind]


def signed_contribution(kind: MovementKind, cantidad: Decimal) -> Decimal:
    """
    Contribution of one movement to its article's balance.

    INCREASE adds the magnitude, DECREASE subtracts it, RAW_DELTA adds the
    stored value with whatever sign it already carries.
    """
    rule = sign_rule(kind)
    if rule is SignRule.INCREASE:
        return cantidad
    if rule is SignRule.DECREASE:
        return -cantidad
    return cantidad


def is_magnitude_kind(kind: MovementKind) -> bool:
    """True when the kind stores a positive magnitude rather than a delta."""
    return sign_rule(kind) is not SignRule.RAW_DELTA
