"""
Quantity column type and boundary conversion.

Stock quantities are ``Decimal`` with four decimal places (``Numeric(18, 4)``)
in every column, DTO and calculation.  ``to_quantity`` is where outside values
enter the kernel: anything it cannot store exactly is rejected rather than
rounded.  ``round_quantity`` normalises the results of ledger arithmetic.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from sqlalchemy import Numeric

from stock_kernel.exceptions import InvalidQuantityError

QUANTITY_DECIMAL_PLACES = 4
QUANTITY_TYPE = Numeric(18, QUANTITY_DECIMAL_PLACES)

_QUANTUM = Decimal(1).scaleb(-QUANTITY_DECIMAL_PLACES)


def round_quantity(value: Decimal) -> Decimal:
    """Quantize to QUANTITY_DECIMAL_PLACES, ROUND_HALF_UP."""
    return value.quantize(_QUANTUM, rounding=ROUND_HALF_UP)


def to_quantity(value: Any) -> Decimal:
    """
    Convert a boundary value into a Decimal quantity with four places.

    Accepts Decimal, int and numeric strings.  Floats are rejected: callers
    decoding JSON should use ``parse_float=Decimal``.  Trailing zeros beyond
    the fourth place are fine ("2.50000"); significant digits there are not
    ("2.00005").

    Raises:
        InvalidQuantityError: If the value is not an exact finite number
            representable with four decimal places.
    """
    if isinstance(value, bool) or value is None:
        raise InvalidQuantityError(value, "must be a number")
    if isinstance(value, float):
        raise InvalidQuantityError(value, "floats are not accepted, use Decimal")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, str)):
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation as exc:
            raise InvalidQuantityError(value, "not a number") from exc
    else:
        raise InvalidQuantityError(value, f"unsupported type {type(value).__name__}")

    if not result.is_finite():
        raise InvalidQuantityError(value, "must be finite")
    quantity = round_quantity(result)
    if quantity != result:
        raise InvalidQuantityError(
            value, f"more than {QUANTITY_DECIMAL_PLACES} decimal places"
        )
    return quantity


ZERO = round_quantity(Decimal(0))
