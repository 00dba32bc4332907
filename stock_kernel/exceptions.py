"""
Typed Exception Hierarchy for the Stock Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers (HTTP handlers, the sales and purchases modules, batch jobs) must be
able to tell a bad request from a missing record from a broken database
without parsing message strings.  Every error therefore has:

  1. A TYPED exception class (catch by type, not message)
  2. A CODE class attribute (machine-readable, API-safe)
  3. A KIND class attribute on the category bases ("validation",
     "not_found", "storage") so transports can map to status codes
  4. Structured DATA attributes (not just a message string)

Example:
    try:
        ledger.record_movement(articulo_id, "teletransporte", qty)
    except UnknownMovementKindError as e:
        respond(400, code=e.code, tipo=e.tipo_movimiento)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    StockKernelError (base)
    |
    +-- ValidationError
    |   +-- InvalidArticleIdError
    |   +-- InvalidQuantityError
    |   +-- MissingMovementKindError
    |   +-- UnknownMovementKindError
    |   +-- ImmutableMovementKindError
    |   +-- InvalidCountEntryError
    |   +-- InvalidCategoryIdError
    |   +-- MissingOperatorError
    |
    +-- NotFoundError
    |   +-- MovementNotFoundError
    |   +-- StockBalanceNotFoundError
    |   +-- CountSessionNotFoundError
    |
    +-- StorageFailureError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category    | Code                      | When Raised
------------|---------------------------|-----------------------------------------
Validation  | INVALID_ARTICLE_ID        | articulo_id missing or not positive
            | INVALID_QUANTITY          | cantidad not positive / not a number
            | MISSING_MOVEMENT_KIND     | tipo_movimiento empty
            | UNKNOWN_MOVEMENT_KIND     | tipo_movimiento outside the closed set
            | IMMUTABLE_MOVEMENT_KIND   | an alta movement edited to another kind
            | INVALID_COUNT_ENTRY       | negative or malformed recount quantity
            | INVALID_CATEGORY_ID       | categoria_id given but not positive
            | MISSING_OPERATOR          | count session opened without operator sub
------------|---------------------------|-----------------------------------------
Not found   | MOVEMENT_NOT_FOUND        | movement id doesn't exist
            | STOCK_BALANCE_NOT_FOUND   | article has no balance row
            | COUNT_SESSION_NOT_FOUND   | toma id doesn't exist
------------|---------------------------|-----------------------------------------
Storage     | STORAGE_FAILURE           | SQLAlchemy raised during read/write

Partial success in ``record_counts`` is NOT an exception: skipped entries are
reported in the returned ``RecordCountsResult``.

Validation errors are raised before any write.  Not-found and storage errors
abort the operation; the savepoint wrapping the operation is rolled back so
no partial writes survive.
"""

from typing import Any


class StockKernelError(Exception):
    """
    Base exception for all stock kernel errors.

    All subclasses carry a ``code`` class attribute for machine-readable
    error identification.
    """

    code: str = "STOCK_KERNEL_ERROR"
    kind: str = "internal"


# Validation exceptions


class ValidationError(StockKernelError):
    """Base exception for malformed input.  Never retried automatically."""

    code: str = "VALIDATION_ERROR"
    kind: str = "validation"


class InvalidArticleIdError(ValidationError):
    """articulo_id is missing, not an integer, or not positive."""

    code: str = "INVALID_ARTICLE_ID"

    def __init__(self, articulo_id: Any):
        self.articulo_id = articulo_id
        super().__init__(f"Invalid articulo_id: {articulo_id!r} (must be a positive integer)")


class InvalidQuantityError(ValidationError):
    """Quantity is not a finite number or violates its sign rule."""

    code: str = "INVALID_QUANTITY"

    def __init__(self, cantidad: Any, reason: str):
        self.cantidad = cantidad
        self.reason = reason
        super().__init__(f"Invalid cantidad {cantidad!r}: {reason}")


class MissingMovementKindError(ValidationError):
    """tipo_movimiento was empty or None."""

    code: str = "MISSING_MOVEMENT_KIND"

    def __init__(self):
        super().__init__("tipo_movimiento is required")


class UnknownMovementKindError(ValidationError):
    """tipo_movimiento is not one of the closed set of movement kinds."""

    code: str = "UNKNOWN_MOVEMENT_KIND"

    def __init__(self, tipo_movimiento: str):
        self.tipo_movimiento = tipo_movimiento
        super().__init__(
            f"Unknown or disallowed tipo_movimiento: {tipo_movimiento!r}"
        )


class ImmutableMovementKindError(ValidationError):
    """
    An alta movement cannot be re-typed.

    The initial stock intake is immutable in kind; only its quantity may
    be edited.
    """

    code: str = "IMMUTABLE_MOVEMENT_KIND"

    def __init__(self, movement_id: str, from_kind: str, to_kind: str):
        self.movement_id = movement_id
        self.from_kind = from_kind
        self.to_kind = to_kind
        super().__init__(
            f"Movement {movement_id} of kind '{from_kind}' cannot be "
            f"changed to '{to_kind}'"
        )


class InvalidCountEntryError(ValidationError):
    """A recount entry has a malformed detalle_id or a negative quantity."""

    code: str = "INVALID_COUNT_ENTRY"

    def __init__(self, detalle_id: Any, reason: str):
        self.detalle_id = detalle_id
        self.reason = reason
        super().__init__(f"Invalid count entry for detalle {detalle_id!r}: {reason}")


class InvalidCategoryIdError(ValidationError):
    """categoria_id was supplied but is not a positive integer."""

    code: str = "INVALID_CATEGORY_ID"

    def __init__(self, categoria_id: Any):
        self.categoria_id = categoria_id
        super().__init__(f"Invalid categoria_id: {categoria_id!r}")


class MissingOperatorError(ValidationError):
    """A count session requires an authenticated operator identity."""

    code: str = "MISSING_OPERATOR"

    def __init__(self):
        super().__init__("operator identity with a non-empty sub is required")


# Not-found exceptions


class NotFoundError(StockKernelError):
    """Base exception for references to records that do not exist."""

    code: str = "NOT_FOUND"
    kind: str = "not_found"


class MovementNotFoundError(NotFoundError):
    """Movement with given ID was not found."""

    code: str = "MOVEMENT_NOT_FOUND"

    def __init__(self, movement_id: str):
        self.movement_id = movement_id
        super().__init__(f"Movement not found: {movement_id}")


class StockBalanceNotFoundError(NotFoundError):
    """No balance row exists for the article."""

    code: str = "STOCK_BALANCE_NOT_FOUND"

    def __init__(self, articulo_id: int):
        self.articulo_id = articulo_id
        super().__init__(f"Stock balance not found for articulo_id {articulo_id}")


class CountSessionNotFoundError(NotFoundError):
    """Physical count session with given ID was not found."""

    code: str = "COUNT_SESSION_NOT_FOUND"

    def __init__(self, toma_id: str):
        self.toma_id = toma_id
        super().__init__(f"Count session not found: {toma_id}")


# Storage exceptions


class StorageFailureError(StockKernelError):
    """
    The underlying persistence layer failed.

    Surfaced to the caller as-is; the kernel never retries internally.
    The original driver exception is chained as ``__cause__``.
    """

    code: str = "STORAGE_FAILURE"
    kind: str = "storage"

    def __init__(self, operation: str, detail: str):
        self.operation = operation
        self.detail = detail
        super().__init__(f"Storage failure during {operation}: {detail}")
