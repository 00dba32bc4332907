"""
Declarative bases for the stock tables.

Every row (movements, balances, count sessions and their details, sequence
counters) is keyed by a uuid4 stored as canonical 36-character text, so the
same schema runs on PostgreSQL and on the SQLite files used for embedding
and tests.  Article, category and folio numbers are BigInteger; quantities
are ``Numeric(18, 4)``; timestamps are timezone-aware.

Nothing here imports from models/, services/ or selectors/.
"""

from datetime import datetime
from decimal import Decimal
from typing import ClassVar
from uuid import UUID, uuid4

from sqlalchemy import BigInteger, DateTime, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator

from stock_kernel.db.types import QUANTITY_TYPE


class UUIDString(TypeDecorator):
    """
    UUID column stored as text.

    Binds accept a UUID or any string ``uuid.UUID`` parses, and always write
    the lower-case hyphenated form, so an id received in another spelling
    still matches the stored row.
    """

    impl = String(36)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if not isinstance(value, UUID):
            value = UUID(str(value))
        return str(value)

    def process_result_value(self, value, dialect):
        return UUID(value) if value is not None else None


class Base(DeclarativeBase):
    """Base for every stock table: uuid4 ``id`` plus the shared type map."""

    type_annotation_map: ClassVar[dict] = {
        Decimal: QUANTITY_TYPE,
        datetime: DateTime(timezone=True),
        UUID: UUIDString(),
        int: BigInteger,
    }

    id: Mapped[UUID] = mapped_column(UUIDString(), primary_key=True, default=uuid4)


class TrackedBase(Base):
    """
    Adds database-side ``created_at`` / ``updated_at``.

    These are row bookkeeping only.  Business time (movement ``fecha``,
    balance ``ultima_actualizacion``, session ``fecha_inicio``) comes from
    the injected Clock and is stored in its own columns.
    """

    __abstract__ = True

    created_at: Mapped[datetime] = mapped_column(server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        server_default=func.now(),
        onupdate=func.now(),
    )
