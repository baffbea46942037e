"""
Module: dealbook_kernel.db.base
Responsibility: Declarative base classes for all SQLAlchemy ORM models.
    Provides the UUID primary key convention, the type annotation map for
    consistent column types, and the TimestampedBase mixin.
Architecture position: Kernel > DB.  Lowest-level import target within the
    kernel; ALL model files import from here.  MUST NOT import from models/,
    services/, selectors/ or engines.

Invariants enforced:
    - UUID primary keys on every model.
    - Decimal precision: Python Decimal maps to Numeric(38, 9) system-wide.
      NEVER use float for monetary amounts.
"""

from datetime import datetime
from decimal import Decimal, localcontext
from typing import ClassVar
from uuid import UUID as PyUUID, uuid4

from sqlalchemy import DateTime, Numeric, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator


class UUIDString(TypeDecorator):
    """
    UUID type stored as String(36) for cross-database portability.

    Converts between Python UUID objects and their 36-character string form.
    """

    impl = String(36)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None:
            return str(value)
        return None

    def process_result_value(self, value, dialect):
        if value is not None:
            return PyUUID(value)
        return None


class DecimalString(TypeDecorator):
    """
    Decimal stored as its exact string form.

    SQLite has no decimal type and stores Numeric as an 8-byte float, so
    amounts past ~15 significant digits would be rounded on the way in.
    Values are quantized to the Numeric scale and read back as Decimal.
    """

    impl = String(48)
    cache_ok = True

    def __init__(self, scale: int = 9):
        super().__init__()
        self.scale = scale

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        with localcontext() as ctx:
            ctx.prec = 48
            return format(Decimal(value).quantize(Decimal(1).scaleb(-self.scale)), "f")

    def process_result_value(self, value, dialect):
        if value is not None:
            return Decimal(value)
        return None


# Numeric(38, 9) everywhere; lossless text on SQLite.
MONEY = Numeric(38, 9).with_variant(DecimalString(9), "sqlite")


class Base(DeclarativeBase):
    """
    Declarative base for all dealbook models.

    Guarantees:
        - id is always a uuid4-generated UUID stored as String(36).
        - Decimal maps to Numeric(38, 9).
        - datetime maps to DateTime(timezone=True).
    """

    type_annotation_map: ClassVar[dict] = {
        Decimal: MONEY,
        datetime: DateTime(timezone=True),
        PyUUID: UUIDString(),
    }

    id: Mapped[PyUUID] = mapped_column(
        UUIDString(),
        primary_key=True,
        default=uuid4,
    )


class TimestampedBase(Base):
    """Abstract base adding server-side created_at / updated_at columns."""

    __abstract__ = True

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


# Re-export UUID for convenience
UUID = PyUUID
