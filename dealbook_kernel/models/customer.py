"""
Module: dealbook_kernel.models.customer
Responsibility: ORM persistence for customers, the parties deals are signed
    with.
Architecture position: Kernel > Models.  May import from db/base.py only.

Failure modes:
    - IntegrityError on duplicate customer code (uq_customer_code).
"""

from typing import TYPE_CHECKING

from sqlalchemy import String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from dealbook_kernel.db.base import TimestampedBase

if TYPE_CHECKING:
    from dealbook_kernel.models.deal import Deal


class Customer(TimestampedBase):
    """A customer organisation."""

    __tablename__ = "customers"

    __table_args__ = (
        UniqueConstraint("code", name="uq_customer_code"),
    )

    code: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        doc="Short unique customer code",
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    contact_email: Mapped[str | None] = mapped_column(String(255), nullable=True)

    deals: Mapped[list["Deal"]] = relationship(
        "Deal",
        back_populates="customer",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Customer {self.code}: {self.name}>"
