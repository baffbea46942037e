"""
Module: dealbook_kernel.models.deal
Responsibility: ORM persistence for deals and their priced, dated line items
    (deal items).  A deal item's after-tax amount is what the proration
    engine spreads across months.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - start_date <= end_date (ck_deal_item_date_range; also validated by
      DealItemService before any write).
    - Amounts are Decimal, stored as Numeric(38, 9).
    - Deleting a deal deletes its items; deleting an item deletes its
      monthly sales rows.

Failure modes:
    - IntegrityError on a violated check constraint or missing parent row.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import CheckConstraint, Date, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from dealbook_kernel.db.base import TimestampedBase, UUIDString

if TYPE_CHECKING:
    from dealbook_kernel.models.customer import Customer
    from dealbook_kernel.models.monthly_sales import MonthlySales


class ProductType(str, Enum):
    """Revenue category of a deal or deal item."""

    LICENSE = "LICENSE"
    SERVICE = "SERVICE"


class Deal(TimestampedBase):
    """A signed deal with a customer, grouping one or more deal items."""

    __tablename__ = "deals"

    __table_args__ = (
        Index("idx_deal_customer", "customer_id"),
        Index("idx_deal_date", "deal_date"),
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    customer_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("customers.id", ondelete="CASCADE"),
        nullable=False,
    )

    deal_date: Mapped[date] = mapped_column(Date, nullable=False)

    deal_type: Mapped[str] = mapped_column(String(20), nullable=False)

    customer: Mapped["Customer"] = relationship("Customer", back_populates="deals")

    items: Mapped[list["DealItem"]] = relationship(
        "DealItem",
        back_populates="deal",
        cascade="all, delete-orphan",
        order_by="DealItem.start_date",
    )

    def __repr__(self) -> str:
        return f"<Deal {self.name} ({self.deal_type})>"


class DealItem(TimestampedBase):
    """
    A contract line item: one product or service sold for a date range.

    Contract:
        ``amount_after_tax`` over ``start_date..end_date`` (both inclusive)
        is prorated into ``monthly_sales`` by DealItemService.  Those rows
        are derived data: they are deleted and rebuilt whenever the amount,
        the category or the date range changes.
    """

    __tablename__ = "deal_items"

    __table_args__ = (
        CheckConstraint("start_date <= end_date", name="ck_deal_item_date_range"),
        Index("idx_deal_item_deal", "deal_id"),
        Index("idx_deal_item_type", "product_type"),
    )

    deal_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("deals.id", ondelete="CASCADE"),
        nullable=False,
    )

    product_id: Mapped[str] = mapped_column(String(100), nullable=False)

    product_name: Mapped[str] = mapped_column(String(255), nullable=False)

    product_type: Mapped[str] = mapped_column(String(20), nullable=False)

    amount_before_tax: Mapped[Decimal] = mapped_column(nullable=False)

    amount_after_tax: Mapped[Decimal] = mapped_column(
        nullable=False,
        doc="Amount prorated into monthly sales",
    )

    start_date: Mapped[date] = mapped_column(Date, nullable=False)

    end_date: Mapped[date] = mapped_column(Date, nullable=False)

    deal: Mapped["Deal"] = relationship("Deal", back_populates="items")

    monthly_sales: Mapped[list["MonthlySales"]] = relationship(
        "MonthlySales",
        back_populates="deal_item",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<DealItem {self.product_name} {self.start_date}..{self.end_date}>"
