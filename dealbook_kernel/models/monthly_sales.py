"""
Module: dealbook_kernel.models.monthly_sales
Responsibility: ORM persistence for prorated monthly revenue -- one row per
    (deal item, calendar month) produced by the proration engine.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - (deal_item_id, year, month) is unique (uq_monthly_sales_item_period).
    - month is 1-12 and 1 <= applied_days <= total_days_in_month
      (check constraints).
    - Rows are derived data with no identity across edits: DealItemService
      deletes and recreates an item's rows inside one transaction.
"""

from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from dealbook_kernel.db.base import TimestampedBase, UUIDString

if TYPE_CHECKING:
    from dealbook_kernel.models.deal import DealItem


class MonthlySales(TimestampedBase):
    """One month's prorated share of a deal item's after-tax amount."""

    __tablename__ = "monthly_sales"

    __table_args__ = (
        UniqueConstraint(
            "deal_item_id", "year", "month", name="uq_monthly_sales_item_period",
        ),
        CheckConstraint("month BETWEEN 1 AND 12", name="ck_monthly_sales_month"),
        CheckConstraint(
            "applied_days >= 1 AND applied_days <= total_days_in_month",
            name="ck_monthly_sales_applied_days",
        ),
        Index("idx_monthly_sales_period", "year", "month"),
        Index("idx_monthly_sales_type", "product_type"),
    )

    deal_item_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("deal_items.id", ondelete="CASCADE"),
        nullable=False,
    )

    year: Mapped[int] = mapped_column(Integer, nullable=False)

    month: Mapped[int] = mapped_column(Integer, nullable=False)

    total_days_in_month: Mapped[int] = mapped_column(Integer, nullable=False)

    applied_days: Mapped[int] = mapped_column(Integer, nullable=False)

    daily_rate: Mapped[Decimal] = mapped_column(nullable=False)

    amount: Mapped[Decimal] = mapped_column(nullable=False)

    product_type: Mapped[str] = mapped_column(String(20), nullable=False)

    deal_item: Mapped["DealItem"] = relationship(
        "DealItem", back_populates="monthly_sales",
    )

    def __repr__(self) -> str:
        return f"<MonthlySales {self.year}-{self.month:02d} {self.amount}>"
