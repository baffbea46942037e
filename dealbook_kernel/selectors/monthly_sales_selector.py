"""
Module: dealbook_kernel.selectors.monthly_sales_selector
Responsibility: Read path for prorated monthly sales.  Loads stored rows for
    a scope (one deal item, one deal, one customer, or everything) and hands
    them to the pure aggregation helpers for dashboard figures.
Architecture position: Kernel > Selectors.  Read-only.

Invariants enforced:
    - Rows come back as ``MonthlyAllocation`` values ordered by
      (year, month), then by deal item, so results are stable.
    - Totals are computed by ``dealbook_engines.aggregation`` over the
      loaded set; there are no stored balances.
"""

from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from sqlalchemy import Select, select

from dealbook_engines.aggregation import (
    filter_by_category,
    filter_by_period,
    sum_allocations,
    summarize_by_category,
    summarize_by_fiscal_quarter,
    summarize_by_month,
)
from dealbook_engines.fiscal_calendar import FiscalCalendar, FiscalPeriodKey
from dealbook_engines.proration import MonthlyAllocation
from dealbook_kernel.logging_config import get_logger
from dealbook_kernel.models.deal import Deal, DealItem, ProductType
from dealbook_kernel.models.monthly_sales import MonthlySales
from dealbook_kernel.selectors.base import BaseSelector

logger = get_logger("selectors.monthly_sales")


def _category_value(category: str | ProductType) -> str:
    return category.value if isinstance(category, ProductType) else str(category)


class MonthlySalesSelector(BaseSelector[MonthlySales]):
    """Read-only queries over the monthly_sales table."""

    def _scoped(
        self,
        deal_item_id: UUID | None,
        deal_id: UUID | None,
        customer_id: UUID | None,
    ) -> Select:
        stmt = select(MonthlySales)
        if deal_item_id is not None:
            stmt = stmt.where(MonthlySales.deal_item_id == deal_item_id)
        if deal_id is not None or customer_id is not None:
            stmt = stmt.join(DealItem, MonthlySales.deal_item_id == DealItem.id)
        if deal_id is not None:
            stmt = stmt.where(DealItem.deal_id == deal_id)
        if customer_id is not None:
            stmt = stmt.join(Deal, DealItem.deal_id == Deal.id).where(
                Deal.customer_id == customer_id
            )
        return stmt

    @staticmethod
    def _to_allocation(row: MonthlySales) -> MonthlyAllocation:
        return MonthlyAllocation(
            line_item_id=row.deal_item_id,
            year=row.year,
            month=row.month,
            days_in_month=row.total_days_in_month,
            applied_days=row.applied_days,
            daily_rate=row.daily_rate,
            amount=row.amount,
            category=row.product_type,
        )

    def list_allocations(
        self,
        *,
        year: int | None = None,
        month: int | None = None,
        category: str | ProductType | None = None,
        deal_item_id: UUID | None = None,
        deal_id: UUID | None = None,
        customer_id: UUID | None = None,
    ) -> list[MonthlyAllocation]:
        """
        Stored allocations matching every given filter.

        Args:
            year, month: Calendar bucket filters.
            category: Product type filter.
            deal_item_id, deal_id, customer_id: Scope filters.

        Returns:
            Allocations ordered by (year, month, deal_item_id).
        """
        stmt = self._scoped(deal_item_id, deal_id, customer_id)
        if year is not None:
            stmt = stmt.where(MonthlySales.year == year)
        if month is not None:
            stmt = stmt.where(MonthlySales.month == month)
        if category is not None:
            stmt = stmt.where(MonthlySales.product_type == _category_value(category))
        stmt = stmt.order_by(
            MonthlySales.year, MonthlySales.month, MonthlySales.deal_item_id,
        )

        rows = self.session.execute(stmt).scalars().all()
        logger.debug(
            "monthly_sales_listed",
            extra={"row_count": len(rows), "year": year, "month": month},
        )
        return [self._to_allocation(row) for row in rows]

    def total_for_period(
        self,
        year: int,
        month: int,
        category: str | ProductType | None = None,
        **scope: UUID | None,
    ) -> Decimal:
        """Total booked to one calendar month, optionally for one category."""
        allocations = filter_by_period(self.list_allocations(**scope), year, month)
        if category is not None:
            allocations = filter_by_category(allocations, category)
        return sum_allocations(allocations)

    def totals_by_month(self, **scope: UUID | None) -> dict[tuple[int, int], Decimal]:
        """Totals keyed by (year, month) for the scope."""
        return summarize_by_month(self.list_allocations(**scope))

    def totals_by_category(self, **scope: UUID | None) -> dict[str, Decimal]:
        """Totals keyed by product type for the scope."""
        return summarize_by_category(self.list_allocations(**scope))

    def totals_by_fiscal_quarter(
        self,
        fiscal_calendar: FiscalCalendar | None = None,
        **scope: UUID | None,
    ) -> dict[FiscalPeriodKey, Decimal]:
        """Totals keyed by fiscal (year, quarter) for the scope."""
        return summarize_by_fiscal_quarter(
            self.list_allocations(**scope), fiscal_calendar,
        )
