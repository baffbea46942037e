"""
DealItemService -- deal items and their prorated monthly sales.

Responsibility:
    Creates, updates and deletes deal items (contract line items) and keeps
    their ``monthly_sales`` rows in step: every write that changes the
    after-tax amount, the category or the date range deletes the item's
    rows and recreates them from ``generate_monthly_allocations``.

Architecture position:
    Kernel > Services -- imperative shell around the pure proration engine.

Invariants enforced:
    - Flush-only: the caller's transaction covers the item write, the
      delete and the re-insert, so readers never see a partial set.
    - The item row is locked (SELECT ... FOR UPDATE) before an update or
      regeneration, serialising concurrent edits of the same item.
    - Stored allocations sum exactly to ``amount_after_tax``
      (``RemainderPolicy.LAST_MONTH``, rounded to the currency unit).

Failure modes:
    - ValidationError: payload missing or malformed fields, or
      start_date after end_date.
    - DealNotFoundError / DealItemNotFoundError: lookup by ID fails.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy import delete, func, select

from dealbook_engines.proration import (
    MonthlyAllocation,
    RemainderPolicy,
    generate_monthly_allocations,
)
from dealbook_kernel.domain.currency import CurrencyRegistry
from dealbook_kernel.domain.validation import DealItemInput, validate_deal_item
from dealbook_kernel.exceptions import DealItemNotFoundError, DealNotFoundError
from dealbook_kernel.logging_config import LogContext, get_logger
from dealbook_kernel.models.deal import Deal, DealItem, ProductType
from dealbook_kernel.models.monthly_sales import MonthlySales
from dealbook_kernel.services.base import BaseService, as_uuid

logger = get_logger("services.deal_item")

# Scale of the Numeric(38, 9) daily_rate column.
_STORAGE_UNIT = Decimal("1E-9")


@dataclass(frozen=True)
class DealItemInfo:
    """Immutable DTO for deal item data."""

    id: UUID
    deal_id: UUID
    product_id: str
    product_name: str
    product_type: ProductType
    amount_before_tax: Decimal
    amount_after_tax: Decimal
    start_date: date
    end_date: date
    month_count: int


class DealItemService(BaseService[DealItem]):
    """
    Service for deal items and monthly sales regeneration.

    Contract:
        Accepts loosely typed payload mappings, validates them, and returns
        frozen ``DealItemInfo`` DTOs.

    Non-goals:
        - Does NOT commit; wrap calls in ``session_scope()``.
        - Does NOT answer reporting queries (see MonthlySalesSelector).
    """

    def __init__(
        self,
        session,
        currency: str = "JPY",
        remainder_policy: RemainderPolicy = RemainderPolicy.LAST_MONTH,
    ):
        super().__init__(session)
        self.decimal_places = CurrencyRegistry.get_decimal_places(currency)
        self.remainder_policy = RemainderPolicy(remainder_policy)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _to_dto(self, item: DealItem, month_count: int | None = None) -> DealItemInfo:
        if month_count is None:
            month_count = self.session.execute(
                select(func.count())
                .select_from(MonthlySales)
                .where(MonthlySales.deal_item_id == item.id)
            ).scalar_one()
        return DealItemInfo(
            id=item.id,
            deal_id=item.deal_id,
            product_id=item.product_id,
            product_name=item.product_name,
            product_type=ProductType(item.product_type),
            amount_before_tax=item.amount_before_tax,
            amount_after_tax=item.amount_after_tax,
            start_date=item.start_date,
            end_date=item.end_date,
            month_count=month_count,
        )

    def _get_item(self, item_id: UUID | str, *, for_update: bool = False) -> DealItem:
        stmt = select(DealItem).where(
            DealItem.id == as_uuid(item_id, DealItemNotFoundError)
        )
        if for_update:
            stmt = stmt.with_for_update()
        item = self.session.execute(stmt).scalar_one_or_none()
        if item is None:
            raise DealItemNotFoundError(str(item_id))
        return item

    def _replace_monthly_sales(self, item: DealItem) -> tuple[MonthlyAllocation, ...]:
        """Delete the item's monthly sales and insert a freshly prorated set."""
        deleted = self.session.execute(
            delete(MonthlySales).where(MonthlySales.deal_item_id == item.id)
        ).rowcount

        allocations = generate_monthly_allocations(
            item.id,
            item.start_date,
            item.end_date,
            item.amount_after_tax,
            ProductType(item.product_type).value,
            decimal_places=self.decimal_places,
            remainder_policy=self.remainder_policy,
        )
        self.session.add_all(
            MonthlySales(
                deal_item_id=item.id,
                year=a.year,
                month=a.month,
                total_days_in_month=a.days_in_month,
                applied_days=a.applied_days,
                daily_rate=a.daily_rate.quantize(_STORAGE_UNIT),
                amount=a.amount,
                product_type=a.category,
            )
            for a in allocations
        )
        self.session.flush()
        self.session.expire(item, ["monthly_sales"])

        logger.info(
            "monthly_sales_regenerated",
            extra={
                "deal_item_id": str(item.id),
                "deleted_rows": deleted,
                "inserted_rows": len(allocations),
                "amount_after_tax": item.amount_after_tax,
            },
        )
        return allocations

    @staticmethod
    def _apply(item: DealItem, payload: DealItemInput) -> bool:
        """Copy payload onto the item; True when proration inputs changed."""
        prorated_changed = (
            item.amount_after_tax != payload.amount_after_tax
            or item.product_type != payload.product_type.value
            or item.start_date != payload.start_date
            or item.end_date != payload.end_date
        )
        item.product_name = payload.product_name
        item.product_type = payload.product_type.value
        item.amount_before_tax = payload.amount_before_tax
        item.amount_after_tax = payload.amount_after_tax
        item.start_date = payload.start_date
        item.end_date = payload.end_date
        return prorated_changed

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def get_deal_item(self, item_id: UUID | str) -> DealItemInfo:
        """
        Get a deal item by ID.

        Raises:
            DealItemNotFoundError: If the item doesn't exist.
        """
        return self._to_dto(self._get_item(item_id))

    def create_deal_item(
        self, deal_id: UUID | str, data: Mapping[str, Any],
    ) -> DealItemInfo:
        """
        Create a deal item and its monthly sales.

        Args:
            deal_id: Owning deal.
            data: Mapping with product_id, product_name, product_type,
                amount_before_tax, amount_after_tax, start_date, end_date.

        Raises:
            ValidationError: If the payload is invalid.
            DealNotFoundError: If the deal doesn't exist.
        """
        payload = validate_deal_item(data)
        deal = self.session.get(Deal, as_uuid(deal_id, DealNotFoundError))
        if deal is None:
            raise DealNotFoundError(str(deal_id))

        item = DealItem(deal_id=deal.id, product_id=payload.product_id)
        self._apply(item, payload)
        self.session.add(item)
        self.session.flush()

        with LogContext.bind(deal_id=str(deal.id), deal_item_id=str(item.id)):
            allocations = self._replace_monthly_sales(item)
            logger.info(
                "deal_item_created",
                extra={
                    "product_type": payload.product_type.value,
                    "start_date": payload.start_date,
                    "end_date": payload.end_date,
                },
            )
        return self._to_dto(item, month_count=len(allocations))

    def update_deal_item(
        self, item_id: UUID | str, data: Mapping[str, Any],
    ) -> DealItemInfo:
        """
        Update a deal item, rebuilding its monthly sales when the amount,
        category or date range changed.

        The product_id is fixed at creation and is not required here.

        Raises:
            ValidationError: If the payload is invalid.
            DealItemNotFoundError: If the item doesn't exist.
        """
        payload = validate_deal_item(data, require_product_id=False)
        item = self._get_item(item_id, for_update=True)

        with LogContext.bind(deal_id=str(item.deal_id), deal_item_id=str(item.id)):
            prorated_changed = self._apply(item, payload)
            self.session.flush()
            if prorated_changed:
                self._replace_monthly_sales(item)
            logger.info(
                "deal_item_updated",
                extra={"monthly_sales_regenerated": prorated_changed},
            )
        return self._to_dto(item)

    def regenerate_monthly_sales(
        self, item_id: UUID | str,
    ) -> tuple[MonthlyAllocation, ...]:
        """
        Rebuild a deal item's monthly sales from its stored fields.

        Used after a change of remainder policy or currency precision, or to
        repair rows written by an older release.

        Raises:
            DealItemNotFoundError: If the item doesn't exist.
        """
        item = self._get_item(item_id, for_update=True)
        with LogContext.bind(deal_id=str(item.deal_id), deal_item_id=str(item.id)):
            return self._replace_monthly_sales(item)

    def delete_deal_item(self, item_id: UUID | str) -> None:
        """
        Delete a deal item and its monthly sales.

        Raises:
            DealItemNotFoundError: If the item doesn't exist.
        """
        item = self._get_item(item_id, for_update=True)
        deleted = self.session.execute(
            delete(MonthlySales).where(MonthlySales.deal_item_id == item.id)
        ).rowcount
        self.session.expire(item, ["monthly_sales"])
        self.session.delete(item)
        self.session.flush()
        logger.info(
            "deal_item_deleted",
            extra={"deal_item_id": str(item_id), "deleted_rows": deleted},
        )
