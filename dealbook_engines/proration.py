"""
Module: dealbook_engines.proration
Responsibility:
    Spread a contract line item's total amount across the calendar months
    its date range touches, proportionally to the days active in each
    month.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import dealbook_kernel exceptions and logging.

Invariants enforced:
    - Day conservation: sum(applied_days) == (end_date - start_date).days + 1.
    - Amount conservation: sum(amount) == total_amount exactly under
      ``RemainderPolicy.LAST_MONTH``.
    - Ordering: one allocation per month touched, strictly increasing
      (year, month), no gaps.
    - Decimal-only arithmetic in a 38-digit local context; floats are
      rejected at the boundary.
    - Purity: no clock access, no I/O; identical inputs give identical
      output.

Failure modes:
    - InvalidDateRangeError when start_date is after end_date.
    - InvalidAmountError on a negative, non-finite, unparsable or float amount.

Remainder policy:
    ``LAST_MONTH`` (default) quantizes each month to the currency unit on
    running totals: month ``i`` receives
    ``round(daily_rate * cumulative_days_i) - allocated_so_far``.  Every
    month stays within one unit of ``daily_rate * applied_days``, no month
    goes negative, and the last month takes ``total_amount -
    allocated_so_far`` so the rounding residual lands there.
    ``NONE`` keeps ``daily_rate * applied_days`` unrounded; the sum then
    matches the total only to the precision of the context.

Usage:
    from datetime import date
    from decimal import Decimal
    from dealbook_engines.proration import generate_monthly_allocations

    allocations = generate_monthly_allocations(
        "item-1", date(2024, 1, 15), date(2024, 3, 15), Decimal("300000"), "SERVICE",
    )
"""

from __future__ import annotations

import calendar
from collections.abc import Iterator
from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from enum import Enum
from typing import Any
from uuid import UUID

from dealbook_engines.tracer import traced_engine
from dealbook_kernel.exceptions import InvalidAmountError, InvalidDateRangeError
from dealbook_kernel.logging_config import get_logger

logger = get_logger("engines.proration")

# Matches the Numeric(38, 9) storage precision.
DECIMAL_PRECISION = 38


class RemainderPolicy(str, Enum):
    """How per-month rounding residue is handled."""

    LAST_MONTH = "last_month"  # Quantize to the unit, residual on the last month
    NONE = "none"  # Full context precision, no quantization


@dataclass(frozen=True)
class MonthlyAllocation:
    """
    One month's share of a line item's amount.

    Contract:
        Frozen dataclass produced by ``generate_monthly_allocations`` and
        rebuilt from storage by the monthly sales selector.
    Guarantees:
        - ``1 <= applied_days <= days_in_month``.
        - ``daily_rate`` is shared by every allocation of the same item.
    """

    line_item_id: str | UUID
    year: int
    month: int
    days_in_month: int
    applied_days: int
    daily_rate: Decimal
    amount: Decimal
    category: str

    @property
    def period(self) -> tuple[int, int]:
        """(year, month) bucket key."""
        return (self.year, self.month)

    def to_record(self) -> dict[str, Any]:
        """Persisted shape of the allocation."""
        return {
            "line_item_id": self.line_item_id,
            "year": self.year,
            "month": self.month,
            "total_days_in_month": self.days_in_month,
            "applied_days": self.applied_days,
            "daily_rate": self.daily_rate,
            "amount": self.amount,
            "category": self.category,
        }


def days_in_month(year: int, month: int) -> int:
    """Number of days in a calendar month (28-31)."""
    return calendar.monthrange(year, month)[1]


def iter_months(start_date: date, end_date: date) -> Iterator[tuple[int, int]]:
    """Yield (year, month) from start_date's month to end_date's month inclusive."""
    year, month = start_date.year, start_date.month
    while (year, month) <= (end_date.year, end_date.month):
        yield year, month
        if month == 12:
            year, month = year + 1, 1
        else:
            month += 1


def month_span(start_date: date, end_date: date) -> int:
    """Count of calendar months touched by the inclusive date range."""
    return (
        (end_date.year * 12 + end_date.month)
        - (start_date.year * 12 + start_date.month)
        + 1
    )


def _coerce_amount(total_amount: Any) -> Decimal:
    if isinstance(total_amount, float):
        raise InvalidAmountError(total_amount, "binary float amounts are not accepted")
    if isinstance(total_amount, bool) or not isinstance(total_amount, (Decimal, int, str)):
        raise InvalidAmountError(total_amount, "expected Decimal, int or str")
    try:
        amount = Decimal(total_amount)
    except InvalidOperation:
        raise InvalidAmountError(total_amount, "not a decimal number") from None
    if not amount.is_finite():
        raise InvalidAmountError(total_amount, "amount must be finite")
    if amount < 0:
        raise InvalidAmountError(total_amount, "amount cannot be negative")
    return amount


def _applied_days(
    year: int, month: int, start_date: date, end_date: date, total_days: int,
) -> int:
    is_first = (year, month) == (start_date.year, start_date.month)
    is_last = (year, month) == (end_date.year, end_date.month)
    if is_first and is_last:
        return total_days
    if is_first:
        return days_in_month(year, month) - start_date.day + 1
    if is_last:
        return end_date.day
    return days_in_month(year, month)


@traced_engine(
    "proration",
    "1.0",
    fingerprint_fields=(
        "line_item_id", "start_date", "end_date", "total_amount",
        "category", "decimal_places", "remainder_policy",
    ),
)
def generate_monthly_allocations(
    line_item_id: str | UUID,
    start_date: date,
    end_date: date,
    total_amount: Decimal | int | str,
    category: str,
    *,
    decimal_places: int | None = None,
    remainder_policy: RemainderPolicy = RemainderPolicy.LAST_MONTH,
) -> tuple[MonthlyAllocation, ...]:
    """
    Prorate ``total_amount`` over the calendar months of a date range.

    Args:
        line_item_id: Identifier passed through to every allocation.
        start_date: First active day (inclusive).
        end_date: Last active day (inclusive).
        total_amount: Non-negative exact decimal amount.
        category: Tag copied into every allocation.
        decimal_places: Currency unit for ``LAST_MONTH`` rounding.  Defaults
            to the scale of ``total_amount`` itself (``300000`` -> 0,
            ``1000.00`` -> 2).
        remainder_policy: See module docstring.

    Returns:
        Allocations in chronological order, one per month touched.
    """
    amount = _coerce_amount(total_amount)
    if start_date > end_date:
        raise InvalidDateRangeError(start_date, end_date)

    policy = RemainderPolicy(remainder_policy)
    if decimal_places is None:
        decimal_places = max(0, -amount.as_tuple().exponent)
    unit = Decimal(1).scaleb(-decimal_places)

    total_days = (end_date - start_date).days + 1
    months = list(iter_months(start_date, end_date))

    allocations: list[MonthlyAllocation] = []
    with localcontext() as ctx:
        ctx.prec = DECIMAL_PRECISION
        daily_rate = amount / Decimal(total_days)

        cumulative_days = 0
        allocated_so_far = Decimal("0")
        for index, (year, month) in enumerate(months):
            applied = _applied_days(year, month, start_date, end_date, total_days)
            cumulative_days += applied

            if policy is RemainderPolicy.NONE:
                month_amount = daily_rate * applied
            elif index == len(months) - 1:
                month_amount = amount - allocated_so_far
            else:
                target = (daily_rate * cumulative_days).quantize(
                    unit, rounding=ROUND_HALF_UP,
                )
                month_amount = target - allocated_so_far
            allocated_so_far += month_amount

            allocations.append(
                MonthlyAllocation(
                    line_item_id=line_item_id,
                    year=year,
                    month=month,
                    days_in_month=days_in_month(year, month),
                    applied_days=applied,
                    daily_rate=daily_rate,
                    amount=month_amount,
                    category=category,
                )
            )

    logger.debug(
        "proration_completed",
        extra={
            "line_item_id": str(line_item_id),
            "total_amount": str(amount),
            "total_days": total_days,
            "month_count": len(allocations),
            "remainder_policy": policy.value,
        },
    )
    return tuple(allocations)
