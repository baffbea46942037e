"""
Module: dealbook_engines.aggregation
Responsibility:
    Filter and total monthly allocations for dashboard figures.  Reporting
    queries chain one or more filters and finish with a sum.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  Operates on
    ``MonthlyAllocation`` values, whether freshly generated or loaded back
    from storage.

Invariants enforced:
    - Filters preserve the relative order of their input.
    - Sums start from Decimal("0") and are order-independent.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from decimal import Decimal

from dealbook_engines.fiscal_calendar import FiscalCalendar, FiscalPeriodKey
from dealbook_engines.proration import MonthlyAllocation


def sum_allocations(allocations: Iterable[MonthlyAllocation]) -> Decimal:
    """Total amount of the allocations; Decimal("0") when empty."""
    return sum((a.amount for a in allocations), Decimal("0"))


def filter_by_period(
    allocations: Iterable[MonthlyAllocation], year: int, month: int,
) -> list[MonthlyAllocation]:
    """Allocations booked to the given calendar year and month."""
    return [a for a in allocations if a.year == year and a.month == month]


def filter_by_category(
    allocations: Iterable[MonthlyAllocation], category: str,
) -> list[MonthlyAllocation]:
    """Allocations tagged with ``category``."""
    return [a for a in allocations if a.category == category]


def summarize_by_month(
    allocations: Iterable[MonthlyAllocation],
) -> dict[tuple[int, int], Decimal]:
    """Totals keyed by (year, month), in chronological key order."""
    totals: defaultdict[tuple[int, int], Decimal] = defaultdict(Decimal)
    for a in allocations:
        totals[a.period] += a.amount
    return dict(sorted(totals.items()))


def summarize_by_category(
    allocations: Iterable[MonthlyAllocation],
) -> dict[str, Decimal]:
    """Totals keyed by category, in order of first appearance."""
    totals: defaultdict[str, Decimal] = defaultdict(Decimal)
    for a in allocations:
        totals[a.category] += a.amount
    return dict(totals)


def summarize_by_fiscal_quarter(
    allocations: Iterable[MonthlyAllocation],
    fiscal_calendar: FiscalCalendar | None = None,
) -> dict[FiscalPeriodKey, Decimal]:
    """Totals keyed by fiscal (year, quarter), in chronological key order."""
    fiscal_calendar = fiscal_calendar or FiscalCalendar()
    totals: defaultdict[FiscalPeriodKey, Decimal] = defaultdict(Decimal)
    for a in allocations:
        totals[fiscal_calendar.fiscal_quarter(a.year, a.month)] += a.amount
    return dict(sorted(totals.items()))
