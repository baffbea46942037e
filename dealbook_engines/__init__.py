"""
Module: dealbook_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    calculation engines.  This is the import surface for the kernel's
    services and selectors.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import dealbook_kernel exceptions and logging.

Invariants enforced:
    - Purity: engines never read the clock or the database.
    - Decimal-only arithmetic for money.
    - Determinism: identical inputs always produce identical outputs.

Usage:
    from dealbook_engines import generate_monthly_allocations, sum_allocations
"""

from dealbook_engines.aggregation import (
    filter_by_category,
    filter_by_period,
    sum_allocations,
    summarize_by_category,
    summarize_by_fiscal_quarter,
    summarize_by_month,
)
from dealbook_engines.fiscal_calendar import (
    FiscalCalendar,
    FiscalPeriodKey,
    quarter_label,
)
from dealbook_engines.proration import (
    MonthlyAllocation,
    RemainderPolicy,
    days_in_month,
    generate_monthly_allocations,
    iter_months,
    month_span,
)
from dealbook_engines.tracer import compute_input_fingerprint, traced_engine

__all__ = [
    # Proration
    "MonthlyAllocation",
    "RemainderPolicy",
    "days_in_month",
    "generate_monthly_allocations",
    "iter_months",
    "month_span",
    # Aggregation
    "filter_by_category",
    "filter_by_period",
    "sum_allocations",
    "summarize_by_category",
    "summarize_by_fiscal_quarter",
    "summarize_by_month",
    # Fiscal calendar
    "FiscalCalendar",
    "FiscalPeriodKey",
    "quarter_label",
    # Tracing
    "compute_input_fingerprint",
    "traced_engine",
]
