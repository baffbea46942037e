"""
Module: dealbook_engines.fiscal_calendar
Responsibility:
    Map calendar (year, month) pairs to fiscal (year, quarter) pairs for
    dashboard roll-ups.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Each fiscal quarter spans three consecutive calendar months starting
      at ``start_month``.
    - A fiscal year is named after the calendar year in which it ends, so
      with a December start, December 2024 belongs to fiscal 2025 Q1.

Failure modes:
    - ValueError on a month outside 1-12 or a quarter outside 1-4.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import NamedTuple


class FiscalPeriodKey(NamedTuple):
    """Fiscal (year, quarter) bucket."""

    fiscal_year: int
    fiscal_quarter: int


def _check_month(month: int) -> None:
    if not 1 <= month <= 12:
        raise ValueError(f"Month must be between 1 and 12, got {month}")


@dataclass(frozen=True)
class FiscalCalendar:
    """
    Fiscal calendar anchored on the month the fiscal year starts in.

    The default (December) is the company calendar the dashboard was built
    for: Q1 = Dec-Feb, Q2 = Mar-May, Q3 = Jun-Aug, Q4 = Sep-Nov.
    """

    start_month: int = 12

    def __post_init__(self) -> None:
        _check_month(self.start_month)

    def fiscal_quarter(self, year: int, month: int) -> FiscalPeriodKey:
        """Fiscal year and quarter for a calendar month."""
        _check_month(month)
        offset = (month - self.start_month) % 12
        fiscal_year = year
        if self.start_month != 1 and month >= self.start_month:
            fiscal_year = year + 1
        return FiscalPeriodKey(fiscal_year, offset // 3 + 1)

    def months_in_quarter(self, quarter: int) -> tuple[int, ...]:
        """Calendar months of a fiscal quarter, in fiscal order."""
        if not 1 <= quarter <= 4:
            raise ValueError(f"Quarter must be between 1 and 4, got {quarter}")
        first = (quarter - 1) * 3
        return tuple(
            (self.start_month - 1 + first + i) % 12 + 1 for i in range(3)
        )


def quarter_label(quarter: int) -> str:
    """Display label for a quarter number."""
    return f"Q{quarter}"
