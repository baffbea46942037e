"""
Tests for the proration engine.

Covers:
- Monthly split of a line item across calendar months
- Year rollover and leap years
- Remainder policies (LAST_MONTH and NONE)
- Precondition failures (date range, amount)
- Engine trace logging
"""

from datetime import date
from decimal import Decimal, localcontext

import pytest

from dealbook_engines.proration import (
    DECIMAL_PRECISION,
    MonthlyAllocation,
    RemainderPolicy,
    days_in_month,
    generate_monthly_allocations,
    iter_months,
    month_span,
)
from dealbook_engines.tracer import TRACE_MESSAGE
from dealbook_kernel.exceptions import InvalidAmountError, InvalidDateRangeError


class TestCalendarHelpers:
    """Tests for the month-walking helpers."""

    @pytest.mark.parametrize(
        "year, month, expected",
        [
            (2024, 1, 31),
            (2024, 2, 29),
            (2023, 2, 28),
            (2100, 2, 28),
            (2000, 2, 29),
            (2024, 4, 30),
            (2024, 12, 31),
        ],
    )
    def test_days_in_month(self, year, month, expected):
        assert days_in_month(year, month) == expected

    def test_iter_months_wraps_december(self):
        months = list(iter_months(date(2024, 11, 30), date(2025, 2, 1)))
        assert months == [(2024, 11), (2024, 12), (2025, 1), (2025, 2)]

    def test_iter_months_single_month(self):
        assert list(iter_months(date(2024, 5, 3), date(2024, 5, 20))) == [(2024, 5)]

    def test_month_span(self):
        assert month_span(date(2024, 1, 15), date(2024, 3, 15)) == 3
        assert month_span(date(2024, 12, 31), date(2025, 1, 1)) == 2
        assert month_span(date(2024, 6, 10), date(2024, 6, 10)) == 1
        assert month_span(date(2022, 1, 1), date(2024, 12, 31)) == 36


class TestGenerateMonthlyAllocations:
    """Tests for the month-by-month split."""

    def test_contract_within_one_month(self):
        """Single month: all days and the whole amount land in it."""
        result = generate_monthly_allocations(
            "item-1", date(2024, 1, 15), date(2024, 1, 31), Decimal("100000"), "LICENSE",
        )

        assert len(result) == 1
        only = result[0]
        assert (only.year, only.month) == (2024, 1)
        assert only.days_in_month == 31
        assert only.applied_days == 17
        assert only.amount == Decimal("100000")
        assert only.line_item_id == "item-1"
        assert only.category == "LICENSE"

    def test_three_month_contract(self):
        result = generate_monthly_allocations(
            "item-2", date(2024, 1, 15), date(2024, 3, 15), Decimal("300000"), "SERVICE",
        )

        assert [a.period for a in result] == [(2024, 1), (2024, 2), (2024, 3)]
        assert [a.applied_days for a in result] == [17, 29, 15]
        assert [a.days_in_month for a in result] == [31, 29, 31]
        assert sum(a.amount for a in result) == Decimal("300000")

    def test_three_month_contract_amounts(self):
        """Running-total rounding: 300000 over 61 days in yen."""
        result = generate_monthly_allocations(
            "item-2", date(2024, 1, 15), date(2024, 3, 15), Decimal("300000"), "SERVICE",
        )

        assert [a.amount for a in result] == [
            Decimal("83607"), Decimal("142623"), Decimal("73770"),
        ]

    def test_year_rollover(self):
        result = generate_monthly_allocations(
            "item-3", date(2024, 12, 15), date(2025, 2, 15), Decimal("300000"), "LICENSE",
        )

        assert [a.period for a in result] == [(2024, 12), (2025, 1), (2025, 2)]
        assert [a.applied_days for a in result] == [17, 31, 15]
        assert [a.amount for a in result] == [
            Decimal("80952"), Decimal("147619"), Decimal("71429"),
        ]

    def test_single_day_contract(self):
        result = generate_monthly_allocations(
            "item-4", date(2024, 6, 10), date(2024, 6, 10), Decimal("10000"), "SERVICE",
        )

        assert len(result) == 1
        assert result[0].applied_days == 1
        assert result[0].days_in_month == 30
        assert result[0].amount == Decimal("10000")
        assert result[0].daily_rate == Decimal("10000")

    def test_intermediate_months_are_full(self):
        result = generate_monthly_allocations(
            "item-5", date(2023, 11, 20), date(2024, 4, 5), Decimal("1000000"), "LICENSE",
        )

        assert [a.applied_days for a in result] == [11, 31, 31, 29, 31, 5]
        for middle in result[1:-1]:
            assert middle.applied_days == middle.days_in_month

    def test_daily_rate_shared_by_all_months(self):
        result = generate_monthly_allocations(
            "item-6", date(2024, 1, 1), date(2024, 12, 31), Decimal("366000"), "LICENSE",
        )

        assert {a.daily_rate for a in result} == {Decimal("1000")}
        assert [a.amount for a in result] == [
            Decimal(days_in_month(2024, m) * 1000) for m in range(1, 13)
        ]

    def test_zero_amount(self):
        result = generate_monthly_allocations(
            "item-7", date(2024, 1, 1), date(2024, 3, 31), Decimal("0"), "SERVICE",
        )

        assert len(result) == 3
        assert all(a.amount == 0 for a in result)

    def test_int_and_str_amounts_accepted(self):
        from_int = generate_monthly_allocations(
            "x", date(2024, 1, 1), date(2024, 2, 29), 60000, "LICENSE",
        )
        from_str = generate_monthly_allocations(
            "x", date(2024, 1, 1), date(2024, 2, 29), "60000", "LICENSE",
        )
        assert from_int == from_str

    def test_returns_frozen_allocations(self):
        result = generate_monthly_allocations(
            "x", date(2024, 1, 1), date(2024, 1, 31), Decimal("31"), "LICENSE",
        )
        assert isinstance(result, tuple)
        with pytest.raises(AttributeError):
            result[0].amount = Decimal("1")

    def test_to_record_persisted_shape(self):
        (allocation,) = generate_monthly_allocations(
            "item-8", date(2024, 6, 10), date(2024, 6, 10), Decimal("10000"), "SERVICE",
        )

        assert allocation.to_record() == {
            "line_item_id": "item-8",
            "year": 2024,
            "month": 6,
            "total_days_in_month": 30,
            "applied_days": 1,
            "daily_rate": Decimal("10000"),
            "amount": Decimal("10000"),
            "category": "SERVICE",
        }


class TestRemainderPolicy:
    """Tests for rounding residue handling."""

    def test_uneven_split_to_cents(self):
        """100.00 over 91 days: residual cents land on the last month."""
        result = generate_monthly_allocations(
            "r-1", date(2024, 1, 1), date(2024, 3, 31), Decimal("100.00"), "LICENSE",
        )

        assert [a.amount for a in result] == [
            Decimal("34.07"), Decimal("31.86"), Decimal("34.07"),
        ]
        assert sum(a.amount for a in result) == Decimal("100.00")

    def test_decimal_places_inferred_from_amount(self):
        """No explicit unit: the scale of the total is used."""
        result = generate_monthly_allocations(
            "r-2", date(2024, 1, 1), date(2024, 3, 31), Decimal("100"), "LICENSE",
        )

        assert [a.amount for a in result] == [
            Decimal("34"), Decimal("32"), Decimal("34"),
        ]

    def test_explicit_decimal_places(self):
        result = generate_monthly_allocations(
            "r-3", date(2024, 1, 1), date(2024, 3, 31), Decimal("100"), "LICENSE",
            decimal_places=2,
        )

        assert [a.amount for a in result] == [
            Decimal("34.07"), Decimal("31.86"), Decimal("34.07"),
        ]

    def test_each_month_within_one_unit_of_raw_share(self):
        result = generate_monthly_allocations(
            "r-4", date(2023, 3, 17), date(2025, 8, 2), Decimal("987654.32"), "SERVICE",
            decimal_places=2,
        )

        for a in result:
            raw = a.daily_rate * a.applied_days
            assert abs(a.amount - raw) <= Decimal("0.01")
            assert a.amount >= 0
        assert sum(a.amount for a in result) == Decimal("987654.32")

    def test_tiny_amount_over_many_months(self):
        """Fewer units than months: some months get zero, none go negative."""
        result = generate_monthly_allocations(
            "r-5", date(2024, 1, 1), date(2024, 12, 31), Decimal("5"), "LICENSE",
        )

        assert len(result) == 12
        assert all(a.amount >= 0 for a in result)
        assert sum(a.amount for a in result) == Decimal("5")

    def test_none_policy_keeps_full_precision(self):
        result = generate_monthly_allocations(
            "r-6", date(2024, 1, 1), date(2024, 3, 31), Decimal("100"), "LICENSE",
            remainder_policy=RemainderPolicy.NONE,
        )

        with localcontext() as ctx:
            ctx.prec = DECIMAL_PRECISION
            for a in result:
                assert a.amount == a.daily_rate * a.applied_days
        drift = abs(sum(a.amount for a in result) - Decimal("100"))
        assert drift < Decimal("1E-30")

    def test_policy_accepts_string_value(self):
        result = generate_monthly_allocations(
            "r-7", date(2024, 1, 1), date(2024, 1, 31), Decimal("31"), "LICENSE",
            remainder_policy="none",
        )
        assert result[0].amount == Decimal("31")


class TestPreconditions:
    """Tests for fail-fast input checks."""

    def test_start_after_end_raises(self):
        with pytest.raises(InvalidDateRangeError) as exc_info:
            generate_monthly_allocations(
                "bad", date(2024, 3, 1), date(2024, 2, 28), Decimal("100"), "LICENSE",
            )

        assert exc_info.value.code == "INVALID_DATE_RANGE"
        assert exc_info.value.start_date == date(2024, 3, 1)
        assert exc_info.value.end_date == date(2024, 2, 28)

    def test_negative_amount_raises(self):
        with pytest.raises(InvalidAmountError, match="negative") as exc_info:
            generate_monthly_allocations(
                "bad", date(2024, 1, 1), date(2024, 1, 31), Decimal("-1"), "LICENSE",
            )
        assert exc_info.value.code == "INVALID_AMOUNT"
        assert exc_info.value.amount == "-1"

    def test_float_amount_rejected(self):
        with pytest.raises(InvalidAmountError, match="float"):
            generate_monthly_allocations(
                "bad", date(2024, 1, 1), date(2024, 1, 31), 100.0, "LICENSE",
            )

    @pytest.mark.parametrize("amount", ["NaN", "Infinity", Decimal("-Infinity")])
    def test_non_finite_amount_rejected(self, amount):
        with pytest.raises(InvalidAmountError):
            generate_monthly_allocations(
                "bad", date(2024, 1, 1), date(2024, 1, 31), amount, "LICENSE",
            )

    def test_unparsable_amount_rejected(self):
        with pytest.raises(InvalidAmountError, match="not a decimal"):
            generate_monthly_allocations(
                "bad", date(2024, 1, 1), date(2024, 1, 31), "12,000", "LICENSE",
            )

    @pytest.mark.parametrize("amount", [True, None, [100]])
    def test_wrong_type_amount_rejected(self, amount):
        with pytest.raises(InvalidAmountError):
            generate_monthly_allocations(
                "bad", date(2024, 1, 1), date(2024, 1, 31), amount, "LICENSE",
            )


class TestEngineTrace:
    """Tests for the DEALBOOK_ENGINE_TRACE record."""

    def test_trace_record_emitted(self, captured_logs):
        generate_monthly_allocations(
            "t-1", date(2024, 1, 15), date(2024, 3, 15), Decimal("300000"), "SERVICE",
        )

        traces = [r for r in captured_logs() if r["message"] == TRACE_MESSAGE]
        assert len(traces) == 1
        trace = traces[0]
        assert trace["engine_name"] == "proration"
        assert trace["engine_version"] == "1.0"
        assert trace["function"] == "generate_monthly_allocations"
        assert len(trace["input_fingerprint"]) == 16
        assert trace["duration_ms"] >= 0

    def test_fingerprint_same_for_positional_and_keyword_calls(self, captured_logs):
        generate_monthly_allocations(
            "t-2", date(2024, 1, 1), date(2024, 2, 29), Decimal("600"), "LICENSE",
        )
        generate_monthly_allocations(
            line_item_id="t-2",
            start_date=date(2024, 1, 1),
            end_date=date(2024, 2, 29),
            total_amount=Decimal("600"),
            category="LICENSE",
        )

        fingerprints = [
            r["input_fingerprint"] for r in captured_logs() if r["message"] == TRACE_MESSAGE
        ]
        assert len(fingerprints) == 2
        assert fingerprints[0] == fingerprints[1]

    def test_fingerprint_changes_with_amount(self, captured_logs):
        for amount in ("600", "601"):
            generate_monthly_allocations(
                "t-3", date(2024, 1, 1), date(2024, 2, 29), Decimal(amount), "LICENSE",
            )

        fingerprints = [
            r["input_fingerprint"] for r in captured_logs() if r["message"] == TRACE_MESSAGE
        ]
        assert fingerprints[0] != fingerprints[1]

    def test_completion_logged_at_debug(self, captured_logs):
        generate_monthly_allocations(
            "t-4", date(2024, 1, 1), date(2024, 2, 29), Decimal("600"), "LICENSE",
        )

        completed = [r for r in captured_logs() if r["message"] == "proration_completed"]
        assert len(completed) == 1
        assert completed[0]["level"] == "DEBUG"
        assert completed[0]["month_count"] == 2
        assert completed[0]["total_days"] == 60
        assert completed[0]["remainder_policy"] == "last_month"


def test_allocation_period_property():
    allocation = MonthlyAllocation(
        line_item_id="p", year=2025, month=7, days_in_month=31, applied_days=31,
        daily_rate=Decimal("1"), amount=Decimal("31"), category="LICENSE",
    )
    assert allocation.period == (2025, 7)
