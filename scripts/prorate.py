#!/usr/bin/env python3
"""
Print the monthly revenue schedule for a contract line item.

Runs the proration engine only; no database is touched.

Usage:
    python3 scripts/prorate.py 2024-01-15 2024-03-15 300000
    python3 scripts/prorate.py 2024-12-15 2025-02-15 1200.00 --currency USD --json
    python3 scripts/prorate.py 2024-01-01 2024-12-31 1000000 --fiscal
"""

import argparse
import json
import sys
from datetime import date
from pathlib import Path

# ---------------------------------------------------------------------------
# Project root on sys.path
# ---------------------------------------------------------------------------
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from dealbook_config import load_settings  # noqa: E402
from dealbook_engines import (  # noqa: E402
    generate_monthly_allocations,
    quarter_label,
    sum_allocations,
    summarize_by_fiscal_quarter,
)
from dealbook_kernel.domain.currency import CurrencyRegistry  # noqa: E402
from dealbook_kernel.domain.validation import parse_amount  # noqa: E402
from dealbook_kernel.exceptions import DealbookError  # noqa: E402
from dealbook_kernel.logging_config import configure_logging  # noqa: E402


def _amount(text: str):
    amount = parse_amount(text)
    if amount is None:
        raise argparse.ArgumentTypeError(f"invalid amount: {text!r}")
    return amount


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Prorate an amount over calendar months")
    parser.add_argument("start_date", type=date.fromisoformat, help="First day (YYYY-MM-DD)")
    parser.add_argument("end_date", type=date.fromisoformat, help="Last day (YYYY-MM-DD)")
    parser.add_argument("amount", type=_amount, help="Total amount, e.g. 300000 or 1200.00")
    parser.add_argument("--category", default="LICENSE", help="Category tag (default LICENSE)")
    parser.add_argument("--item-id", default="cli", help="Line item identifier")
    parser.add_argument("--currency", help="Currency code (default from settings)")
    parser.add_argument("--config", help="Settings YAML file")
    parser.add_argument("--json", action="store_true", help="Emit JSON instead of a table")
    parser.add_argument("--fiscal", action="store_true", help="Append fiscal quarter totals")
    return parser


def _print_table(allocations, total, currency: str) -> None:
    W = 72
    print("=" * W)
    print(f"  {'Period':<10}{'Days':>6}{'Applied':>9}{'Daily rate':>22}{'Amount':>20}")
    print("-" * W)
    for a in allocations:
        print(
            f"  {a.year:04d}-{a.month:02d}   {a.days_in_month:>6}{a.applied_days:>9}"
            f"{a.daily_rate:>22.6f}{a.amount:>20}"
        )
    print("-" * W)
    print(f"  {'Total ' + currency:<47}{total:>20}")
    print("=" * W)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = load_settings(args.config)
        configure_logging(level=settings.log_level)
        if args.currency:
            currency = args.currency.upper()
            decimal_places = CurrencyRegistry.get_decimal_places(currency)
        else:
            currency = settings.currency
            decimal_places = settings.decimal_places

        allocations = generate_monthly_allocations(
            args.item_id,
            args.start_date,
            args.end_date,
            args.amount,
            args.category,
            decimal_places=decimal_places,
            remainder_policy=settings.remainder_policy,
        )
    except DealbookError as exc:
        print(f"  ERROR [{exc.code}]: {exc}", file=sys.stderr)
        return 1

    total = sum_allocations(allocations)
    quarters = (
        summarize_by_fiscal_quarter(allocations, settings.fiscal_calendar())
        if args.fiscal else {}
    )

    if args.json:
        doc = {
            "currency": currency,
            "total": str(total),
            "allocations": [
                {k: str(v) for k, v in a.to_record().items()} for a in allocations
            ],
        }
        if args.fiscal:
            doc["fiscal_quarters"] = [
                {"fiscal_year": key.fiscal_year, "quarter": quarter_label(key.fiscal_quarter),
                 "amount": str(amount)}
                for key, amount in quarters.items()
            ]
        print(json.dumps(doc, indent=2))
        return 0

    _print_table(allocations, total, currency)
    for key, amount in quarters.items():
        print(f"  FY{key.fiscal_year} {quarter_label(key.fiscal_quarter)}: {amount}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
