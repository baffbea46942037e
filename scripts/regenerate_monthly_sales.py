#!/usr/bin/env python3
"""
Rebuild stored monthly sales for every deal item (or one item).

Each item is regenerated in its own transaction, so a failure leaves the
remaining items untouched and already-rebuilt items committed.

Usage:
    python3 scripts/regenerate_monthly_sales.py
    python3 scripts/regenerate_monthly_sales.py --item 6f1c...-uuid
    python3 scripts/regenerate_monthly_sales.py --db-url sqlite:///dealbook.db
"""

import argparse
import sys
from pathlib import Path

# ---------------------------------------------------------------------------
# Project root on sys.path
# ---------------------------------------------------------------------------
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from sqlalchemy import select  # noqa: E402

from dealbook_config import load_settings  # noqa: E402
from dealbook_kernel.db.engine import (  # noqa: E402
    get_session,
    init_engine_from_url,
    session_scope,
)
from dealbook_kernel.exceptions import DealbookError  # noqa: E402
from dealbook_kernel.logging_config import configure_logging, get_logger  # noqa: E402
from dealbook_kernel.models.deal import DealItem  # noqa: E402
from dealbook_kernel.services.deal_item_service import DealItemService  # noqa: E402

logger = get_logger("scripts.regenerate")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Regenerate monthly sales")
    parser.add_argument("--item", help="Only this deal item ID")
    parser.add_argument("--config", help="Settings YAML file")
    parser.add_argument("--db-url", help="Database URL (overrides settings)")
    args = parser.parse_args(argv)

    settings = load_settings(args.config)
    configure_logging(level=settings.log_level)
    init_engine_from_url(args.db_url or settings.database_url, echo=settings.echo_sql)

    if args.item:
        item_ids = [args.item]
    else:
        session = get_session()
        try:
            item_ids = list(session.execute(select(DealItem.id)).scalars())
        finally:
            session.close()

    failures = 0
    for item_id in item_ids:
        try:
            with session_scope() as session:
                service = DealItemService(
                    session,
                    currency=settings.currency,
                    remainder_policy=settings.remainder_policy,
                )
                allocations = service.regenerate_monthly_sales(item_id)
            print(f"  {item_id}: {len(allocations)} month(s)")
        except DealbookError as exc:
            failures += 1
            logger.error("regeneration_failed", extra={"deal_item_id": str(item_id)}, exc_info=True)
            print(f"  {item_id}: ERROR [{exc.code}] {exc}", file=sys.stderr)

    print(f"\n  Regenerated {len(item_ids) - failures} of {len(item_ids)} item(s).")
    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
