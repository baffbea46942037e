"""
Input validation for deal and deal item payloads.

Pure checks with no I/O.  Payloads arrive from forms, imports or API
bodies as loosely typed mappings; these helpers turn them into typed,
frozen inputs or raise ``ValidationError`` listing every offending field.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from dealbook_kernel.exceptions import ValidationError
from dealbook_kernel.models.deal import ProductType


@dataclass(frozen=True)
class DealItemInput:
    """Validated deal item fields."""

    product_id: str
    product_name: str
    product_type: ProductType
    amount_before_tax: Decimal
    amount_after_tax: Decimal
    start_date: date
    end_date: date


@dataclass(frozen=True)
class DealInput:
    """Validated deal fields."""

    name: str
    customer_id: str
    deal_date: date
    deal_type: ProductType


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def parse_product_type(value: Any) -> ProductType | None:
    """ProductType for ``value``, or None when it is not one of the known types."""
    if isinstance(value, ProductType):
        return value
    try:
        return ProductType(str(value).strip().upper())
    except ValueError:
        return None


def parse_amount(value: Any) -> Decimal | None:
    """Exact Decimal for ``value``, or None when it is not a finite number.

    Floats are refused: money never passes through binary floating point.
    """
    if isinstance(value, (bool, float)) or _is_blank(value):
        return None
    try:
        amount = Decimal(value.strip() if isinstance(value, str) else value)
    except (InvalidOperation, TypeError, ValueError):
        return None
    return amount if amount.is_finite() else None


def parse_date(value: Any) -> date | None:
    """Date for ``value`` (a date or an ISO ``YYYY-MM-DD`` string), else None."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip())
        except ValueError:
            return None
    return None


def validate_deal_item(data: Mapping[str, Any], *, require_product_id: bool = True) -> DealItemInput:
    """
    Validate a deal item payload.

    Args:
        data: Mapping with product_id, product_name, product_type,
            amount_before_tax, amount_after_tax, start_date, end_date.
        require_product_id: False on updates, where the product cannot change.

    Raises:
        ValidationError: with one message per invalid field.
    """
    errors: dict[str, str] = {}

    if require_product_id and _is_blank(data.get("product_id")):
        errors["product_id"] = "product_id is required"
    if _is_blank(data.get("product_name")):
        errors["product_name"] = "product_name is required"

    product_type = parse_product_type(data.get("product_type"))
    if product_type is None:
        errors["product_type"] = "product_type must be LICENSE or SERVICE"

    amounts: dict[str, Decimal | None] = {}
    for name in ("amount_before_tax", "amount_after_tax"):
        amounts[name] = parse_amount(data.get(name))
        if amounts[name] is None:
            errors[name] = f"{name} must be a number"
        elif amounts[name] < 0:
            errors[name] = f"{name} cannot be negative"

    dates: dict[str, date | None] = {}
    for name in ("start_date", "end_date"):
        dates[name] = parse_date(data.get(name))
        if dates[name] is None:
            errors[name] = f"{name} is required and must be a valid date"

    start_date, end_date = dates["start_date"], dates["end_date"]
    if start_date is not None and end_date is not None and start_date > end_date:
        errors["start_date"] = "start_date must be on or before end_date"

    if errors:
        raise ValidationError("Validation failed", errors)

    return DealItemInput(
        product_id=str(data.get("product_id") or "").strip(),
        product_name=str(data["product_name"]).strip(),
        product_type=product_type,
        amount_before_tax=amounts["amount_before_tax"],
        amount_after_tax=amounts["amount_after_tax"],
        start_date=start_date,
        end_date=end_date,
    )


def validate_deal(data: Mapping[str, Any]) -> DealInput:
    """
    Validate a deal payload (name, customer_id, deal_date, deal_type).

    Raises:
        ValidationError: with one message per invalid field.
    """
    errors: dict[str, str] = {}

    if _is_blank(data.get("name")):
        errors["name"] = "name is required"
    if _is_blank(data.get("customer_id")):
        errors["customer_id"] = "customer_id is required"

    deal_date = parse_date(data.get("deal_date"))
    if deal_date is None:
        errors["deal_date"] = "deal_date is required and must be a valid date"

    deal_type = parse_product_type(data.get("deal_type"))
    if deal_type is None:
        errors["deal_type"] = "deal_type must be LICENSE or SERVICE"

    if errors:
        raise ValidationError("Validation failed", errors)

    return DealInput(
        name=str(data["name"]).strip(),
        customer_id=str(data["customer_id"]).strip(),
        deal_date=deal_date,
        deal_type=deal_type,
    )
