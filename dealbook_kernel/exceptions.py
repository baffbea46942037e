"""
Typed exception hierarchy for dealbook.

Every error has its own class, a class-level machine-readable ``code``,
and structured attributes so that callers catch by type and APIs report
by code rather than by parsing message strings.

    DealbookError (base)
    |
    +-- ProrationError
    |   +-- InvalidDateRangeError
    |   +-- InvalidAmountError
    |
    +-- ValidationError
    |
    +-- NotFoundError
    |   +-- CustomerNotFoundError
    |   +-- DealNotFoundError
    |   +-- DealItemNotFoundError
    |
    +-- CurrencyError
    |   +-- InvalidCurrencyError
    |
    +-- ConfigurationError

Category        | Code                  | When Raised
----------------|-----------------------|-----------------------------------------
Proration       | INVALID_DATE_RANGE    | start_date after end_date
                | INVALID_AMOUNT        | Negative amount or binary float given
----------------|-----------------------|-----------------------------------------
Validation      | VALIDATION_ERROR      | Required field missing or malformed
----------------|-----------------------|-----------------------------------------
Not found       | CUSTOMER_NOT_FOUND    | Customer ID doesn't exist
                | DEAL_NOT_FOUND        | Deal ID doesn't exist
                | DEAL_ITEM_NOT_FOUND   | Deal item ID doesn't exist
----------------|-----------------------|-----------------------------------------
Currency        | INVALID_CURRENCY      | Not a known ISO 4217 code
----------------|-----------------------|-----------------------------------------
Configuration   | CONFIGURATION_ERROR   | Settings file or override is invalid

Handling pattern::

    try:
        service.update_deal_item(item_id, payload)
    except ValidationError as e:
        return {"error": e.code, "message": str(e), "fields": e.fields}
    except DealItemNotFoundError as e:
        return {"error": e.code, "deal_item_id": e.deal_item_id}
"""

from datetime import date
from decimal import Decimal


class DealbookError(Exception):
    """
    Base exception for all dealbook errors.

    All subclasses must have a ``code`` class attribute for
    machine-readable error identification.
    """

    code: str = "DEALBOOK_ERROR"


# Proration exceptions


class ProrationError(DealbookError):
    """Base exception for proration engine precondition failures."""

    code: str = "PRORATION_ERROR"


class InvalidDateRangeError(ProrationError):
    """Contract start date falls after its end date."""

    code: str = "INVALID_DATE_RANGE"

    def __init__(self, start_date: date, end_date: date):
        self.start_date = start_date
        self.end_date = end_date
        super().__init__(
            f"Start date {start_date.isoformat()} is after end date "
            f"{end_date.isoformat()}"
        )


class InvalidAmountError(ProrationError):
    """Amount is negative or not an exact decimal value."""

    code: str = "INVALID_AMOUNT"

    def __init__(self, amount: Decimal | float | int | str, reason: str):
        self.amount = str(amount)
        self.reason = reason
        super().__init__(f"Invalid amount {amount}: {reason}")


# Validation


class ValidationError(DealbookError):
    """
    Input rejected before reaching the database.

    ``fields`` maps each offending field name to a human-readable message.
    """

    code: str = "VALIDATION_ERROR"

    def __init__(self, message: str, fields: dict[str, str] | None = None):
        self.fields = dict(fields or {})
        super().__init__(message)


# Lookup failures


class NotFoundError(DealbookError):
    """Base exception for missing records."""

    code: str = "NOT_FOUND"


class CustomerNotFoundError(NotFoundError):
    """Customer with given ID was not found."""

    code: str = "CUSTOMER_NOT_FOUND"

    def __init__(self, customer_id: str):
        self.customer_id = str(customer_id)
        super().__init__(f"Customer not found: {customer_id}")


class DealNotFoundError(NotFoundError):
    """Deal with given ID was not found."""

    code: str = "DEAL_NOT_FOUND"

    def __init__(self, deal_id: str):
        self.deal_id = str(deal_id)
        super().__init__(f"Deal not found: {deal_id}")


class DealItemNotFoundError(NotFoundError):
    """Deal item with given ID was not found."""

    code: str = "DEAL_ITEM_NOT_FOUND"

    def __init__(self, deal_item_id: str):
        self.deal_item_id = str(deal_item_id)
        super().__init__(f"Deal item not found: {deal_item_id}")


# Currency


class CurrencyError(DealbookError):
    """Base exception for currency errors."""

    code: str = "CURRENCY_ERROR"


class InvalidCurrencyError(CurrencyError):
    """Currency code is not a known ISO 4217 code."""

    code: str = "INVALID_CURRENCY"

    def __init__(self, currency: str):
        self.currency = currency
        super().__init__(f"Invalid currency code: {currency}")


# Configuration


class ConfigurationError(DealbookError):
    """Settings could not be loaded or failed validation."""

    code: str = "CONFIGURATION_ERROR"

    def __init__(self, setting: str, reason: str):
        self.setting = setting
        self.reason = reason
        super().__init__(f"Invalid setting '{setting}': {reason}")
