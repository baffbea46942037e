"""
DealService -- customer and deal management.

Responsibility:
    Creates and looks up customers and deals.  Deal items and their
    prorated monthly sales are handled by DealItemService.

Invariants enforced:
    - Returns frozen ``CustomerInfo`` / ``DealInfo`` DTOs, never ORM rows.
    - Flush-only: never commits or rolls back the session.

Failure modes:
    - ValidationError: deal payload missing or malformed fields.
    - CustomerNotFoundError / DealNotFoundError: lookup by ID fails.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date
from typing import Any
from uuid import UUID

from dealbook_kernel.domain.validation import validate_deal
from dealbook_kernel.exceptions import (
    CustomerNotFoundError,
    DealNotFoundError,
    ValidationError,
)
from dealbook_kernel.logging_config import get_logger
from dealbook_kernel.models.customer import Customer
from dealbook_kernel.models.deal import Deal, ProductType
from dealbook_kernel.services.base import BaseService, as_uuid

logger = get_logger("services.deal")


@dataclass(frozen=True)
class CustomerInfo:
    """Immutable DTO for customer data."""

    id: UUID
    code: str
    name: str
    contact_email: str | None


@dataclass(frozen=True)
class DealInfo:
    """Immutable DTO for deal data."""

    id: UUID
    name: str
    customer_id: UUID
    deal_date: date
    deal_type: ProductType


class DealService(BaseService[Deal]):
    """Service for customers and deals."""

    def _customer_to_dto(self, customer: Customer) -> CustomerInfo:
        return CustomerInfo(
            id=customer.id,
            code=customer.code,
            name=customer.name,
            contact_email=customer.contact_email,
        )

    def _deal_to_dto(self, deal: Deal) -> DealInfo:
        return DealInfo(
            id=deal.id,
            name=deal.name,
            customer_id=deal.customer_id,
            deal_date=deal.deal_date,
            deal_type=ProductType(deal.deal_type),
        )

    def _get_customer(self, customer_id: UUID | str) -> Customer:
        customer = self.session.get(
            Customer, as_uuid(customer_id, CustomerNotFoundError),
        )
        if customer is None:
            raise CustomerNotFoundError(str(customer_id))
        return customer

    def _get_deal(self, deal_id: UUID | str) -> Deal:
        deal = self.session.get(Deal, as_uuid(deal_id, DealNotFoundError))
        if deal is None:
            raise DealNotFoundError(str(deal_id))
        return deal

    def create_customer(
        self,
        code: str,
        name: str,
        contact_email: str | None = None,
    ) -> CustomerInfo:
        """
        Create a customer.

        Raises:
            ValidationError: If code or name is blank.
        """
        errors = {
            field: f"{field} is required"
            for field, value in (("code", code), ("name", name))
            if not value or not value.strip()
        }
        if errors:
            raise ValidationError("Validation failed", errors)

        customer = Customer(
            code=code.strip(), name=name.strip(), contact_email=contact_email,
        )
        self.session.add(customer)
        self.session.flush()
        logger.info("customer_created", extra={"customer_code": customer.code})
        return self._customer_to_dto(customer)

    def get_customer(self, customer_id: UUID | str) -> CustomerInfo:
        """
        Get a customer by ID.

        Raises:
            CustomerNotFoundError: If the customer doesn't exist.
        """
        return self._customer_to_dto(self._get_customer(customer_id))

    def create_deal(self, data: Mapping[str, Any]) -> DealInfo:
        """
        Create a deal for an existing customer.

        Args:
            data: Mapping with name, customer_id, deal_date, deal_type.

        Raises:
            ValidationError: If the payload is invalid.
            CustomerNotFoundError: If the customer doesn't exist.
        """
        payload = validate_deal(data)
        customer = self._get_customer(payload.customer_id)

        deal = Deal(
            name=payload.name,
            customer_id=customer.id,
            deal_date=payload.deal_date,
            deal_type=payload.deal_type.value,
        )
        self.session.add(deal)
        self.session.flush()
        logger.info(
            "deal_created",
            extra={
                "deal_id": str(deal.id),
                "customer_code": customer.code,
                "deal_type": payload.deal_type.value,
            },
        )
        return self._deal_to_dto(deal)

    def get_deal(self, deal_id: UUID | str) -> DealInfo:
        """
        Get a deal by ID.

        Raises:
            DealNotFoundError: If the deal doesn't exist.
        """
        return self._deal_to_dto(self._get_deal(deal_id))

    def delete_deal(self, deal_id: UUID | str) -> None:
        """
        Delete a deal together with its items and their monthly sales.

        Raises:
            DealNotFoundError: If the deal doesn't exist.
        """
        deal = self._get_deal(deal_id)
        item_count = len(deal.items)
        self.session.delete(deal)
        self.session.flush()
        logger.info(
            "deal_deleted",
            extra={"deal_id": str(deal_id), "item_count": item_count},
        )
