"""Kernel write services (flush-only; the caller owns the transaction)."""

from dealbook_kernel.services.deal_item_service import DealItemInfo, DealItemService
from dealbook_kernel.services.deal_service import CustomerInfo, DealInfo, DealService

__all__ = [
    "CustomerInfo",
    "DealInfo",
    "DealItemInfo",
    "DealItemService",
    "DealService",
]
