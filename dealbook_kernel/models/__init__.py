"""ORM models for the dealbook kernel."""

from dealbook_kernel.models.customer import Customer
from dealbook_kernel.models.deal import Deal, DealItem, ProductType
from dealbook_kernel.models.monthly_sales import MonthlySales

__all__ = [
    "Customer",
    "Deal",
    "DealItem",
    "MonthlySales",
    "ProductType",
]
