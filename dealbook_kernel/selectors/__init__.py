"""Read-only selectors returning DTOs and computed totals."""

from dealbook_kernel.selectors.monthly_sales_selector import MonthlySalesSelector

__all__ = ["MonthlySalesSelector"]
