"""Pure kernel domain objects (no ORM, no I/O)."""

from dealbook_kernel.domain.currency import CurrencyInfo, CurrencyRegistry

__all__ = ["CurrencyInfo", "CurrencyRegistry"]
