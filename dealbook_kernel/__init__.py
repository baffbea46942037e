"""
Dealbook Kernel

Persistence and infrastructure for the deal dashboard:
- Structured JSON logging with request-scoped context
- Typed, coded exceptions
- Deals, deal items and their prorated monthly sales
- Atomic regeneration of monthly sales when a deal item changes
"""

__version__ = "0.1.0"
