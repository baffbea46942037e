"""
Configuration for dealbook.

The single entry point for runtime settings is ``load_settings()``.
"""

from dealbook_config.settings import (
    DEFAULT_DATABASE_URL,
    DealbookSettings,
    compute_checksum,
    load_settings,
)

__all__ = [
    "DEFAULT_DATABASE_URL",
    "DealbookSettings",
    "compute_checksum",
    "load_settings",
]
