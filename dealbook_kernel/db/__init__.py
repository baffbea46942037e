"""Database layer - engine, session scope and declarative base classes."""

from dealbook_kernel.db.base import UUID, Base, TimestampedBase, UUIDString
from dealbook_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_engine,
    get_session,
    is_postgres,
    init_engine_from_url,
    reset_engine,
    session_scope,
)

__all__ = [
    "init_engine_from_url",
    "get_engine",
    "get_session",
    "session_scope",
    "create_tables",
    "drop_tables",
    "reset_engine",
    "is_postgres",
    "Base",
    "TimestampedBase",
    "UUIDString",
    "UUID",
]
