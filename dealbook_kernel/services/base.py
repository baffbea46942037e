"""
BaseService -- abstract base for all kernel services.

Responsibility:
    Provides the common constructor and session-handling contract for
    every write service.  Services receive a SQLAlchemy ``Session`` and
    use ``session.flush()`` -- never ``session.commit()``.

Invariants enforced:
    Transaction boundaries belong to the caller (``session_scope()`` or a
    test fixture).  A deal item update and the rebuild of its monthly
    sales therefore commit or roll back together.
"""

from abc import ABC
from typing import Generic, TypeVar
from uuid import UUID

from sqlalchemy.orm import Session

from dealbook_kernel.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


def as_uuid(value: UUID | str, error: type[Exception]) -> UUID:
    """UUID for an ID argument; a malformed ID raises ``error`` like a missing row."""
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError:
        raise error(str(value)) from None


class BaseService(ABC, Generic[ModelType]):
    """
    Abstract base class for kernel services.

    Contract:
        Accepts a SQLAlchemy ``Session`` from the caller and flushes
        changes within the caller's transaction.

    Non-goals:
        - Does NOT commit or roll back.
        - Does NOT provide reporting queries; those live in
          ``dealbook_kernel/selectors/``.
    """

    def __init__(self, session: Session):
        self.session = session
