"""
BaseService -- abstract base for all kernel services.

Responsibility:
    Provides the common constructor and session-handling contract for
    every service in the kernel layer.  Concrete services receive a
    SQLAlchemy ``Session`` and use ``session.flush()`` -- never
    ``session.commit()`` -- unless they are constructed with
    ``auto_commit=True`` as a transaction owner (the recalculation
    orchestrator and the request endpoints).

Architecture position:
    Kernel > Services -- imperative shell infrastructure.

Invariants enforced:
    - Transaction boundaries: flush-only services run inside the caller's
      transaction, so deleting a line item and recalculating its order
      commit or roll back together.
"""

from abc import ABC
from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from order_kernel.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseService(ABC, Generic[ModelType]):
    """
    Abstract base class for all kernel services.

    Contract:
        Accepts a SQLAlchemy ``Session`` from the caller and uses
        ``session.flush()`` to persist changes within the active
        transaction.

    Non-goals:
        - Does NOT provide query-only (read) methods -- those belong
          in ``order_kernel/selectors/``.
    """

    def __init__(self, session: Session):
        """
        Initialize the service.

        Args:
            session: SQLAlchemy session for database operations.
        """
        self.session = session
