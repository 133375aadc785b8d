"""
Module: order_kernel.selectors.base
Responsibility: Abstract base class for all read-only query selectors.
Architecture position: Kernel > Selectors.  May import from db/base.py and
    models/.  MUST NOT import from services/ or outer layers.
    Selectors NEVER create, modify, or delete data.

Invariants enforced:
    - Read-only access: Selectors accept a Session from the caller but MUST NOT
      call session.add(), session.delete(), session.commit(), or session.flush().
    - DTO return convention: Selectors return frozen dataclasses, NOT raw ORM
      model instances.
    - Existence checks return None or False; they never raise for a missing
      row.
"""

from abc import ABC
from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from order_kernel.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseSelector(ABC, Generic[ModelType]):
    """
    Abstract base class for all selectors.

    Contract:
        Selectors accept a Session from the caller, perform read-only queries,
        and return DTOs or computed results.  They MUST NOT mutate any data.
    """

    def __init__(self, session: Session):
        """
        Initialize the selector.

        Args:
            session: SQLAlchemy session for database operations.
        """
        self.session = session
