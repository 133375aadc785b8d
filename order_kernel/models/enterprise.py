"""
Module: order_kernel.models.enterprise
Responsibility: ORM persistence for marketplace participants (producers,
    hubs, shops) and the customers who place orders with them.
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - allow_order_changes gates every edit to a completed order distributed
      by this enterprise (see domain/deletion_policy.py).
    - charges_sales_tax gates whether tax-inclusive fee amounts are
      decomposed into an included_tax component.
"""

from sqlalchemy import Boolean, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from order_kernel.db.base import TrackedBase


class Enterprise(TrackedBase):
    """
    A producer, hub or shop trading through order cycles.

    Guarantees:
        - is_distributor marks enterprises that can receive orders.
        - Both configuration flags default to False.
    """

    __tablename__ = "enterprises"

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    is_distributor: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )

    charges_sales_tax: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )

    allow_order_changes: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )

    def __repr__(self) -> str:
        return f"<Enterprise {self.name}>"


class User(TrackedBase):
    """Customer account that owns orders."""

    __tablename__ = "users"

    __table_args__ = (
        UniqueConstraint("email", name="uq_user_email"),
    )

    email: Mapped[str] = mapped_column(String(255), nullable=False)

    def __repr__(self) -> str:
        return f"<User {self.email}>"
