"""
Module: order_kernel.models.catalog
Responsibility: ORM persistence for products and their purchasable variants.
Architecture position: Kernel > Models.  May import from db/base.py only.
"""

from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from order_kernel.db.base import TrackedBase, UUIDString

if TYPE_CHECKING:
    from order_kernel.models.enterprise import Enterprise


class Product(TrackedBase):
    """A product offered by a supplier enterprise."""

    __tablename__ = "products"

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    supplier_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("enterprises.id"),
        nullable=False,
    )

    supplier: Mapped["Enterprise"] = relationship()

    variants: Mapped[list["Variant"]] = relationship(
        back_populates="product",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Product {self.name}>"


class Variant(TrackedBase):
    """
    A purchasable unit of a product.

    Line items capture the variant price at the time they are added, so a
    later price change never alters an existing order.
    """

    __tablename__ = "variants"

    product_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("products.id"),
        nullable=False,
    )

    sku: Mapped[str] = mapped_column(String(50), nullable=False, default="")

    price: Mapped[Decimal] = mapped_column(nullable=False, default=Decimal("0"))

    product: Mapped["Product"] = relationship(back_populates="variants")

    def __repr__(self) -> str:
        return f"<Variant {self.sku or self.id} @ {self.price}>"
