"""Store catalog models."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from libs.db.types import UTCDateTime
from services.store_service.models.enums import ProductCategory, enum_values
from sqlalchemy import JSON, Boolean, CheckConstraint
from sqlalchemy import Enum as SAEnum
from sqlalchemy import (
    Float,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column

# ============================================================================
# CATALOG MODELS
# ============================================================================


class Product(Base):
    """Sellable products (produce, proteins, meal kits, supplements...)."""

    __tablename__ = "store_products"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    category: Mapped[ProductCategory] = mapped_column(
        SAEnum(
            ProductCategory,
            values_callable=enum_values,
            name="store_product_category_enum",
        ),
        nullable=False,
    )

    # Pricing
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    sale_price: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(12, 2), nullable=True
    )
    unit: Mapped[str] = mapped_column(String(20), default="piece")

    # Stock
    stock_quantity: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    min_order_quantity: Mapped[int] = mapped_column(Integer, default=1)
    max_order_quantity: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    dietary_tags: Mapped[list] = mapped_column(JSON, default=list)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    is_featured: Mapped[bool] = mapped_column(Boolean, default=False)

    # Ratings, derived from store_product_reviews
    average_rating: Mapped[float] = mapped_column(Float, default=0.0)
    rating_count: Mapped[int] = mapped_column(Integer, default=0)

    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utc_now, onupdate=utc_now
    )

    __table_args__ = (
        CheckConstraint("price >= 0", name="non_negative_price"),
        CheckConstraint("stock_quantity >= 0", name="non_negative_stock"),
    )

    @property
    def final_price(self) -> Decimal:
        """Sale price when one is set, list price otherwise."""
        return self.sale_price or self.price

    def has_stock(self, quantity: int) -> bool:
        return self.stock_quantity >= quantity

    def __repr__(self):
        return f"<Product {self.name}>"


class ProductReview(Base):
    """One shopper's rating of a product."""

    __tablename__ = "store_product_reviews"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    product_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("store_products.id", ondelete="CASCADE"), nullable=False, index=True
    )
    reviewer_id: Mapped[str] = mapped_column(String(255), nullable=False)
    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    comment: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utc_now)

    __table_args__ = (
        UniqueConstraint("product_id", "reviewer_id"),
        CheckConstraint("rating BETWEEN 1 AND 5", name="rating_range"),
    )

    def __repr__(self):
        return f"<ProductReview {self.product_id} rating={self.rating}>"
