"""Cart aggregate: line items plus denormalized totals."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from libs.common.currency import ZERO, line_total, percent_of, to_money
from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from libs.db.types import UTCDateTime
from services.store_service.errors import InvariantViolation, ValidationError
from sqlalchemy import Boolean, CheckConstraint, ForeignKey, Integer, Numeric, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

# ============================================================================
# CART MODELS
# ============================================================================


class Cart(Base):
    """Shopping carts, one per owner.

    ``subtotal`` and ``total`` are caches over the items and adjustments.
    Every mutator below ends in ``recalculate_totals()``; nothing else should
    write them.
    """

    __tablename__ = "store_carts"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    owner_id: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)

    subtotal: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=ZERO)
    tax: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=ZERO)
    shipping: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=ZERO)
    discount: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=ZERO)
    total: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=ZERO)

    # Coupon
    coupon_code: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    coupon_percent: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(5, 2), nullable=True
    )
    coupon_discount: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=ZERO)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    last_updated: Mapped[datetime] = mapped_column(UTCDateTime, default=utc_now)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utc_now)

    # Relationships
    items: Mapped[list["CartItem"]] = relationship(
        back_populates="cart", cascade="all, delete-orphan", lazy="selectin"
    )

    @classmethod
    def open(cls, owner_id: str) -> "Cart":
        """Build an empty cart with every money field set."""
        now = utc_now()
        return cls(
            owner_id=owner_id,
            items=[],
            subtotal=ZERO,
            tax=ZERO,
            shipping=ZERO,
            discount=ZERO,
            total=ZERO,
            coupon_code=None,
            coupon_percent=None,
            coupon_discount=ZERO,
            is_active=True,
            last_updated=now,
            created_at=now,
        )

    # ------------------------------------------------------------------
    # Totals
    # ------------------------------------------------------------------

    def computed_totals(self) -> tuple[Decimal, Decimal, Decimal]:
        """Return ``(subtotal, coupon_discount, total)`` derived from source data."""
        subtotal = sum((to_money(item.total_price) for item in self.items), ZERO)
        coupon_discount = ZERO
        if self.coupon_code and self.coupon_percent:
            coupon_discount = percent_of(subtotal, self.coupon_percent)
        # No clamping: discounts larger than the subtotal give a negative total.
        total = (
            subtotal
            + to_money(self.tax or ZERO)
            + to_money(self.shipping or ZERO)
            - to_money(self.discount or ZERO)
            - coupon_discount
        )
        return subtotal, coupon_discount, to_money(total)

    def recalculate_totals(self) -> None:
        self.subtotal, self.coupon_discount, self.total = self.computed_totals()
        self.last_updated = utc_now()

    def verify_totals(self) -> None:
        """Raise InvariantViolation if the cached totals drifted from the items."""
        subtotal, coupon_discount, total = self.computed_totals()
        cached = (
            to_money(self.subtotal or ZERO),
            to_money(self.coupon_discount or ZERO),
            to_money(self.total or ZERO),
        )
        if cached != (subtotal, coupon_discount, total):
            raise InvariantViolation(
                {
                    "message": "Cart totals out of sync with items",
                    "cached": {
                        "subtotal": str(cached[0]),
                        "coupon_discount": str(cached[1]),
                        "total": str(cached[2]),
                    },
                    "expected": {
                        "subtotal": str(subtotal),
                        "coupon_discount": str(coupon_discount),
                        "total": str(total),
                    },
                }
            )

    # ------------------------------------------------------------------
    # Line items
    # ------------------------------------------------------------------

    def find_item(self, product_id: uuid.UUID) -> Optional["CartItem"]:
        return next((i for i in self.items if i.product_id == product_id), None)

    def add_item(
        self,
        product_id: uuid.UUID,
        quantity: int,
        unit_price: Decimal,
        note: Optional[str] = None,
    ) -> "CartItem":
        """Add ``quantity`` of a product.

        An existing line keeps the unit price it was first added at; the
        passed price only applies to a brand-new line.
        """
        if quantity < 1:
            raise ValidationError("Quantity must be at least 1")
        if to_money(unit_price) < ZERO:
            raise ValidationError("Unit price cannot be negative")

        item = self.find_item(product_id)
        if item is not None:
            item.quantity += quantity
            item.total_price = line_total(item.quantity, item.unit_price)
        else:
            item = CartItem(
                product_id=product_id,
                quantity=quantity,
                unit_price=to_money(unit_price),
                total_price=line_total(quantity, unit_price),
                added_at=utc_now(),
                note=note,
            )
            self.items.append(item)

        self.recalculate_totals()
        return item

    def remove_item(self, product_id: uuid.UUID) -> None:
        for item in [i for i in self.items if i.product_id == product_id]:
            self.items.remove(item)
        self.recalculate_totals()

    def update_item_quantity(self, product_id: uuid.UUID, quantity: int) -> None:
        """Set a line's quantity. Unknown products are ignored."""
        if quantity < 1:
            raise ValidationError("Quantity must be at least 1")

        item = self.find_item(product_id)
        if item is None:
            return
        item.quantity = quantity
        item.total_price = line_total(quantity, item.unit_price)
        self.recalculate_totals()

    def clear(self) -> None:
        self.items.clear()
        self.subtotal = ZERO
        self.tax = ZERO
        self.shipping = ZERO
        self.discount = ZERO
        self.total = ZERO
        self.coupon_code = None
        self.coupon_percent = None
        self.coupon_discount = ZERO
        self.last_updated = utc_now()

    # ------------------------------------------------------------------
    # Coupons
    # ------------------------------------------------------------------

    def apply_coupon(self, code: str, percent: Decimal) -> None:
        self.coupon_code = code
        self.coupon_percent = to_money(percent)
        self.recalculate_totals()

    def remove_coupon(self) -> None:
        self.coupon_code = None
        self.coupon_percent = None
        self.recalculate_totals()

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    def __repr__(self):
        return f"<Cart {self.id} owner={self.owner_id} items={len(self.items)}>"


class CartItem(Base):
    """Cart line items."""

    __tablename__ = "store_cart_items"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    cart_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("store_carts.id", ondelete="CASCADE"), nullable=False
    )
    product_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("store_products.id"), nullable=False
    )

    quantity: Mapped[int] = mapped_column(Integer, default=1, nullable=False)

    # Snapshot price at add time
    unit_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    total_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    note: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    added_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utc_now)

    __table_args__ = (CheckConstraint("quantity > 0", name="positive_quantity"),)

    # Relationships
    cart: Mapped["Cart"] = relationship(back_populates="items")

    def __repr__(self):
        return f"<CartItem product={self.product_id} qty={self.quantity}>"
