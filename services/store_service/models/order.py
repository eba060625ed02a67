"""Order aggregate: a frozen snapshot plus the status/payment state machines."""

import random
import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from libs.common.currency import ZERO, to_money
from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from libs.db.types import UTCDateTime
from services.store_service.errors import ConflictError, ValidationError
from services.store_service.models.enums import (
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
    enum_values,
)
from sqlalchemy import JSON, Boolean
from sqlalchemy import Enum as SAEnum
from sqlalchemy import ForeignKey, Integer, Numeric, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

# Status changes reachable through update_status(). Refunds have their own
# entry point because they also move the payment status.
ORDER_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.CONFIRMED, OrderStatus.CANCELLED}),
    OrderStatus.CONFIRMED: frozenset({OrderStatus.PROCESSING, OrderStatus.CANCELLED}),
    OrderStatus.PROCESSING: frozenset({OrderStatus.SHIPPED}),
    OrderStatus.SHIPPED: frozenset({OrderStatus.DELIVERED}),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
    OrderStatus.REFUNDED: frozenset(),
}

CANCELLABLE_STATUSES = frozenset({OrderStatus.PENDING, OrderStatus.CONFIRMED})

PAYMENT_TRANSITIONS: dict[PaymentStatus, frozenset[PaymentStatus]] = {
    PaymentStatus.PENDING: frozenset({PaymentStatus.PAID, PaymentStatus.FAILED}),
    PaymentStatus.FAILED: frozenset({PaymentStatus.PENDING, PaymentStatus.PAID}),
    PaymentStatus.PAID: frozenset({PaymentStatus.REFUNDED}),
    PaymentStatus.REFUNDED: frozenset(),
}


# ============================================================================
# ORDER MODELS
# ============================================================================


class Order(Base):
    """Orders."""

    __tablename__ = "store_orders"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    order_number: Mapped[str] = mapped_column(
        String(20), unique=True, nullable=False, index=True
    )
    owner_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)

    # Pricing, copied from the cart at checkout
    subtotal: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    tax: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=ZERO)
    shipping: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=ZERO)
    discount: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=ZERO)
    coupon_code: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    coupon_discount: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=ZERO)
    total: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    # Status
    status: Mapped[OrderStatus] = mapped_column(
        SAEnum(OrderStatus, values_callable=enum_values, name="store_order_status_enum"),
        default=OrderStatus.PENDING,
        index=True,
    )
    payment_status: Mapped[PaymentStatus] = mapped_column(
        SAEnum(
            PaymentStatus,
            values_callable=enum_values,
            name="store_payment_status_enum",
        ),
        default=PaymentStatus.PENDING,
    )
    payment_method: Mapped[PaymentMethod] = mapped_column(
        SAEnum(
            PaymentMethod,
            values_callable=enum_values,
            name="store_payment_method_enum",
        ),
        nullable=False,
    )

    # Addresses are copied values, not references
    shipping_address: Mapped[dict] = mapped_column(JSON, nullable=False)
    billing_address: Mapped[dict] = mapped_column(JSON, nullable=False)
    delivery_instructions: Mapped[Optional[str]] = mapped_column(
        String(500), nullable=True
    )

    # Fulfilment
    estimated_delivery: Mapped[Optional[datetime]] = mapped_column(
        UTCDateTime, nullable=True
    )
    actual_delivery: Mapped[Optional[datetime]] = mapped_column(
        UTCDateTime, nullable=True
    )
    tracking_number: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Subscription linkage
    is_subscription_order: Mapped[bool] = mapped_column(Boolean, default=False)
    subscription_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("store_subscriptions.id"), nullable=True, index=True
    )
    # Set for subscription orders: one order per subscription cycle
    idempotency_key: Mapped[Optional[str]] = mapped_column(
        String(100), unique=True, nullable=True
    )

    # Refunds
    refund_amount: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(12, 2), nullable=True
    )
    refund_reason: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utc_now, onupdate=utc_now
    )

    # Relationships
    items: Mapped[list["OrderItem"]] = relationship(
        back_populates="order", cascade="all, delete-orphan", lazy="selectin"
    )

    @staticmethod
    def generate_order_number(prefix: str = "NC") -> str:
        """Generate a human-readable order number: NC + 6 time digits + 3 random."""
        millis = int(utc_now().timestamp() * 1000)
        timestamp = str(millis)[-6:]
        suffix = f"{random.randint(0, 999):03d}"
        return f"{prefix}{timestamp}{suffix}"

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def update_status(self, new_status: OrderStatus) -> None:
        if new_status == self.status:
            return
        if new_status not in ORDER_TRANSITIONS[self.status]:
            raise ConflictError(
                f"Cannot change order status from {self.status.value} to {new_status.value}"
            )
        self.status = new_status
        if new_status == OrderStatus.DELIVERED:
            self.actual_delivery = utc_now()
        self.updated_at = utc_now()

    def update_payment_status(self, new_status: PaymentStatus) -> None:
        if new_status == self.payment_status:
            return
        if new_status == PaymentStatus.REFUNDED:
            raise ConflictError("Refunds must be issued through the refund operation")
        if new_status not in PAYMENT_TRANSITIONS[self.payment_status]:
            raise ConflictError(
                f"Cannot change payment status from {self.payment_status.value} "
                f"to {new_status.value}"
            )
        self.payment_status = new_status
        self.updated_at = utc_now()

    def add_tracking(self, tracking_number: str) -> None:
        self.tracking_number = tracking_number
        self.updated_at = utc_now()

    def cancel(self, reason: Optional[str] = None) -> None:
        if self.status not in CANCELLABLE_STATUSES:
            raise ConflictError("Order cannot be cancelled at this stage")
        self.status = OrderStatus.CANCELLED
        self.notes = f"Cancelled: {reason}" if reason else "Cancelled by user"
        self.updated_at = utc_now()

    def process_refund(self, amount: Decimal, reason: str) -> None:
        """Record the refunded amount and move the order to refunded.

        The amount is bookkeeping only: any refund, whatever its size, sets
        both the order status and the payment status to refunded, from any
        order status. The payment must have been taken.
        """
        amount = to_money(amount)
        if amount <= ZERO:
            raise ValidationError("Refund amount must be positive")
        if amount > to_money(self.total):
            raise ValidationError("Refund amount cannot exceed the order total")
        if PaymentStatus.REFUNDED not in PAYMENT_TRANSITIONS[self.payment_status]:
            raise ConflictError("Order has not been paid")

        self.refund_amount = amount
        self.refund_reason = reason
        self.status = OrderStatus.REFUNDED
        self.payment_status = PaymentStatus.REFUNDED
        self.updated_at = utc_now()

    def calculate_totals(self) -> None:
        """Re-derive subtotal and total from the items.

        Only for administrative corrections after items were edited; the
        checkout total is otherwise authoritative.
        """
        self.subtotal = sum((to_money(i.total_price) for i in self.items), ZERO)
        self.total = to_money(
            self.subtotal
            + to_money(self.tax or ZERO)
            + to_money(self.shipping or ZERO)
            - to_money(self.discount or ZERO)
            - to_money(self.coupon_discount or ZERO)
        )
        self.updated_at = utc_now()

    def __repr__(self):
        return f"<Order {self.order_number} status={self.status}>"


class OrderItem(Base):
    """Order line items (snapshot, never edited through the public API)."""

    __tablename__ = "store_order_items"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    order_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("store_orders.id", ondelete="CASCADE"), nullable=False
    )
    product_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("store_products.id"), nullable=False
    )

    # Snapshot at order time
    product_name: Mapped[str] = mapped_column(String(100), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    total_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    # Relationships
    order: Mapped["Order"] = relationship(back_populates="items")

    def __repr__(self):
        return f"<OrderItem {self.product_name} x{self.quantity}>"
