"""Subscription aggregate: recurring delivery schedule."""

import uuid
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Optional

from libs.common.currency import ZERO, line_total
from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from libs.db.types import UTCDateTime
from services.store_service.errors import ConflictError
from services.store_service.models.enums import (
    PaymentMethod,
    SubscriptionPlan,
    SubscriptionStatus,
    enum_values,
)
from sqlalchemy import JSON, Boolean, CheckConstraint
from sqlalchemy import Enum as SAEnum
from sqlalchemy import ForeignKey, Integer, Numeric, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

# ============================================================================
# SUBSCRIPTION MODELS
# ============================================================================


class Subscription(Base):
    """Recurring orders on a weekly, bi-weekly or monthly cadence.

    ``next_order_date`` is only ever written by ``calculate_next_order_date``
    (directly or via resume/process_order) and at creation.
    """

    __tablename__ = "store_subscriptions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    owner_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)

    plan: Mapped[SubscriptionPlan] = mapped_column(
        SAEnum(
            SubscriptionPlan,
            values_callable=enum_values,
            name="store_subscription_plan_enum",
        ),
        nullable=False,
    )
    frequency: Mapped[int] = mapped_column(Integer, nullable=False)  # days
    status: Mapped[SubscriptionStatus] = mapped_column(
        SAEnum(
            SubscriptionStatus,
            values_callable=enum_values,
            name="store_subscription_status_enum",
        ),
        default=SubscriptionStatus.ACTIVE,
        index=True,
    )

    # Schedule
    start_date: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    next_order_date: Mapped[datetime] = mapped_column(
        UTCDateTime, nullable=False, index=True
    )
    end_date: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)
    last_order_date: Mapped[Optional[datetime]] = mapped_column(
        UTCDateTime, nullable=True
    )

    total_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=ZERO)
    payment_method: Mapped[PaymentMethod] = mapped_column(
        SAEnum(
            PaymentMethod,
            values_callable=enum_values,
            name="store_payment_method_enum",
        ),
        default=PaymentMethod.CREDIT_CARD,
    )
    shipping_address: Mapped[dict] = mapped_column(JSON, nullable=False)
    delivery_instructions: Mapped[Optional[str]] = mapped_column(
        String(500), nullable=True
    )

    auto_renew: Mapped[bool] = mapped_column(Boolean, default=True)
    max_orders: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    current_order_count: Mapped[int] = mapped_column(Integer, default=0)
    next_order_number: Mapped[int] = mapped_column(Integer, default=1)

    # Pause window
    pause_reason: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    pause_start_date: Mapped[Optional[datetime]] = mapped_column(
        UTCDateTime, nullable=True
    )
    pause_end_date: Mapped[Optional[datetime]] = mapped_column(
        UTCDateTime, nullable=True
    )

    # Cancellation
    cancellation_reason: Mapped[Optional[str]] = mapped_column(
        String(255), nullable=True
    )
    cancelled_at: Mapped[Optional[datetime]] = mapped_column(UTCDateTime, nullable=True)

    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utc_now, onupdate=utc_now
    )

    __table_args__ = (
        CheckConstraint("max_orders IS NULL OR max_orders > 0", name="positive_max_orders"),
    )

    # Relationships
    items: Mapped[list["SubscriptionItem"]] = relationship(
        back_populates="subscription", cascade="all, delete-orphan", lazy="selectin"
    )

    @classmethod
    def start(
        cls,
        *,
        owner_id: str,
        plan: SubscriptionPlan,
        shipping_address: dict,
        payment_method: PaymentMethod = PaymentMethod.CREDIT_CARD,
        start_date: Optional[datetime] = None,
        delivery_instructions: Optional[str] = None,
        max_orders: Optional[int] = None,
        auto_renew: bool = True,
        notes: Optional[str] = None,
    ) -> "Subscription":
        """Build an active subscription whose first order is one cadence out."""
        now = utc_now()
        start_date = start_date or now
        frequency = plan.frequency_days
        return cls(
            owner_id=owner_id,
            plan=plan,
            frequency=frequency,
            status=SubscriptionStatus.ACTIVE,
            start_date=start_date,
            next_order_date=start_date + timedelta(days=frequency),
            items=[],
            total_amount=ZERO,
            shipping_address=shipping_address,
            payment_method=payment_method,
            delivery_instructions=delivery_instructions,
            auto_renew=auto_renew,
            max_orders=max_orders,
            current_order_count=0,
            next_order_number=1,
            notes=notes,
            created_at=now,
            updated_at=now,
        )

    # ------------------------------------------------------------------
    # Items
    # ------------------------------------------------------------------

    def set_items(self, lines: list[tuple[uuid.UUID, int, Decimal]]) -> None:
        """Replace the items with ``(product_id, quantity, unit_price)`` lines."""
        self.items.clear()
        for product_id, quantity, unit_price in lines:
            self.items.append(
                SubscriptionItem(
                    product_id=product_id, quantity=quantity, unit_price=unit_price
                )
            )
        self.total_amount = sum(
            (line_total(i.quantity, i.unit_price) for i in self.items), ZERO
        )
        self.updated_at = utc_now()

    def update_items(self, lines: list[tuple[uuid.UUID, int, Decimal]]) -> None:
        if self.status != SubscriptionStatus.ACTIVE:
            raise ConflictError("Cannot update inactive subscription")
        self.set_items(lines)

    # ------------------------------------------------------------------
    # Cadence
    # ------------------------------------------------------------------

    @property
    def is_paused(self) -> bool:
        return self.pause_start_date is not None

    @property
    def order_cap_reached(self) -> bool:
        return self.max_orders is not None and self.current_order_count >= self.max_orders

    def calculate_next_order_date(self) -> Optional[datetime]:
        """Derive next_order_date from the last order (or the start date).

        Only active, unpaused subscriptions move. Repeated calls without an
        intervening order give the same date.
        """
        if self.status == SubscriptionStatus.ACTIVE and not self.is_paused:
            base = self.last_order_date or self.start_date
            self.next_order_date = base + timedelta(days=self.frequency)
        return self.next_order_date

    def pause(self, reason: Optional[str] = None, pause_end_date: Optional[datetime] = None) -> None:
        if self.status != SubscriptionStatus.ACTIVE:
            raise ConflictError("Subscription is not active")
        self.status = SubscriptionStatus.PAUSED
        self.pause_reason = reason
        self.pause_start_date = utc_now()
        self.pause_end_date = pause_end_date
        self.updated_at = utc_now()

    def resume(self) -> None:
        """Reactivate; the time spent paused is not added back to the schedule."""
        if self.status != SubscriptionStatus.PAUSED:
            raise ConflictError("Subscription is not paused")
        self.status = SubscriptionStatus.ACTIVE
        self.pause_reason = None
        self.pause_start_date = None
        self.pause_end_date = None
        self.calculate_next_order_date()
        self.updated_at = utc_now()

    def cancel(self, reason: Optional[str] = None) -> None:
        if self.status == SubscriptionStatus.CANCELLED:
            raise ConflictError("Subscription is already cancelled")
        if self.status == SubscriptionStatus.EXPIRED:
            raise ConflictError("Subscription has already expired")
        self.status = SubscriptionStatus.CANCELLED
        self.cancellation_reason = reason
        self.cancelled_at = utc_now()
        self.auto_renew = False
        self.updated_at = utc_now()

    def should_process_order(self, now: Optional[datetime] = None) -> bool:
        """Whether the sweep should produce an order now. Never mutates."""
        now = now or utc_now()
        if self.status != SubscriptionStatus.ACTIVE:
            return False
        if (
            self.pause_start_date is not None
            and self.pause_end_date is not None
            and now < self.pause_end_date
        ):
            return False
        if self.order_cap_reached:
            return False
        return now >= self.next_order_date

    def process_order(self, now: Optional[datetime] = None) -> int:
        """Record one produced order. Returns the sequence number it used."""
        now = now or utc_now()
        sequence = self.next_order_number
        self.current_order_count += 1
        self.last_order_date = now
        self.next_order_number = sequence + 1

        if self.order_cap_reached:
            self.status = SubscriptionStatus.EXPIRED
            self.end_date = now
        else:
            self.calculate_next_order_date()
        self.updated_at = now
        return sequence

    def __repr__(self):
        return f"<Subscription {self.id} plan={self.plan} status={self.status}>"


class SubscriptionItem(Base):
    """Subscription line items, priced when the subscription was set up."""

    __tablename__ = "store_subscription_items"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    subscription_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("store_subscriptions.id", ondelete="CASCADE"), nullable=False
    )
    product_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("store_products.id"), nullable=False
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    __table_args__ = (CheckConstraint("quantity > 0", name="positive_quantity"),)

    # Relationships
    subscription: Mapped["Subscription"] = relationship(back_populates="items")

    def __repr__(self):
        return f"<SubscriptionItem product={self.product_id} qty={self.quantity}>"
