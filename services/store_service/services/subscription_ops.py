"""Subscription operations for the owner-facing API."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from libs.common.datetime_utils import as_utc
from libs.common.logging import get_logger
from services.store_service.errors import NotFoundError, ValidationError
from services.store_service.models import (
    PaymentMethod,
    Product,
    Subscription,
    SubscriptionPlan,
    SubscriptionStatus,
)
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def _priced_lines(
    db: AsyncSession, items: list[tuple[uuid.UUID, int]]
) -> list[tuple[uuid.UUID, int, Decimal]]:
    """Resolve ``(product_id, quantity)`` pairs to lines priced at today's final price."""
    if not items:
        raise ValidationError("Subscription must contain at least one item")

    product_ids = [product_id for product_id, _ in items]
    result = await db.execute(select(Product).where(Product.id.in_(product_ids)))
    products = {p.id: p for p in result.scalars().all()}

    lines = []
    for product_id, quantity in items:
        if quantity < 1:
            raise ValidationError("Quantity must be at least 1")
        product = products.get(product_id)
        if product is None:
            raise NotFoundError(f"Product {product_id} not found")
        if not product.is_active:
            raise ValidationError(f"{product.name} is not available")
        lines.append((product.id, quantity, product.final_price))
    return lines


async def get_subscription(
    db: AsyncSession,
    *,
    subscription_id: uuid.UUID,
    owner_id: str,
    for_update: bool = False,
) -> Subscription:
    query = select(Subscription).where(
        Subscription.id == subscription_id, Subscription.owner_id == owner_id
    )
    if for_update:
        query = query.with_for_update()
    result = await db.execute(query)
    subscription = result.scalar_one_or_none()
    if not subscription:
        raise NotFoundError("Subscription not found")
    return subscription


async def list_subscriptions(
    db: AsyncSession,
    *,
    owner_id: str,
    status: Optional[SubscriptionStatus] = None,
) -> list[Subscription]:
    query = select(Subscription).where(Subscription.owner_id == owner_id)
    if status is not None:
        query = query.where(Subscription.status == status)
    result = await db.execute(query.order_by(Subscription.created_at.desc()))
    return list(result.scalars().all())


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


async def create_subscription(
    db: AsyncSession,
    *,
    owner_id: str,
    plan: SubscriptionPlan,
    items: list[tuple[uuid.UUID, int]],
    shipping_address: dict,
    payment_method: PaymentMethod = PaymentMethod.CREDIT_CARD,
    start_date: Optional[datetime] = None,
    delivery_instructions: Optional[str] = None,
    max_orders: Optional[int] = None,
    auto_renew: bool = True,
    notes: Optional[str] = None,
) -> Subscription:
    lines = await _priced_lines(db, items)

    subscription = Subscription.start(
        owner_id=owner_id,
        plan=plan,
        shipping_address=shipping_address,
        payment_method=payment_method,
        start_date=as_utc(start_date),
        delivery_instructions=delivery_instructions,
        max_orders=max_orders,
        auto_renew=auto_renew,
        notes=notes,
    )
    subscription.set_items(lines)
    db.add(subscription)
    await db.flush()
    await db.commit()

    logger.info(
        "Created %s subscription %s for owner %s (total=%s, next=%s)",
        plan.value,
        subscription.id,
        owner_id,
        subscription.total_amount,
        subscription.next_order_date.isoformat(),
    )
    return subscription


async def update_subscription_items(
    db: AsyncSession,
    *,
    subscription_id: uuid.UUID,
    owner_id: str,
    items: list[tuple[uuid.UUID, int]],
) -> Subscription:
    subscription = await get_subscription(
        db, subscription_id=subscription_id, owner_id=owner_id, for_update=True
    )
    lines = await _priced_lines(db, items)
    subscription.update_items(lines)
    await db.commit()
    return subscription


async def pause_subscription(
    db: AsyncSession,
    *,
    subscription_id: uuid.UUID,
    owner_id: str,
    reason: Optional[str] = None,
    pause_end_date: Optional[datetime] = None,
) -> Subscription:
    subscription = await get_subscription(
        db, subscription_id=subscription_id, owner_id=owner_id, for_update=True
    )
    subscription.pause(reason, as_utc(pause_end_date))
    await db.commit()

    logger.info("Paused subscription %s until %s", subscription.id, pause_end_date)
    return subscription


async def resume_subscription(
    db: AsyncSession, *, subscription_id: uuid.UUID, owner_id: str
) -> Subscription:
    subscription = await get_subscription(
        db, subscription_id=subscription_id, owner_id=owner_id, for_update=True
    )
    subscription.resume()
    await db.commit()

    logger.info(
        "Resumed subscription %s (next=%s)",
        subscription.id,
        subscription.next_order_date.isoformat(),
    )
    return subscription


async def cancel_subscription(
    db: AsyncSession,
    *,
    subscription_id: uuid.UUID,
    owner_id: str,
    reason: Optional[str] = None,
) -> Subscription:
    subscription = await get_subscription(
        db, subscription_id=subscription_id, owner_id=owner_id, for_update=True
    )
    subscription.cancel(reason)
    await db.commit()

    logger.info("Cancelled subscription %s", subscription.id)
    return subscription
