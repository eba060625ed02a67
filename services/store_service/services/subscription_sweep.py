"""Produce orders for subscriptions whose next order date has arrived.

Each due subscription is handled in its own transaction: the row is re-read
under ``FOR UPDATE``, re-checked with ``should_process_order`` and advanced
together with the insert of its order. The order carries the idempotency key
``subscription-<id>-<sequence>``, so overlapping sweeps cannot produce the
same cycle twice.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.common.logging import get_logger
from services.store_service.errors import ConflictError
from services.store_service.models import (
    Order,
    Product,
    Subscription,
    SubscriptionStatus,
)
from services.store_service.services.order_ops import build_order, insert_order
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


@dataclass
class SweepResult:
    processed: list[uuid.UUID] = field(default_factory=list)
    skipped: list[uuid.UUID] = field(default_factory=list)
    failed: list[uuid.UUID] = field(default_factory=list)


def idempotency_key_for(subscription_id: uuid.UUID, sequence: int) -> str:
    return f"subscription-{subscription_id}-{sequence}"


async def find_due_subscription_ids(
    db: AsyncSession,
    *,
    now: datetime,
    limit: int = 100,
    exclude: Optional[set[uuid.UUID]] = None,
) -> list[uuid.UUID]:
    """Coarse filter; the per-row predicate runs again under the lock."""
    query = select(Subscription.id).where(
        Subscription.status == SubscriptionStatus.ACTIVE,
        Subscription.next_order_date <= now,
    )
    if exclude:
        query = query.where(Subscription.id.not_in(exclude))
    result = await db.execute(
        query.order_by(Subscription.next_order_date.asc(), Subscription.id).limit(
            limit
        )
    )
    return list(result.scalars().all())


async def process_subscription(
    db: AsyncSession, subscription_id: uuid.UUID, *, now: Optional[datetime] = None
) -> Optional[Order]:
    """Produce one order for a due subscription. Returns None when not due."""
    now = now or utc_now()

    result = await db.execute(
        select(Subscription)
        .where(Subscription.id == subscription_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    subscription = result.scalar_one_or_none()
    if subscription is None or not subscription.should_process_order(now):
        await db.commit()  # release the row lock
        return None

    key = idempotency_key_for(subscription.id, subscription.next_order_number)
    existing = await db.execute(select(Order.id).where(Order.idempotency_key == key))
    if existing.scalar_one_or_none() is not None:
        logger.warning("Subscription %s cycle %s already produced", subscription.id, key)
        await db.commit()
        return None

    product_ids = [item.product_id for item in subscription.items]
    result = await db.execute(
        select(Product).where(Product.id.in_(product_ids)).with_for_update()
    )
    products = {p.id: p for p in result.scalars().all()}

    lines = []
    for item in subscription.items:
        product = products.get(item.product_id)
        if product is None or not product.is_active:
            raise ConflictError(f"Product {item.product_id} is no longer available")
        if not product.has_stock(item.quantity):
            raise ConflictError(f"Insufficient stock for {product.name}")
        lines.append((product, item.quantity, item.unit_price))

    order = build_order(
        owner_id=subscription.owner_id,
        lines=lines,
        payment_method=subscription.payment_method,
        shipping_address=subscription.shipping_address,
        delivery_instructions=subscription.delivery_instructions,
        subscription_id=subscription.id,
        idempotency_key=key,
    )
    for product, quantity, _ in lines:
        product.stock_quantity -= quantity

    sequence = subscription.process_order(now)
    await insert_order(db, order)
    await db.commit()

    logger.info(
        "Subscription %s produced order %s (cycle %d, status=%s)",
        subscription.id,
        order.order_number,
        sequence,
        subscription.status.value,
    )
    return order


async def sweep_due_subscriptions(
    db: AsyncSession, *, now: Optional[datetime] = None, limit: int = 100
) -> SweepResult:
    """Run one sweep over every due subscription, ``limit`` ids per batch.

    A failing subscription is rolled back and logged; the rest continue. Ids
    tried in this run are excluded from later batches, so subscriptions that
    keep failing cannot hold the head of the queue.
    """
    now = now or utc_now()
    sweep = SweepResult()
    attempted: set[uuid.UUID] = set()

    while True:
        due_ids = await find_due_subscription_ids(
            db, now=now, limit=limit, exclude=attempted
        )
        if not due_ids:
            break
        logger.info("Subscription sweep batch of %d due subscriptions", len(due_ids))

        for subscription_id in due_ids:
            attempted.add(subscription_id)
            try:
                order = await process_subscription(db, subscription_id, now=now)
            except Exception:
                await db.rollback()
                logger.exception("Subscription %s failed to process", subscription_id)
                sweep.failed.append(subscription_id)
                continue

            if order is None:
                sweep.skipped.append(subscription_id)
            else:
                sweep.processed.append(subscription_id)

    logger.info(
        "Subscription sweep done: processed=%d skipped=%d failed=%d",
        len(sweep.processed),
        len(sweep.skipped),
        len(sweep.failed),
    )
    return sweep
