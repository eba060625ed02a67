"""Order persistence and lifecycle operations."""

import uuid
from datetime import timedelta
from decimal import Decimal
from typing import Iterable, Optional

from libs.common.config import get_settings
from libs.common.currency import ZERO, line_total, to_money
from libs.common.datetime_utils import utc_now
from libs.common.logging import get_logger
from services.store_service.errors import ConflictError, NotFoundError
from services.store_service.models import (
    Order,
    OrderItem,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
    Product,
)
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

ORDER_NUMBER_ATTEMPTS = 5


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


def build_order(
    *,
    owner_id: str,
    lines: Iterable[tuple[Product, int, Decimal]],
    payment_method: PaymentMethod,
    shipping_address: dict,
    billing_address: Optional[dict] = None,
    subtotal: Optional[Decimal] = None,
    tax: Decimal = ZERO,
    shipping: Decimal = ZERO,
    discount: Decimal = ZERO,
    coupon_code: Optional[str] = None,
    coupon_discount: Decimal = ZERO,
    total: Optional[Decimal] = None,
    delivery_instructions: Optional[str] = None,
    notes: Optional[str] = None,
    subscription_id: Optional[uuid.UUID] = None,
    idempotency_key: Optional[str] = None,
) -> Order:
    """Snapshot ``(product, quantity, unit_price)`` lines into a pending order.

    Money fields are taken as given when supplied (checkout copies them from
    the cart) and derived from the lines otherwise.
    """
    settings = get_settings()
    now = utc_now()

    items = [
        OrderItem(
            product_id=product.id,
            product_name=product.name,
            quantity=quantity,
            unit_price=to_money(unit_price),
            total_price=line_total(quantity, unit_price),
        )
        for product, quantity, unit_price in lines
    ]
    if subtotal is None:
        subtotal = sum((item.total_price for item in items), ZERO)
    if total is None:
        total = subtotal + tax + shipping - discount - coupon_discount

    return Order(
        order_number=Order.generate_order_number(settings.ORDER_NUMBER_PREFIX),
        owner_id=owner_id,
        items=items,
        subtotal=to_money(subtotal),
        tax=to_money(tax),
        shipping=to_money(shipping),
        discount=to_money(discount),
        coupon_code=coupon_code,
        coupon_discount=to_money(coupon_discount),
        total=to_money(total),
        status=OrderStatus.PENDING,
        payment_status=PaymentStatus.PENDING,
        payment_method=payment_method,
        shipping_address=shipping_address,
        billing_address=billing_address or shipping_address,
        delivery_instructions=delivery_instructions,
        estimated_delivery=now + timedelta(days=settings.ESTIMATED_DELIVERY_DAYS),
        notes=notes,
        is_subscription_order=subscription_id is not None,
        subscription_id=subscription_id,
        idempotency_key=idempotency_key,
        created_at=now,
        updated_at=now,
    )


async def insert_order(db: AsyncSession, order: Order) -> Order:
    """Flush a new order, drawing a fresh order number on a collision.

    Pending changes are flushed first so that only the order insert sits in
    the retried savepoint. Does not commit.
    """
    await db.flush()
    for attempt in range(1, ORDER_NUMBER_ATTEMPTS + 1):
        try:
            async with db.begin_nested():
                db.add(order)
                await db.flush()
            return order
        except IntegrityError:
            if order.idempotency_key and await _idempotency_key_taken(
                db, order.idempotency_key
            ):
                raise ConflictError("Order already produced for this cycle")
            logger.warning(
                "Order number %s collided (attempt %d), regenerating",
                order.order_number,
                attempt,
            )
            order.order_number = Order.generate_order_number(
                get_settings().ORDER_NUMBER_PREFIX
            )
    raise ConflictError("Could not allocate a unique order number")


async def _idempotency_key_taken(db: AsyncSession, key: str) -> bool:
    result = await db.execute(select(Order.id).where(Order.idempotency_key == key))
    return result.scalar_one_or_none() is not None


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------


async def get_order(
    db: AsyncSession,
    *,
    order_id: uuid.UUID,
    owner_id: Optional[str] = None,
    for_update: bool = False,
) -> Order:
    """Load an order; when ``owner_id`` is given, other users' orders are hidden."""
    query = select(Order).where(Order.id == order_id)
    if owner_id is not None:
        query = query.where(Order.owner_id == owner_id)
    if for_update:
        query = query.with_for_update()
    result = await db.execute(query)
    order = result.scalar_one_or_none()
    if not order:
        raise NotFoundError("Order not found")
    return order


async def get_order_by_number(
    db: AsyncSession, *, order_number: str, owner_id: str
) -> Order:
    result = await db.execute(
        select(Order).where(
            Order.order_number == order_number, Order.owner_id == owner_id
        )
    )
    order = result.scalar_one_or_none()
    if not order:
        raise NotFoundError("Order not found")
    return order


async def list_orders(
    db: AsyncSession,
    *,
    owner_id: str,
    status: Optional[OrderStatus] = None,
    page: int = 1,
    limit: int = 10,
) -> tuple[list[Order], int]:
    """Return one page of the owner's orders, newest first, and the total count."""
    filters = [Order.owner_id == owner_id]
    if status is not None:
        filters.append(Order.status == status)

    total = await db.scalar(select(func.count()).select_from(Order).where(*filters))
    result = await db.execute(
        select(Order)
        .where(*filters)
        .order_by(Order.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    return list(result.scalars().all()), total or 0


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


async def _restock(db: AsyncSession, order: Order) -> None:
    """Put the quantities of a cancelled order back on the shelf."""
    product_ids = [item.product_id for item in order.items]
    result = await db.execute(
        select(Product).where(Product.id.in_(product_ids)).with_for_update()
    )
    products = {p.id: p for p in result.scalars().all()}
    for item in order.items:
        product = products.get(item.product_id)
        if product is not None:
            product.stock_quantity += item.quantity


async def cancel_order(
    db: AsyncSession,
    *,
    order_id: uuid.UUID,
    owner_id: str,
    reason: Optional[str] = None,
) -> Order:
    order = await get_order(db, order_id=order_id, owner_id=owner_id, for_update=True)
    order.cancel(reason)
    await _restock(db, order)
    await db.commit()

    logger.info("Order %s cancelled by owner %s", order.order_number, owner_id)
    return order


async def update_order_status(
    db: AsyncSession,
    *,
    order_id: uuid.UUID,
    status: OrderStatus,
    tracking_number: Optional[str] = None,
) -> Order:
    """Admin status change, optionally attaching a tracking number."""
    order = await get_order(db, order_id=order_id, for_update=True)
    previous = order.status
    order.update_status(status)
    if tracking_number:
        order.add_tracking(tracking_number)
    if status == OrderStatus.CANCELLED and previous != OrderStatus.CANCELLED:
        await _restock(db, order)
    await db.commit()

    logger.info(
        "Order %s status %s -> %s", order.order_number, previous.value, status.value
    )
    return order


async def update_payment_status(
    db: AsyncSession, *, order_id: uuid.UUID, payment_status: PaymentStatus
) -> Order:
    order = await get_order(db, order_id=order_id, for_update=True)
    order.update_payment_status(payment_status)
    await db.commit()

    logger.info(
        "Order %s payment status -> %s", order.order_number, payment_status.value
    )
    return order


async def refund_order(
    db: AsyncSession, *, order_id: uuid.UUID, amount: Decimal, reason: str
) -> Order:
    order = await get_order(db, order_id=order_id, for_update=True)
    order.process_refund(amount, reason)
    await db.commit()

    logger.info(
        "Order %s refunded %s (%s)", order.order_number, order.refund_amount, reason
    )
    return order
