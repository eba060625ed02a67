"""Checkout: turn the owner's cart into a pending order in one transaction."""

from typing import Optional

from libs.common.logging import get_logger
from services.store_service.errors import ConflictError, NotFoundError, ValidationError
from services.store_service.models import Cart, Order, PaymentMethod, Product
from services.store_service.services.order_ops import build_order, insert_order
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


async def checkout(
    db: AsyncSession,
    *,
    owner_id: str,
    payment_method: PaymentMethod,
    shipping_address: dict,
    billing_address: Optional[dict] = None,
    delivery_instructions: Optional[str] = None,
) -> Order:
    """Snapshot the cart into an order, take the stock and clear the cart.

    Stock re-check, order insert, stock decrement and cart clearing share one
    commit; any failure leaves the cart and stock as they were. Cart and
    product rows are locked for the duration on backends that support it.
    """
    result = await db.execute(
        select(Cart).where(Cart.owner_id == owner_id).with_for_update()
    )
    cart = result.scalar_one_or_none()
    if not cart or not cart.items:
        raise ValidationError("Cart is empty")

    product_ids = [item.product_id for item in cart.items]
    result = await db.execute(
        select(Product).where(Product.id.in_(product_ids)).with_for_update()
    )
    products = {p.id: p for p in result.scalars().all()}

    lines = []
    for item in cart.items:
        product = products.get(item.product_id)
        if product is None:
            raise NotFoundError("Product not found")
        if not product.is_active:
            raise ConflictError(f"{product.name} is no longer available")
        if not product.has_stock(item.quantity):
            raise ConflictError(
                {
                    "message": f"Insufficient stock for {product.name}",
                    "available": product.stock_quantity,
                }
            )
        lines.append((product, item.quantity, item.unit_price))

    order = build_order(
        owner_id=owner_id,
        lines=lines,
        payment_method=payment_method,
        shipping_address=shipping_address,
        billing_address=billing_address,
        subtotal=cart.subtotal,
        tax=cart.tax,
        shipping=cart.shipping,
        discount=cart.discount,
        coupon_code=cart.coupon_code,
        coupon_discount=cart.coupon_discount,
        total=cart.total,
        delivery_instructions=delivery_instructions,
    )

    for product, quantity, _ in lines:
        product.stock_quantity -= quantity
    cart.clear()

    try:
        await insert_order(db, order)
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info(
        "Checkout created order %s for owner %s (total=%s, items=%d)",
        order.order_number,
        owner_id,
        order.total,
        len(order.items),
    )
    return order
