"""Cart operations: stock-checked mutations on the owner's cart."""

import uuid
from typing import Optional

from libs.common.logging import get_logger
from services.store_service.errors import (
    ConflictError,
    InvariantViolation,
    NotFoundError,
    ValidationError,
)
from services.store_service.models import Cart, Product
from services.store_service.services.coupons import CouponService, get_coupon_service
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def get_product(db: AsyncSession, product_id: uuid.UUID) -> Product:
    product = await db.get(Product, product_id)
    if not product:
        raise NotFoundError("Product not found")
    return product


def ensure_available(product: Product, quantity: int) -> None:
    """Reject inactive products, quantity limits and short stock."""
    if not product.is_active:
        raise ValidationError("Product is not available")
    if product.max_order_quantity and quantity > product.max_order_quantity:
        raise ValidationError(
            f"Maximum order quantity for {product.name} is {product.max_order_quantity}"
        )
    if not product.has_stock(quantity):
        raise ConflictError(
            {
                "message": f"Only {product.stock_quantity} items available in stock",
                "available": product.stock_quantity,
            }
        )


async def get_or_create_cart(db: AsyncSession, owner_id: str) -> Cart:
    """Return the owner's cart, creating an empty one on first access."""
    result = await db.execute(select(Cart).where(Cart.owner_id == owner_id))
    cart = result.scalar_one_or_none()
    if cart:
        return cart

    cart = Cart.open(owner_id)
    try:
        async with db.begin_nested():
            db.add(cart)
            await db.flush()
    except IntegrityError:
        # A concurrent request created it first
        result = await db.execute(select(Cart).where(Cart.owner_id == owner_id))
        return result.scalar_one()
    await db.commit()

    logger.info("Created cart %s for owner %s", cart.id, owner_id)
    return cart


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


async def get_cart(db: AsyncSession, *, owner_id: str) -> Cart:
    """Load the cart, repairing cached totals if they drifted from the items."""
    cart = await get_or_create_cart(db, owner_id)
    try:
        cart.verify_totals()
    except InvariantViolation as exc:
        logger.error("Cart %s totals drift detected: %s", cart.id, exc.detail)
        cart.recalculate_totals()
        await db.commit()
    return cart


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------


async def add_to_cart(
    db: AsyncSession,
    *,
    owner_id: str,
    product_id: uuid.UUID,
    quantity: int,
    note: Optional[str] = None,
) -> Cart:
    cart = await get_or_create_cart(db, owner_id)
    product = await get_product(db, product_id)

    existing = cart.find_item(product_id)
    in_cart = existing.quantity if existing else 0
    ensure_available(product, in_cart + quantity)

    cart.add_item(product.id, quantity, product.final_price, note=note)
    await db.commit()

    logger.info(
        "Added %d x %s to cart %s (subtotal=%s)",
        quantity,
        product_id,
        cart.id,
        cart.subtotal,
    )
    return cart


async def update_cart_item(
    db: AsyncSession, *, owner_id: str, product_id: uuid.UUID, quantity: int
) -> Cart:
    cart = await get_or_create_cart(db, owner_id)
    if cart.find_item(product_id) is None:
        raise NotFoundError("Item not found in cart")

    product = await get_product(db, product_id)
    ensure_available(product, quantity)

    cart.update_item_quantity(product_id, quantity)
    await db.commit()
    return cart


async def remove_from_cart(
    db: AsyncSession, *, owner_id: str, product_id: uuid.UUID
) -> Cart:
    cart = await get_or_create_cart(db, owner_id)
    cart.remove_item(product_id)
    await db.commit()
    return cart


async def clear_cart(db: AsyncSession, *, owner_id: str) -> Cart:
    cart = await get_or_create_cart(db, owner_id)
    cart.clear()
    await db.commit()
    return cart


async def apply_coupon(
    db: AsyncSession,
    *,
    owner_id: str,
    code: str,
    coupon_service: Optional[CouponService] = None,
) -> Cart:
    """Attach a percentage coupon. Unknown codes leave the cart untouched."""
    service = coupon_service or get_coupon_service()
    rule = await service.resolve(code)
    if rule is None:
        raise ConflictError("Invalid coupon code")

    cart = await get_or_create_cart(db, owner_id)
    cart.apply_coupon(rule.code, rule.percent_off)
    await db.commit()

    logger.info(
        "Applied coupon %s to cart %s (discount=%s)",
        rule.code,
        cart.id,
        cart.coupon_discount,
    )
    return cart


async def remove_coupon(db: AsyncSession, *, owner_id: str) -> Cart:
    cart = await get_or_create_cart(db, owner_id)
    cart.remove_coupon()
    await db.commit()
    return cart
