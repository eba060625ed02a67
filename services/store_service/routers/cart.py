"""Store cart router: cart operations and coupons."""

import uuid

from fastapi import APIRouter, Depends
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.db.session import get_async_db
from services.store_service.schemas import (
    ApplyCouponRequest,
    CartItemCreate,
    CartItemUpdate,
    CartResponse,
)
from services.store_service.services import cart_ops
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(tags=["store"])


# ============================================================================
# CART ENDPOINTS
# ============================================================================


@router.get("/cart", response_model=CartResponse)
async def get_cart(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Get current cart, creating an empty one on first access."""
    return await cart_ops.get_cart(db, owner_id=current_user.user_id)


@router.post("/cart/items", response_model=CartResponse)
async def add_to_cart(
    item_in: CartItemCreate,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Add item to cart."""
    return await cart_ops.add_to_cart(
        db,
        owner_id=current_user.user_id,
        product_id=item_in.product_id,
        quantity=item_in.quantity,
        note=item_in.note,
    )


@router.put("/cart/items/{product_id}", response_model=CartResponse)
async def update_cart_item(
    product_id: uuid.UUID,
    item_in: CartItemUpdate,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Update cart item quantity."""
    return await cart_ops.update_cart_item(
        db,
        owner_id=current_user.user_id,
        product_id=product_id,
        quantity=item_in.quantity,
    )


@router.delete("/cart/items/{product_id}", response_model=CartResponse)
async def remove_cart_item(
    product_id: uuid.UUID,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Remove every line for a product."""
    return await cart_ops.remove_from_cart(
        db, owner_id=current_user.user_id, product_id=product_id
    )


@router.delete("/cart", response_model=CartResponse)
async def clear_cart(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Empty the cart."""
    return await cart_ops.clear_cart(db, owner_id=current_user.user_id)


# ============================================================================
# COUPONS
# ============================================================================


@router.post("/cart/coupon", response_model=CartResponse)
async def apply_coupon(
    coupon_in: ApplyCouponRequest,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Apply a coupon code."""
    return await cart_ops.apply_coupon(
        db, owner_id=current_user.user_id, code=coupon_in.code
    )


@router.delete("/cart/coupon", response_model=CartResponse)
async def remove_coupon(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Remove the applied coupon."""
    return await cart_ops.remove_coupon(db, owner_id=current_user.user_id)
