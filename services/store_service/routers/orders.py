"""Store orders router: checkout and the owner's orders."""

import math
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.db.session import get_async_db
from services.store_service.models import OrderStatus
from services.store_service.schemas import (
    CancelOrderRequest,
    CheckoutRequest,
    OrderListResponse,
    OrderResponse,
    OrderTrackingResponse,
)
from services.store_service.services import order_ops
from services.store_service.services.checkout import checkout
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(tags=["store"])


# ============================================================================
# CHECKOUT
# ============================================================================


@router.post(
    "/orders", response_model=OrderResponse, status_code=status.HTTP_201_CREATED
)
async def create_order(
    checkout_in: CheckoutRequest,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Check out the current cart."""
    return await checkout(
        db,
        owner_id=current_user.user_id,
        payment_method=checkout_in.payment_method,
        shipping_address=checkout_in.shipping_address.model_dump(),
        billing_address=(
            checkout_in.billing_address.model_dump()
            if checkout_in.billing_address
            else None
        ),
        delivery_instructions=checkout_in.delivery_instructions,
    )


# ============================================================================
# MY ORDERS
# ============================================================================


@router.get("/orders", response_model=OrderListResponse)
async def list_my_orders(
    status_filter: Optional[OrderStatus] = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """List current user's orders."""
    orders, total = await order_ops.list_orders(
        db, owner_id=current_user.user_id, status=status_filter, page=page, limit=limit
    )
    return OrderListResponse(
        items=[OrderResponse.model_validate(o) for o in orders],
        total=total,
        page=page,
        limit=limit,
        pages=math.ceil(total / limit) if total else 0,
    )


@router.get("/orders/track/{order_number}", response_model=OrderTrackingResponse)
async def track_order(
    order_number: str,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Tracking details by order number."""
    return await order_ops.get_order_by_number(
        db, order_number=order_number, owner_id=current_user.user_id
    )


@router.get("/orders/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: uuid.UUID,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Get order details."""
    return await order_ops.get_order(
        db, order_id=order_id, owner_id=current_user.user_id
    )


@router.post("/orders/{order_id}/cancel", response_model=OrderResponse)
async def cancel_order(
    order_id: uuid.UUID,
    cancel_in: Optional[CancelOrderRequest] = None,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Cancel a pending or confirmed order."""
    return await order_ops.cancel_order(
        db,
        order_id=order_id,
        owner_id=current_user.user_id,
        reason=cancel_in.reason if cancel_in else None,
    )
