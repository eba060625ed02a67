"""Store subscriptions router: recurring deliveries."""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.db.session import get_async_db
from services.store_service.models import SubscriptionStatus
from services.store_service.schemas import (
    CancelSubscriptionRequest,
    PauseSubscriptionRequest,
    SubscriptionCreate,
    SubscriptionItemsUpdate,
    SubscriptionResponse,
)
from services.store_service.services import subscription_ops
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(tags=["store"])


@router.get("/subscriptions", response_model=list[SubscriptionResponse])
async def list_my_subscriptions(
    status_filter: Optional[SubscriptionStatus] = Query(None, alias="status"),
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    return await subscription_ops.list_subscriptions(
        db, owner_id=current_user.user_id, status=status_filter
    )


@router.post(
    "/subscriptions",
    response_model=SubscriptionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_subscription(
    subscription_in: SubscriptionCreate,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Start a subscription; items are priced at today's catalog price."""
    return await subscription_ops.create_subscription(
        db,
        owner_id=current_user.user_id,
        plan=subscription_in.plan,
        items=[(i.product_id, i.quantity) for i in subscription_in.items],
        shipping_address=subscription_in.shipping_address.model_dump(),
        payment_method=subscription_in.payment_method,
        start_date=subscription_in.start_date,
        delivery_instructions=subscription_in.delivery_instructions,
        max_orders=subscription_in.max_orders,
        auto_renew=subscription_in.auto_renew,
        notes=subscription_in.notes,
    )


@router.get("/subscriptions/{subscription_id}", response_model=SubscriptionResponse)
async def get_subscription(
    subscription_id: uuid.UUID,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    return await subscription_ops.get_subscription(
        db, subscription_id=subscription_id, owner_id=current_user.user_id
    )


@router.put(
    "/subscriptions/{subscription_id}/items", response_model=SubscriptionResponse
)
async def update_subscription_items(
    subscription_id: uuid.UUID,
    items_in: SubscriptionItemsUpdate,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Replace the items of an active subscription."""
    return await subscription_ops.update_subscription_items(
        db,
        subscription_id=subscription_id,
        owner_id=current_user.user_id,
        items=[(i.product_id, i.quantity) for i in items_in.items],
    )


@router.post(
    "/subscriptions/{subscription_id}/pause", response_model=SubscriptionResponse
)
async def pause_subscription(
    subscription_id: uuid.UUID,
    pause_in: Optional[PauseSubscriptionRequest] = None,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    return await subscription_ops.pause_subscription(
        db,
        subscription_id=subscription_id,
        owner_id=current_user.user_id,
        reason=pause_in.reason if pause_in else None,
        pause_end_date=pause_in.pause_end_date if pause_in else None,
    )


@router.post(
    "/subscriptions/{subscription_id}/resume", response_model=SubscriptionResponse
)
async def resume_subscription(
    subscription_id: uuid.UUID,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    return await subscription_ops.resume_subscription(
        db, subscription_id=subscription_id, owner_id=current_user.user_id
    )


@router.post(
    "/subscriptions/{subscription_id}/cancel", response_model=SubscriptionResponse
)
async def cancel_subscription(
    subscription_id: uuid.UUID,
    cancel_in: Optional[CancelSubscriptionRequest] = None,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    return await subscription_ops.cancel_subscription(
        db,
        subscription_id=subscription_id,
        owner_id=current_user.user_id,
        reason=cancel_in.reason if cancel_in else None,
    )
