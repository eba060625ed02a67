"""Admin orders router: fulfilment, payment state and refunds."""

import uuid

from fastapi import APIRouter, Depends
from libs.auth.dependencies import require_admin
from libs.auth.models import AuthUser
from libs.db.session import get_async_db
from services.store_service.schemas import (
    OrderResponse,
    OrderStatusUpdate,
    PaymentStatusUpdate,
    RefundRequest,
)
from services.store_service.services import order_ops
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(tags=["admin-store"])


@router.put("/orders/{order_id}/status", response_model=OrderResponse)
async def update_order_status(
    order_id: uuid.UUID,
    status_in: OrderStatusUpdate,
    admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Move an order along its lifecycle, optionally attaching tracking."""
    return await order_ops.update_order_status(
        db,
        order_id=order_id,
        status=status_in.status,
        tracking_number=status_in.tracking_number,
    )


@router.put("/orders/{order_id}/payment-status", response_model=OrderResponse)
async def update_payment_status(
    order_id: uuid.UUID,
    payment_in: PaymentStatusUpdate,
    admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    return await order_ops.update_payment_status(
        db, order_id=order_id, payment_status=payment_in.payment_status
    )


@router.post("/orders/{order_id}/refund", response_model=OrderResponse)
async def refund_order(
    order_id: uuid.UUID,
    refund_in: RefundRequest,
    admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Refund a paid order."""
    return await order_ops.refund_order(
        db, order_id=order_id, amount=refund_in.amount, reason=refund_in.reason
    )
