"""Unit tests for persisting new orders: number collisions and cycle keys."""

from decimal import Decimal

import pytest
from services.store_service.errors import ConflictError
from services.store_service.models import Order, PaymentMethod
from services.store_service.services import order_ops
from sqlalchemy import func, select
from tests.factories import address


def _new_order(product, idempotency_key=None):
    return order_ops.build_order(
        owner_id="owner-1",
        lines=[(product, 1, Decimal("10.00"))],
        payment_method=PaymentMethod.CREDIT_CARD,
        shipping_address=address(),
        idempotency_key=idempotency_key,
    )


async def _order_count(db):
    return await db.scalar(select(func.count()).select_from(Order))


@pytest.mark.asyncio
@pytest.mark.unit
async def test_colliding_order_number_is_regenerated(db_session, apples):
    first = await order_ops.insert_order(db_session, _new_order(apples))
    await db_session.commit()
    taken = first.order_number

    second = _new_order(apples)
    second.order_number = taken
    await order_ops.insert_order(db_session, second)
    await db_session.commit()

    assert second.order_number != taken
    assert await _order_count(db_session) == 2


@pytest.mark.asyncio
@pytest.mark.unit
async def test_order_number_attempts_are_bounded(db_session, apples, monkeypatch):
    first = await order_ops.insert_order(db_session, _new_order(apples))
    await db_session.commit()
    taken = first.order_number
    monkeypatch.setattr(
        Order, "generate_order_number", staticmethod(lambda prefix="NC": taken)
    )

    with pytest.raises(ConflictError) as exc_info:
        await order_ops.insert_order(db_session, _new_order(apples))

    assert exc_info.value.detail == "Could not allocate a unique order number"
    assert await _order_count(db_session) == 1


@pytest.mark.asyncio
@pytest.mark.unit
async def test_duplicate_cycle_key_is_rejected(db_session, apples):
    key = "subscription-abc-1"
    await order_ops.insert_order(db_session, _new_order(apples, idempotency_key=key))
    await db_session.commit()

    with pytest.raises(ConflictError) as exc_info:
        await order_ops.insert_order(
            db_session, _new_order(apples, idempotency_key=key)
        )

    assert exc_info.value.detail == "Order already produced for this cycle"
    assert await _order_count(db_session) == 1
