"""Unit tests for checkout: cart -> pending order in one transaction."""

from decimal import Decimal

import pytest
from services.store_service.errors import ConflictError, NotFoundError, ValidationError
from services.store_service.models import (
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
    Product,
)
from services.store_service.services import cart_ops, order_ops
from services.store_service.services.checkout import checkout
from tests.factories import address


async def _fill_cart(db, apples, oats, owner_id="owner-1"):
    await cart_ops.add_to_cart(db, owner_id=owner_id, product_id=apples.id, quantity=2)
    await cart_ops.add_to_cart(db, owner_id=owner_id, product_id=oats.id, quantity=1)


async def _checkout(db, owner_id="owner-1", **overrides):
    kwargs = {
        "owner_id": owner_id,
        "payment_method": PaymentMethod.CREDIT_CARD,
        "shipping_address": address(),
    }
    kwargs.update(overrides)
    return await checkout(db, **kwargs)


@pytest.mark.asyncio
@pytest.mark.unit
async def test_checkout_copies_cart_totals_and_clears_cart(db_session, apples, oats):
    await _fill_cart(db_session, apples, oats)

    order = await _checkout(db_session)

    assert order.subtotal == Decimal("25.00")
    assert order.total == Decimal("25.00")
    assert order.status == OrderStatus.PENDING
    assert order.payment_status == PaymentStatus.PENDING
    assert sorted((i.product_name, i.quantity) for i in order.items) == [
        ("Organic Apples", 2),
        ("Rolled Oats", 1),
    ]

    cart = await cart_ops.get_cart(db_session, owner_id="owner-1")
    assert cart.items == []
    assert cart.total == Decimal("0")


@pytest.mark.asyncio
@pytest.mark.unit
async def test_checkout_decrements_stock(db_session, apples, oats):
    await _fill_cart(db_session, apples, oats)

    await _checkout(db_session)

    assert (await db_session.get(Product, apples.id)).stock_quantity == 98
    assert (await db_session.get(Product, oats.id)).stock_quantity == 99


@pytest.mark.asyncio
@pytest.mark.unit
async def test_checkout_carries_coupon(db_session, apples, oats):
    await _fill_cart(db_session, apples, oats)
    await cart_ops.apply_coupon(db_session, owner_id="owner-1", code="WELCOME10")

    order = await _checkout(db_session)

    assert order.coupon_code == "WELCOME10"
    assert order.coupon_discount == Decimal("2.50")
    assert order.total == Decimal("22.50")


@pytest.mark.asyncio
@pytest.mark.unit
async def test_checkout_empty_cart_rejected(db_session):
    await cart_ops.get_or_create_cart(db_session, "owner-1")

    with pytest.raises(ValidationError) as exc_info:
        await _checkout(db_session)
    assert exc_info.value.detail == "Cart is empty"


@pytest.mark.asyncio
@pytest.mark.unit
async def test_checkout_without_any_cart_rejected(db_session):
    with pytest.raises(ValidationError):
        await _checkout(db_session, owner_id="nobody")


@pytest.mark.asyncio
@pytest.mark.unit
async def test_insufficient_stock_leaves_cart_intact(db_session, apples, oats):
    await _fill_cart(db_session, apples, oats)
    apples.stock_quantity = 1
    await db_session.commit()

    with pytest.raises(ConflictError) as exc_info:
        await _checkout(db_session)
    assert exc_info.value.detail["message"] == "Insufficient stock for Organic Apples"
    assert exc_info.value.detail["available"] == 1

    cart = await cart_ops.get_cart(db_session, owner_id="owner-1")
    assert len(cart.items) == 2
    assert cart.total == Decimal("25.00")
    orders, total = await order_ops.list_orders(db_session, owner_id="owner-1")
    assert (orders, total) == ([], 0)


@pytest.mark.asyncio
@pytest.mark.unit
async def test_cancelled_order_returns_stock(db_session, apples, oats):
    await _fill_cart(db_session, apples, oats)
    order = await _checkout(db_session)

    cancelled = await order_ops.cancel_order(
        db_session, order_id=order.id, owner_id="owner-1", reason="Ordered twice"
    )

    assert cancelled.status == OrderStatus.CANCELLED
    assert cancelled.notes == "Cancelled: Ordered twice"
    assert (await db_session.get(Product, apples.id)).stock_quantity == 100
    assert (await db_session.get(Product, oats.id)).stock_quantity == 100


@pytest.mark.asyncio
@pytest.mark.unit
async def test_orders_hidden_from_other_owners(db_session, apples, oats):
    await _fill_cart(db_session, apples, oats)
    order = await _checkout(db_session)

    found = await order_ops.get_order_by_number(
        db_session, order_number=order.order_number, owner_id="owner-1"
    )
    assert found.id == order.id

    _, total = await order_ops.list_orders(db_session, owner_id="someone-else")
    assert total == 0
    with pytest.raises(NotFoundError):
        await order_ops.get_order(db_session, order_id=order.id, owner_id="someone-else")


@pytest.mark.asyncio
@pytest.mark.unit
async def test_admin_refund_after_payment(db_session, apples, oats):
    await _fill_cart(db_session, apples, oats)
    order = await _checkout(db_session)

    await order_ops.update_order_status(
        db_session, order_id=order.id, status=OrderStatus.CONFIRMED
    )
    await order_ops.update_payment_status(
        db_session, order_id=order.id, payment_status=PaymentStatus.PAID
    )
    refunded = await order_ops.refund_order(
        db_session, order_id=order.id, amount=Decimal("25.00"), reason="Spoiled"
    )

    assert refunded.status == OrderStatus.REFUNDED
    assert refunded.payment_status == PaymentStatus.REFUNDED
    assert refunded.refund_amount == Decimal("25.00")
