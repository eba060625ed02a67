"""Unit tests for the order aggregate's status and payment state machines."""

import re
from decimal import Decimal

import pytest
from services.store_service.errors import ConflictError, ValidationError
from services.store_service.models import (
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
)
from services.store_service.services.order_ops import build_order
from tests.factories import ProductFactory, address


def _order(**overrides):
    apples = ProductFactory.create(name="Apples", price=Decimal("10.00"))
    oats = ProductFactory.create(name="Oats", price=Decimal("5.00"))
    order = build_order(
        owner_id="user-1",
        lines=[(apples, 2, Decimal("10.00")), (oats, 1, Decimal("5.00"))],
        payment_method=PaymentMethod.CREDIT_CARD,
        shipping_address=address(),
    )
    for key, value in overrides.items():
        setattr(order, key, value)
    return order


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_build_order_snapshots_lines():
    order = _order()

    assert [i.product_name for i in order.items] == ["Apples", "Oats"]
    assert order.subtotal == Decimal("25.00")
    assert order.total == Decimal("25.00")
    assert order.status == OrderStatus.PENDING
    assert order.payment_status == PaymentStatus.PENDING
    assert order.billing_address == order.shipping_address
    assert (order.estimated_delivery - order.created_at).days == 4


@pytest.mark.unit
def test_order_number_format():
    number = _order().order_number
    assert re.fullmatch(r"NC\d{9}", number)


# ---------------------------------------------------------------------------
# update_status
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_happy_path_through_delivery_stamps_actual_delivery():
    order = _order()
    for status in (
        OrderStatus.CONFIRMED,
        OrderStatus.PROCESSING,
        OrderStatus.SHIPPED,
    ):
        order.update_status(status)
        assert order.actual_delivery is None

    order.update_status(OrderStatus.DELIVERED)

    assert order.status == OrderStatus.DELIVERED
    assert order.actual_delivery is not None


@pytest.mark.unit
@pytest.mark.parametrize(
    "start, target",
    [
        (OrderStatus.PENDING, OrderStatus.SHIPPED),
        (OrderStatus.SHIPPED, OrderStatus.PENDING),
        (OrderStatus.DELIVERED, OrderStatus.PROCESSING),
        (OrderStatus.CANCELLED, OrderStatus.CONFIRMED),
        (OrderStatus.PROCESSING, OrderStatus.REFUNDED),
    ],
)
def test_illegal_transitions_rejected(start, target):
    order = _order(status=start)

    with pytest.raises(ConflictError):
        order.update_status(target)
    assert order.status == start


@pytest.mark.unit
def test_add_tracking_leaves_status_alone():
    order = _order(status=OrderStatus.PROCESSING)
    order.add_tracking("1Z999AA10123456784")

    assert order.tracking_number == "1Z999AA10123456784"
    assert order.status == OrderStatus.PROCESSING


# ---------------------------------------------------------------------------
# cancel
# ---------------------------------------------------------------------------


@pytest.mark.unit
@pytest.mark.parametrize("status", [OrderStatus.PENDING, OrderStatus.CONFIRMED])
def test_cancel_allowed_early(status):
    order = _order(status=status)
    order.cancel("Changed my mind")

    assert order.status == OrderStatus.CANCELLED
    assert order.notes == "Cancelled: Changed my mind"


@pytest.mark.unit
def test_cancel_without_reason_notes_user():
    order = _order()
    order.cancel()
    assert order.notes == "Cancelled by user"


@pytest.mark.unit
@pytest.mark.parametrize(
    "status", [OrderStatus.PROCESSING, OrderStatus.SHIPPED, OrderStatus.DELIVERED]
)
def test_cancel_rejected_once_fulfilment_started(status):
    order = _order(status=status)

    with pytest.raises(ConflictError) as exc_info:
        order.cancel("too late")
    assert exc_info.value.detail == "Order cannot be cancelled at this stage"
    assert order.status == status


# ---------------------------------------------------------------------------
# Payment + refunds
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_payment_transitions():
    order = _order()
    order.update_payment_status(PaymentStatus.FAILED)
    order.update_payment_status(PaymentStatus.PENDING)
    order.update_payment_status(PaymentStatus.PAID)

    assert order.payment_status == PaymentStatus.PAID
    with pytest.raises(ConflictError):
        order.update_payment_status(PaymentStatus.PENDING)
    with pytest.raises(ConflictError):
        order.update_payment_status(PaymentStatus.REFUNDED)


@pytest.mark.unit
def test_refund_forces_both_statuses():
    order = _order(status=OrderStatus.DELIVERED, payment_status=PaymentStatus.PAID)

    order.process_refund(Decimal("10.00"), "Bruised fruit")

    assert order.status == OrderStatus.REFUNDED
    assert order.payment_status == PaymentStatus.REFUNDED
    assert order.refund_amount == Decimal("10.00")
    assert order.refund_reason == "Bruised fruit"


@pytest.mark.unit
def test_paid_pending_order_can_be_refunded():
    order = _order(payment_status=PaymentStatus.PAID)

    order.process_refund(Decimal("25.00"), "Changed mind")

    assert order.status == OrderStatus.REFUNDED
    assert order.payment_status == PaymentStatus.REFUNDED


@pytest.mark.unit
def test_partial_refund_still_moves_order_to_refunded():
    order = _order(status=OrderStatus.SHIPPED, payment_status=PaymentStatus.PAID)

    order.process_refund(Decimal("0.01"), "Goodwill")

    assert order.status == OrderStatus.REFUNDED
    assert order.payment_status == PaymentStatus.REFUNDED
    assert order.refund_amount == Decimal("0.01")


@pytest.mark.unit
def test_refunded_order_cannot_be_refunded_again():
    order = _order(payment_status=PaymentStatus.PAID)
    order.process_refund(Decimal("5.00"), "first")

    with pytest.raises(ConflictError):
        order.process_refund(Decimal("5.00"), "second")
    assert order.refund_reason == "first"


@pytest.mark.unit
def test_refund_requires_payment():
    order = _order(status=OrderStatus.CONFIRMED)

    with pytest.raises(ConflictError):
        order.process_refund(Decimal("5.00"), "n/a")
    assert order.status == OrderStatus.CONFIRMED


@pytest.mark.unit
def test_refund_amount_bounded_by_total():
    order = _order(status=OrderStatus.DELIVERED, payment_status=PaymentStatus.PAID)

    with pytest.raises(ValidationError):
        order.process_refund(Decimal("25.01"), "too much")


# ---------------------------------------------------------------------------
# calculate_totals
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_checkout_total_is_kept_until_recalculated():
    order = _order()
    order.items[0].quantity = 1
    order.items[0].total_price = Decimal("10.00")

    assert order.total == Decimal("25.00")

    order.calculate_totals()

    assert order.subtotal == Decimal("15.00")
    assert order.total == Decimal("15.00")
