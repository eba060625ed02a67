"""Unit tests for the cart aggregate's totals engine.

Pure in-memory tests: carts are built with Cart.open() and never touch the DB.
"""

import uuid
from decimal import Decimal

import pytest
from services.store_service.errors import InvariantViolation, ValidationError
from tests.factories import CartFactory


def _assert_consistent(cart):
    assert cart.subtotal == sum((i.total_price for i in cart.items), Decimal("0"))
    assert cart.total == (
        cart.subtotal + cart.tax + cart.shipping - cart.discount - cart.coupon_discount
    )


# ---------------------------------------------------------------------------
# add_item / remove_item / update_item_quantity
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_add_existing_product_keeps_original_unit_price():
    """Second add of the same product ignores the new price."""
    cart = CartFactory.create()
    product_id = uuid.uuid4()

    cart.add_item(product_id, 2, Decimal("10"))
    cart.add_item(product_id, 3, Decimal("99"))

    assert len(cart.items) == 1
    line = cart.items[0]
    assert line.quantity == 5
    assert line.unit_price == Decimal("10")
    assert line.total_price == Decimal("50")
    assert cart.subtotal == Decimal("50")
    assert cart.total == Decimal("50")


@pytest.mark.unit
def test_totals_stay_consistent_through_mutations():
    cart = CartFactory.create()
    a, b, c = uuid.uuid4(), uuid.uuid4(), uuid.uuid4()

    steps = [
        lambda: cart.add_item(a, 1, Decimal("3.99")),
        lambda: cart.add_item(b, 4, Decimal("1.25")),
        lambda: cart.update_item_quantity(a, 3),
        lambda: cart.add_item(c, 2, Decimal("12.50")),
        lambda: cart.remove_item(b),
        lambda: cart.add_item(a, 1, Decimal("0.01")),
        lambda: cart.update_item_quantity(uuid.uuid4(), 7),
        lambda: cart.remove_item(c),
    ]
    for step in steps:
        step()
        _assert_consistent(cart)

    assert cart.subtotal == Decimal("15.96")  # 4 x 3.99


@pytest.mark.unit
def test_adjustments_feed_into_total():
    cart = CartFactory.create()
    cart.tax = Decimal("2.00")
    cart.shipping = Decimal("5.00")
    cart.discount = Decimal("1.50")
    cart.add_item(uuid.uuid4(), 2, Decimal("10.00"))

    assert cart.subtotal == Decimal("20.00")
    assert cart.total == Decimal("25.50")


@pytest.mark.unit
def test_total_is_not_clamped_at_zero():
    cart = CartFactory.create()
    cart.discount = Decimal("30.00")
    cart.add_item(uuid.uuid4(), 1, Decimal("10.00"))

    assert cart.total == Decimal("-20.00")


@pytest.mark.unit
def test_remove_item_drops_every_line_for_product():
    cart = CartFactory.create()
    keep, drop = uuid.uuid4(), uuid.uuid4()
    cart.add_item(keep, 1, Decimal("4.00"))
    cart.add_item(drop, 2, Decimal("6.00"))

    cart.remove_item(drop)

    assert [i.product_id for i in cart.items] == [keep]
    assert cart.subtotal == Decimal("4.00")


@pytest.mark.unit
def test_update_quantity_of_absent_product_is_noop():
    cart = CartFactory.create()
    cart.add_item(uuid.uuid4(), 1, Decimal("4.00"))
    before = (cart.subtotal, cart.total, len(cart.items))

    cart.update_item_quantity(uuid.uuid4(), 9)

    assert (cart.subtotal, cart.total, len(cart.items)) == before


@pytest.mark.unit
@pytest.mark.parametrize("quantity", [0, -1])
def test_non_positive_quantity_rejected_without_mutation(quantity):
    cart = CartFactory.create()
    product_id = uuid.uuid4()
    cart.add_item(product_id, 1, Decimal("4.00"))

    with pytest.raises(ValidationError):
        cart.add_item(product_id, quantity, Decimal("4.00"))
    with pytest.raises(ValidationError):
        cart.update_item_quantity(product_id, quantity)

    assert cart.items[0].quantity == 1
    assert cart.subtotal == Decimal("4.00")


# ---------------------------------------------------------------------------
# clear
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_clear_zeroes_everything():
    cart = CartFactory.create()
    cart.tax = Decimal("1.00")
    cart.shipping = Decimal("4.99")
    cart.add_item(uuid.uuid4(), 2, Decimal("10.00"))
    cart.apply_coupon("WELCOME10", Decimal("10"))

    cart.clear()

    assert cart.items == []
    for field in ("subtotal", "tax", "shipping", "discount", "coupon_discount", "total"):
        assert getattr(cart, field) == Decimal("0"), field
    assert cart.coupon_code is None


# ---------------------------------------------------------------------------
# Coupons
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_percentage_coupon_on_subtotal_200():
    cart = CartFactory.create()
    cart.add_item(uuid.uuid4(), 4, Decimal("50.00"))

    cart.apply_coupon("WELCOME10", Decimal("10"))

    assert cart.subtotal == Decimal("200.00")
    assert cart.coupon_discount == Decimal("20.00")
    assert cart.total == Decimal("180.00")


@pytest.mark.unit
def test_coupon_discount_follows_subtotal():
    cart = CartFactory.create()
    product_id = uuid.uuid4()
    cart.add_item(product_id, 1, Decimal("100.00"))
    cart.apply_coupon("WELCOME10", Decimal("10"))

    cart.update_item_quantity(product_id, 3)

    assert cart.coupon_discount == Decimal("30.00")
    assert cart.total == Decimal("270.00")


@pytest.mark.unit
def test_remove_coupon_zeroes_discount():
    cart = CartFactory.create()
    cart.add_item(uuid.uuid4(), 1, Decimal("80.00"))
    cart.apply_coupon("WELCOME10", Decimal("10"))

    cart.remove_coupon()

    assert cart.coupon_code is None
    assert cart.coupon_discount == Decimal("0")
    assert cart.total == Decimal("80.00")


# ---------------------------------------------------------------------------
# verify_totals
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_verify_totals_flags_drift():
    cart = CartFactory.create()
    cart.add_item(uuid.uuid4(), 2, Decimal("10.00"))
    cart.verify_totals()

    cart.total = Decimal("5.00")

    with pytest.raises(InvariantViolation) as exc_info:
        cart.verify_totals()
    assert exc_info.value.status_code == 500
    assert exc_info.value.detail["expected"]["total"] == "20.00"
