"""
Model factories for creating valid test data.

Every factory produces a valid, insertable SQLAlchemy model instance.
Override any field via kwargs.

Usage:
    product = ProductFactory.create(price=Decimal("4.50"))
    db_session.add(product)
    await db_session.commit()
"""

import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _uuid() -> uuid.UUID:
    return uuid.uuid4()


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _owner() -> str:
    return f"user-{uuid.uuid4().hex[:8]}"


def address(**overrides) -> dict:
    defaults = {
        "first_name": "Test",
        "last_name": "Shopper",
        "address": "1 Market Street",
        "city": "Springfield",
        "state": "IL",
        "zip_code": "62701",
        "country": "US",
        "phone": "555-0100",
    }
    defaults.update(overrides)
    return defaults


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


class ProductFactory:
    @staticmethod
    def create(**overrides):
        from services.store_service.models import Product, ProductCategory

        defaults = {
            "id": _uuid(),
            "name": f"Product {uuid.uuid4().hex[:6]}",
            "description": "Fresh and wholesome",
            "category": ProductCategory.FRUITS,
            "price": Decimal("10.00"),
            "sale_price": None,
            "unit": "piece",
            "stock_quantity": 100,
            "min_order_quantity": 1,
            "max_order_quantity": None,
            "dietary_tags": ["vegan"],
            "is_active": True,
            "is_featured": False,
            "created_at": _now(),
            "updated_at": _now(),
        }
        defaults.update(overrides)
        if isinstance(defaults["category"], str):
            defaults["category"] = ProductCategory(defaults["category"])
        return Product(**defaults)


# ---------------------------------------------------------------------------
# Cart / Subscription
# ---------------------------------------------------------------------------


class CartFactory:
    @staticmethod
    def create(owner_id=None, **overrides):
        from services.store_service.models import Cart

        cart = Cart.open(owner_id or _owner())
        for key, value in overrides.items():
            setattr(cart, key, value)
        return cart


class SubscriptionFactory:
    """Build a subscription; ``lines`` is a list of (product, quantity)."""

    @staticmethod
    def create(lines=(), owner_id=None, plan=None, started_days_ago=0, **overrides):
        from services.store_service.models import Subscription, SubscriptionPlan

        subscription = Subscription.start(
            owner_id=owner_id or _owner(),
            plan=plan or SubscriptionPlan.WEEKLY,
            shipping_address=address(),
            start_date=_now() - timedelta(days=started_days_ago),
            max_orders=overrides.pop("max_orders", None),
        )
        subscription.set_items(
            [(product.id, quantity, product.final_price) for product, quantity in lines]
        )
        for key, value in overrides.items():
            setattr(subscription, key, value)
        return subscription


# ---------------------------------------------------------------------------
# Diet plans
# ---------------------------------------------------------------------------


class DietPlanFactory:
    """Build a diet plan; ``groceries`` is a list of (name, quantity text)."""

    @staticmethod
    def create(groceries=(), **overrides):
        from services.store_service.models import DietPlan, DietPlanType

        defaults = {
            "id": _uuid(),
            "name": f"Plan {uuid.uuid4().hex[:6]}",
            "type": DietPlanType.MEDITERRANEAN,
            "description": "Balanced whole-food eating",
            "short_description": "Balanced plan",
            "tags": [],
            "weekly_schedule": [],
            "grocery_list": [
                {
                    "category": "groceries",
                    "items": [
                        {"name": name, "quantity": quantity, "frequency": "weekly"}
                        for name, quantity in groceries
                    ],
                }
            ]
            if groceries
            else [],
            "rating": 0.0,
            "is_active": True,
            "created_at": _now(),
            "updated_at": _now(),
        }
        defaults.update(overrides)
        if isinstance(defaults["type"], str):
            defaults["type"] = DietPlanType(defaults["type"])
        return DietPlan(**defaults)
