"""Store Service models package."""

from services.store_service.models.cart import Cart, CartItem
from services.store_service.models.catalog import Product, ProductReview
from services.store_service.models.diet_plan import DietPlan
from services.store_service.models.enums import (
    PLAN_FREQUENCY_DAYS,
    DietDifficulty,
    DietPlanType,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
    ProductCategory,
    SubscriptionPlan,
    SubscriptionStatus,
)
from services.store_service.models.order import Order, OrderItem
from services.store_service.models.subscription import Subscription, SubscriptionItem

__all__ = [
    "Cart",
    "CartItem",
    "DietDifficulty",
    "DietPlan",
    "DietPlanType",
    "Order",
    "OrderItem",
    "OrderStatus",
    "PLAN_FREQUENCY_DAYS",
    "PaymentMethod",
    "PaymentStatus",
    "Product",
    "ProductCategory",
    "ProductReview",
    "Subscription",
    "SubscriptionItem",
    "SubscriptionPlan",
    "SubscriptionStatus",
]
