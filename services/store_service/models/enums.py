"""Enum definitions for store service models."""

import enum


def enum_values(enum_cls):
    """Return persistent DB values for SAEnum mappings."""
    return [member.value for member in enum_cls]


class ProductCategory(str, enum.Enum):
    FRUITS = "fruits"
    VEGETABLES = "vegetables"
    PROTEINS = "proteins"
    GRAINS = "grains"
    DAIRY = "dairy"
    SNACKS = "snacks"
    BEVERAGES = "beverages"
    SUPPLEMENTS = "supplements"
    MEAL_KITS = "meal-kits"


class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"


class PaymentMethod(str, enum.Enum):
    CREDIT_CARD = "credit-card"
    DEBIT_CARD = "debit-card"
    PAYPAL = "paypal"
    APPLE_PAY = "apple-pay"
    GOOGLE_PAY = "google-pay"


class SubscriptionPlan(str, enum.Enum):
    WEEKLY = "weekly"
    BI_WEEKLY = "bi-weekly"
    MONTHLY = "monthly"

    @property
    def frequency_days(self) -> int:
        return PLAN_FREQUENCY_DAYS[self]


PLAN_FREQUENCY_DAYS = {
    SubscriptionPlan.WEEKLY: 7,
    SubscriptionPlan.BI_WEEKLY: 14,
    SubscriptionPlan.MONTHLY: 30,
}


class SubscriptionStatus(str, enum.Enum):
    ACTIVE = "active"
    PAUSED = "paused"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


class DietPlanType(str, enum.Enum):
    KETO = "keto"
    VEGAN = "vegan"
    DASH = "dash"
    MEDITERRANEAN = "mediterranean"
    INTERMITTENT_FASTING = "intermittent-fasting"
    PALEO = "paleo"
    LOW_CARB = "low-carb"
    HIGH_PROTEIN = "high-protein"


class DietDifficulty(str, enum.Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"
