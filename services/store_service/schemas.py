"""Pydantic schemas for store service."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from services.store_service.models import (
    DietDifficulty,
    DietPlanType,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
    ProductCategory,
    SubscriptionPlan,
    SubscriptionStatus,
)

# ============================================================================
# SHARED
# ============================================================================


class Address(BaseModel):
    first_name: str = Field(..., max_length=100)
    last_name: str = Field(..., max_length=100)
    address: str = Field(..., max_length=255)
    city: str = Field(..., max_length=100)
    state: str = Field(..., max_length=100)
    zip_code: str = Field(..., max_length=20)
    country: str = Field("US", max_length=100)
    phone: Optional[str] = Field(None, max_length=50)


# ============================================================================
# PRODUCT SCHEMAS
# ============================================================================


class ProductBase(BaseModel):
    name: str = Field(..., max_length=100)
    description: Optional[str] = None
    category: ProductCategory
    price: Decimal = Field(..., ge=0)
    sale_price: Optional[Decimal] = Field(None, ge=0)
    unit: str = Field("piece", max_length=20)
    stock_quantity: int = Field(0, ge=0)
    min_order_quantity: int = Field(1, ge=1)
    max_order_quantity: Optional[int] = Field(None, ge=1)
    dietary_tags: list[str] = []
    is_active: bool = True
    is_featured: bool = False


class ProductCreate(ProductBase):
    pass


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = None
    category: Optional[ProductCategory] = None
    price: Optional[Decimal] = Field(None, ge=0)
    sale_price: Optional[Decimal] = Field(None, ge=0)
    unit: Optional[str] = Field(None, max_length=20)
    stock_quantity: Optional[int] = Field(None, ge=0)
    min_order_quantity: Optional[int] = Field(None, ge=1)
    max_order_quantity: Optional[int] = Field(None, ge=1)
    dietary_tags: Optional[list[str]] = None
    is_active: Optional[bool] = None
    is_featured: Optional[bool] = None


class ProductResponse(ProductBase):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    final_price: Decimal
    average_rating: float = 0.0
    rating_count: int = 0
    created_at: datetime
    updated_at: datetime


class ReviewCreate(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = Field(None, max_length=500)


class ReviewResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    product_id: uuid.UUID
    reviewer_id: str
    rating: int
    comment: Optional[str] = None
    created_at: datetime


class ProductRatingResponse(BaseModel):
    product_id: uuid.UUID
    average_rating: float
    rating_count: int


# ============================================================================
# CART SCHEMAS
# ============================================================================


class CartItemCreate(BaseModel):
    product_id: uuid.UUID
    quantity: int = Field(1, ge=1)
    note: Optional[str] = Field(None, max_length=255)


class CartItemUpdate(BaseModel):
    quantity: int = Field(..., ge=1)


class ApplyCouponRequest(BaseModel):
    code: str = Field(..., min_length=1, max_length=50)


class CartItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    product_id: uuid.UUID
    quantity: int
    unit_price: Decimal
    total_price: Decimal
    note: Optional[str] = None
    added_at: datetime


class CartResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    owner_id: str
    items: list[CartItemResponse] = []
    item_count: int
    subtotal: Decimal
    tax: Decimal
    shipping: Decimal
    discount: Decimal
    coupon_code: Optional[str] = None
    coupon_discount: Decimal
    total: Decimal
    last_updated: datetime


# ============================================================================
# ORDER SCHEMAS
# ============================================================================


class CheckoutRequest(BaseModel):
    payment_method: PaymentMethod
    shipping_address: Address
    billing_address: Optional[Address] = None
    delivery_instructions: Optional[str] = Field(None, max_length=500)


class CancelOrderRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=255)


class OrderStatusUpdate(BaseModel):
    status: OrderStatus
    tracking_number: Optional[str] = Field(None, max_length=100)


class PaymentStatusUpdate(BaseModel):
    payment_status: PaymentStatus


class RefundRequest(BaseModel):
    amount: Decimal = Field(..., gt=0)
    reason: str = Field(..., min_length=1, max_length=500)


class OrderItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    product_id: uuid.UUID
    product_name: str
    quantity: int
    unit_price: Decimal
    total_price: Decimal


class OrderResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    order_number: str
    owner_id: str
    items: list[OrderItemResponse] = []
    subtotal: Decimal
    tax: Decimal
    shipping: Decimal
    discount: Decimal
    coupon_code: Optional[str] = None
    coupon_discount: Decimal
    total: Decimal
    status: OrderStatus
    payment_status: PaymentStatus
    payment_method: PaymentMethod
    shipping_address: Address
    billing_address: Address
    delivery_instructions: Optional[str] = None
    estimated_delivery: Optional[datetime] = None
    actual_delivery: Optional[datetime] = None
    tracking_number: Optional[str] = None
    notes: Optional[str] = None
    is_subscription_order: bool
    subscription_id: Optional[uuid.UUID] = None
    refund_amount: Optional[Decimal] = None
    refund_reason: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class OrderListResponse(BaseModel):
    items: list[OrderResponse]
    total: int
    page: int
    limit: int
    pages: int


class OrderTrackingResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    order_number: str
    status: OrderStatus
    tracking_number: Optional[str] = None
    estimated_delivery: Optional[datetime] = None
    actual_delivery: Optional[datetime] = None
    created_at: datetime


# ============================================================================
# SUBSCRIPTION SCHEMAS
# ============================================================================


class SubscriptionItemIn(BaseModel):
    product_id: uuid.UUID
    quantity: int = Field(..., ge=1)


class SubscriptionCreate(BaseModel):
    plan: SubscriptionPlan
    items: list[SubscriptionItemIn] = Field(..., min_length=1)
    shipping_address: Address
    payment_method: PaymentMethod = PaymentMethod.CREDIT_CARD
    start_date: Optional[datetime] = None
    delivery_instructions: Optional[str] = Field(None, max_length=500)
    max_orders: Optional[int] = Field(None, ge=1)
    auto_renew: bool = True
    notes: Optional[str] = None


class SubscriptionItemsUpdate(BaseModel):
    items: list[SubscriptionItemIn] = Field(..., min_length=1)


class PauseSubscriptionRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=255)
    pause_end_date: Optional[datetime] = None


class CancelSubscriptionRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=255)


class SubscriptionItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    product_id: uuid.UUID
    quantity: int
    unit_price: Decimal


class SubscriptionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    owner_id: str
    plan: SubscriptionPlan
    frequency: int
    status: SubscriptionStatus
    items: list[SubscriptionItemResponse] = []
    total_amount: Decimal
    payment_method: PaymentMethod
    shipping_address: Address
    delivery_instructions: Optional[str] = None
    start_date: datetime
    next_order_date: datetime
    last_order_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    auto_renew: bool
    max_orders: Optional[int] = None
    current_order_count: int
    next_order_number: int
    pause_reason: Optional[str] = None
    pause_start_date: Optional[datetime] = None
    pause_end_date: Optional[datetime] = None
    cancellation_reason: Optional[str] = None
    cancelled_at: Optional[datetime] = None
    notes: Optional[str] = None
    created_at: datetime


# ============================================================================
# DIET PLAN SCHEMAS
# ============================================================================


class GroceryItem(BaseModel):
    name: str = Field(..., max_length=150)
    quantity: str = Field("1", max_length=50)
    frequency: Optional[str] = Field(None, max_length=20)  # daily, weekly, monthly


class GrocerySection(BaseModel):
    category: str = Field(..., max_length=100)
    items: list[GroceryItem] = []


class Meal(BaseModel):
    name: str
    time: str
    description: Optional[str] = None
    calories: Optional[float] = None
    protein: Optional[float] = None
    carbs: Optional[float] = None
    fat: Optional[float] = None
    fiber: Optional[float] = None
    ingredients: list[str] = []
    instructions: list[str] = []


class PlanDay(BaseModel):
    day: Literal[
        "monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"
    ]
    meals: list[Meal] = []
    total_calories: Optional[float] = None
    total_protein: Optional[float] = None
    total_carbs: Optional[float] = None
    total_fat: Optional[float] = None


class CalorieTarget(BaseModel):
    min: Optional[int] = Field(None, ge=0)
    max: Optional[int] = Field(None, ge=0)


class MacroRatios(BaseModel):
    protein: Optional[float] = Field(None, ge=0, le=100)
    carbs: Optional[float] = Field(None, ge=0, le=100)
    fat: Optional[float] = Field(None, ge=0, le=100)


class DietPlanBase(BaseModel):
    name: str = Field(..., max_length=150)
    type: DietPlanType
    description: str
    short_description: Optional[str] = Field(None, max_length=255)
    difficulty: DietDifficulty = DietDifficulty.BEGINNER
    duration_weeks: int = Field(4, ge=1)
    benefits: list[str] = []
    restrictions: list[str] = []
    target_audience: list[str] = []
    tags: list[str] = []
    tips: list[str] = []
    warnings: list[str] = []
    daily_calorie_target: Optional[CalorieTarget] = None
    macro_ratios: Optional[MacroRatios] = None
    rating: float = Field(0.0, ge=0, le=5)
    is_active: bool = True


class DietPlanCreate(DietPlanBase):
    weekly_schedule: list[PlanDay] = []
    grocery_list: list[GrocerySection] = []


class DietPlanUpdate(BaseModel):
    name: Optional[str] = Field(None, max_length=150)
    type: Optional[DietPlanType] = None
    description: Optional[str] = None
    short_description: Optional[str] = Field(None, max_length=255)
    difficulty: Optional[DietDifficulty] = None
    duration_weeks: Optional[int] = Field(None, ge=1)
    benefits: Optional[list[str]] = None
    restrictions: Optional[list[str]] = None
    target_audience: Optional[list[str]] = None
    tags: Optional[list[str]] = None
    tips: Optional[list[str]] = None
    warnings: Optional[list[str]] = None
    weekly_schedule: Optional[list[PlanDay]] = None
    daily_calorie_target: Optional[CalorieTarget] = None
    macro_ratios: Optional[MacroRatios] = None
    grocery_list: Optional[list[GrocerySection]] = None
    rating: Optional[float] = Field(None, ge=0, le=5)
    is_active: Optional[bool] = None


class DietPlanSummary(DietPlanBase):
    """List view: everything but the weekly schedule and grocery list."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    created_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class DietPlanResponse(DietPlanSummary):
    weekly_schedule: list[PlanDay] = []
    grocery_list: list[GrocerySection] = []


class DietProfile(BaseModel):
    health_goals: list[str] = []
    dietary_restrictions: list[str] = []
    activity_level: Optional[str] = Field(None, max_length=50)
    age: Optional[int] = Field(None, ge=0)
    weight: Optional[float] = Field(None, ge=0)


class DietPlanSuggestion(BaseModel):
    suggested_type: DietPlanType
    reasoning: str
    diet_plan: DietPlanResponse


class DietPlanCartLine(BaseModel):
    name: str
    quantity: int
    product_id: Optional[uuid.UUID] = None
    unit_price: Optional[Decimal] = None
    reason: Optional[str] = None


class DietPlanCartResponse(BaseModel):
    diet_plan_id: uuid.UUID
    added: list[DietPlanCartLine]
    unmatched: list[DietPlanCartLine]
    unavailable: list[DietPlanCartLine]
    estimated_total: Decimal
    cart: CartResponse
