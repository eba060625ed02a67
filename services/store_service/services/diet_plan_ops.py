"""Diet plan queries, plan suggestion and grocery-list-to-cart."""

import uuid
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional

from libs.common.currency import ZERO, line_total
from libs.common.logging import get_logger
from services.store_service.errors import ConflictError, NotFoundError, ValidationError
from services.store_service.models import (
    Cart,
    DietDifficulty,
    DietPlan,
    DietPlanType,
    Product,
)
from services.store_service.services.cart_ops import (
    ensure_available,
    get_or_create_cart,
)
from sqlalchemy import String, cast, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

FEATURED_PLANS_LIMIT = 6
# Flat per-unit guess for grocery lines with no matching product
GROCERY_ESTIMATE_UNIT_PRICE = Decimal("5.00")


def _active_plans():
    return select(DietPlan).where(DietPlan.is_active.is_(True))


async def get_diet_plan(db: AsyncSession, plan_id: uuid.UUID) -> DietPlan:
    plan = await db.get(DietPlan, plan_id)
    if not plan or not plan.is_active:
        raise NotFoundError("Diet plan not found")
    return plan


async def list_diet_plans(
    db: AsyncSession,
    *,
    plan_type: Optional[DietPlanType] = None,
    difficulty: Optional[DietDifficulty] = None,
    page: int = 1,
    limit: int = 20,
) -> list[DietPlan]:
    query = _active_plans()
    if plan_type:
        query = query.where(DietPlan.type == plan_type)
    if difficulty:
        query = query.where(DietPlan.difficulty == difficulty)
    result = await db.execute(
        query.order_by(DietPlan.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    return list(result.scalars().all())


async def list_featured_plans(
    db: AsyncSession, *, limit: int = FEATURED_PLANS_LIMIT
) -> list[DietPlan]:
    result = await db.execute(
        _active_plans()
        .order_by(DietPlan.rating.desc(), DietPlan.created_at.desc())
        .limit(limit)
    )
    return list(result.scalars().all())


async def search_diet_plans(
    db: AsyncSession, query_text: str, *, limit: int = 10
) -> list[DietPlan]:
    pattern = f"%{query_text}%"
    result = await db.execute(
        _active_plans()
        .where(
            or_(
                DietPlan.name.ilike(pattern),
                DietPlan.description.ilike(pattern),
                DietPlan.short_description.ilike(pattern),
                cast(DietPlan.type, String).ilike(pattern),
            )
        )
        .order_by(DietPlan.created_at.desc())
        .limit(limit)
    )
    return list(result.scalars().all())


# ---------------------------------------------------------------------------
# Suggestion
# ---------------------------------------------------------------------------


def suggest_plan_type(
    health_goals: list[str], dietary_restrictions: list[str]
) -> DietPlanType:
    """Rule-based pick of a plan type from a shopper's goals and restrictions."""
    goals = {g.lower() for g in health_goals}
    restrictions = {r.lower() for r in dietary_restrictions}

    if "weight-loss" in goals:
        if "vegan" in restrictions:
            return DietPlanType.VEGAN
        if "gluten-free" in restrictions:
            return DietPlanType.MEDITERRANEAN
        return DietPlanType.INTERMITTENT_FASTING
    if "muscle-building" in goals:
        return DietPlanType.HIGH_PROTEIN
    if "heart-health" in goals:
        return DietPlanType.DASH
    if "vegan" in restrictions:
        return DietPlanType.VEGAN
    return DietPlanType.MEDITERRANEAN


async def suggest_diet_plan(
    db: AsyncSession,
    *,
    health_goals: list[str],
    dietary_restrictions: list[str],
    activity_level: Optional[str] = None,
) -> tuple[DietPlanType, DietPlan, str]:
    plan_type = suggest_plan_type(health_goals, dietary_restrictions)
    result = await db.execute(
        _active_plans()
        .where(DietPlan.type == plan_type)
        .order_by(DietPlan.created_at.desc())
        .limit(1)
    )
    plan = result.scalar_one_or_none()
    if plan is None:
        raise NotFoundError("No suitable diet plan found")

    reasoning = (
        f"Based on your profile: {', '.join(health_goals) or 'general health'} goals, "
        f"{', '.join(dietary_restrictions) or 'no'} restrictions, and "
        f"{activity_level or 'moderate'} activity level."
    )
    return plan_type, plan, reasoning


# ---------------------------------------------------------------------------
# Grocery list -> cart
# ---------------------------------------------------------------------------


@dataclass
class GroceryLine:
    name: str
    quantity: int
    product_id: Optional[uuid.UUID] = None
    unit_price: Optional[Decimal] = None
    reason: Optional[str] = None


@dataclass
class GroceryCartResult:
    cart: Cart
    added: list[GroceryLine] = field(default_factory=list)
    unmatched: list[GroceryLine] = field(default_factory=list)
    unavailable: list[GroceryLine] = field(default_factory=list)

    @property
    def estimated_total(self) -> Decimal:
        total = sum(
            (line_total(line.quantity, line.unit_price) for line in self.added), ZERO
        )
        for line in self.unmatched + self.unavailable:
            total += line_total(line.quantity, GROCERY_ESTIMATE_UNIT_PRICE)
        return total


async def add_plan_groceries_to_cart(
    db: AsyncSession, *, plan_id: uuid.UUID, owner_id: str
) -> GroceryCartResult:
    """Add every grocery line that matches an available product, in one commit.

    Lines are matched to active products by case-insensitive name. Lines with
    no match, or whose product fails the cart's availability checks, are
    reported back and only counted in the estimate.
    """
    plan = await get_diet_plan(db, plan_id)
    groceries = plan.grocery_items()
    cart = await get_or_create_cart(db, owner_id)
    outcome = GroceryCartResult(cart=cart)

    names = {g["name"].strip().lower() for g in groceries if g["name"].strip()}
    products: dict[str, Product] = {}
    if names:
        result = await db.execute(
            select(Product).where(
                Product.is_active.is_(True), func.lower(Product.name).in_(names)
            )
        )
        products = {p.name.lower(): p for p in result.scalars().all()}

    for grocery in groceries:
        name = grocery["name"].strip()
        line = GroceryLine(name=name, quantity=grocery["quantity"])
        product = products.get(name.lower())
        if product is None:
            outcome.unmatched.append(line)
            continue

        line.product_id = product.id
        existing = cart.find_item(product.id)
        in_cart = existing.quantity if existing else 0
        try:
            ensure_available(product, in_cart + line.quantity)
        except (ValidationError, ConflictError) as exc:
            detail = exc.detail
            line.reason = detail["message"] if isinstance(detail, dict) else detail
            outcome.unavailable.append(line)
            continue

        cart.add_item(product.id, line.quantity, product.final_price)
        line.unit_price = product.final_price
        outcome.added.append(line)

    await db.commit()

    logger.info(
        "Diet plan %s groceries to cart %s: added=%d unmatched=%d unavailable=%d",
        plan.id,
        cart.id,
        len(outcome.added),
        len(outcome.unmatched),
        len(outcome.unavailable),
    )
    return outcome
