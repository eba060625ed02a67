"""Store diet plan router: browsing, suggestion and groceries to cart."""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.db.session import get_async_db
from services.store_service.models import DietDifficulty, DietPlanType
from services.store_service.schemas import (
    CartResponse,
    DietPlanCartLine,
    DietPlanCartResponse,
    DietPlanResponse,
    DietPlanSuggestion,
    DietPlanSummary,
    DietProfile,
)
from services.store_service.services import diet_plan_ops
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(tags=["store"])


# ============================================================================
# DIET PLANS
# ============================================================================


@router.get("/diet-plans", response_model=list[DietPlanSummary])
async def list_diet_plans(
    type: Optional[DietPlanType] = None,
    difficulty: Optional[DietDifficulty] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_async_db),
):
    """List active diet plans, newest first."""
    return await diet_plan_ops.list_diet_plans(
        db, plan_type=type, difficulty=difficulty, page=page, limit=limit
    )


@router.get("/diet-plans/featured", response_model=list[DietPlanSummary])
async def list_featured_plans(db: AsyncSession = Depends(get_async_db)):
    return await diet_plan_ops.list_featured_plans(db)


@router.get("/diet-plans/type/{plan_type}", response_model=list[DietPlanSummary])
async def list_plans_by_type(
    plan_type: DietPlanType,
    limit: int = Query(10, ge=1, le=100),
    db: AsyncSession = Depends(get_async_db),
):
    return await diet_plan_ops.list_diet_plans(db, plan_type=plan_type, limit=limit)


@router.get("/diet-plans/search/{query}", response_model=list[DietPlanSummary])
async def search_diet_plans(
    query: str,
    limit: int = Query(10, ge=1, le=100),
    db: AsyncSession = Depends(get_async_db),
):
    """Search active plans by name, description or type."""
    return await diet_plan_ops.search_diet_plans(db, query, limit=limit)


@router.post("/diet-plans/suggest", response_model=DietPlanSuggestion)
async def suggest_diet_plan(
    profile: DietProfile,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Suggest a diet plan for the shopper's goals and restrictions."""
    plan_type, plan, reasoning = await diet_plan_ops.suggest_diet_plan(
        db,
        health_goals=profile.health_goals,
        dietary_restrictions=profile.dietary_restrictions,
        activity_level=profile.activity_level,
    )
    return DietPlanSuggestion(
        suggested_type=plan_type,
        reasoning=reasoning,
        diet_plan=DietPlanResponse.model_validate(plan),
    )


@router.get("/diet-plans/{plan_id}", response_model=DietPlanResponse)
async def get_diet_plan(
    plan_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_db),
):
    return await diet_plan_ops.get_diet_plan(db, plan_id)


@router.post("/diet-plans/{plan_id}/add-to-cart", response_model=DietPlanCartResponse)
async def add_plan_to_cart(
    plan_id: uuid.UUID,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Add the plan's grocery list to the cart, matching items to products."""
    outcome = await diet_plan_ops.add_plan_groceries_to_cart(
        db, plan_id=plan_id, owner_id=current_user.user_id
    )

    def lines(rows):
        return [DietPlanCartLine(**vars(row)) for row in rows]

    return DietPlanCartResponse(
        diet_plan_id=plan_id,
        added=lines(outcome.added),
        unmatched=lines(outcome.unmatched),
        unavailable=lines(outcome.unavailable),
        estimated_total=outcome.estimated_total,
        cart=CartResponse.model_validate(outcome.cart),
    )
