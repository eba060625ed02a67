"""Admin store diet plan router: plan authoring."""

import uuid

from fastapi import APIRouter, Depends, status
from libs.auth.dependencies import require_admin
from libs.auth.models import AuthUser
from libs.common.logging import get_logger
from libs.db.session import get_async_db
from services.store_service.errors import ConflictError, NotFoundError
from services.store_service.models import DietPlan
from services.store_service.schemas import (
    DietPlanCreate,
    DietPlanResponse,
    DietPlanUpdate,
)
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(tags=["admin-store"])
logger = get_logger(__name__)


async def _commit_unique_name(db: AsyncSession, name: str) -> None:
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError(f"A diet plan named '{name}' already exists")


@router.post(
    "/diet-plans", response_model=DietPlanResponse, status_code=status.HTTP_201_CREATED
)
async def create_diet_plan(
    plan_in: DietPlanCreate,
    admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Create a diet plan."""
    plan = DietPlan(**plan_in.model_dump(), created_by=admin.user_id)
    db.add(plan)
    await _commit_unique_name(db, plan_in.name)
    await db.refresh(plan)

    logger.info("Admin %s created diet plan %s (%s)", admin.user_id, plan.id, plan.name)
    return plan


@router.patch("/diet-plans/{plan_id}", response_model=DietPlanResponse)
async def update_diet_plan(
    plan_id: uuid.UUID,
    plan_in: DietPlanUpdate,
    admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    plan = await db.get(DietPlan, plan_id)
    if not plan:
        raise NotFoundError("Diet plan not found")

    update_data = plan_in.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        setattr(plan, field, value)
    await _commit_unique_name(db, plan.name)
    await db.refresh(plan)

    logger.info("Admin %s updated diet plan %s: %s", admin.user_id, plan.id, sorted(update_data))
    return plan


@router.delete("/diet-plans/{plan_id}", status_code=status.HTTP_204_NO_CONTENT)
async def archive_diet_plan(
    plan_id: uuid.UUID,
    admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Archive a diet plan (soft delete)."""
    plan = await db.get(DietPlan, plan_id)
    if not plan:
        raise NotFoundError("Diet plan not found")

    plan.is_active = False
    await db.commit()

    logger.info("Admin %s archived diet plan %s", admin.user_id, plan.id)
    return None
