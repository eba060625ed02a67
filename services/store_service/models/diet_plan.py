"""Diet plan content: curated eating plans with a weekly menu and grocery list."""

import re
import uuid
from datetime import datetime
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from libs.db.types import UTCDateTime
from services.store_service.models.enums import (
    DietDifficulty,
    DietPlanType,
    enum_values,
)
from sqlalchemy import JSON, Boolean, Float
from sqlalchemy import Enum as SAEnum
from sqlalchemy import Index, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

_LEADING_INT = re.compile(r"^\s*(\d+)")

# ============================================================================
# DIET PLAN MODELS
# ============================================================================


def grocery_quantity(text) -> int:
    """Units to buy for a grocery line: the leading integer of "2 lbs", else 1."""
    if isinstance(text, int) and text > 0:
        return text
    match = _LEADING_INT.match(str(text or ""))
    if match and int(match.group(1)) > 0:
        return int(match.group(1))
    return 1


class DietPlan(Base):
    """A diet plan.

    The nested documents (weekly schedule, grocery list, calorie target,
    macro ratios) are stored as JSON; only the list filters are columns.
    """

    __tablename__ = "store_diet_plans"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(150), unique=True, nullable=False)
    type: Mapped[DietPlanType] = mapped_column(
        SAEnum(
            DietPlanType,
            values_callable=enum_values,
            name="store_diet_plan_type_enum",
        ),
        nullable=False,
    )
    description: Mapped[str] = mapped_column(Text, nullable=False)
    short_description: Mapped[Optional[str]] = mapped_column(
        String(255), nullable=True
    )
    difficulty: Mapped[DietDifficulty] = mapped_column(
        SAEnum(
            DietDifficulty,
            values_callable=enum_values,
            name="store_diet_difficulty_enum",
        ),
        default=DietDifficulty.BEGINNER,
    )
    duration_weeks: Mapped[int] = mapped_column(Integer, default=4)

    benefits: Mapped[list] = mapped_column(JSON, default=list)
    restrictions: Mapped[list] = mapped_column(JSON, default=list)
    target_audience: Mapped[list] = mapped_column(JSON, default=list)
    tags: Mapped[list] = mapped_column(JSON, default=list)
    tips: Mapped[list] = mapped_column(JSON, default=list)
    warnings: Mapped[list] = mapped_column(JSON, default=list)

    # [{day, meals: [{name, time, calories, protein, ...}], total_calories, ...}]
    weekly_schedule: Mapped[list] = mapped_column(JSON, default=list)
    daily_calorie_target: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)
    macro_ratios: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)
    # [{category, items: [{name, quantity, frequency}]}]
    grocery_list: Mapped[list] = mapped_column(JSON, default=list)

    rating: Mapped[float] = mapped_column(Float, default=0.0)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_by: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime, default=utc_now, onupdate=utc_now
    )

    __table_args__ = (
        Index("ix_store_diet_plans_type_difficulty", "type", "difficulty", "is_active"),
    )

    def grocery_items(self) -> list[dict]:
        """Flatten the grocery list into ``{name, quantity, category}`` rows."""
        rows = []
        for section in self.grocery_list or []:
            for item in section.get("items", []):
                rows.append(
                    {
                        "name": item.get("name", ""),
                        "quantity": grocery_quantity(item.get("quantity")),
                        "category": section.get("category"),
                    }
                )
        return rows

    def __repr__(self):
        return f"<DietPlan {self.name} ({self.type})>"
