"""Seed script for store demo data.

Creates a small nutrition catalog and a few diet plans so you can exercise
cart, checkout, subscriptions and diet-plan groceries end-to-end.

Usage:
    cd nutricart-backend
    python -m services.store_service.seed_store_data
"""

import asyncio
from decimal import Decimal

from sqlalchemy import func, select

from libs.db.config import AsyncSessionLocal
from services.store_service.models import (
    DietDifficulty,
    DietPlan,
    DietPlanType,
    Product,
    ProductCategory,
)

CATALOG = [
    # (name, category, price, sale_price, unit, stock, dietary tags, featured)
    ("Organic Gala Apples", ProductCategory.FRUITS, "4.99", None, "lb", 250, ["vegan", "organic"], True),
    ("Wild Blueberries", ProductCategory.FRUITS, "6.49", "5.49", "pint", 120, ["vegan", "organic"], False),
    ("Baby Spinach", ProductCategory.VEGETABLES, "3.99", None, "bag", 180, ["vegan", "organic"], False),
    ("Sweet Potatoes", ProductCategory.VEGETABLES, "2.49", None, "lb", 300, ["vegan", "gluten-free"], False),
    ("Grass-Fed Chicken Breast", ProductCategory.PROTEINS, "11.99", None, "lb", 80, ["keto", "paleo"], True),
    ("Wild Salmon Fillet", ProductCategory.PROTEINS, "15.99", "13.99", "lb", 60, ["keto", "paleo"], False),
    ("Rolled Oats", ProductCategory.GRAINS, "5.49", None, "bag", 200, ["vegan", "gluten-free"], False),
    ("Tri-Color Quinoa", ProductCategory.GRAINS, "7.99", None, "bag", 140, ["vegan", "gluten-free"], False),
    ("Greek Yogurt", ProductCategory.DAIRY, "3.49", None, "piece", 150, ["vegetarian"], False),
    ("Almond Butter Bites", ProductCategory.SNACKS, "8.99", None, "box", 90, ["vegan"], False),
    ("Cold-Pressed Green Juice", ProductCategory.BEVERAGES, "6.99", None, "bottle", 70, ["vegan", "raw"], False),
    ("Plant Protein Powder", ProductCategory.SUPPLEMENTS, "34.99", "29.99", "piece", 40, ["vegan"], True),
    ("Mediterranean Meal Kit", ProductCategory.MEAL_KITS, "24.99", None, "box", 50, ["vegetarian"], True),
]


DIET_PLANS = [
    {
        "name": "Mediterranean Starter",
        "type": DietPlanType.MEDITERRANEAN,
        "description": "Whole grains, fish, greens and olive oil across four weeks.",
        "short_description": "Heart-friendly Mediterranean eating",
        "difficulty": DietDifficulty.BEGINNER,
        "benefits": ["heart health", "steady energy"],
        "tags": ["balanced", "pescatarian"],
        "daily_calorie_target": {"min": 1800, "max": 2200},
        "macro_ratios": {"protein": 20, "carbs": 50, "fat": 30},
        "weekly_schedule": [
            {
                "day": "monday",
                "meals": [
                    {"name": "Oats with blueberries", "time": "08:00", "calories": 350},
                    {"name": "Salmon quinoa bowl", "time": "13:00", "calories": 600},
                ],
                "total_calories": 950,
            }
        ],
        "grocery_list": [
            {
                "category": "pantry",
                "items": [
                    {"name": "Rolled Oats", "quantity": "1 bag", "frequency": "weekly"},
                    {"name": "Tri-Color Quinoa", "quantity": "1 bag", "frequency": "weekly"},
                ],
            },
            {
                "category": "fresh",
                "items": [
                    {"name": "Wild Salmon Fillet", "quantity": "2 lb", "frequency": "weekly"},
                    {"name": "Baby Spinach", "quantity": "2 bags", "frequency": "weekly"},
                    {"name": "Extra Virgin Olive Oil", "quantity": "1 bottle", "frequency": "monthly"},
                ],
            },
        ],
        "rating": 4.6,
    },
    {
        "name": "Plant Power",
        "type": DietPlanType.VEGAN,
        "description": "A fully plant-based plan built around legumes, grains and greens.",
        "short_description": "Vegan plan for weight management",
        "difficulty": DietDifficulty.INTERMEDIATE,
        "benefits": ["weight management", "high fibre"],
        "restrictions": ["no animal products"],
        "tags": ["vegan", "high-fibre"],
        "macro_ratios": {"protein": 20, "carbs": 55, "fat": 25},
        "grocery_list": [
            {
                "category": "fresh",
                "items": [
                    {"name": "Sweet Potatoes", "quantity": "3 lb", "frequency": "weekly"},
                    {"name": "Baby Spinach", "quantity": "1 bag", "frequency": "weekly"},
                ],
            },
            {
                "category": "supplements",
                "items": [
                    {"name": "Plant Protein Powder", "quantity": "1", "frequency": "monthly"},
                ],
            },
        ],
        "rating": 4.4,
    },
    {
        "name": "Keto Kickoff",
        "type": DietPlanType.KETO,
        "description": "Low-carb, high-fat meals to ease into ketosis.",
        "short_description": "Beginner ketogenic plan",
        "difficulty": DietDifficulty.ADVANCED,
        "warnings": ["consult a doctor if you have a medical condition"],
        "tags": ["keto", "low-carb"],
        "macro_ratios": {"protein": 25, "carbs": 5, "fat": 70},
        "grocery_list": [
            {
                "category": "protein",
                "items": [
                    {"name": "Grass-Fed Chicken Breast", "quantity": "3 lb", "frequency": "weekly"},
                ],
            },
        ],
        "rating": 4.1,
    },
]


async def _seed_products(db) -> int:
    count = await db.scalar(select(func.count()).select_from(Product))
    if count:
        print(f"Store data already exists ({count} products). Skipping products.")
        return 0

    products = [
        Product(
            name=name,
            description=f"{name}, sourced fresh for NutriCart.",
            category=category,
            price=Decimal(price),
            sale_price=Decimal(sale_price) if sale_price else None,
            unit=unit,
            stock_quantity=stock,
            min_order_quantity=1,
            dietary_tags=tags,
            is_active=True,
            is_featured=featured,
        )
        for name, category, price, sale_price, unit, stock, tags, featured in CATALOG
    ]
    db.add_all(products)
    return len(products)


async def _seed_diet_plans(db) -> int:
    count = await db.scalar(select(func.count()).select_from(DietPlan))
    if count:
        print(f"Diet plans already exist ({count}). Skipping diet plans.")
        return 0

    db.add_all(DietPlan(**plan) for plan in DIET_PLANS)
    return len(DIET_PLANS)


async def seed_store_data():
    async with AsyncSessionLocal() as db:
        print("Seeding store data...")

        products = await _seed_products(db)
        plans = await _seed_diet_plans(db)
        await db.commit()

        print("=" * 60)
        print("Store data seeded successfully!")
        print("=" * 60)
        print(f"  Products:   {products}")
        print(f"  Diet plans: {plans}")
        print("=" * 60)


if __name__ == "__main__":
    asyncio.run(seed_store_data())
