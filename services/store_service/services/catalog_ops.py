"""Catalog reads and product reviews."""

import uuid
from typing import Optional

from libs.common.logging import get_logger
from services.store_service.errors import NotFoundError, ValidationError
from services.store_service.models import Product, ProductCategory, ProductReview
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

FEATURED_PRODUCTS_LIMIT = 8


async def get_active_product(db: AsyncSession, product_id: uuid.UUID) -> Product:
    product = await db.get(Product, product_id)
    if not product or not product.is_active:
        raise NotFoundError("Product not found")
    return product


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------


async def list_featured_products(
    db: AsyncSession, *, limit: int = FEATURED_PRODUCTS_LIMIT
) -> list[Product]:
    result = await db.execute(
        select(Product)
        .where(Product.is_active.is_(True), Product.is_featured.is_(True))
        .order_by(Product.average_rating.desc(), Product.created_at.desc())
        .limit(limit)
    )
    return list(result.scalars().all())


async def list_categories(db: AsyncSession) -> list[ProductCategory]:
    result = await db.execute(
        select(Product.category).where(Product.is_active.is_(True)).distinct()
    )
    return sorted(result.scalars().all(), key=lambda category: category.value)


async def list_dietary_tags(db: AsyncSession) -> list[str]:
    # Tags live in a JSON column, so the union is taken here rather than in SQL
    result = await db.execute(
        select(Product.dietary_tags).where(Product.is_active.is_(True))
    )
    tags: set[str] = set()
    for row_tags in result.scalars().all():
        tags.update(row_tags or [])
    return sorted(tags)


# ---------------------------------------------------------------------------
# Reviews
# ---------------------------------------------------------------------------


async def list_reviews(
    db: AsyncSession, product_id: uuid.UUID, *, page: int = 1, limit: int = 20
) -> list[ProductReview]:
    await get_active_product(db, product_id)
    result = await db.execute(
        select(ProductReview)
        .where(ProductReview.product_id == product_id)
        .order_by(ProductReview.created_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
    )
    return list(result.scalars().all())


async def add_review(
    db: AsyncSession,
    *,
    product_id: uuid.UUID,
    reviewer_id: str,
    rating: int,
    comment: Optional[str] = None,
) -> Product:
    """Record one review per reviewer and refresh the product's rating."""
    product = await get_active_product(db, product_id)

    existing = await db.execute(
        select(ProductReview.id).where(
            ProductReview.product_id == product_id,
            ProductReview.reviewer_id == reviewer_id,
        )
    )
    if existing.scalar_one_or_none() is not None:
        raise ValidationError("You have already reviewed this product")

    review = ProductReview(
        product_id=product_id, reviewer_id=reviewer_id, rating=rating, comment=comment
    )
    try:
        async with db.begin_nested():
            db.add(review)
            await db.flush()
    except IntegrityError:
        # Lost a race with the same reviewer's concurrent request
        raise ValidationError("You have already reviewed this product")

    average, count = (
        await db.execute(
            select(func.avg(ProductReview.rating), func.count(ProductReview.id)).where(
                ProductReview.product_id == product_id
            )
        )
    ).one()
    product.average_rating = round(float(average or 0), 2)
    product.rating_count = count
    await db.commit()

    logger.info(
        "Review by %s on product %s (rating=%d, average=%.2f over %d)",
        reviewer_id,
        product_id,
        rating,
        product.average_rating,
        product.rating_count,
    )
    return product
