"""Store catalog router: product browsing and reviews."""

import uuid
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.db.session import get_async_db
from services.store_service.models import Product, ProductCategory
from services.store_service.schemas import (
    ProductRatingResponse,
    ProductResponse,
    ReviewCreate,
    ReviewResponse,
)
from services.store_service.services import catalog_ops
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(tags=["store"])


# ============================================================================
# CATALOG - PRODUCTS
# ============================================================================


@router.get("/products", response_model=list[ProductResponse])
async def list_products(
    category: Optional[ProductCategory] = None,
    search: Optional[str] = Query(None, max_length=100),
    featured: Optional[bool] = None,
    min_price: Optional[Decimal] = Query(None, ge=0),
    max_price: Optional[Decimal] = Query(None, ge=0),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_async_db),
):
    """List active products."""
    query = select(Product).where(Product.is_active.is_(True))
    if category:
        query = query.where(Product.category == category)
    if search:
        pattern = f"%{search}%"
        query = query.where(
            or_(Product.name.ilike(pattern), Product.description.ilike(pattern))
        )
    if featured is not None:
        query = query.where(Product.is_featured.is_(featured))
    if min_price is not None:
        query = query.where(Product.price >= min_price)
    if max_price is not None:
        query = query.where(Product.price <= max_price)

    query = query.order_by(Product.name).offset((page - 1) * limit).limit(limit)
    result = await db.execute(query)
    return result.scalars().all()


# Fixed paths are registered before /products/{product_id}


@router.get("/products/featured", response_model=list[ProductResponse])
async def list_featured_products(
    limit: int = Query(catalog_ops.FEATURED_PRODUCTS_LIMIT, ge=1, le=50),
    db: AsyncSession = Depends(get_async_db),
):
    """Featured products, best rated first."""
    return await catalog_ops.list_featured_products(db, limit=limit)


@router.get("/products/categories", response_model=list[ProductCategory])
async def list_categories(db: AsyncSession = Depends(get_async_db)):
    """Categories that have at least one active product."""
    return await catalog_ops.list_categories(db)


@router.get("/products/dietary-tags", response_model=list[str])
async def list_dietary_tags(db: AsyncSession = Depends(get_async_db)):
    return await catalog_ops.list_dietary_tags(db)


@router.get("/products/{product_id}", response_model=ProductResponse)
async def get_product(
    product_id: uuid.UUID,
    db: AsyncSession = Depends(get_async_db),
):
    """Get an active product."""
    return await catalog_ops.get_active_product(db, product_id)


# ============================================================================
# CATALOG - REVIEWS
# ============================================================================


@router.get("/products/{product_id}/reviews", response_model=list[ReviewResponse])
async def list_reviews(
    product_id: uuid.UUID,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_async_db),
):
    """Reviews for a product, newest first."""
    return await catalog_ops.list_reviews(db, product_id, page=page, limit=limit)


@router.post(
    "/products/{product_id}/reviews",
    response_model=ProductRatingResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_review(
    product_id: uuid.UUID,
    review_in: ReviewCreate,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    """Review a product (once per shopper)."""
    product = await catalog_ops.add_review(
        db,
        product_id=product_id,
        reviewer_id=current_user.user_id,
        rating=review_in.rating,
        comment=review_in.comment,
    )
    return ProductRatingResponse(
        product_id=product.id,
        average_rating=product.average_rating,
        rating_count=product.rating_count,
    )
