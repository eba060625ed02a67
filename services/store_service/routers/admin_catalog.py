"""Admin store catalog router: product management."""

import uuid

from fastapi import APIRouter, Depends, Query, status
from libs.auth.dependencies import require_admin
from libs.auth.models import AuthUser
from libs.common.logging import get_logger
from libs.db.session import get_async_db
from services.store_service.errors import NotFoundError
from services.store_service.models import Product
from services.store_service.schemas import (
    ProductCreate,
    ProductResponse,
    ProductUpdate,
)
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(tags=["admin-store"])
logger = get_logger(__name__)


@router.post(
    "/products", response_model=ProductResponse, status_code=status.HTTP_201_CREATED
)
async def create_product(
    product_in: ProductCreate,
    admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Create a product."""
    product = Product(**product_in.model_dump())
    db.add(product)
    await db.commit()
    await db.refresh(product)

    logger.info("Admin %s created product %s (%s)", admin.user_id, product.id, product.name)
    return product


@router.patch("/products/{product_id}/stock", response_model=ProductResponse)
async def set_product_stock(
    product_id: uuid.UUID,
    quantity: int = Query(..., ge=0),
    admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Set the on-hand stock for a product."""
    product = await db.get(Product, product_id)
    if not product:
        raise NotFoundError("Product not found")
    product.stock_quantity = quantity
    await db.commit()
    await db.refresh(product)

    logger.info("Admin %s set stock of %s to %d", admin.user_id, product.id, quantity)
    return product


@router.patch("/products/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: uuid.UUID,
    product_in: ProductUpdate,
    admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Update the fields sent; the rest are left as they are."""
    product = await db.get(Product, product_id)
    if not product:
        raise NotFoundError("Product not found")

    update_data = product_in.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        setattr(product, field, value)
    await db.commit()
    await db.refresh(product)

    logger.info(
        "Admin %s updated product %s: %s", admin.user_id, product.id, sorted(update_data)
    )
    return product


@router.delete("/products/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def archive_product(
    product_id: uuid.UUID,
    admin: AuthUser = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Archive a product (soft delete).

    Past orders and subscriptions keep pointing at it; carts and the
    subscription sweep treat it as unavailable.
    """
    product = await db.get(Product, product_id)
    if not product:
        raise NotFoundError("Product not found")

    product.is_active = False
    await db.commit()

    logger.info("Admin %s archived product %s", admin.user_id, product.id)
    return None
