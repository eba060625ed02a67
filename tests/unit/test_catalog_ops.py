"""Unit tests for catalog lookups and product reviews."""

from datetime import timedelta

import pytest
from libs.common.datetime_utils import utc_now
from services.store_service.errors import NotFoundError, ValidationError
from services.store_service.models import ProductCategory
from services.store_service.services import catalog_ops
from tests.factories import ProductFactory


async def _add(db, **overrides):
    product = ProductFactory.create(**overrides)
    db.add(product)
    await db.commit()
    return product


# ---------------------------------------------------------------------------
# Reviews
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_reviews_update_average_and_count(db_session, apples):
    await catalog_ops.add_review(
        db_session, product_id=apples.id, reviewer_id="u1", rating=5
    )
    await catalog_ops.add_review(
        db_session, product_id=apples.id, reviewer_id="u2", rating=4, comment="Crisp"
    )
    product = await catalog_ops.add_review(
        db_session, product_id=apples.id, reviewer_id="u3", rating=4
    )

    assert product.rating_count == 3
    assert product.average_rating == pytest.approx(4.33)

    reviews = await catalog_ops.list_reviews(db_session, apples.id)
    assert sorted(r.reviewer_id for r in reviews) == ["u1", "u2", "u3"]


@pytest.mark.asyncio
@pytest.mark.unit
async def test_second_review_by_same_reviewer_rejected(db_session, apples):
    await catalog_ops.add_review(
        db_session, product_id=apples.id, reviewer_id="u1", rating=2
    )

    with pytest.raises(ValidationError) as exc_info:
        await catalog_ops.add_review(
            db_session, product_id=apples.id, reviewer_id="u1", rating=5
        )

    assert exc_info.value.detail == "You have already reviewed this product"
    assert apples.rating_count == 1
    assert apples.average_rating == 2.0


@pytest.mark.asyncio
@pytest.mark.unit
async def test_review_of_inactive_product_not_found(db_session):
    hidden = await _add(db_session, is_active=False)

    with pytest.raises(NotFoundError):
        await catalog_ops.add_review(
            db_session, product_id=hidden.id, reviewer_id="u1", rating=3
        )


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_featured_products_best_rated_first(db_session):
    now = utc_now()
    plain = await _add(db_session, is_featured=True, average_rating=3.0, created_at=now)
    best = await _add(db_session, is_featured=True, average_rating=4.8)
    newer_plain = await _add(
        db_session,
        is_featured=True,
        average_rating=3.0,
        created_at=now + timedelta(minutes=5),
    )
    await _add(db_session, is_featured=False, average_rating=5.0)
    await _add(db_session, is_featured=True, is_active=False, average_rating=5.0)

    featured = await catalog_ops.list_featured_products(db_session)

    assert [p.id for p in featured] == [best.id, newer_plain.id, plain.id]


@pytest.mark.asyncio
@pytest.mark.unit
async def test_categories_and_tags_cover_active_products_only(db_session):
    await _add(db_session, category="grains", dietary_tags=["vegan", "gluten-free"])
    await _add(db_session, category="fruits", dietary_tags=["vegan", "organic"])
    await _add(db_session, category="dairy", dietary_tags=["vegetarian"], is_active=False)

    categories = await catalog_ops.list_categories(db_session)
    tags = await catalog_ops.list_dietary_tags(db_session)

    assert categories == [ProductCategory.FRUITS, ProductCategory.GRAINS]
    assert tags == ["gluten-free", "organic", "vegan"]
