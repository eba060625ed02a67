"""Shared helpers for store tests: auth overrides and seeded products."""

from contextlib import contextmanager
from decimal import Decimal
from typing import Iterator

import pytest
import pytest_asyncio
from fastapi import FastAPI
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from services.store_service.services.coupons import reset_coupon_service
from tests.factories import ProductFactory


def make_member_user(user_id: str = "test-user", email: str = "shopper@nutricart.io") -> AuthUser:
    return AuthUser(user_id=user_id, email=email, role="authenticated")


def make_admin_user(user_id: str = "admin-user") -> AuthUser:
    return AuthUser(user_id=user_id, email="admin@nutricart.io", role="admin")


@contextmanager
def override_auth(app: FastAPI, user: AuthUser) -> Iterator[AuthUser]:
    """Temporarily authenticate requests as ``user``."""
    previous = app.dependency_overrides.get(get_current_user)
    app.dependency_overrides[get_current_user] = lambda: user
    try:
        yield user
    finally:
        if previous is None:
            app.dependency_overrides.pop(get_current_user, None)
        else:
            app.dependency_overrides[get_current_user] = previous


@pytest.fixture(autouse=True)
def _default_coupons():
    reset_coupon_service()
    yield
    reset_coupon_service()


@pytest_asyncio.fixture
async def apples(db_session):
    product = ProductFactory.create(name="Organic Apples", price=Decimal("10.00"))
    db_session.add(product)
    await db_session.commit()
    return product


@pytest_asyncio.fixture
async def oats(db_session):
    product = ProductFactory.create(
        name="Rolled Oats", category="grains", price=Decimal("5.00")
    )
    db_session.add(product)
    await db_session.commit()
    return product
