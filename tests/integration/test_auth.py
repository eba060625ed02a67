"""Bearer-token authentication against the real JWT dependency."""

import pytest
from jose import jwt
from libs.auth.dependencies import get_current_user
from libs.common.config import get_settings
from services.store_service.app.main import app


def _token(**claims) -> str:
    settings = get_settings()
    return jwt.encode(claims, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


@pytest.fixture
def real_auth(client):
    app.dependency_overrides.pop(get_current_user, None)
    return client


@pytest.mark.asyncio
@pytest.mark.integration
async def test_valid_token_resolves_owner(real_auth):
    token = _token(sub="jwt-user", email="jwt@nutricart.io", role="authenticated")

    response = await real_auth.get(
        "/store/cart", headers={"Authorization": f"Bearer {token}"}
    )

    assert response.status_code == 200, response.text
    assert response.json()["owner_id"] == "jwt-user"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_bad_signature_401(real_auth):
    token = jwt.encode({"sub": "jwt-user"}, "not-the-secret", algorithm="HS256")

    response = await real_auth.get(
        "/store/cart", headers={"Authorization": f"Bearer {token}"}
    )

    assert response.status_code == 401


@pytest.mark.asyncio
@pytest.mark.integration
async def test_missing_token_rejected(real_auth):
    response = await real_auth.get("/store/cart")
    assert response.status_code in (401, 403)


@pytest.mark.asyncio
@pytest.mark.integration
async def test_admin_role_claim_grants_admin(real_auth):
    token = _token(sub="ops", role=get_settings().ADMIN_ROLE)

    response = await real_auth.patch(
        "/admin/store/products/00000000-0000-0000-0000-000000000000/stock",
        params={"quantity": 1},
        headers={"Authorization": f"Bearer {token}"},
    )

    assert response.status_code == 404
