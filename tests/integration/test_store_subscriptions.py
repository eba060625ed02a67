"""Integration tests for subscription endpoints."""

import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from services.store_service.app.main import app
from tests.conftest import make_member_user, override_auth
from tests.factories import address


async def _subscribe(client, *lines, plan="weekly", **extra):
    payload = {
        "plan": plan,
        "items": [{"product_id": str(p.id), "quantity": q} for p, q in lines],
        "shipping_address": address(),
    }
    payload.update(extra)
    response = await client.post("/store/subscriptions", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


def _parse(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_subscription(client, apples, oats):
    data = await _subscribe(client, (apples, 2), (oats, 1), plan="bi-weekly")

    assert data["status"] == "active"
    assert data["frequency"] == 14
    assert Decimal(data["total_amount"]) == Decimal("25.00")
    assert data["current_order_count"] == 0
    assert data["next_order_number"] == 1
    assert _parse(data["next_order_date"]) - _parse(data["start_date"]) == timedelta(
        days=14
    )


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_with_unknown_product_404(client):
    response = await client.post(
        "/store/subscriptions",
        json={
            "plan": "weekly",
            "items": [{"product_id": str(uuid.uuid4()), "quantity": 1}],
            "shipping_address": address(),
        },
    )
    assert response.status_code == 404


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_without_items_422(client):
    response = await client.post(
        "/store/subscriptions",
        json={"plan": "weekly", "items": [], "shipping_address": address()},
    )
    assert response.status_code == 422


@pytest.mark.asyncio
@pytest.mark.integration
async def test_list_and_get(client, apples):
    created = await _subscribe(client, (apples, 1))

    listing = await client.get("/store/subscriptions")
    assert [s["id"] for s in listing.json()] == [created["id"]]

    paused_only = await client.get("/store/subscriptions", params={"status": "paused"})
    assert paused_only.json() == []

    detail = await client.get(f"/store/subscriptions/{created['id']}")
    assert detail.status_code == 200

    with override_auth(app, make_member_user(user_id="someone-else")):
        hidden = await client.get(f"/store/subscriptions/{created['id']}")
    assert hidden.status_code == 404


@pytest.mark.asyncio
@pytest.mark.integration
async def test_update_items_reprices(client, apples, oats):
    created = await _subscribe(client, (apples, 1))

    response = await client.put(
        f"/store/subscriptions/{created['id']}/items",
        json={"items": [{"product_id": str(oats.id), "quantity": 3}]},
    )

    assert response.status_code == 200, response.text
    data = response.json()
    assert [i["product_id"] for i in data["items"]] == [str(oats.id)]
    assert Decimal(data["total_amount"]) == Decimal("15.00")


@pytest.mark.asyncio
@pytest.mark.integration
async def test_pause_resume_cancel(client, apples):
    created = await _subscribe(client, (apples, 1))
    base = f"/store/subscriptions/{created['id']}"
    pause_end = (datetime.now(timezone.utc) + timedelta(days=14)).isoformat()

    paused = await client.post(
        f"{base}/pause", json={"reason": "Vacation", "pause_end_date": pause_end}
    )
    assert paused.status_code == 200, paused.text
    assert paused.json()["status"] == "paused"
    assert paused.json()["pause_reason"] == "Vacation"
    assert _parse(paused.json()["next_order_date"]) == _parse(created["next_order_date"])

    again = await client.post(f"{base}/pause")
    assert again.status_code == 409

    resumed = await client.post(f"{base}/resume")
    assert resumed.status_code == 200
    data = resumed.json()
    assert data["status"] == "active"
    assert data["pause_start_date"] is None
    assert _parse(data["next_order_date"]) == _parse(created["next_order_date"])

    cancelled = await client.post(f"{base}/cancel", json={"reason": "Budget"})
    assert cancelled.status_code == 200
    assert cancelled.json()["status"] == "cancelled"
    assert cancelled.json()["auto_renew"] is False

    assert (await client.post(f"{base}/cancel")).status_code == 409
    assert (await client.post(f"{base}/resume")).status_code == 409
    items = await client.put(
        f"{base}/items", json={"items": [{"product_id": str(apples.id), "quantity": 1}]}
    )
    assert items.status_code == 409
