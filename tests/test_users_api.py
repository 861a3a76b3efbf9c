"""
User API tests - profile, own listings and swaps, dashboard stats, public profile.
"""

import pytest
from httpx import AsyncClient

from conftest import make_item
from rewear.core.enums import ItemStatus


@pytest.mark.asyncio
async def test_get_and_update_profile(client: AsyncClient, alice_headers):
    profile = (await client.get("/api/v1/users/profile", headers=alice_headers)).json()
    assert profile["preferences"]["notifications"]["email"] is True

    response = await client.put(
        "/api/v1/users/profile",
        headers=alice_headers,
        json={
            "name": "Alice Green",
            "city": "Lisbon",
            "preferences": {"notifications": {"email": False}, "sizes": ["S", "M"], "categories": ["Tops"]},
        },
    )
    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Alice Green"
    assert data["city"] == "Lisbon"
    assert data["preferences"]["notifications"]["email"] is False
    assert data["preferences"]["sizes"] == ["S", "M"]


@pytest.mark.asyncio
async def test_profile_rejects_unknown_size(client: AsyncClient, alice_headers):
    response = await client.put(
        "/api/v1/users/profile", headers=alice_headers, json={"preferences": {"sizes": ["XXXL"]}}
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_my_items_include_unlisted(client: AsyncClient, session, alice, alice_headers):
    await make_item(session, alice)
    pending = await make_item(session, alice, status=ItemStatus.PENDING, approved=False)
    everything = (await client.get("/api/v1/users/items", headers=alice_headers)).json()
    assert everything["pagination"]["total"] == 2
    only_pending = (await client.get("/api/v1/users/items", headers=alice_headers, params={"status": "pending"})).json()
    assert [i["id"] for i in only_pending["items"]] == [pending.id]


@pytest.mark.asyncio
async def test_my_swaps(client: AsyncClient, session, bob, alice_headers):
    item = await make_item(session, bob)
    await client.post(
        "/api/v1/swaps",
        headers=alice_headers,
        json={"requested_item_id": item.id, "swap_type": "points", "points_offered": 10},
    )
    swaps = (await client.get("/api/v1/users/swaps", headers=alice_headers)).json()
    assert swaps["pagination"]["total"] == 1


@pytest.mark.asyncio
async def test_dashboard_stats(client: AsyncClient, session, alice, bob, alice_headers):
    await make_item(session, alice)
    await make_item(session, alice, status=ItemStatus.PENDING, approved=False)
    wanted = await make_item(session, bob)
    await client.post(
        "/api/v1/swaps",
        headers=alice_headers,
        json={"requested_item_id": wanted.id, "swap_type": "points", "points_offered": 10},
    )
    stats = (await client.get("/api/v1/users/stats", headers=alice_headers)).json()
    assert stats["total_items"] == 2
    assert stats["available_items"] == 1
    assert stats["pending_items"] == 1
    assert stats["swaps_involved"] == 1
    assert stats["pending_swaps"] == 1
    assert stats["points"] == 50


@pytest.mark.asyncio
async def test_add_points(client: AsyncClient, bob_headers):
    response = await client.post("/api/v1/users/points/add", headers=bob_headers, json={"amount": 25})
    assert response.status_code == 200
    assert response.json() == {"message": "Added 25 points", "new_balance": 35}
    too_many = await client.post("/api/v1/users/points/add", headers=bob_headers, json={"amount": 101})
    assert too_many.status_code == 400
    inbox = (await client.get("/api/v1/notifications", headers=bob_headers)).json()["items"]
    assert inbox[0]["type"] == "points_earned"
    assert inbox[0]["data"]["points"] == 25


@pytest.mark.asyncio
async def test_public_profile(client: AsyncClient, session, alice):
    for n in range(7):
        await make_item(session, alice, title=f"Listing {n}")
    await make_item(session, alice, title="Hidden", status=ItemStatus.PENDING, approved=False)
    response = await client.get(f"/api/v1/users/{alice.id}")
    assert response.status_code == 200
    data = response.json()
    assert data["user"]["name"] == "Alice"
    assert "email" not in data["user"]
    assert len(data["items"]) == 6
    assert "Hidden" not in [i["title"] for i in data["items"]]

    items = (await client.get(f"/api/v1/users/{alice.id}/items", params={"limit": 5})).json()
    assert items["pagination"]["total"] == 7
    assert (await client.get("/api/v1/users/999")).status_code == 404
