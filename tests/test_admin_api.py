"""
Admin API tests - role guard, moderation, user management, dashboard, analytics.
"""

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select

from conftest import make_item
from rewear.core.enums import ItemStatus
from rewear.db.models import Item, Notification, Swap


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "method,path",
    [
        ("GET", "/api/v1/admin/dashboard"),
        ("GET", "/api/v1/admin/items/pending"),
        ("PUT", "/api/v1/admin/items/1/approve"),
        ("GET", "/api/v1/admin/users"),
        ("DELETE", "/api/v1/admin/users/1"),
        ("GET", "/api/v1/admin/swaps"),
        ("GET", "/api/v1/admin/analytics"),
    ],
)
async def test_admin_routes_forbidden_for_users(client: AsyncClient, alice_headers, method, path):
    response = await client.request(method, path, headers=alice_headers)
    assert response.status_code == 403
    assert response.json()["error"] == "Admin access required"


@pytest.mark.asyncio
async def test_approve_item_lists_and_indexes_it(client: AsyncClient, session, alice, admin, admin_headers, queued):
    item = await make_item(session, alice, status=ItemStatus.PENDING, approved=False)
    pending = (await client.get("/api/v1/admin/items/pending", headers=admin_headers)).json()
    assert [i["id"] for i in pending["items"]] == [item.id]

    response = await client.put(f"/api/v1/admin/items/{item.id}/approve", headers=admin_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "available"
    assert data["is_approved"] is True
    assert data["approved_at"] is not None
    assert queued["index"][0]["id"] == item.id
    assert queued["index"][0]["title"] == item.title

    again = await client.put(f"/api/v1/admin/items/{item.id}/approve", headers=admin_headers)
    assert again.status_code == 400

    note = (await session.execute(select(Notification).where(Notification.user_id == alice.id))).scalars().one()
    assert note.type == "item_approved"
    assert note.priority == "medium"


@pytest.mark.asyncio
async def test_reject_item_with_reason(client: AsyncClient, session, alice, admin_headers):
    item = await make_item(session, alice, status=ItemStatus.PENDING, approved=False)
    missing_reason = await client.put(f"/api/v1/admin/items/{item.id}/reject", headers=admin_headers, json={"reason": ""})
    assert missing_reason.status_code == 400

    response = await client.put(
        f"/api/v1/admin/items/{item.id}/reject", headers=admin_headers, json={"reason": "Photos are blurry"}
    )
    assert response.status_code == 200
    assert response.json()["status"] == "removed"
    note = (await session.execute(select(Notification).where(Notification.user_id == alice.id))).scalars().one()
    assert note.type == "item_rejected"
    assert "Photos are blurry" in note.message


@pytest.mark.asyncio
async def test_set_item_status(client: AsyncClient, session, alice, admin_headers):
    item = await make_item(session, alice)
    response = await client.patch(
        f"/api/v1/admin/items/{item.id}/status", headers=admin_headers, json={"status": "removed"}
    )
    assert response.status_code == 200
    assert response.json()["status"] == "removed"
    bad = await client.patch(f"/api/v1/admin/items/{item.id}/status", headers=admin_headers, json={"status": "lost"})
    assert bad.status_code == 400


@pytest.mark.asyncio
async def test_list_users_with_search(client: AsyncClient, alice, bob, admin_headers):
    everyone = (await client.get("/api/v1/admin/users", headers=admin_headers)).json()
    assert everyone["pagination"]["total"] == 3
    found = (await client.get("/api/v1/admin/users", headers=admin_headers, params={"search": "bob"})).json()
    assert [u["email"] for u in found["items"]] == ["bob@example.com"]


@pytest.mark.asyncio
async def test_change_role(client: AsyncClient, alice, admin, admin_headers):
    promoted = await client.put(f"/api/v1/admin/users/{alice.id}/role", headers=admin_headers, json={"role": "admin"})
    assert promoted.status_code == 200
    assert promoted.json()["role"] == "admin"

    self_demote = await client.put(f"/api/v1/admin/users/{admin.id}/role", headers=admin_headers, json={"role": "user"})
    assert self_demote.status_code == 400
    assert (await client.put("/api/v1/admin/users/999/role", headers=admin_headers, json={"role": "user"})).status_code == 404


@pytest.mark.asyncio
async def test_delete_user_cascades(client: AsyncClient, session, alice, bob, admin, admin_headers, queued):
    alice_item = await make_item(session, alice)
    bob_item = await make_item(session, bob)
    alice_id, alice_item_id = alice.id, alice_item.id
    swap = Swap(
        initiator_id=bob.id,
        recipient_id=alice.id,
        requested_item_id=alice_item.id,
        points_offered=10,
        swap_type="points",
    )
    session.add(swap)
    session.add(Notification(user_id=alice.id, type="system_announcement", title="Hi", message="Welcome"))
    await session.flush()

    assert (await client.delete(f"/api/v1/admin/users/{admin.id}", headers=admin_headers)).status_code == 400

    response = await client.delete(f"/api/v1/admin/users/{alice_id}", headers=admin_headers)
    assert response.status_code == 200

    async def count(stmt):
        return (await session.execute(stmt)).scalar_one()

    assert await count(select(func.count()).select_from(Item).where(Item.owner_id == alice_id)) == 0
    assert await count(select(func.count()).select_from(Swap)) == 0
    assert await count(select(func.count()).select_from(Notification).where(Notification.user_id == alice_id)) == 0
    assert await count(select(func.count()).select_from(Item).where(Item.id == bob_item.id)) == 1
    assert queued["remove"] == [alice_item_id]
    assert queued["delete_images"] == [["rewear/items/seed"]]
    assert (await client.get(f"/api/v1/users/{alice_id}")).status_code == 404


@pytest.mark.asyncio
async def test_list_swaps_by_status(client: AsyncClient, session, alice, bob, admin_headers):
    item = await make_item(session, bob)
    session.add(Swap(initiator_id=alice.id, recipient_id=bob.id, requested_item_id=item.id, swap_type="points", points_offered=10))
    session.add(
        Swap(
            initiator_id=alice.id,
            recipient_id=bob.id,
            requested_item_id=item.id,
            swap_type="points",
            points_offered=10,
            status="rejected",
        )
    )
    await session.flush()
    all_swaps = (await client.get("/api/v1/admin/swaps", headers=admin_headers)).json()
    assert all_swaps["pagination"]["total"] == 2
    rejected = (await client.get("/api/v1/admin/swaps", headers=admin_headers, params={"status": "rejected"})).json()
    assert rejected["pagination"]["total"] == 1


@pytest.mark.asyncio
async def test_dashboard(client: AsyncClient, session, alice, admin_headers):
    await make_item(session, alice)
    await make_item(session, alice, status=ItemStatus.PENDING, approved=False)
    alice.eco_impact = 5.0
    await session.flush()
    response = await client.get("/api/v1/admin/dashboard", headers=admin_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["stats"]["total_users"] == 2
    assert data["stats"]["total_items"] == 2
    assert data["stats"]["pending_items"] == 1
    assert data["stats"]["total_eco_impact"] == 5.0
    assert len(data["recent"]["users"]) == 2
    assert len(data["recent"]["items"]) == 2


@pytest.mark.asyncio
async def test_analytics(client: AsyncClient, session, alice, admin_headers):
    await make_item(session, alice)
    await make_item(session, alice, status=ItemStatus.SWAPPED)
    response = await client.get("/api/v1/admin/analytics", headers=admin_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["users"]["total"] == 2
    assert data["users"]["admins"] == 1
    assert data["items"]["total"] == 2
    assert data["items"]["available"] == 1
    assert data["items"]["swapped"] == 1
    assert data["swaps"]["total"] == 0

    trends = data["trends"]["users"]
    assert len(trends) == 6
    # Everything was created this month
    assert trends[-1]["count"] == 2
    assert sum(m["count"] for m in trends[:-1]) == 0
    assert data["trends"]["items"][-1]["count"] == 2
