"""
Swap API tests - creation rules, the state machine, points ledger, chat, ratings.
"""

import pytest
from httpx import AsyncClient

from conftest import auth_headers_for, make_item, make_user
from rewear.core.enums import ItemStatus


async def propose_points(client, headers, item_id, points, message=None):
    body = {"requested_item_id": item_id, "swap_type": "points", "points_offered": points}
    if message:
        body["message"] = message
    return await client.post("/api/v1/swaps", headers=headers, json=body)


async def propose_direct(client, headers, item_id, offered_id):
    return await client.post(
        "/api/v1/swaps",
        headers=headers,
        json={"requested_item_id": item_id, "swap_type": "direct", "offered_item_id": offered_id},
    )


# --- Creation ---


@pytest.mark.asyncio
async def test_create_points_swap_notifies_owner(client: AsyncClient, session, alice, bob, alice_headers, bob_headers):
    item = await make_item(session, bob, points_required=10)
    response = await propose_points(client, alice_headers, item.id, 12, message="Love this jacket")
    assert response.status_code == 201
    swap = response.json()
    assert swap["status"] == "pending"
    assert swap["initiator"]["id"] == alice.id
    assert swap["recipient"]["id"] == bob.id
    assert swap["points_offered"] == 12
    assert swap["offered_item"] is None

    inbox = (await client.get("/api/v1/notifications", headers=bob_headers)).json()["items"]
    assert inbox[0]["type"] == "swap_request"
    assert inbox[0]["priority"] == "high"
    assert inbox[0]["data"]["swap_id"] == swap["id"]


@pytest.mark.asyncio
async def test_cannot_swap_for_own_item(client: AsyncClient, session, alice, alice_headers):
    item = await make_item(session, alice)
    response = await propose_points(client, alice_headers, item.id, 10)
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_under_offered_points_rejected(client: AsyncClient, session, bob, alice_headers):
    item = await make_item(session, bob, points_required=20)
    response = await propose_points(client, alice_headers, item.id, 15)
    assert response.status_code == 400
    assert response.json()["error"] == "Insufficient offer"


@pytest.mark.asyncio
async def test_offer_above_balance_rejected(client: AsyncClient, session, bob, alice, alice_headers):
    item = await make_item(session, bob, points_required=60)
    response = await propose_points(client, alice_headers, item.id, 60)
    assert response.status_code == 400
    assert response.json()["error"] == "Insufficient points"


@pytest.mark.asyncio
async def test_zero_points_rejected(client: AsyncClient, session, bob, alice_headers):
    item = await make_item(session, bob)
    response = await propose_points(client, alice_headers, item.id, 0)
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_requested_item_must_be_listed(client: AsyncClient, session, bob, alice_headers):
    pending = await make_item(session, bob, status=ItemStatus.PENDING, approved=False)
    response = await propose_points(client, alice_headers, pending.id, 10)
    assert response.status_code == 400
    missing = await propose_points(client, alice_headers, 999, 10)
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_item_swap_type_is_enforced(client: AsyncClient, session, alice, bob, alice_headers):
    direct_only = await make_item(session, bob, swap_type="direct")
    response = await propose_points(client, alice_headers, direct_only.id, 10)
    assert response.status_code == 400
    assert response.json()["error"] == "Invalid swap type"


@pytest.mark.asyncio
async def test_direct_swap_offer_rules(client: AsyncClient, session, alice, bob, alice_headers):
    wanted = await make_item(session, bob)
    not_mine = await make_item(session, bob, title="Bob's other coat")

    no_offer = await client.post(
        "/api/v1/swaps", headers=alice_headers, json={"requested_item_id": wanted.id, "swap_type": "direct"}
    )
    assert no_offer.status_code == 400
    assert (await propose_direct(client, alice_headers, wanted.id, 999)).status_code == 404
    assert (await propose_direct(client, alice_headers, wanted.id, not_mine.id)).status_code == 403

    unlisted = await make_item(session, alice, status=ItemStatus.PENDING, approved=False)
    assert (await propose_direct(client, alice_headers, wanted.id, unlisted.id)).status_code == 400


@pytest.mark.asyncio
async def test_duplicate_pending_request_rejected(client: AsyncClient, session, bob, alice_headers):
    item = await make_item(session, bob)
    assert (await propose_points(client, alice_headers, item.id, 10)).status_code == 201
    again = await propose_points(client, alice_headers, item.id, 10)
    assert again.status_code == 400
    assert again.json()["error"] == "Duplicate request"


# --- Accept / reject ---


@pytest.mark.asyncio
async def test_accept_points_swap_transfers_points(
    client: AsyncClient, session, alice, bob, alice_headers, bob_headers, queued
):
    item = await make_item(session, bob, points_required=10)
    swap = (await propose_points(client, alice_headers, item.id, 12)).json()

    response = await client.put(
        f"/api/v1/swaps/{swap['id']}/accept", headers=bob_headers, json={"response_message": "Deal!"}
    )
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "accepted"
    assert data["response_message"] == "Deal!"
    assert data["requested_item"]["status"] == "swapped"

    assert (await client.get("/api/v1/auth/me", headers=alice_headers)).json()["points"] == 38
    assert (await client.get("/api/v1/auth/me", headers=bob_headers)).json()["points"] == 22
    assert queued["remove"] == [item.id]

    alice_inbox = (await client.get("/api/v1/notifications", headers=alice_headers)).json()["items"]
    assert alice_inbox[0]["type"] == "swap_accepted"


@pytest.mark.asyncio
async def test_accept_direct_swap_flips_both_items(client: AsyncClient, session, alice, bob, alice_headers, bob_headers):
    wanted = await make_item(session, bob)
    offered = await make_item(session, alice, title="Alice's boots")
    swap = (await propose_direct(client, alice_headers, wanted.id, offered.id)).json()

    response = await client.put(f"/api/v1/swaps/{swap['id']}/accept", headers=bob_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["requested_item"]["status"] == "swapped"
    assert data["offered_item"]["status"] == "swapped"
    # No points move on direct swaps
    assert (await client.get("/api/v1/auth/me", headers=alice_headers)).json()["points"] == 50


@pytest.mark.asyncio
async def test_second_accept_is_rejected(client: AsyncClient, session, bob, alice_headers, bob_headers):
    item = await make_item(session, bob)
    swap = (await propose_points(client, alice_headers, item.id, 10)).json()
    assert (await client.put(f"/api/v1/swaps/{swap['id']}/accept", headers=bob_headers)).status_code == 200
    second = await client.put(f"/api/v1/swaps/{swap['id']}/accept", headers=bob_headers)
    assert second.status_code == 400
    assert (await client.get("/api/v1/auth/me", headers=bob_headers)).json()["points"] == 20


@pytest.mark.asyncio
async def test_only_recipient_can_accept_or_reject(client: AsyncClient, session, bob, alice_headers):
    item = await make_item(session, bob)
    swap = (await propose_points(client, alice_headers, item.id, 10)).json()
    assert (await client.put(f"/api/v1/swaps/{swap['id']}/accept", headers=alice_headers)).status_code == 403
    assert (await client.put(f"/api/v1/swaps/{swap['id']}/reject", headers=alice_headers)).status_code == 403


@pytest.mark.asyncio
async def test_accept_revalidates_points_balance(client: AsyncClient, session, alice, bob, alice_headers, bob_headers):
    item = await make_item(session, bob, points_required=10)
    swap = (await propose_points(client, alice_headers, item.id, 40)).json()
    alice.points = 5
    await session.flush()
    response = await client.put(f"/api/v1/swaps/{swap['id']}/accept", headers=bob_headers)
    assert response.status_code == 400
    assert response.json()["error"] == "Insufficient points"


@pytest.mark.asyncio
async def test_accept_auto_rejects_competing_requests(client: AsyncClient, session, alice, bob, bob_headers):
    item = await make_item(session, bob)
    carol = await make_user(session, "carol@example.com", points=30)
    first = (await propose_points(client, auth_headers_for(alice), item.id, 10)).json()
    second = (await propose_points(client, auth_headers_for(carol), item.id, 15)).json()

    assert (await client.put(f"/api/v1/swaps/{first['id']}/accept", headers=bob_headers)).status_code == 200
    other = (await client.get(f"/api/v1/swaps/{second['id']}", headers=auth_headers_for(carol))).json()
    assert other["status"] == "rejected"
    carol_inbox = (await client.get("/api/v1/notifications", headers=auth_headers_for(carol))).json()["items"]
    assert carol_inbox[0]["type"] == "swap_rejected"


@pytest.mark.asyncio
async def test_reject_then_accept_is_400(client: AsyncClient, session, bob, alice_headers, bob_headers):
    item = await make_item(session, bob)
    swap = (await propose_points(client, alice_headers, item.id, 10)).json()
    rejected = await client.put(f"/api/v1/swaps/{swap['id']}/reject", headers=bob_headers)
    assert rejected.status_code == 200
    assert rejected.json()["status"] == "rejected"
    assert (await client.put(f"/api/v1/swaps/{swap['id']}/accept", headers=bob_headers)).status_code == 400
    assert (await client.put(f"/api/v1/swaps/{swap['id']}/reject", headers=bob_headers)).status_code == 400


# --- Complete / cancel ---


@pytest.mark.asyncio
async def test_complete_credits_stats_and_badges(
    client: AsyncClient, session, alice, bob, alice_headers, bob_headers, fake_redis
):
    wanted = await make_item(session, bob)
    offered = await make_item(session, alice, title="Alice's boots")
    swap = (await propose_direct(client, alice_headers, wanted.id, offered.id)).json()
    await client.put(f"/api/v1/swaps/{swap['id']}/accept", headers=bob_headers)

    fake_redis["cache"]["stats:platform"] = {"stale": True}
    response = await client.put(f"/api/v1/swaps/{swap['id']}/complete", headers=alice_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "completed"
    assert data["completed_at"] is not None
    assert data["eco_impact"] == 5.0
    assert "stats:platform" not in fake_redis["cache"]

    for headers in (alice_headers, bob_headers):
        me = (await client.get("/api/v1/auth/me", headers=headers)).json()
        assert me["stats"]["total_swaps"] == 1
        assert me["stats"]["eco_impact"] == 2.5
        assert me["stats"]["items_received"] == 1
        assert "First Swap" in me["badges"]

    bob_types = [n["type"] for n in (await client.get("/api/v1/notifications", headers=bob_headers)).json()["items"]]
    assert "swap_completed" in bob_types
    assert "badge_earned" in bob_types


@pytest.mark.asyncio
async def test_points_swap_completion_credits_only_initiator_received(
    client: AsyncClient, session, bob, alice_headers, bob_headers
):
    item = await make_item(session, bob)
    swap = (await propose_points(client, alice_headers, item.id, 10)).json()
    await client.put(f"/api/v1/swaps/{swap['id']}/accept", headers=bob_headers)
    await client.put(f"/api/v1/swaps/{swap['id']}/complete", headers=bob_headers)
    alice_stats = (await client.get("/api/v1/auth/me", headers=alice_headers)).json()["stats"]
    bob_stats = (await client.get("/api/v1/auth/me", headers=bob_headers)).json()["stats"]
    assert alice_stats["items_received"] == 1
    assert bob_stats["items_received"] == 0


@pytest.mark.asyncio
async def test_complete_requires_accepted(client: AsyncClient, session, bob, alice_headers):
    item = await make_item(session, bob)
    swap = (await propose_points(client, alice_headers, item.id, 10)).json()
    response = await client.put(f"/api/v1/swaps/{swap['id']}/complete", headers=alice_headers)
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_cancel_accepted_swap_restores_items_and_points(
    client: AsyncClient, session, alice, bob, alice_headers, bob_headers, queued
):
    item = await make_item(session, bob, points_required=10)
    swap = (await propose_points(client, alice_headers, item.id, 10)).json()
    await client.put(f"/api/v1/swaps/{swap['id']}/accept", headers=bob_headers)

    response = await client.put(
        f"/api/v1/swaps/{swap['id']}/cancel", headers=alice_headers, json={"reason": "Changed my mind"}
    )
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "cancelled"
    assert data["cancelled_by_id"] == alice.id
    assert data["cancellation_reason"] == "Changed my mind"
    assert data["requested_item"]["status"] == "available"
    assert (await client.get("/api/v1/auth/me", headers=alice_headers)).json()["points"] == 50
    assert (await client.get("/api/v1/auth/me", headers=bob_headers)).json()["points"] == 10
    # Back on the market, so back in the index
    assert queued["index"][-1]["id"] == item.id

    bob_inbox = (await client.get("/api/v1/notifications", headers=bob_headers)).json()["items"]
    assert bob_inbox[0]["type"] == "swap_cancelled"


@pytest.mark.asyncio
async def test_terminal_swaps_are_immutable(client: AsyncClient, session, bob, alice_headers, bob_headers):
    item = await make_item(session, bob)
    swap = (await propose_points(client, alice_headers, item.id, 10)).json()
    await client.put(f"/api/v1/swaps/{swap['id']}/cancel", headers=alice_headers)

    for action in ("accept", "reject", "complete", "cancel"):
        headers = bob_headers if action in ("accept", "reject") else alice_headers
        response = await client.put(f"/api/v1/swaps/{swap['id']}/{action}", headers=headers)
        assert response.status_code == 400, action
    message = await client.post(f"/api/v1/swaps/{swap['id']}/messages", headers=alice_headers, json={"message": "hi"})
    assert message.status_code == 400


# --- Reads, chat, ratings ---


@pytest.mark.asyncio
async def test_swap_visible_to_participants_only(client: AsyncClient, session, bob, alice_headers, admin_headers):
    item = await make_item(session, bob)
    swap = (await propose_points(client, alice_headers, item.id, 10)).json()
    stranger = await make_user(session, "stranger@example.com")
    assert (await client.get(f"/api/v1/swaps/{swap['id']}", headers=auth_headers_for(stranger))).status_code == 403
    assert (await client.get(f"/api/v1/swaps/{swap['id']}", headers=alice_headers)).status_code == 200
    assert (await client.get(f"/api/v1/swaps/{swap['id']}", headers=admin_headers)).status_code == 200
    assert (await client.get("/api/v1/swaps/999", headers=alice_headers)).status_code == 404


@pytest.mark.asyncio
async def test_list_and_pending(client: AsyncClient, session, bob, alice_headers, bob_headers):
    item = await make_item(session, bob)
    other = await make_item(session, bob, title="Bob's hat")
    first = (await propose_points(client, alice_headers, item.id, 10)).json()
    await propose_points(client, alice_headers, other.id, 10)
    await client.put(f"/api/v1/swaps/{first['id']}/reject", headers=bob_headers)

    mine = (await client.get("/api/v1/swaps", headers=alice_headers)).json()
    assert mine["pagination"]["total"] == 2
    rejected = (await client.get("/api/v1/swaps", headers=alice_headers, params={"status": "rejected"})).json()
    assert [s["id"] for s in rejected["items"]] == [first["id"]]

    pending = (await client.get("/api/v1/swaps/pending", headers=bob_headers)).json()
    assert len(pending) == 1
    assert (await client.get("/api/v1/swaps/pending", headers=alice_headers)).json() == []


@pytest.mark.asyncio
async def test_chat_messages_and_read_receipts(client: AsyncClient, session, alice, bob, alice_headers, bob_headers):
    item = await make_item(session, bob)
    swap = (await propose_points(client, alice_headers, item.id, 10)).json()

    sent = await client.post(
        f"/api/v1/swaps/{swap['id']}/messages", headers=alice_headers, json={"message": "Is it still available?"}
    )
    assert sent.status_code == 201
    assert sent.json()["sender_id"] == alice.id
    assert sent.json()["is_read"] is False

    bob_inbox = (await client.get("/api/v1/notifications", headers=bob_headers)).json()["items"]
    assert bob_inbox[0]["type"] == "new_message"

    # Alice reading her own messages changes nothing
    own = await client.put(f"/api/v1/swaps/{swap['id']}/messages/read", headers=alice_headers)
    assert own.json()["message"] == "0 messages marked as read"
    read = await client.put(f"/api/v1/swaps/{swap['id']}/messages/read", headers=bob_headers)
    assert read.json()["message"] == "1 messages marked as read"

    detail = (await client.get(f"/api/v1/swaps/{swap['id']}", headers=alice_headers)).json()
    assert [m["is_read"] for m in detail["messages"]] == [True]


@pytest.mark.asyncio
async def test_empty_message_is_400(client: AsyncClient, session, bob, alice_headers):
    item = await make_item(session, bob)
    swap = (await propose_points(client, alice_headers, item.id, 10)).json()
    response = await client.post(f"/api/v1/swaps/{swap['id']}/messages", headers=alice_headers, json={"message": ""})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_whitespace_only_message_is_400(client: AsyncClient, session, bob, alice_headers):
    item = await make_item(session, bob)
    swap = (await propose_points(client, alice_headers, item.id, 10)).json()
    blank = await client.post(f"/api/v1/swaps/{swap['id']}/messages", headers=alice_headers, json={"message": "   "})
    assert blank.status_code == 400
    padded = await client.post(
        f"/api/v1/swaps/{swap['id']}/messages", headers=alice_headers, json={"message": "  see you at noon  "}
    )
    assert padded.status_code == 201
    assert padded.json()["message"] == "see you at noon"


@pytest.mark.asyncio
async def test_rating_rules(client: AsyncClient, session, bob, alice_headers, bob_headers):
    item = await make_item(session, bob)
    swap = (await propose_points(client, alice_headers, item.id, 10)).json()
    early = await client.post(f"/api/v1/swaps/{swap['id']}/rating", headers=alice_headers, json={"rating": 5})
    assert early.status_code == 400

    await client.put(f"/api/v1/swaps/{swap['id']}/accept", headers=bob_headers)
    await client.put(f"/api/v1/swaps/{swap['id']}/complete", headers=bob_headers)

    out_of_range = await client.post(f"/api/v1/swaps/{swap['id']}/rating", headers=alice_headers, json={"rating": 6})
    assert out_of_range.status_code == 400
    rated = await client.post(
        f"/api/v1/swaps/{swap['id']}/rating", headers=alice_headers, json={"rating": 5, "comment": "Smooth swap"}
    )
    assert rated.status_code == 201
    assert rated.json()["rating"] == 5
    twice = await client.post(f"/api/v1/swaps/{swap['id']}/rating", headers=alice_headers, json={"rating": 4})
    assert twice.status_code == 400
    assert (await client.post(f"/api/v1/swaps/{swap['id']}/rating", headers=bob_headers, json={"rating": 4})).status_code == 201
