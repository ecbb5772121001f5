"""
Club creation, admin review and browsing
"""

import pytest

from app.database import database


@pytest.mark.asyncio
async def test_student_club_request_is_pending_with_creator_as_lead(client, admin, make_user):
    student = await make_user(name="Ravi")

    resp = await client.post(
        "/api/clubs",
        json={"name": "Drama Society", "category": "Cultural"},
        headers=student["headers"]
    )

    assert resp.status_code == 201
    club = resp.json()["club"]
    assert club["status"] == "pending"
    assert club["member_count"] == 1

    membership = await database.fetch_one(
        "SELECT role, status FROM club_memberships WHERE club_id = :club_id AND user_id = :user_id",
        {"club_id": club["id"], "user_id": student["id"]}
    )
    assert dict(membership) == {"role": "lead", "status": "approved"}

    inbox = await client.get("/api/notifications", headers=admin["headers"])
    assert [n["type"] for n in inbox.json()["notifications"]] == ["club_request"]


@pytest.mark.asyncio
async def test_admin_creates_active_club(client, admin):
    resp = await client.post(
        "/api/clubs",
        json={"name": "Coding Club", "category": "Technical"},
        headers=admin["headers"]
    )

    assert resp.status_code == 201
    assert resp.json()["club"]["status"] == "active"


@pytest.mark.asyncio
async def test_review_activates_and_promotes_creator(client, club, lead):
    assert club["status"] == "active"

    role = await database.fetch_val("SELECT role FROM users WHERE id = :id", {"id": lead["id"]})
    assert role == "club_lead"

    inbox = await client.get("/api/notifications", headers=lead["headers"])
    assert "club_approved" in [n["type"] for n in inbox.json()["notifications"]]


@pytest.mark.asyncio
async def test_review_requires_admin(client, club, lead):
    resp = await client.put(f"/api/clubs/{club['id']}/review", json={"status": "inactive"}, headers=lead["headers"])

    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_review_unknown_club_is_not_found(client, admin):
    resp = await client.put(
        "/api/clubs/5b0d7d1e-8f0a-4d2b-9a8e-1c2d3e4f5a6b/review",
        json={"status": "active"},
        headers=admin["headers"]
    )

    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_list_shows_only_active_clubs_and_filters(client, club, admin, lead):
    await client.post("/api/clubs", json={"name": "Pending Club", "category": "Technical"}, headers=lead["headers"])
    await client.post(
        "/api/clubs",
        json={"name": "Music Circle", "category": "Cultural", "description": "Jam sessions"},
        headers=admin["headers"]
    )

    everything = await client.get("/api/clubs")
    cultural = await client.get("/api/clubs", params={"category": "Cultural"})
    search = await client.get("/api/clubs", params={"search": "ROBOT"})

    assert sorted(c["name"] for c in everything.json()) == ["Music Circle", "Robotics Club"]
    assert [c["name"] for c in cultural.json()] == ["Music Circle"]
    assert [c["name"] for c in search.json()] == ["Robotics Club"]


@pytest.mark.asyncio
async def test_club_detail_includes_members_events_and_caller_membership(client, club, lead, create_event):
    await create_event(club["id"], lead)

    anonymous = await client.get(f"/api/clubs/{club['id']}")
    signed_in = await client.get(f"/api/clubs/{club['id']}", headers=lead["headers"])

    assert anonymous.status_code == 200
    body = anonymous.json()
    assert [m["name"] for m in body["members"]] == ["Lead"]
    assert [e["title"] for e in body["upcoming_events"]] == ["Intro to ROS"]
    assert body["user_membership"] is None
    assert signed_in.json()["user_membership"]["role"] == "lead"


@pytest.mark.asyncio
async def test_update_club_is_lead_or_admin_only(client, club, admin, make_user, join_club):
    member = await make_user()
    await join_club(member, club["id"], admin)

    denied = await client.put(f"/api/clubs/{club['id']}", json={"name": "Hijacked"}, headers=member["headers"])
    allowed = await client.put(
        f"/api/clubs/{club['id']}",
        json={"description": "Robots and more"},
        headers=admin["headers"]
    )

    assert denied.status_code == 403
    assert allowed.status_code == 200
    assert allowed.json()["club"]["name"] == "Robotics Club"
    assert allowed.json()["club"]["description"] == "Robots and more"


@pytest.mark.asyncio
async def test_unknown_club_is_not_found(client):
    resp = await client.get("/api/clubs/5b0d7d1e-8f0a-4d2b-9a8e-1c2d3e4f5a6b")

    assert resp.status_code == 404
    assert resp.json()["detail"] == "Club not found."
