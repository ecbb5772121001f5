"""
Join requests, decisions, leaving and club roles
"""

import asyncio

import pytest

from app.database import database


async def membership_rows(user_id, club_id):
    return await database.fetch_all(
        "SELECT * FROM club_memberships WHERE user_id = :user_id AND club_id = :club_id",
        {"user_id": user_id, "club_id": club_id}
    )


@pytest.mark.asyncio
async def test_join_request_is_pending_and_notifies_leads(client, club, lead, make_user):
    student = await make_user(name="Meera")

    resp = await client.post(f"/api/memberships/join/{club['id']}", headers=student["headers"])

    assert resp.status_code == 201
    assert resp.json()["membership"]["status"] == "pending"
    assert resp.json()["membership"]["role"] == "member"

    inbox = await client.get("/api/notifications", headers=lead["headers"])
    requests = [n for n in inbox.json()["notifications"] if n["type"] == "membership_request"]
    assert len(requests) == 1
    assert "Meera" in requests[0]["message"]


@pytest.mark.asyncio
async def test_double_join_is_conflict_with_single_row(client, club, make_user):
    student = await make_user()

    first = await client.post(f"/api/memberships/join/{club['id']}", headers=student["headers"])
    second = await client.post(f"/api/memberships/join/{club['id']}", headers=student["headers"])

    assert first.status_code == 201
    assert second.status_code == 409
    assert len(await membership_rows(student["id"], club["id"])) == 1


@pytest.mark.asyncio
async def test_concurrent_join_creates_one_row(client, club, make_user):
    student = await make_user()

    responses = await asyncio.gather(*(
        client.post(f"/api/memberships/join/{club['id']}", headers=student["headers"])
        for _ in range(4)
    ))

    assert sorted(r.status_code for r in responses) == [201, 409, 409, 409]
    assert len(await membership_rows(student["id"], club["id"])) == 1


@pytest.mark.asyncio
async def test_join_pending_club_is_not_found(client, lead, make_user):
    resp = await client.post("/api/clubs", json={"name": "Quiz Club", "category": "Literary"}, headers=lead["headers"])
    student = await make_user()

    join = await client.post(f"/api/memberships/join/{resp.json()['club']['id']}", headers=student["headers"])

    assert join.status_code == 404


@pytest.mark.asyncio
async def test_approve_updates_count_and_notifies(client, club, lead, make_user):
    student = await make_user()
    join = await client.post(f"/api/memberships/join/{club['id']}", headers=student["headers"])
    membership_id = join.json()["membership"]["id"]

    resp = await client.put(f"/api/memberships/{membership_id}", json={"status": "approved"}, headers=lead["headers"])

    assert resp.status_code == 200
    assert resp.json()["membership"]["status"] == "approved"
    count = await database.fetch_val("SELECT member_count FROM clubs WHERE id = :id", {"id": club["id"]})
    assert count == 2

    inbox = await client.get("/api/notifications", headers=student["headers"])
    assert [n["type"] for n in inbox.json()["notifications"]] == ["membership_approved"]


@pytest.mark.asyncio
async def test_decide_requires_club_staff(client, club, make_user, join_club, admin):
    member = await make_user()
    await join_club(member, club["id"], admin)
    applicant = await make_user()
    join = await client.post(f"/api/memberships/join/{club['id']}", headers=applicant["headers"])

    resp = await client.put(
        f"/api/memberships/{join.json()['membership']['id']}",
        json={"status": "approved"},
        headers=member["headers"]
    )

    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_decide_twice_is_rejected(client, club, lead, make_user):
    student = await make_user()
    join = await client.post(f"/api/memberships/join/{club['id']}", headers=student["headers"])
    membership_id = join.json()["membership"]["id"]

    await client.put(f"/api/memberships/{membership_id}", json={"status": "approved"}, headers=lead["headers"])
    again = await client.put(f"/api/memberships/{membership_id}", json={"status": "rejected"}, headers=lead["headers"])

    assert again.status_code == 400


@pytest.mark.asyncio
async def test_invalid_decision_is_bad_request(client, club, lead, make_user):
    student = await make_user()
    join = await client.post(f"/api/memberships/join/{club['id']}", headers=student["headers"])

    resp = await client.put(
        f"/api/memberships/{join.json()['membership']['id']}",
        json={"status": "maybe"},
        headers=lead["headers"]
    )

    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_rejected_user_can_request_again_on_same_row(client, club, lead, make_user):
    student = await make_user()
    join = await client.post(f"/api/memberships/join/{club['id']}", headers=student["headers"])
    membership_id = join.json()["membership"]["id"]
    await client.put(f"/api/memberships/{membership_id}", json={"status": "rejected"}, headers=lead["headers"])

    again = await client.post(f"/api/memberships/join/{club['id']}", headers=student["headers"])

    assert again.status_code == 201
    assert again.json()["membership"]["id"] == membership_id
    assert again.json()["membership"]["status"] == "pending"


@pytest.mark.asyncio
async def test_leave_deletes_row_and_is_idempotent(client, club, admin, make_user, join_club):
    member = await make_user()
    await join_club(member, club["id"], admin)

    first = await client.delete(f"/api/memberships/leave/{club['id']}", headers=member["headers"])
    second = await client.delete(f"/api/memberships/leave/{club['id']}", headers=member["headers"])

    assert first.status_code == 200
    assert second.status_code == 200
    assert await membership_rows(member["id"], club["id"]) == []
    count = await database.fetch_val("SELECT member_count FROM clubs WHERE id = :id", {"id": club["id"]})
    assert count == 1


@pytest.mark.asyncio
async def test_assign_role_by_lead_only(client, club, lead, make_user, join_club):
    first = await make_user()
    second = await make_user()
    first_membership = await join_club(first, club["id"], lead)
    second_membership = await join_club(second, club["id"], lead)

    promoted = await client.put(
        f"/api/memberships/{first_membership['id']}/role",
        json={"role": "co_lead"},
        headers=lead["headers"]
    )
    assert promoted.status_code == 200
    assert promoted.json()["membership"]["role"] == "co_lead"

    # co-leads review requests but cannot hand out roles
    denied = await client.put(
        f"/api/memberships/{second_membership['id']}/role",
        json={"role": "co_lead"},
        headers=first["headers"]
    )
    assert denied.status_code == 403


@pytest.mark.asyncio
async def test_co_lead_can_review_requests(client, club, lead, make_user, join_club):
    co_lead = await make_user()
    membership = await join_club(co_lead, club["id"], lead)
    await client.put(f"/api/memberships/{membership['id']}/role", json={"role": "co_lead"}, headers=lead["headers"])
    applicant = await make_user()
    await client.post(f"/api/memberships/join/{club['id']}", headers=applicant["headers"])

    pending = await client.get(f"/api/memberships/pending/{club['id']}", headers=co_lead["headers"])

    assert pending.status_code == 200
    assert [p["user_id"] for p in pending.json()] == [applicant["id"]]


@pytest.mark.asyncio
async def test_my_memberships_and_member_list(client, club, lead, make_user, join_club):
    member = await make_user(name="Zara")
    await join_club(member, club["id"], lead)

    mine = await client.get("/api/memberships/my", headers=member["headers"])
    members = await client.get(f"/api/clubs/{club['id']}/members")

    assert [m["club_name"] for m in mine.json()] == ["Robotics Club"]
    assert [(m["name"], m["role"]) for m in members.json()] == [("Lead", "lead"), ("Zara", "member")]
