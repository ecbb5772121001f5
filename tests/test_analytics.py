"""
Scores, leaderboard, per-user analytics, insights and club suggestions
"""

import pytest

from app.services.analytics_service import activity_score, leaderboard_score


def test_activity_score_weights_and_cap():
    assert activity_score(clubs=1, attended=2, certificates=1, feedback=1) == 10 + 16 + 15 + 5
    assert activity_score(clubs=5, attended=5, certificates=5, feedback=5) == 100


def test_leaderboard_score_weights():
    assert leaderboard_score(attended=3, certificates=2, clubs=1) == 30 + 30 + 5
    assert leaderboard_score(0, 0, 0) == 0


@pytest.fixture
def scenario(client, club, lead, make_user, create_event, attend):
    """One attendee with a certificate and one registrant who never showed up"""
    async def _build():
        event = await create_event(club["id"], lead)
        star = await make_user(name="Star")
        idle = await make_user(name="Idle", department="ECE")
        await attend(star, event["id"], lead)
        await client.post(f"/api/events/{event['id']}/register", headers=idle["headers"])
        await client.post(
            "/api/certificates/issue",
            json={"event_id": event["id"], "user_id": star["id"]},
            headers=lead["headers"]
        )
        return event, star, idle

    return _build


@pytest.mark.asyncio
async def test_leaderboard_orders_by_score(client, scenario):
    await scenario()

    resp = await client.get("/api/analytics/leaderboard")

    assert resp.status_code == 200
    board = resp.json()["leaderboard"]
    assert [(e["name"], e["score"]) for e in board[:2]] == [("Star", 25), ("Lead", 5)]
    assert board[0]["events_attended"] == 1
    assert board[0]["certificates"] == 1


@pytest.mark.asyncio
async def test_user_analytics_for_self(client, scenario):
    _, star, _ = await scenario()

    resp = await client.get("/api/analytics/user/me", headers=star["headers"])

    assert resp.status_code == 200
    body = resp.json()
    assert body["events_registered"] == 1
    assert body["events_attended"] == 1
    assert body["attendance_rate"] == "100%"
    assert body["certificates_earned"] == 1
    assert body["activity_score"] == 23


@pytest.mark.asyncio
async def test_user_analytics_for_others_is_admin_only(client, admin, scenario):
    _, star, idle = await scenario()

    denied = await client.get(f"/api/analytics/user/{star['id']}", headers=idle["headers"])
    allowed = await client.get(f"/api/analytics/user/{idle['id']}", headers=admin["headers"])

    assert denied.status_code == 403
    assert allowed.status_code == 200
    assert allowed.json()["attendance_rate"] == "0%"


@pytest.mark.asyncio
async def test_event_insights(client, scenario):
    event, star, _ = await scenario()

    resp = await client.get(f"/api/analytics/event-insights/{event['id']}", headers=star["headers"])

    assert resp.status_code == 200
    body = resp.json()
    assert body["stats"]["total_registered"] == 2
    assert body["stats"]["attended"] == 1
    assert body["stats"]["fill_rate"] == "20%"
    assert body["department_breakdown"] == {"CSE": 1, "ECE": 1}
    assert "📊 Attendance rate: 50%" in body["insights"]


@pytest.mark.asyncio
async def test_overview_and_public_stats(client, scenario, admin):
    await scenario()

    overview = await client.get("/api/analytics/overview", headers=admin["headers"])
    stats = await client.get("/api/stats")

    assert overview.status_code == 200
    assert overview.json()["totals"]["certificates"] == 1
    assert len(overview.json()["monthly_trend"]) == 6
    assert overview.json()["monthly_trend"][-1]["registrations"] == 2
    assert stats.json() == {"clubs": 1, "events": 1, "users": 4, "certificates": 1}


@pytest.mark.asyncio
async def test_suggest_clubs_excludes_joined_and_ranks_interests(client, club, admin, lead, make_user):
    for name, category in (("Music Circle", "Cultural"), ("Coding Club", "Technical")):
        await client.post("/api/clubs", json={"name": name, "category": category}, headers=admin["headers"])
    student = await make_user()

    for_student = await client.post(
        "/api/analytics/suggest-clubs", json={"interests": ["music"]}, headers=student["headers"]
    )
    for_lead = await client.post("/api/analytics/suggest-clubs", json={}, headers=lead["headers"])

    assert for_student.json()["total_available"] == 3
    assert for_student.json()["recommendations"][0]["name"] == "Music Circle"
    assert "Robotics Club" not in [c["name"] for c in for_lead.json()["recommendations"]]


@pytest.mark.asyncio
async def test_generate_description_is_for_club_leads_and_admins(client, admin, make_user):
    student = await make_user()
    club_lead = await make_user(role="club_lead")
    payload = {"type": "event", "name": "Drone Day", "club_name": "Robotics Club", "category": "Technical"}

    denied = await client.post("/api/analytics/generate-description", json=payload, headers=student["headers"])
    for_lead = await client.post("/api/analytics/generate-description", json=payload, headers=club_lead["headers"])
    for_admin = await client.post(
        "/api/analytics/generate-description",
        json={"type": "club", "name": "Chess Society"},
        headers=admin["headers"]
    )

    assert denied.status_code == 403
    assert denied.json()["detail"] == "Club lead or admin access required."
    assert for_lead.status_code == 200
    assert "Drone Day" in for_lead.json()["description"]
    assert "Chess Society" in for_admin.json()["description"]


@pytest.mark.asyncio
async def test_generate_description_requires_a_name(client, admin):
    resp = await client.post(
        "/api/analytics/generate-description", json={"name": "   "}, headers=admin["headers"]
    )

    assert resp.status_code == 400
