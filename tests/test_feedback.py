import pytest

from app.database import database


@pytest.mark.asyncio
async def test_feedback_requires_registration(client, club, lead, make_user, create_event):
    event = await create_event(club["id"], lead)
    stranger = await make_user()

    resp = await client.post(f"/api/feedback/{event['id']}", json={"rating": 5}, headers=stranger["headers"])

    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_rating_out_of_range_is_bad_request(client, club, lead, make_user, create_event):
    event = await create_event(club["id"], lead)
    student = await make_user()
    await client.post(f"/api/events/{event['id']}/register", headers=student["headers"])

    resp = await client.post(f"/api/feedback/{event['id']}", json={"rating": 6}, headers=student["headers"])

    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_second_submission_replaces_first(client, club, lead, make_user, create_event):
    event = await create_event(club["id"], lead)
    student = await make_user()
    await client.post(f"/api/events/{event['id']}/register", headers=student["headers"])

    first = await client.post(f"/api/feedback/{event['id']}", json={"rating": 2}, headers=student["headers"])
    second = await client.post(
        f"/api/feedback/{event['id']}",
        json={"rating": 4, "comment": "Better than I said"},
        headers=student["headers"]
    )

    assert first.status_code == 201
    assert second.status_code == 200
    assert second.json()["feedback"]["id"] == first.json()["feedback"]["id"]
    rows = await database.fetch_all("SELECT rating FROM feedback WHERE event_id = :id", {"id": event["id"]})
    assert [r["rating"] for r in rows] == [4]


@pytest.mark.asyncio
async def test_summary_and_club_rating(client, club, lead, make_user, create_event):
    event = await create_event(club["id"], lead)
    ratings = [5, 4, 4]
    for rating in ratings:
        student = await make_user()
        await client.post(f"/api/events/{event['id']}/register", headers=student["headers"])
        await client.post(f"/api/feedback/{event['id']}", json={"rating": rating}, headers=student["headers"])

    resp = await client.get(f"/api/feedback/{event['id']}")

    summary = resp.json()["summary"]
    assert summary["total_reviews"] == 3
    assert summary["average_rating"] == 4.3
    assert summary["distribution"] == {"1": 0, "2": 0, "3": 0, "4": 2, "5": 1}

    club_rating = await database.fetch_val("SELECT rating FROM clubs WHERE id = :id", {"id": club["id"]})
    assert club_rating == 4.3

    detail = await client.get(f"/api/events/{event['id']}")
    assert detail.json()["feedback_summary"] == {"average_rating": 4.3, "total_reviews": 3}
