"""
Notification fan-out, the inbox, reminders and broadcasts
"""

import pytest

from app.database import database
from app.services import notification_service as notification_module
from app.services.notification_service import notification_service


async def inbox_types(user_id):
    rows = await database.fetch_all(
        "SELECT type FROM notifications WHERE user_id = :user_id ORDER BY created_at",
        {"user_id": user_id}
    )
    return [r["type"] for r in rows]


@pytest.mark.asyncio
async def test_fan_out_deduplicates_recipients(make_user):
    first = await make_user()
    second = await make_user()

    written = await notification_service.fan_out(
        [first["id"], second["id"], first["id"]], "club_broadcast", "Hello"
    )

    assert written == 2
    assert await inbox_types(first["id"]) == ["club_broadcast"]
    assert await inbox_types(second["id"]) == ["club_broadcast"]


@pytest.mark.asyncio
async def test_fan_out_continues_past_a_failed_write(make_user, monkeypatch):
    first = await make_user()
    second = await make_user()
    real_execute = notification_module.database.execute

    async def flaky_execute(query, values=None):
        if values and values.get("user_id") == first["id"]:
            raise RuntimeError("connection reset")
        return await real_execute(query, values)

    monkeypatch.setattr(notification_module.database, "execute", flaky_execute)

    written = await notification_service.fan_out([first["id"], second["id"]], "event_reminder", "Soon")

    assert written == 1
    assert await inbox_types(first["id"]) == []
    assert await inbox_types(second["id"]) == ["event_reminder"]


@pytest.mark.asyncio
async def test_inbox_lists_newest_first_with_unread_count(client, make_user):
    user = await make_user()
    for title in ("one", "two", "three"):
        await notification_service.notify(user["id"], "welcome", title)

    resp = await client.get("/api/notifications", headers=user["headers"])

    assert resp.status_code == 200
    body = resp.json()
    assert [n["title"] for n in body["notifications"]] == ["three", "two", "one"]
    assert body["unread_count"] == 3


@pytest.mark.asyncio
async def test_mark_read_is_scoped_to_owner(client, make_user):
    owner = await make_user()
    other = await make_user()
    await notification_service.notify(owner["id"], "welcome", "Hi")
    inbox = await client.get("/api/notifications", headers=owner["headers"])
    notification_id = inbox.json()["notifications"][0]["id"]

    denied = await client.put(f"/api/notifications/{notification_id}/read", headers=other["headers"])
    allowed = await client.put(f"/api/notifications/{notification_id}/read", headers=owner["headers"])

    assert denied.status_code == 404
    assert allowed.status_code == 200
    after = await client.get("/api/notifications", headers=owner["headers"])
    assert after.json()["unread_count"] == 0
    assert after.json()["notifications"][0]["is_read"] is True


@pytest.mark.asyncio
async def test_mark_all_read_and_unread_filter(client, make_user):
    user = await make_user()
    other = await make_user()
    for target in (user, user, other):
        await notification_service.notify(target["id"], "welcome", "Hi")

    resp = await client.put("/api/notifications/read-all", headers=user["headers"])

    assert resp.status_code == 200
    unread = await client.get("/api/notifications", params={"unread_only": True}, headers=user["headers"])
    assert unread.json()["notifications"] == []
    untouched = await client.get("/api/notifications", headers=other["headers"])
    assert untouched.json()["unread_count"] == 1


@pytest.mark.asyncio
async def test_reminder_reaches_registered_users_only(client, club, lead, make_user, create_event):
    event = await create_event(club["id"], lead)
    registered = await make_user()
    cancelled = await make_user()
    for user in (registered, cancelled):
        await client.post(f"/api/events/{event['id']}/register", headers=user["headers"])
    await client.delete(f"/api/events/{event['id']}/register", headers=cancelled["headers"])

    resp = await client.post("/api/email/reminder", json={"event_id": event["id"]}, headers=lead["headers"])

    assert resp.status_code == 200
    assert resp.json()["sent"] == 1
    assert "event_reminder" in await inbox_types(registered["id"])
    assert "event_reminder" not in await inbox_types(cancelled["id"])


@pytest.mark.asyncio
async def test_broadcast_skips_sender_and_requires_staff(client, club, lead, make_user, join_club):
    members = [await make_user() for _ in range(2)]
    for member in members:
        await join_club(member, club["id"], lead)
    payload = {"club_id": club["id"], "title": "Meetup", "message": "Friday 5pm"}

    denied = await client.post("/api/email/broadcast", json=payload, headers=members[0]["headers"])
    resp = await client.post("/api/email/broadcast", json=payload, headers=lead["headers"])

    assert denied.status_code == 403
    assert resp.json()["sent"] == 2
    assert "club_broadcast" not in await inbox_types(lead["id"])
