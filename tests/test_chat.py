import pytest


@pytest.mark.asyncio
async def test_non_member_cannot_read_or_post(client, club, make_user):
    outsider = await make_user()

    read = await client.get(f"/api/chat/{club['id']}", headers=outsider["headers"])
    post = await client.post(f"/api/chat/{club['id']}", json={"message": "hi"}, headers=outsider["headers"])

    assert read.status_code == 403
    assert post.status_code == 403


@pytest.mark.asyncio
async def test_pending_member_is_not_in_chat(client, club, make_user):
    applicant = await make_user()
    await client.post(f"/api/memberships/join/{club['id']}", headers=applicant["headers"])

    resp = await client.get(f"/api/chat/{club['id']}", headers=applicant["headers"])

    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_blank_message_is_rejected(client, club, lead):
    resp = await client.post(f"/api/chat/{club['id']}", json={"message": "   "}, headers=lead["headers"])

    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_messages_come_back_oldest_first(client, club, lead, make_user, join_club):
    member = await make_user(name="Nisha")
    await join_club(member, club["id"], lead)

    for sender, text in ((lead, "Welcome!"), (member, "Thanks"), (lead, "Meeting at 5")):
        resp = await client.post(f"/api/chat/{club['id']}", json={"message": text}, headers=sender["headers"])
        assert resp.status_code == 201

    history = await client.get(f"/api/chat/{club['id']}", headers=member["headers"])
    latest_two = await client.get(f"/api/chat/{club['id']}", params={"limit": 2}, headers=member["headers"])

    assert [m["message"] for m in history.json()] == ["Welcome!", "Thanks", "Meeting at 5"]
    assert history.json()[1]["sender_name"] == "Nisha"
    assert [m["message"] for m in latest_two.json()] == ["Thanks", "Meeting at 5"]


@pytest.mark.asyncio
async def test_admin_can_read_any_club_chat(client, club, admin):
    resp = await client.get(f"/api/chat/{club['id']}", headers=admin["headers"])

    assert resp.status_code == 200
    assert resp.json() == []


@pytest.mark.asyncio
async def test_channels_show_last_message(client, club, lead):
    await client.post(f"/api/chat/{club['id']}", json={"message": "First"}, headers=lead["headers"])
    await client.post(f"/api/chat/{club['id']}", json={"message": "Latest"}, headers=lead["headers"])

    resp = await client.get("/api/chat/channels", headers=lead["headers"])

    assert resp.status_code == 200
    (channel,) = resp.json()
    assert channel["name"] == "Robotics Club"
    assert channel["last_message"]["text"] == "Latest"
    assert channel["last_message"]["sender"] == "Lead"
