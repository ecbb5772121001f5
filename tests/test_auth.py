"""
Registration, login, profile and the identity gate
"""

import pytest

from app.auth import create_access_token, has_role, verify_password
from app.auth import dependencies
from app.database import database


async def register(client, email="asha@campus.edu", password="secret123", name="Asha Rao"):
    return await client.post(
        "/api/auth/register",
        json={"email": email, "password": password, "name": name, "department": "CSE", "year": "3"}
    )


@pytest.mark.asyncio
async def test_register_creates_student_and_returns_token(client):
    resp = await register(client)

    assert resp.status_code == 201
    body = resp.json()
    assert body["token"]
    assert body["user"]["email"] == "asha@campus.edu"
    assert body["user"]["role"] == "student"
    assert "password_hash" not in body["user"]

    stored = await database.fetch_one("SELECT password_hash FROM users WHERE email = 'asha@campus.edu'")
    assert stored["password_hash"] != "secret123"
    assert verify_password("secret123", stored["password_hash"])


@pytest.mark.asyncio
async def test_register_writes_welcome_notification(client):
    resp = await register(client)
    headers = {"Authorization": f"Bearer {resp.json()['token']}"}

    resp = await client.get("/api/notifications", headers=headers)

    assert resp.status_code == 200
    assert [n["type"] for n in resp.json()["notifications"]] == ["welcome"]


@pytest.mark.asyncio
async def test_register_duplicate_email_is_conflict(client):
    await register(client)
    resp = await register(client, email="ASHA@campus.edu")

    assert resp.status_code == 409
    count = await database.fetch_val("SELECT COUNT(*) FROM users")
    assert count == 1


@pytest.mark.asyncio
async def test_register_short_password_rejected(client):
    resp = await register(client, password="abc")

    assert resp.status_code == 400
    assert "Password" in resp.json()["detail"]


@pytest.mark.asyncio
async def test_register_invalid_email_is_bad_request(client):
    resp = await register(client, email="not-an-email")

    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_login_success_and_failure(client):
    await register(client)

    ok = await client.post("/api/auth/login", json={"email": "asha@campus.edu", "password": "secret123"})
    wrong = await client.post("/api/auth/login", json={"email": "asha@campus.edu", "password": "nope-nope"})
    unknown = await client.post("/api/auth/login", json={"email": "ghost@campus.edu", "password": "secret123"})

    assert ok.status_code == 200
    assert ok.json()["user"]["admin_club_id"] is None
    assert wrong.status_code == 401
    assert unknown.status_code == 401
    assert wrong.json()["detail"] == unknown.json()["detail"]


@pytest.mark.asyncio
async def test_me_requires_token(client):
    resp = await client.get("/api/auth/me")
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_me_rejects_garbage_token(client):
    resp = await client.get("/api/auth/me", headers={"Authorization": "Bearer not.a.token"})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_me_rejects_token_for_deleted_user(client):
    token = create_access_token({"sub": "7d1c0a3e-5e8b-4f57-9a53-0d5cbd4f3f11", "email": "x@y.z", "role": "admin"})

    resp = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})

    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_me_reports_clubs_and_counters(client, club, lead):
    resp = await client.get("/api/auth/me", headers=lead["headers"])

    assert resp.status_code == 200
    body = resp.json()
    assert body["role"] == "club_lead"
    assert body["admin_club_id"] == club["id"]
    assert [c["name"] for c in body["clubs"]] == ["Robotics Club"]
    assert body["events_registered"] == 0
    assert body["certificates"] == 0


@pytest.mark.asyncio
async def test_update_profile_only_touches_given_fields(client, make_user):
    user = await make_user(name="Old Name", department="ECE")

    resp = await client.put("/api/auth/profile", json={"name": "New Name"}, headers=user["headers"])

    assert resp.status_code == 200
    assert resp.json()["user"]["name"] == "New Name"
    assert resp.json()["user"]["department"] == "ECE"


@pytest.mark.asyncio
async def test_clubs_list_is_public_and_active_only(client, club, lead):
    await client.post("/api/clubs", json={"name": "Chess Club", "category": "Games"}, headers=lead["headers"])

    resp = await client.get("/api/auth/clubs-list")

    assert resp.status_code == 200
    assert [c["name"] for c in resp.json()] == ["Robotics Club"]


def test_has_role():
    assert has_role({"role": "admin"}, ("admin",))
    assert has_role({"role": "club_lead"}, ("admin", "club_lead"))
    assert not has_role({"role": "student"}, ("admin", "club_lead"))
    assert not has_role(None, ("admin",))


@pytest.mark.asyncio
async def test_optional_auth_treats_lookup_failure_as_anonymous(client, club, lead, monkeypatch):
    class UnavailableUsers:
        async def fetch_one(self, query, values=None):
            raise ConnectionError("users lookup unavailable")

    monkeypatch.setattr(dependencies, "database", UnavailableUsers())

    resp = await client.get(f"/api/clubs/{club['id']}", headers=lead["headers"])

    assert resp.status_code == 200
    assert resp.json()["user_membership"] is None


@pytest.mark.asyncio
async def test_optional_auth_ignores_bad_token(client, club):
    resp = await client.get(f"/api/clubs/{club['id']}", headers={"Authorization": "Bearer not.a.token"})

    assert resp.status_code == 200
    assert resp.json()["user_membership"] is None
