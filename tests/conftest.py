import itertools
import os
import tempfile
import uuid
from datetime import date, timedelta
from pathlib import Path

# Point the app at a throwaway SQLite file before anything imports app.config
_TEST_DB_DIR = tempfile.mkdtemp(prefix="campushub-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{Path(_TEST_DB_DIR) / 'campushub_test.db'}"
os.environ["JWT_SECRET_KEY"] = "test-secret-key"
os.environ["SMTP_USER"] = ""
os.environ["SMTP_PASSWORD"] = ""
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

import app.models  # noqa: F401
from app.auth import hash_password, create_user_token
from app.database import Base, database, engine, utcnow
from app.main import app
from app.services.email_service import email_service
from app.services.otp_service import otp_service, InMemoryTTLStore

PASSWORD = "secret123"
# bcrypt is slow; hash once for every seeded user
PASSWORD_HASH = hash_password(PASSWORD)


class Outbox(list):
    """Captured emails; ``accept`` decides what the fake SMTP server answers"""
    accept = False


@pytest.fixture(scope="session", autouse=True)
def schema():
    Base.metadata.create_all(engine)
    yield
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest_asyncio.fixture(autouse=True)
async def db(schema):
    await database.connect()
    for table in reversed(Base.metadata.sorted_tables):
        await database.execute(f"DELETE FROM {table.name}")
    try:
        yield database
    finally:
        await database.disconnect()


@pytest.fixture(autouse=True)
def outbox(monkeypatch):
    sent = Outbox()

    async def fake_send_email(to, subject, html_body, text_body=None):
        sent.append({"to": to, "subject": subject, "html": html_body, "text": text_body})
        return sent.accept

    monkeypatch.setattr(email_service, "send_email", fake_send_email)
    return sent


@pytest.fixture(autouse=True)
def fresh_otp_store(monkeypatch):
    monkeypatch.setattr(otp_service, "store", InMemoryTTLStore())


@pytest_asyncio.fixture
async def client():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client


@pytest.fixture
def make_user():
    counter = itertools.count(1)

    async def _make(name=None, role="student", email=None, department="CSE", year="2"):
        n = next(counter)
        user = {
            "id": str(uuid.uuid4()),
            "email": email or f"user{n}@campus.edu",
            "name": name or f"User {n}",
            "role": role,
            "department": department,
            "year": year,
        }
        await database.execute(
            """
            INSERT INTO users (id, email, password_hash, name, department, year, role, created_at)
            VALUES (:id, :email, :password_hash, :name, :department, :year, :role, :created_at)
            """,
            {**user, "password_hash": PASSWORD_HASH, "created_at": utcnow()}
        )
        user["headers"] = {"Authorization": f"Bearer {create_user_token(user)}"}
        return user

    return _make


@pytest_asyncio.fixture
async def admin(make_user):
    return await make_user(name="Admin", role="admin", email="admin@campus.edu")


@pytest_asyncio.fixture
async def lead(make_user):
    return await make_user(name="Lead", email="lead@campus.edu")


@pytest_asyncio.fixture
async def club(client, admin, lead):
    """Active club created by ``lead`` and approved by ``admin``"""
    resp = await client.post(
        "/api/clubs",
        json={"name": "Robotics Club", "category": "Technical", "description": "Build and race robots"},
        headers=lead["headers"]
    )
    assert resp.status_code == 201, resp.text
    club_id = resp.json()["club"]["id"]

    resp = await client.put(f"/api/clubs/{club_id}/review", json={"status": "active"}, headers=admin["headers"])
    assert resp.status_code == 200, resp.text
    return resp.json()["club"]


@pytest.fixture
def join_club(client):
    """Join request by ``user`` approved by ``approver``"""
    async def _join(user, club_id, approver):
        resp = await client.post(f"/api/memberships/join/{club_id}", headers=user["headers"])
        assert resp.status_code == 201, resp.text
        membership_id = resp.json()["membership"]["id"]
        resp = await client.put(
            f"/api/memberships/{membership_id}",
            json={"status": "approved"},
            headers=approver["headers"]
        )
        assert resp.status_code == 200, resp.text
        return resp.json()["membership"]

    return _join


@pytest.fixture
def create_event(client):
    async def _create(club_id, actor, **overrides):
        payload = {
            "club_id": club_id,
            "title": "Intro to ROS",
            "description": "Hands-on robotics workshop",
            "event_date": (date.today() + timedelta(days=7)).isoformat(),
            "start_time": "10:00",
            "end_time": "12:00",
            "venue": "Lab 3",
            "max_participants": 10,
        }
        payload.update(overrides)
        resp = await client.post("/api/events", json=payload, headers=actor["headers"])
        assert resp.status_code == 201, resp.text
        return resp.json()["event"]

    return _create


@pytest.fixture
def attend(client):
    """Register ``user`` for the event and check them in as ``staff``"""
    async def _attend(user, event_id, staff):
        resp = await client.post(f"/api/events/{event_id}/register", headers=user["headers"])
        assert resp.status_code == 201, resp.text
        resp = await client.post(f"/api/checkin/{event_id}", json={"user_id": user["id"]}, headers=staff["headers"])
        assert resp.status_code == 200, resp.text

    return _attend
