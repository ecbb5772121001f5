import csv
import io

import pytest

from app.services.export_service import rows_to_csv, safe_filename, MEMBER_COLUMNS


def test_rows_to_csv_blanks_missing_values():
    content = rows_to_csv([{"sr_no": 1, "name": "Asha", "email": None, "extra": "x"}], MEMBER_COLUMNS)

    rows = list(csv.DictReader(io.StringIO(content)))
    assert rows[0]["name"] == "Asha"
    assert rows[0]["email"] == ""
    assert "extra" not in rows[0]


def test_safe_filename():
    assert safe_filename("Intro to ROS!") == "Intro_to_ROS"
    assert safe_filename("") == "export"


@pytest.mark.asyncio
async def test_attendee_export_json_and_csv(client, club, lead, make_user, create_event, attend):
    event = await create_event(club["id"], lead)
    student = await make_user(name="Asha")
    await attend(student, event["id"], lead)

    as_json = await client.get(f"/api/export/event/{event['id']}/attendees", headers=lead["headers"])
    as_csv = await client.get(
        f"/api/export/event/{event['id']}/attendees", params={"format": "csv"}, headers=lead["headers"]
    )

    assert as_json.json()["total"] == 1
    assert as_json.json()["attendees"][0]["status"] == "attended"
    assert as_csv.status_code == 200
    assert as_csv.headers["content-type"].startswith("text/csv")
    assert "Intro_to_ROS_attendees.csv" in as_csv.headers["content-disposition"]
    rows = list(csv.DictReader(io.StringIO(as_csv.text)))
    assert [(r["sr_no"], r["name"], r["status"]) for r in rows] == [("1", "Asha", "attended")]


@pytest.mark.asyncio
async def test_member_export_requires_staff(client, club, lead, make_user, join_club):
    member = await make_user()
    await join_club(member, club["id"], lead)

    denied = await client.get(f"/api/export/club/{club['id']}/members", headers=member["headers"])
    allowed = await client.get(
        f"/api/export/club/{club['id']}/members", params={"format": "csv"}, headers=lead["headers"]
    )

    assert denied.status_code == 403
    rows = list(csv.DictReader(io.StringIO(allowed.text)))
    assert [r["role"] for r in rows] == ["lead", "member"]


@pytest.mark.asyncio
async def test_health(client):
    resp = await client.get("/api/health")

    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"
