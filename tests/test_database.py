"""
Raw SQL access through the databases client
"""

from datetime import timedelta

import pytest
from databases import Database

from app.database import database, parse_timestamp, utcnow


def test_database_is_a_databases_client():
    assert isinstance(database, Database)


def test_parse_timestamp_normalizes_to_utc():
    assert parse_timestamp(None) is None
    assert parse_timestamp("") is None
    parsed = parse_timestamp("2026-03-01 09:30:00.000000")
    assert parsed.tzinfo is not None
    assert parsed.hour == 9


@pytest.mark.asyncio
async def test_rows_map_by_column_and_timestamps_round_trip(make_user):
    user = await make_user(name="Grace")

    row = await database.fetch_one(
        "SELECT id, name, created_at FROM users WHERE id = :id",
        {"id": user["id"]}
    )

    assert row["name"] == "Grace"
    assert dict(row)["id"] == user["id"]
    assert abs(parse_timestamp(row["created_at"]) - utcnow()) < timedelta(minutes=1)


@pytest.mark.asyncio
async def test_datetime_parameters_compare_against_stored_values(make_user):
    await make_user()

    recent = await database.fetch_val(
        "SELECT COUNT(*) FROM users WHERE created_at >= :since",
        {"since": utcnow() - timedelta(hours=1)}
    )
    future = await database.fetch_val(
        "SELECT COUNT(*) FROM users WHERE created_at >= :since",
        {"since": utcnow() + timedelta(hours=1)}
    )

    assert recent == 1
    assert future == 0
