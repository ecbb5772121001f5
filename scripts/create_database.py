#!/usr/bin/env python
"""Create the CampusHub PostgreSQL database named in `DATABASE_URL`.

Usage:
  python scripts/create_database.py [--password PASSWORD]

SQLite URLs need no setup; the file is created on first connect.
"""
import argparse
import os
import sys
from getpass import getpass

# Ensure project root is on sys.path so `app` package can be imported
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

import psycopg2  # noqa: E402
from psycopg2 import sql, OperationalError  # noqa: E402
from sqlalchemy.engine import make_url  # noqa: E402

from app.config import settings  # noqa: E402


def ensure_database(url, password):
    """Connect to the `postgres` maintenance DB and create the target if missing"""
    conn = psycopg2.connect(
        dbname="postgres",
        user=url.username,
        password=password,
        host=url.host or "localhost",
        port=url.port or 5432,
    )
    conn.autocommit = True
    try:
        cur = conn.cursor()
        cur.execute("SELECT 1 FROM pg_database WHERE datname=%s", (url.database,))
        if cur.fetchone():
            print(f"Database '{url.database}' already exists.")
        else:
            cur.execute(sql.SQL("CREATE DATABASE {};").format(sql.Identifier(url.database)))
            print(f"Database '{url.database}' created.")
        cur.close()
    finally:
        conn.close()


def main():
    url = make_url(settings.DATABASE_URL)
    if url.get_backend_name() == "sqlite":
        print("SQLite database, nothing to create.")
        return
    if not url.database:
        print("No database name found in DATABASE_URL")
        sys.exit(1)

    # Accept password from CLI or environment for non-interactive use
    parser = argparse.ArgumentParser()
    parser.add_argument("--password", "-p", help="Postgres admin password")
    args = parser.parse_args()

    password = args.password or os.getenv("POSTGRES_PASSWORD") or url.password

    try:
        ensure_database(url, password)
    except OperationalError:
        if not sys.stdin.isatty():
            print("Password authentication failed. Provide the password via --password or POSTGRES_PASSWORD env var.")
            sys.exit(1)
        print("Password authentication failed. Please enter the Postgres password for user:", url.username)
        try:
            ensure_database(url, getpass())
        except Exception as e:
            print("Error creating database:", e)
            sys.exit(1)
    except Exception as e:
        print("Error creating database:", e)
        sys.exit(1)


if __name__ == "__main__":
    main()
