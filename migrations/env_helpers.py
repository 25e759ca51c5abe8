"""Database URL helpers for Alembic migrations.

Kept apart from env.py so they can be tested without alembic.context.
DATABASE_URL may be a URL or a libpq ``key=value`` DSN (the form the
application itself hands to psycopg2); both become a SQLAlchemy URL here.
"""

from __future__ import annotations

import os

from psycopg2.extensions import parse_dsn
from sqlalchemy.engine import URL, make_url

DRIVERNAME = "postgresql+psycopg2"


def libpq_dsn_to_url(dsn: str) -> URL:
    """Convert a libpq DSN to a SQLAlchemy URL.

    A ``host`` starting with ``/`` is a unix socket directory and is passed
    as a query parameter. DB_PASSWORD fills in a missing password.
    """
    params = parse_dsn(dsn)
    password = params.get("password") or os.environ.get("DB_PASSWORD") or None
    host = params.get("host", "localhost")

    if host.startswith("/"):
        return URL.create(
            DRIVERNAME,
            username=params.get("user"),
            password=password,
            database=params.get("dbname"),
            query={"host": host},
        )

    return URL.create(
        DRIVERNAME,
        username=params.get("user"),
        password=password,
        host=host,
        port=int(params.get("port", 5432)),
        database=params.get("dbname"),
    )


def normalize_url(url: str) -> URL:
    """Force the psycopg2 driver and fill in a missing password from DB_PASSWORD."""
    parsed = make_url(url)
    if parsed.drivername in ("postgres", "postgresql"):
        parsed = parsed.set(drivername=DRIVERNAME)

    db_password = os.environ.get("DB_PASSWORD")
    if db_password and not parsed.password:
        parsed = parsed.set(password=db_password)
    return parsed


def get_database_url() -> str:
    """DATABASE_URL rendered for SQLAlchemy, password included.

    Raises:
        RuntimeError: If DATABASE_URL is not set.
    """
    raw = os.environ.get("DATABASE_URL")
    if not raw:
        raise RuntimeError("DATABASE_URL is required to run migrations")

    url = normalize_url(raw) if "://" in raw else libpq_dsn_to_url(raw)
    return url.render_as_string(hide_password=False)
