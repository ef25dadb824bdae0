"""Database connection settings.

``DATABASE_URL`` wins when set; otherwise the URL is assembled from
``PG_HOST`` / ``PG_PORT`` / ``PG_USER`` / ``PG_PASSWORD`` / ``PG_DATABASE``.
The same database is reached through two drivers: psycopg2 for Alembic
migrations and asyncpg for the server.
"""

import os

from sqlalchemy.engine import URL, make_url


def _database_url() -> URL:
    raw = os.getenv("DATABASE_URL")
    if raw:
        return make_url(raw)
    return URL.create(
        "postgresql",
        username=os.getenv("PG_USER", "intake"),
        password=os.getenv("PG_PASSWORD", "intake"),
        host=os.getenv("PG_HOST", "localhost"),
        port=int(os.getenv("PG_PORT", "5432")),
        database=os.getenv("PG_DATABASE", "intake"),
    )


def get_sync_url() -> URL:
    """URL for Alembic, whatever driver ``DATABASE_URL`` names."""
    return _database_url().set(drivername="postgresql+psycopg2")


def get_async_url() -> URL:
    """URL for the runtime async engine."""
    return _database_url().set(drivername="postgresql+asyncpg")
