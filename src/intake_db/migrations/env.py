"""Alembic runner for intake_db.

Migrations are applied online against the database named by
``intake_db.config``; offline ``--sql`` generation is not supported.
"""

from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine, pool

from intake_db.config import get_sync_url
from intake_db.models import Base

if context.config.config_file_name is not None:
    fileConfig(context.config.config_file_name)


def run_migrations() -> None:
    engine = create_engine(get_sync_url(), poolclass=pool.NullPool)
    try:
        with engine.connect() as connection:
            context.configure(
                connection=connection,
                target_metadata=Base.metadata,
                compare_type=True,
            )
            with context.begin_transaction():
                context.run_migrations()
    finally:
        engine.dispose()


if context.is_offline_mode():
    raise RuntimeError("intake_db migrations run online only; drop the --sql flag")

run_migrations()
