"""
Alembic Migration Environment
=============================

What:  Runs NoteWise schema migrations against PostgreSQL.
How:   The URL comes from notewise.config.settings (DATABASE_URL), never from
       alembic.ini; online runs open an asyncpg connection and hand it to
       Alembic through run_sync().

Tables under management (all in Base.metadata):
    notes       owner-scoped notes; deleted_at marks the trash
    summaries   AI bullet summaries, one current row per note (FK CASCADE)
    note_tags   AI tags, one row per tag (FK CASCADE)

Autogenerate also compares column types (compare_type=True).
"""

import asyncio
from logging.config import fileConfig

from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import async_engine_from_config
from alembic import context

from notewise.config import settings
from notewise.database import Base
from notewise.models.note import Note
from notewise.models.note_tag import NoteTag
from notewise.models.summary import Summary

# Models whose tables Alembic manages.
MANAGED_MODELS = (Note, Summary, NoteTag)

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata

config.set_main_option("sqlalchemy.url", settings.database_url)

CONFIGURE_OPTIONS = {
    "target_metadata": target_metadata,
    "compare_type": True,
}


def run_migrations_offline() -> None:
    """`alembic upgrade --sql`: print the DDL instead of executing it."""
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **CONFIGURE_OPTIONS,
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection: Connection) -> None:
    context.configure(connection=connection, **CONFIGURE_OPTIONS)

    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations() -> None:
    # NullPool: a migration run opens exactly one connection and exits.
    connectable = async_engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    try:
        async with connectable.connect() as connection:
            await connection.run_sync(do_run_migrations)
    finally:
        await connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_async_migrations())
