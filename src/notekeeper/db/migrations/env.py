"""Alembic environment configuration.

Learn: Alembic compares models.py to the live schema to autogenerate
migrations. The database URL comes from NOTEKEEPER_DATABASE_URL, or from
`alembic -x database_url=...` for one-off runs against another database.
SQLite needs batch mode for ALTERs, so it is switched on for sqlite URLs.
"""

import asyncio
from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool
from sqlalchemy.ext.asyncio import async_engine_from_config

from notekeeper.config import settings
from notekeeper.db.models import Base

config = context.config

database_url = context.get_x_argument(as_dictionary=True).get(
    "database_url", settings.database_url
)
config.set_main_option("sqlalchemy.url", database_url)

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata

_configure_opts = {
    "target_metadata": target_metadata,
    "compare_type": True,
    "render_as_batch": database_url.startswith("sqlite"),
}


def run_migrations_offline() -> None:
    """Emit SQL to stdout without connecting."""
    context.configure(
        url=database_url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **_configure_opts,
    )
    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection):
    context.configure(connection=connection, **_configure_opts)
    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations() -> None:
    connectable = async_engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)
    await connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_async_migrations())
