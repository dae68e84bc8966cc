"""Alembic environment — schema migrations for the archive record store.

The URL comes from the application's Settings, so DATABASE_URL (and the
postgresql:// to postgresql+asyncpg:// rewrite) behaves exactly as at runtime.
alembic.ini only supplies logging and the docker-compose fallback URL.
"""

import asyncio
import os
from logging.config import fileConfig

from sqlalchemy import pool
from sqlalchemy.ext.asyncio import create_async_engine

from alembic import context

from arsip.config import get_settings
from arsip.db.base import Base
import arsip.models  # noqa: F401  (registers every table on Base.metadata)

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)


def _database_url() -> str:
    if "DATABASE_URL" in os.environ:
        return get_settings().database_url
    return config.get_main_option("sqlalchemy.url") or get_settings().database_url


def _migrate(**configure_kwargs) -> None:
    context.configure(
        target_metadata=Base.metadata, compare_type=True, **configure_kwargs,
    )
    with context.begin_transaction():
        context.run_migrations()


async def _migrate_online(url: str) -> None:
    engine = create_async_engine(url, poolclass=pool.NullPool)
    try:
        async with engine.connect() as conn:
            await conn.run_sync(lambda sync_conn: _migrate(connection=sync_conn))
    finally:
        await engine.dispose()


if context.is_offline_mode():
    _migrate(
        url=_database_url(), literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
else:
    asyncio.run(_migrate_online(_database_url()))
