from __future__ import annotations

import asyncio
import os
import sys
from logging.config import fileConfig
from urllib.parse import parse_qsl, urlencode, urlparse, urlunparse

from alembic import context
from sqlalchemy import MetaData, pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import create_async_engine

# Ensure the eventhub package is importable when run from a checkout
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

# Imported via __import__ so linters do not flag module-level imports after
# the sys.path change.
__import__("eventhub.models")
settings = __import__("eventhub.core.settings", fromlist=["settings"]).settings
ModelBase = __import__("eventhub.database", fromlist=["Base"]).Base

TARGET_METADATA = ModelBase.metadata

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# Query args that asyncpg.connect does not accept
UNSUPPORTED_QUERY_ARGS = {"sslmode", "channel_binding"}


def _normalize_db_url(url: str) -> str:
    if url.startswith("postgresql://"):
        url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
    parsed = urlparse(url)
    if parsed.query:
        query = [
            (k, v)
            for k, v in parse_qsl(parsed.query, keep_blank_values=True)
            if k.lower() not in UNSUPPORTED_QUERY_ARGS
        ]
        url = urlunparse(parsed._replace(query=urlencode(query)))
    return url


# Prefer `-x dburl=...`, then alembic.ini, then settings
x_args = context.get_x_argument(as_dictionary=True)
override_url = x_args.get("dburl")
if override_url:
    config.set_main_option("sqlalchemy.url", _normalize_db_url(str(override_url)))
elif not config.get_main_option("sqlalchemy.url"):
    config.set_main_option(
        "sqlalchemy.url", _normalize_db_url(str(settings.SQLALCHEMY_DATABASE_URI))
    )


def get_target_metadata() -> MetaData:
    return TARGET_METADATA


def run_migrations_offline() -> None:
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=get_target_metadata(),
        render_as_batch=True,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection: Connection) -> None:
    context.configure(
        connection=connection,
        target_metadata=get_target_metadata(),
        render_as_batch=True,
        compare_type=True,
    )

    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    url = config.get_main_option("sqlalchemy.url") or ""
    connectable = create_async_engine(url, poolclass=pool.NullPool)

    async with connectable.connect() as connection:
        await connection.run_sync(do_run_migrations)

    await connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
