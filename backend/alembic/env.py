"""Alembic runtime for the SocialOps schema.

The database URL comes from the application settings (``DATABASE_URL`` in
the environment or ``.env``), so migrations always target the same database
the API serves from. SQLite gets batch mode so ALTERs work in local runs.
"""

import logging
import sys
from logging.config import fileConfig
from pathlib import Path

from alembic import context
from sqlalchemy import engine_from_config, pool
from sqlalchemy.engine import make_url

# backend/alembic/env.py -> parents[1] == backend/
sys.path.append(str(Path(__file__).resolve().parents[1]))

import socialops.db.models  # noqa: F401, E402
from socialops.core.config import Settings  # noqa: E402
from socialops.db.base import Base  # noqa: E402

config = context.config

if config.config_file_name is not None:
    # keep the API's loggers alive when migrations run in-process
    fileConfig(config.config_file_name, disable_existing_loggers=False)

logger = logging.getLogger("alembic.env")

target_metadata = Base.metadata


def database_url() -> str:
    override = config.get_main_option("sqlalchemy.url")
    return override or Settings().DATABASE_URL


def _configure(url: str, **kwargs) -> None:
    context.configure(
        target_metadata=target_metadata,
        compare_type=True,
        render_as_batch=make_url(url).get_backend_name() == "sqlite",
        **kwargs,
    )


def run_migrations_offline() -> None:
    url = database_url()
    _configure(url, url=url, literal_binds=True, dialect_opts={"paramstyle": "named"})

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    url = database_url()
    section = config.get_section(config.config_ini_section) or {}
    section["sqlalchemy.url"] = url
    connectable = engine_from_config(section, prefix="sqlalchemy.", poolclass=pool.NullPool)

    logger.info("Migrating %s", make_url(url).render_as_string(hide_password=True))
    with connectable.connect() as connection:
        _configure(url, connection=connection)

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
