"""
Alembic environment for the learner database.

Only the ORM models are imported here; the database URL comes from
DATABASE_URL or, failing that, alembic.ini, so migrations can run
without STATIC_TOKEN or any other API setting.
"""

import os
from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool
from sqlalchemy.engine import make_url

from common.models import Base

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def get_url() -> str:
    """
    Resolve the database URL.

    Raises:
        ValueError: If neither DATABASE_URL nor sqlalchemy.url is set
    """
    url = os.getenv("DATABASE_URL") or config.get_main_option("sqlalchemy.url")
    if not url:
        raise ValueError(
            "Database connection not configured. Set DATABASE_URL or "
            "sqlalchemy.url in alembic.ini."
        )
    return url


def _configure(url: str, **kwargs) -> None:
    # SQLite cannot ALTER constraints in place; batch mode rebuilds tables
    context.configure(
        target_metadata=target_metadata,
        render_as_batch=make_url(url).get_backend_name() == "sqlite",
        compare_type=True,
        **kwargs
    )


def run_migrations_offline() -> None:
    """Emit SQL for the migrations without connecting."""
    url = get_url()
    _configure(
        url,
        url=url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"}
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Apply the migrations over a live connection."""
    url = get_url()
    section = config.get_section(config.config_ini_section) or {}
    section["sqlalchemy.url"] = url
    connectable = engine_from_config(
        section,
        prefix="sqlalchemy.",
        poolclass=pool.NullPool
    )

    with connectable.connect() as connection:
        _configure(url, connection=connection)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
