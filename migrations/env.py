"""Alembic environment for the gallery schema."""
from __future__ import annotations

import os
from logging.config import fileConfig

from alembic import context
from sqlalchemy import pool

from kvasari_stage.core.settings import settings
from kvasari_stage.db.session import Base, build_engine

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def database_url() -> str:
    """Pick the URL to migrate: ALEMBIC_URL, then alembic.ini, then the app settings."""
    return (
        os.getenv("ALEMBIC_URL")
        or config.get_main_option("sqlalchemy.url")
        or settings.effective_database_url
    )


def include_object(obj, name, type_, reflected, compare_to):
    return not (type_ == "table" and name == "alembic_version")


def configure_context(**kwargs) -> None:
    # SQLite can't ALTER most constraints in place; batch mode recreates the table.
    context.configure(
        target_metadata=target_metadata,
        include_object=include_object,
        compare_type=True,
        **kwargs,
    )


def run_migrations_offline() -> None:
    """Emit the migration SQL for ``database_url()`` without connecting."""
    url = database_url()
    configure_context(
        url=url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_as_batch=url.startswith("sqlite"),
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Migrate through an engine built like the application's, foreign keys included."""
    migration_engine = build_engine(settings, url=database_url(), poolclass=pool.NullPool)

    try:
        with migration_engine.connect() as connection:
            configure_context(
                connection=connection,
                render_as_batch=connection.dialect.name == "sqlite",
            )
            with context.begin_transaction():
                context.run_migrations()
    finally:
        migration_engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
