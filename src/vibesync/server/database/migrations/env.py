"""
Alembic migration environment for VibeSync.

This file configures Alembic to work with SQLite in a way that supports:
- Batch operations (required for SQLite ALTER TABLE limitations)
- A database URL injected by run_migrations() or derived from DATA_DIR
"""

import os
from logging.config import fileConfig
from pathlib import Path

from alembic import context
from sqlalchemy import create_engine, pool

# Alembic Config object
config = context.config

# Configure logging from alembic.ini if present
if config.config_file_name is not None:
    fileConfig(config.config_file_name)


def get_database_url() -> str:
    """Get the database URL from the Alembic config, environment or default path."""
    configured = config.get_main_option("sqlalchemy.url")
    if configured:
        return configured

    data_dir = Path(os.environ.get("DATA_DIR", Path.cwd() / "data"))
    return f"sqlite:///{data_dir / 'database' / 'vibesync.db'}"


def run_migrations_offline() -> None:
    """
    Run migrations in 'offline' mode.

    This generates SQL scripts without requiring a database connection.
    """
    context.configure(
        url=get_database_url(),
        target_metadata=None,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        # SQLite needs batch mode to recreate tables for most ALTERs
        render_as_batch=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """
    Run migrations in 'online' mode.

    This creates a connection to the database and runs migrations
    within a transaction.
    """
    connectable = create_engine(get_database_url(), poolclass=pool.NullPool)

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=None,
            render_as_batch=True,
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
