"""Alembic environment configuration.

The Supabase public schema also holds tables owned by Supabase itself, so
this module configures Alembic to:
1. Only manage tables declared in Base.metadata (staff_records)
2. Never drop or alter reflected tables it does not know about
"""

import sys
from logging.config import fileConfig
from pathlib import Path

from alembic import context
from sqlalchemy import create_engine, pool

# Add the project root to sys.path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from config.settings import settings
from models.base import Base

# Import all models to ensure they are registered with Base.metadata
from models.staff_record import StaffRecord  # noqa: F401

# Alembic Config object
config = context.config

# Setup logging from config file
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# Set the SQLAlchemy URL from settings
config.set_main_option("sqlalchemy.url", settings.database_url)

# Target metadata for autogenerate
target_metadata = Base.metadata

MANAGED_TABLES = set(target_metadata.tables)


def include_object(
    obj,
    name: str,
    type_: str,
    reflected: bool,
    compare_to,
) -> bool:
    """Filter function to include only the tables this service owns."""
    if type_ == "table":
        return name in MANAGED_TABLES

    # Indexes, constraints and columns follow their parent table
    table = getattr(obj, "table", None)
    if table is not None:
        return table.name in MANAGED_TABLES

    return not reflected


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode.

    Generates SQL script without database connection.
    """
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        include_object=include_object,
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode.

    Creates database connection and runs migrations.
    """
    connectable = create_engine(
        config.get_main_option("sqlalchemy.url"),
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            include_object=include_object,
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
