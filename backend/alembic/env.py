"""Migration runner for the attendance schema.

The target URL is taken from `settings.DATABASE_URL`, not alembic.ini, and
the metadata covers accounts, sessions, events, roster users and attendances.
"""
from logging.config import fileConfig
from sqlalchemy import engine_from_config, pool
from alembic import context

import sys
import os
# backend/ holds the attendance package when run from a checkout
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from attendance.config import settings
from attendance.database import Base

# Table definitions attach to Base.metadata on import
from attendance.models.account import AdminAccount, AuthSession
from attendance.models.event import Event
from attendance.models.user import User
from attendance.models.attendance import Attendance

config = context.config
config.set_main_option("sqlalchemy.url", settings.DATABASE_URL)

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """Emit SQL for the configured URL without connecting."""
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Apply migrations over a live, unpooled connection."""
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
