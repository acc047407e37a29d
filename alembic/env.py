"""Alembic environment for the crowdfunding schema (database.py + models/)."""

import logging
import os
import sys

from sqlalchemy import engine_from_config, pool
from alembic import context

# Project root on sys.path so `database`, `models` and `services` import
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from dotenv import load_dotenv

load_dotenv()

from config.logging_config import configure_logging  # noqa: E402
from config.settings import database_url as env_database_url  # noqa: E402
from services.identifier_remap import JOURNAL_TABLE  # noqa: E402

config = context.config

# DATABASE_URL wins over alembic.ini; '%' must be escaped for configparser.
database_url = env_database_url()
if database_url:
    config.set_main_option("sqlalchemy.url", database_url.replace("%", "%%"))

configure_logging()
logger = logging.getLogger("alembic.env")

from database import Base  # noqa: E402
import models  # noqa: E402, F401

target_metadata = Base.metadata


def include_object(obj, name, type_, reflected, compare_to):
    # The remap journal only exists while a remap is half-applied.
    if type_ == "table" and name == JOURNAL_TABLE:
        return False
    return True


def run_migrations_offline() -> None:
    """Render SQL to stdout (`alembic upgrade --sql`)."""
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        include_object=include_object,
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        logger.info("migrating %s database", connection.dialect.name)
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            include_object=include_object,
            compare_type=True,
            compare_server_default=True,
        )

        # A single transaction for the whole run; on PostgreSQL a failure in
        # any revision, the identifier remap included, rolls everything back.
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
