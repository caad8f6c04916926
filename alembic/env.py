"""
env.py — Alembic Migration Environment for HousingHub

Points Alembic at the HousingHub models (Base.metadata) and the database
named by DATABASE_URL, unless the caller already set sqlalchemy.url on the
Config (tests and one-off tooling target a scratch database that way).

Business Rules:
- Every schema change ships as an explicit revision under alembic/versions;
  the app never calls create_all
- quotes keeps its (request_id, contractor_id) unique constraint in every
  revision; the quote workflow relies on it for one quote per pair
- SQLite runs use batch mode so ALTERs are rebuilt as copy-and-swap
- Existing databases are stamped at 001_initial, not re-created

Called by: alembic CLI, tests/test_alembic.py
Depends on: app.models (Base + all tables), app.config (get_settings)
"""

from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

from app.config import get_settings
from app.models import Base  # noqa: F401  imports all models via Base.metadata

config = context.config

if not config.get_main_option("sqlalchemy.url"):
    config.set_main_option("sqlalchemy.url", get_settings().database_url)

# Callers that already configured logging (loguru intercept) opt out
if config.config_file_name is not None and config.attributes.get("configure_logger", True):
    fileConfig(config.config_file_name, disable_existing_loggers=False)

target_metadata = Base.metadata


def _is_sqlite(url: str) -> bool:
    return url.startswith("sqlite")


def run_migrations_offline() -> None:
    """Emit the migration SQL without connecting."""
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_as_batch=_is_sqlite(url),
        compare_type=True,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Connect to the configured database and apply pending revisions."""
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            render_as_batch=connection.dialect.name == "sqlite",
            compare_type=True,
        )
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
