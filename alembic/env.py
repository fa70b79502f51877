from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

from db import build_database_url
from models import Base
import app.models.codes  # noqa: F401
import app.models.out_manage  # noqa: F401
import app.models.system_log  # noqa: F401

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def _escape_for_alembic_config(url: str) -> str:
    # Alembic uses configparser interpolation: '%' is special.
    # URL-encoded passwords include '%xx', so escape '%' to '%%'.
    return url.replace("%", "%%")


def _resolve_url() -> str:
    configured = config.get_main_option("sqlalchemy.url")
    return configured or build_database_url()


def run_migrations_offline() -> None:
    context.configure(
        url=_resolve_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    if not config.get_main_option("sqlalchemy.url"):
        config.set_main_option(
            "sqlalchemy.url", _escape_for_alembic_config(build_database_url())
        )

    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
