import os
from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

from catalog.core.config import get_settings
from catalog.db.base import Base
from catalog import models  # noqa: F401

config = context.config


def _resolve_sqlalchemy_url() -> str:
    explicit_url = config.attributes.get("connection_url")
    if explicit_url:
        return str(explicit_url)

    for env_name in ("DATABASE_URL", "POSTGRES_DSN"):
        value = os.getenv(env_name, "").strip()
        if value:
            return value

    configured = config.get_main_option("sqlalchemy.url")
    if configured:
        return configured
    return get_settings().postgres_dsn


config.set_main_option("sqlalchemy.url", _resolve_sqlalchemy_url())

if config.config_file_name is not None and config.attributes.get("configure_logger", True):
    fileConfig(config.config_file_name, disable_existing_loggers=False)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    url = config.get_main_option("sqlalchemy.url")
    context.configure(url=url, target_metadata=target_metadata, literal_binds=True, compare_type=True)
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
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
            render_as_batch=connection.dialect.name == "sqlite",
        )
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
