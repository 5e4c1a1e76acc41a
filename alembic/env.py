"""Alembic environment for the execution ledger, control number and key-value schema."""
# pylint: disable=no-member,invalid-name,wrong-import-order

from alembic import context
from sqlalchemy import create_engine, pool

from x12_exchange.config import config_configure_logging, config_load_database_url

config = context.config
config_configure_logging(level=config.get_main_option("log_level", "INFO"))

database_url = config.get_main_option("sqlalchemy.url") or config_load_database_url()


def run_migrations_offline() -> None:
    """Emit migration SQL without a database connection."""

    context.configure(
        url=database_url,
        target_metadata=None,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Apply migrations over a dedicated non-pooled connection."""

    engine = create_engine(database_url, poolclass=pool.NullPool)
    try:
        with engine.connect() as connection:
            context.configure(connection=connection, target_metadata=None, transaction_per_migration=True)
            with context.begin_transaction():
                context.run_migrations()
    finally:
        engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
