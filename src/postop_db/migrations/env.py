"""Alembic environment for the postop_feedback schema.

Alembic's runner is synchronous, so migrations connect through the
``get_sync_url()`` form of ``DATABASE_URL`` (psycopg2), while the webhook
itself uses asyncpg.  ``DB_SSL`` applies here too: hosted PostgreSQL that
requires TLS for the app requires it for migrations as well.

The revision table is named ``postop_alembic_version`` so this schema can
live in a database shared with the clinic dashboard's own migrations.
"""

from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine, pool

from postop_db.config import get_sync_url, ssl_required
from postop_db.models.base import Base

# Registers PostopFeedback on Base.metadata
import postop_db.models.feedback  # noqa: F401

VERSION_TABLE = "postop_alembic_version"

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def _configure(**kwargs) -> None:
    context.configure(
        target_metadata=target_metadata,
        version_table=VERSION_TABLE,
        compare_type=True,
        **kwargs,
    )


def run_migrations_offline() -> None:
    """Emit SQL for the pending revisions without connecting."""
    _configure(
        url=get_sync_url(),
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Connect with the sync driver and apply the pending revisions."""
    connect_args = {"sslmode": "require"} if ssl_required() else {}
    engine = create_engine(
        get_sync_url(), poolclass=pool.NullPool, connect_args=connect_args,
    )
    with engine.connect() as connection:
        _configure(connection=connection)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
