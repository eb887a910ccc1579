"""Database configuration — reads connection parameters from environment.

Persistence is optional: when ``DATABASE_URL`` is unset the server runs
without storing reports.  ``DB_SSL`` (any truthy value) asks the driver to
use TLS, which most hosted PostgreSQL providers require.

Both ``sync_url`` (used by Alembic migrations) and ``async_url`` (used by
the async SQLAlchemy engine at runtime) are exposed.
"""

import os

_TRUTHY = {"1", "true", "yes", "on", "require"}


def get_database_url() -> str | None:
    """Return the raw ``DATABASE_URL``, or ``None`` if persistence is disabled."""
    url = os.getenv("DATABASE_URL", "").strip()
    return url or None


def ssl_required() -> bool:
    """True when ``DB_SSL`` is set to a truthy value."""
    return os.getenv("DB_SSL", "").strip().lower() in _TRUTHY


def to_sync_url(url: str) -> str:
    """Normalise *url* to a synchronous (psycopg2 / libpq) connection URL."""
    url = url.replace("postgresql+asyncpg://", "postgresql://", 1)
    # Heroku-style scheme
    return url.replace("postgres://", "postgresql://", 1)


def to_async_url(url: str) -> str:
    """Normalise *url* to an asyncpg connection URL."""
    url = to_sync_url(url)
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return url


def get_sync_url() -> str:
    """Return the synchronous URL for Alembic.

    Raises ``RuntimeError`` if ``DATABASE_URL`` is not set — migrations
    have nothing to connect to.
    """
    url = get_database_url()
    if url is None:
        raise RuntimeError("DATABASE_URL is not set")
    return to_sync_url(url)


def get_async_url() -> str:
    """Return the asyncpg URL for the runtime engine.

    Raises ``RuntimeError`` if ``DATABASE_URL`` is not set.
    """
    url = get_database_url()
    if url is None:
        raise RuntimeError("DATABASE_URL is not set")
    return to_async_url(url)
