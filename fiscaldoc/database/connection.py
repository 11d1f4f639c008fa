from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

import psycopg
from psycopg.conninfo import make_conninfo
from psycopg_pool import ConnectionPool

from fiscaldoc.config.settings import Settings
from fiscaldoc.logging.logger import Log

_pool: ConnectionPool | None = None


def init_pool(settings: Settings) -> None:
    """Open the shared pool and wait until its minimum connections are up.

    Raises:
        psycopg_pool.PoolTimeout: if the database is unreachable within
            ``db_pool_timeout_seconds``. The half-open pool is closed first.
    """
    global _pool  # noqa: PLW0603
    conninfo = make_conninfo(
        host=settings.db_host,
        port=settings.db_port,
        dbname=settings.db_database,
        user=settings.db_username,
        password=settings.db_password,
    )
    pool = ConnectionPool(
        conninfo,
        min_size=settings.db_pool_min_size,
        max_size=settings.db_pool_max_size,
        timeout=settings.db_pool_timeout_seconds,
        name="fiscaldoc",
        open=True,
    )
    try:
        pool.wait(timeout=settings.db_pool_timeout_seconds)
    except Exception:
        pool.close()
        raise
    _pool = pool
    Log.info(
        f"Database pool ready for {settings.db_host}:{settings.db_port}/{settings.db_database}"
    )


def close_pool() -> None:
    global _pool  # noqa: PLW0603
    if _pool is not None:
        _pool.close()
        _pool = None


@contextmanager
def get_connection() -> Generator[psycopg.Connection[Any], None, None]:
    """Borrow a pooled connection. Callers commit; an exception rolls back."""
    if _pool is None:
        raise RuntimeError("Connection pool not initialized. Call init_pool() first.")
    with _pool.connection() as conn:
        yield conn
