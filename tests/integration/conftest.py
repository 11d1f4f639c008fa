import os
import uuid
from collections.abc import Generator
from typing import Any

import psycopg
import pytest

from fiscaldoc.config.settings import Settings
from fiscaldoc.database.connection import close_pool, get_connection, init_pool
from fiscaldoc.database.schema import ensure_schema


def _test_settings() -> Settings:
    return Settings(
        db_database=os.environ.get("DB_DATABASE", "fiscaldoc_test"),
        encryption_key=os.environ.get("ENCRYPTION_KEY", "12345678901234567890123456789012"),
        encryption_iv=os.environ.get("ENCRYPTION_IV", "1234567890123456"),
    )


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def integration_pool(test_settings: Settings) -> Generator[None, None, None]:
    try:
        init_pool(test_settings)
        ensure_schema()
    except Exception as e:
        close_pool()
        pytest.skip(
            f"PostgreSQL test DB not available: {e}. "
            "Set DB_* env to point at a disposable database"
        )
    try:
        yield
    finally:
        close_pool()


@pytest.fixture
def db_conn(integration_pool: None) -> Generator[psycopg.Connection[Any], None, None]:
    with get_connection() as conn:
        yield conn


@pytest.fixture
def integration_cleanup(integration_pool: None) -> Generator[list[uuid.UUID], None, None]:
    cleanup: list[uuid.UUID] = []
    yield cleanup
    if not cleanup:
        return
    with get_connection() as conn:
        with conn.cursor() as cur:
            for document_id in cleanup:
                cur.execute("DELETE FROM fiscal_documents WHERE id = %s", (document_id,))
        conn.commit()


@pytest.fixture
def unique_key() -> str:
    """Random 44-digit key so runs never collide on the unique index."""
    return str(uuid.uuid4().int)[:44].ljust(44, "0")
