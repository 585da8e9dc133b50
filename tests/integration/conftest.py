"""
Shared fixtures for integration tests.

Requires PostgreSQL (DATABASE_URL, e.g. via docker-compose). Tests are
skipped when the database cannot be reached.
"""

from collections.abc import Generator

import pytest
from psycopg_pool import ConnectionPool


@pytest.fixture(autouse=True)
def clean_database(pool: ConnectionPool) -> Generator[None, None, None]:
    """Clean tables before each test."""
    with pool.connection() as conn:
        conn.execute("DELETE FROM activities")
        conn.execute("DELETE FROM accounts")
        conn.commit()
    yield
