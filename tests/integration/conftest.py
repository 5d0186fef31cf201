"""
Shared fixtures for integration tests.

Tests that touch the database require PostgreSQL to be running and are
skipped otherwise.
"""

from collections.abc import Generator

import pytest
from psycopg_pool import ConnectionPool

from accountkit.adapters.repository.postgres import (
    PostgresAccountRepository,
    PostgresResetTokenRepository,
)

from tests.support import clean_tables, open_test_pool

pytestmark = pytest.mark.integration


@pytest.fixture(scope="module")
def database() -> Generator[ConnectionPool, None, None]:
    """Create connection pool for integration tests."""
    pool = open_test_pool()
    yield pool
    pool.close()


@pytest.fixture
def pool(database: ConnectionPool) -> ConnectionPool:
    """Connection pool over freshly emptied account tables."""
    clean_tables(database)
    return database


@pytest.fixture
def pg_accounts(pool: ConnectionPool) -> PostgresAccountRepository:
    return PostgresAccountRepository(pool)


@pytest.fixture
def pg_tokens(pool: ConnectionPool) -> PostgresResetTokenRepository:
    return PostgresResetTokenRepository(pool)
