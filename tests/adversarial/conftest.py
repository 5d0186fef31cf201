"""
Shared fixtures for adversarial tests.

Every attack runs against both storage backends: the in-memory adapters
always, the PostgreSQL adapters when a database is reachable.
"""

from collections.abc import Generator
from dataclasses import dataclass
from unittest.mock import Mock

import pytest
from psycopg_pool import ConnectionPool

from accountkit.adapters.repository.memory import (
    InMemoryAccountRepository,
    InMemoryResetTokenRepository,
)
from accountkit.adapters.repository.postgres import (
    PostgresAccountRepository,
    PostgresResetTokenRepository,
)
from accountkit.domain.hooks import UrlBuilder
from accountkit.domain.passwords import PasswordHasher, PasswordService
from accountkit.domain.ports import AccountRepository, ResetTokenRepository

from tests.conftest import FAST_ROUNDS, SITE
from tests.support import FakeClock, clean_tables, open_test_pool

# Module-level marker for all adversarial tests
pytestmark = pytest.mark.adversarial


@dataclass
class Backend:
    """A matched pair of repositories to attack."""

    name: str
    accounts: AccountRepository
    tokens: ResetTokenRepository


@pytest.fixture(scope="session")
def database() -> Generator[ConnectionPool, None, None]:
    """Create connection pool for adversarial tests."""
    pool = open_test_pool(max_size=20)
    yield pool
    pool.close()


@pytest.fixture(params=["memory", "postgres"])
def backend(request: pytest.FixtureRequest) -> Backend:
    """Repositories for one storage backend, emptied before each test."""
    if request.param == "memory":
        return Backend("memory", InMemoryAccountRepository(), InMemoryResetTokenRepository())

    pool = request.getfixturevalue("database")
    clean_tables(pool)
    return Backend(
        "postgres", PostgresAccountRepository(pool), PostgresResetTokenRepository(pool)
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def password_service(backend: Backend, clock: FakeClock) -> PasswordService:
    """Password service over the backend under attack."""
    return PasswordService(
        accounts=backend.accounts,
        tokens=backend.tokens,
        notifier=Mock(),
        urls=UrlBuilder(SITE.url),
        site_name=SITE.name,
        hasher=PasswordHasher(rounds=FAST_ROUNDS),
        ttl_seconds=3600,
        clock=clock,
    )


def create_victim(backend: Backend, username: str = "victim") -> int:
    """Helper to create an account with a known password hash."""
    password_hash = PasswordHasher(rounds=FAST_ROUNDS).hash("original-password")
    return backend.accounts.create(
        username, password_hash, username.title(), f"{username}@example.com"
    )
