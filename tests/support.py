"""Test helpers shared across suites."""

from datetime import datetime, timedelta, timezone

import pytest
from psycopg_pool import ConnectionPool, PoolTimeout

from accountkit.adapters.repository.postgres import run_migrations
from accountkit.config.settings import get_settings


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


def open_test_pool(max_size: int = 10) -> ConnectionPool:
    """Connect to the configured database and apply migrations, or skip."""
    settings = get_settings()
    pool = ConnectionPool(
        conninfo=settings.database_url,
        min_size=1,
        max_size=max_size,
        open=True,
    )
    try:
        pool.wait(timeout=5.0)
    except PoolTimeout:
        pool.close()
        pytest.skip("PostgreSQL is not reachable")
    run_migrations(pool)
    return pool


def clean_tables(pool: ConnectionPool) -> None:
    with pool.connection() as conn:
        conn.execute("DELETE FROM reset_tokens")
        conn.execute("DELETE FROM accounts")
        conn.commit()
