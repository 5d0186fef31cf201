"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- In-memory repositories standing in for PostgreSQL
- A controllable clock for TTL tests
- A fast bcrypt hasher and a mock notification transport
- Fully wired domain services
"""

from unittest.mock import Mock

import pytest

from accountkit.adapters.repository.memory import (
    InMemoryAccountRepository,
    InMemoryResetTokenRepository,
)
from accountkit.domain.hooks import EventBus, UrlBuilder
from accountkit.domain.notifications import BanNotificationDispatcher, Site, SubscriptionNotifier
from accountkit.domain.passwords import PasswordHasher, PasswordService
from accountkit.domain.registration import RegistrationService
from accountkit.domain.users import AccountAdministration, UserDirectory

from tests.support import FakeClock

SITE = Site(name="Example Site", url="https://example.com")

# bcrypt's minimum cost keeps the suite fast; production cost is checked separately
FAST_ROUNDS = 4


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def accounts() -> InMemoryAccountRepository:
    return InMemoryAccountRepository()


@pytest.fixture
def tokens() -> InMemoryResetTokenRepository:
    return InMemoryResetTokenRepository()


@pytest.fixture
def notifier() -> Mock:
    return Mock()


@pytest.fixture
def hasher() -> PasswordHasher:
    return PasswordHasher(rounds=FAST_ROUNDS)


@pytest.fixture
def bus() -> EventBus:
    return EventBus()


@pytest.fixture
def urls(bus: EventBus) -> UrlBuilder:
    return UrlBuilder(SITE.url, bus.hooks)


@pytest.fixture
def registration(
    accounts: InMemoryAccountRepository, hasher: PasswordHasher
) -> RegistrationService:
    return RegistrationService(accounts=accounts, hasher=hasher)


@pytest.fixture
def passwords(
    accounts: InMemoryAccountRepository,
    tokens: InMemoryResetTokenRepository,
    notifier: Mock,
    urls: UrlBuilder,
    hasher: PasswordHasher,
    clock: FakeClock,
) -> PasswordService:
    return PasswordService(
        accounts=accounts,
        tokens=tokens,
        notifier=notifier,
        urls=urls,
        site_name=SITE.name,
        hasher=hasher,
        ttl_seconds=3600,
        clock=clock,
    )


@pytest.fixture
def dispatcher(notifier: Mock, urls: UrlBuilder) -> BanNotificationDispatcher:
    return BanNotificationDispatcher(notifier=notifier, site=SITE, urls=urls, enabled=True)


@pytest.fixture
def pipeline(
    accounts: InMemoryAccountRepository, notifier: Mock, bus: EventBus
) -> SubscriptionNotifier:
    return SubscriptionNotifier(accounts=accounts, notifier=notifier, hooks=bus.hooks, site=SITE)


@pytest.fixture
def admin(accounts: InMemoryAccountRepository, bus: EventBus) -> AccountAdministration:
    return AccountAdministration(accounts=accounts, bus=bus)


@pytest.fixture
def directory(accounts: InMemoryAccountRepository, clock: FakeClock) -> UserDirectory:
    return UserDirectory(accounts=accounts, clock=clock)


@pytest.fixture
def alice(registration: RegistrationService) -> int:
    """A registered account; returns its guid."""
    return registration.register("alice", "correct-horse", "Alice", "alice@example.com")
