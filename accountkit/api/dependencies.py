"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting
domain services and infrastructure adapters into routes.
"""

from fastapi import Request
from psycopg_pool import ConnectionPool

from accountkit.adapters.repository.postgres import (
    PostgresAccountRepository,
    PostgresResetTokenRepository,
)
from accountkit.adapters.smtp.console import ConsoleNotificationTransport
from accountkit.config.settings import Settings, get_settings
from accountkit.domain.hooks import EventBus, UrlBuilder
from accountkit.domain.notifications import BanNotificationDispatcher, Site, SubscriptionNotifier
from accountkit.domain.passwords import PasswordHasher, PasswordService
from accountkit.domain.ports import AccountRepository, NotificationTransport
from accountkit.domain.registration import RegistrationService
from accountkit.domain.users import AccountAdministration, UserDirectory
from accountkit.domain.validation import AccountPolicy, Validator

# Module-level singleton - ConsoleNotificationTransport is stateless
_notifier = ConsoleNotificationTransport()


def build_validator(settings: Settings) -> Validator:
    """Validator configured from the account policy settings."""
    policy = AccountPolicy(
        min_username_length=settings.min_username_length,
        max_username_length=settings.max_username_length,
        min_password_length=settings.min_password_length,
        reserved_usernames=frozenset(settings.reserved_usernames),
    )
    return Validator(policy)


def build_event_bus(
    settings: Settings, accounts: AccountRepository, notifier: NotificationTransport
) -> EventBus:
    """
    Create the application event bus with ban notifications wired in.

    The bus outlives requests, so it is built once at startup.
    """
    bus = EventBus()
    site = Site(name=settings.site_name, url=settings.site_url)
    urls = UrlBuilder(settings.site_url, bus.hooks)
    dispatcher = BanNotificationDispatcher(
        notifier=notifier, site=site, urls=urls, enabled=settings.notify_user_ban
    )
    pipeline = SubscriptionNotifier(accounts=accounts, notifier=notifier, hooks=bus.hooks, site=site)
    dispatcher.register(bus, pipeline)
    return bus


def get_pool(request: Request) -> ConnectionPool:
    """
    Get connection pool from app state.

    The pool is created during app lifespan startup and stored in app.state.
    """
    return request.app.state.pool


def get_account_repository(request: Request) -> PostgresAccountRepository:
    """Create account repository with connection pool from app state."""
    return PostgresAccountRepository(get_pool(request))


def get_token_repository(request: Request) -> PostgresResetTokenRepository:
    """Create reset token repository with connection pool from app state."""
    return PostgresResetTokenRepository(get_pool(request))


def get_notifier() -> ConsoleNotificationTransport:
    """Get console notification transport (singleton)."""
    return _notifier


def get_event_bus(request: Request) -> EventBus:
    """Get the application event bus from app state."""
    return request.app.state.bus


def get_url_builder(request: Request) -> UrlBuilder:
    """URL builder sharing the application's hook chain."""
    settings = get_settings()
    return UrlBuilder(settings.site_url, get_event_bus(request).hooks)


def get_registration_service(request: Request) -> RegistrationService:
    """
    Create registration service with injected dependencies.

    Wires together the repository, validator and hasher for the domain service.
    """
    settings = get_settings()
    return RegistrationService(
        accounts=get_account_repository(request),
        validator=build_validator(settings),
        hasher=PasswordHasher(rounds=settings.bcrypt_cost),
        allow_registration=settings.allow_registration,
        allow_multiple_emails=settings.allow_multiple_emails,
    )


def get_password_service(request: Request) -> PasswordService:
    """Create password reset service with injected dependencies."""
    settings = get_settings()
    return PasswordService(
        accounts=get_account_repository(request),
        tokens=get_token_repository(request),
        notifier=get_notifier(),
        urls=get_url_builder(request),
        site_name=settings.site_name,
        hasher=PasswordHasher(rounds=settings.bcrypt_cost),
        validator=build_validator(settings),
        ttl_seconds=settings.reset_token_ttl_seconds,
    )


def get_user_directory(request: Request) -> UserDirectory:
    """Create user lookup facade."""
    return UserDirectory(accounts=get_account_repository(request))


def get_account_administration(request: Request) -> AccountAdministration:
    """Create ban/unban service bound to the application event bus."""
    return AccountAdministration(
        accounts=get_account_repository(request), bus=get_event_bus(request)
    )
