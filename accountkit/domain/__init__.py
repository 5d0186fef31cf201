"""
Domain layer - Pure business logic with zero framework imports.

This package contains the account lifecycle logic: validation,
registration, password reset tokens, invite codes and ban
notifications. It defines its own port interfaces for infrastructure
abstraction, so storage and delivery can be swapped freely.
"""

from .exceptions import (
    AccountError,
    DuplicateEmail,
    DuplicateUsername,
    InvalidToken,
    NotFound,
    RegistrationDisabled,
    RegistrationError,
    ValidationError,
)
from .hooks import EventBus, HookChain, UrlBuilder
from .notifications import BanNotificationDispatcher, Notification, Site, SubscriptionNotifier
from .passwords import PasswordHasher, PasswordService, generate_password
from .ports import (
    Account,
    AccountRepository,
    BanState,
    NotificationTransport,
    ResetToken,
    ResetTokenRepository,
    TokenState,
)
from .registration import RegistrationService
from .users import AccountAdministration, UserDirectory
from .validation import AccountPolicy, ValidationResults, Validator

__all__ = [
    "Account",
    "AccountAdministration",
    "AccountError",
    "AccountPolicy",
    "AccountRepository",
    "BanNotificationDispatcher",
    "BanState",
    "DuplicateEmail",
    "DuplicateUsername",
    "EventBus",
    "HookChain",
    "InvalidToken",
    "NotFound",
    "Notification",
    "NotificationTransport",
    "PasswordHasher",
    "PasswordService",
    "RegistrationDisabled",
    "RegistrationError",
    "RegistrationService",
    "ResetToken",
    "ResetTokenRepository",
    "Site",
    "SubscriptionNotifier",
    "TokenState",
    "UrlBuilder",
    "UserDirectory",
    "ValidationError",
    "ValidationResults",
    "Validator",
    "generate_password",
]
