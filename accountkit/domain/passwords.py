"""
Password service - Hashing, generation and the reset token lifecycle.

Reset Token Lifecycle (per account)
===================================

    NoActiveToken -> ISSUED -> CONSUMED   (first successful use)
                            -> EXPIRED    (TTL exceeded, token discarded)

Issuing a new token overwrites the previous one, so at most one token
per account is ever active. Consumption is a compare-and-swap in the
ResetTokenRepository: of two concurrent attempts with the right code,
at most one succeeds.

Every failure to redeem a code surfaces as the same InvalidToken error,
whatever the underlying reason (no token, wrong code, consumed, expired).
"""

import logging
import secrets
import string
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

import bcrypt

from .exceptions import InvalidToken, ValidationError
from .hooks import UrlBuilder
from .messages import translate
from .ports import AccountRepository, NotificationTransport, ResetToken, ResetTokenRepository
from .validation import Validator

logger = logging.getLogger(__name__)

# bcrypt ignores input past 72 bytes (newer releases reject it outright)
_BCRYPT_MAX_BYTES = 72

# Letters and digits without look-alikes (0/O, 1/l/I), plus a few symbols
_PASSWORD_ALPHABET = (
    "".join(c for c in string.ascii_letters + string.digits if c not in "0O1lI") + "!#$%&*+-=?@_"
)

DEFAULT_PASSWORD_LENGTH = 12


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def generate_password(length: int = DEFAULT_PASSWORD_LENGTH) -> str:
    """
    Generate a random clear text password.

    Uses the secrets module for cryptographic randomness. The result
    always contains at least one lowercase letter, one uppercase letter
    and one digit.
    """
    if length < 3:
        raise ValueError("length must be at least 3")

    while True:
        password = "".join(secrets.choice(_PASSWORD_ALPHABET) for _ in range(length))
        if (
            any(c.islower() for c in password)
            and any(c.isupper() for c in password)
            and any(c.isdigit() for c in password)
        ):
            return password


def generate_reset_code() -> str:
    """Random confirmation code, safe to embed in a URL."""
    return secrets.token_urlsafe(24)


@dataclass(frozen=True)
class PasswordHasher:
    """One-way salted hashing with bcrypt."""

    rounds: int = 10

    def hash(self, password: str) -> str:
        return bcrypt.hashpw(self._encode(password), bcrypt.gensalt(rounds=self.rounds)).decode()

    def verify(self, password: str, password_hash: str) -> bool:
        if not password_hash:
            return False
        return bcrypt.checkpw(self._encode(password), password_hash.encode())

    @staticmethod
    def _encode(password: str) -> bytes:
        return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]


@dataclass(frozen=True)
class ResetRequest:
    """Metadata about an issued reset token. Never carries the code."""

    account_guid: int
    issued_at: datetime
    expires_at: datetime
    delivered: bool


@dataclass(frozen=True)
class ResetOutcome:
    """Result of a successful reset.

    password is the clear text value actually set; when generated is
    True the caller is responsible for delivering it.
    """

    password: str
    generated: bool
    success: bool = True


@dataclass
class PasswordService:
    """
    Domain service for password resets.

    Orchestrates token issuance, code verification, password
    validation and hashing, and the related user notifications.
    """

    accounts: AccountRepository
    tokens: ResetTokenRepository
    notifier: NotificationTransport
    urls: UrlBuilder
    site_name: str
    hasher: PasswordHasher = field(default_factory=PasswordHasher)
    validator: Validator = field(default_factory=Validator)
    ttl_seconds: int = 86400
    clock: Callable[[], datetime] = utcnow

    def send_new_password_request(self, guid: int) -> ResetRequest | bool:
        """
        Issue a reset token and email the reset link to the account.

        Any previously issued token for the account stops working.

        Returns:
            ResetRequest on success, False if the account has no usable email

        Raises:
            NotFound: If the account does not exist
        """
        account = self.accounts.get(guid)

        try:
            self.validator.validate_email_address(account.email)
        except ValidationError:
            logger.warning("Account %s has no usable email, reset not issued", guid)
            return False

        now = self.clock()
        token = ResetToken(
            account_guid=guid,
            code=generate_reset_code(),
            issued_at=now,
            expires_at=now + timedelta(seconds=self.ttl_seconds),
        )
        self.tokens.replace(token)
        logger.info("Issued password reset token for account %s", guid)

        link = self.urls.reset_password_url(guid, token.code)
        subject = translate("email:changereq:subject", [], account.language)
        body = translate(
            "email:changereq:body",
            [account.display_name, self.site_name, link],
            account.language,
        )
        delivered = self._notify(account.guid, account.email, subject, body)

        return ResetRequest(
            account_guid=guid,
            issued_at=token.issued_at,
            expires_at=token.expires_at,
            delivered=delivered,
        )

    def execute_new_password_request(
        self, guid: int, code: str, password: str | None = None
    ) -> ResetOutcome:
        """
        Redeem a reset code and change the password.

        A random password is generated when none is supplied.

        Raises:
            InvalidToken: No active token, wrong code, or token expired
            ValidationError: The supplied password violates policy
                (the token stays usable)
        """
        token = self.tokens.get(guid)
        now = self.clock()

        # Always compare, even without a token, to keep timing uniform
        stored_code = token.code if token is not None else generate_reset_code()
        code_valid = secrets.compare_digest(stored_code.encode(), code.encode())

        if token is None or token.consumed or not code_valid:
            logger.info("Rejected password reset for account %s", guid)
            raise InvalidToken()

        if not token.is_active(now):
            self.tokens.discard(guid)
            logger.info("Discarded expired reset token for account %s", guid)
            raise InvalidToken()

        generated = password is None
        if password is None:
            password = generate_password(
                max(DEFAULT_PASSWORD_LENGTH, self.validator.policy.min_password_length)
            )
        self.validator.validate_password(password)
        password_hash = self.hasher.hash(password)

        if not self.tokens.consume(guid, token.code, now):
            # Lost the race against a concurrent redemption, or expired meanwhile
            raise InvalidToken()

        self.accounts.set_password_hash(guid, password_hash)
        logger.info("Password reset completed for account %s", guid)

        self._send_password_changed(guid)
        return ResetOutcome(password=password, generated=generated)

    def force_password_reset(self, guid: int, password: str) -> bool:
        """
        Set a password directly, bypassing the token check.

        Privileged: only for administrative tooling, never for input
        coming from an untrusted request.
        """
        self.validator.validate_password(password)
        self.accounts.set_password_hash(guid, self.hasher.hash(password))
        logger.info("Password force-reset for account %s", guid)
        return True

    def send_generated_password(self, guid: int, password: str) -> bool:
        """Email a freshly generated password to its owner."""
        account = self.accounts.get(guid)
        subject = translate("email:resetpassword:subject", [], account.language)
        body = translate(
            "email:resetpassword:body",
            [account.display_name, password],
            account.language,
        )
        return self._notify(account.guid, account.email, subject, body)

    def _send_password_changed(self, guid: int) -> None:
        account = self.accounts.get(guid)
        subject = translate("email:changepassword:subject", [], account.language)
        body = translate(
            "email:changepassword:body",
            [account.display_name, self.site_name],
            account.language,
        )
        self._notify(account.guid, account.email, subject, body)

    def _notify(self, guid: int, address: str, subject: str, body: str) -> bool:
        try:
            self.notifier.send(guid, address, subject, body, "email")
        except Exception:
            # Delivery failures never undo token issuance or password changes
            logger.exception("Failed to deliver email to account %s", guid)
            return False
        return True
