"""
Registration domain service - Account creation and pre-submission checks.

register() validates and creates an account, stopping at the first
problem. validate_account_data() runs the same checks but collects
every failure into a ValidationResults, for forms that want to show
all problems at once.

Registration order:
1. Policy gate (registration enabled)
2. Username, password, email validation (first failure aborts)
3. Email availability, unless multiple accounts per email are allowed
4. One-way password hashing
5. Atomic create in the credential store (username uniqueness enforced
   by the storage layer)
"""

import logging
from dataclasses import dataclass, field

from .exceptions import (
    DuplicateEmail,
    DuplicateUsername,
    NotFound,
    RegistrationDisabled,
    RegistrationError,
    ValidationError,
)
from .passwords import PasswordHasher
from .ports import AccountRepository
from .validation import ValidationResults, Validator

logger = logging.getLogger(__name__)

PasswordInput = str | tuple[str, str] | list[str]


@dataclass
class RegistrationService:
    """
    Domain service for user registration.

    Orchestrates normalization, validation, password hashing and
    account persistence.
    """

    accounts: AccountRepository
    validator: Validator = field(default_factory=Validator)
    hasher: PasswordHasher = field(default_factory=PasswordHasher)
    allow_registration: bool = True
    allow_multiple_emails: bool = False

    def register(
        self,
        username: str,
        password: str,
        display_name: str | None,
        email: str,
        allow_multiple_emails: bool | None = None,
        language: str = "en",
    ) -> int:
        """
        Register a new account.

        Args:
            username: Requested username (surrounding whitespace stripped)
            password: Clear text password (hashed before storage)
            display_name: Free-text display name
            email: Email address (normalized)
            allow_multiple_emails: Override the service-wide email policy

        Returns:
            The new account's guid

        Raises:
            RegistrationError: Registration disabled, or username taken
            ValidationError: First invalid field
            DuplicateEmail: Email taken while uniqueness is enforced
        """
        if not self.allow_registration:
            raise RegistrationDisabled("Registration is disabled")

        username = self._normalize_username(username)
        display_name = self._normalize_display_name(display_name)
        email = self._normalize_email(email)

        self.validator.validate_username(username)
        self._validate_display_name(display_name)
        self.validator.validate_password(password)
        self.validator.validate_email_address(email)

        unique_email = not self._allow_multiple(allow_multiple_emails)
        if unique_email and self.accounts.get_by_email(email):
            raise DuplicateEmail(email)

        password_hash = self.hasher.hash(password)

        try:
            guid = self.accounts.create(
                username,
                password_hash,
                display_name,
                email,
                unique_email=unique_email,
                language=language,
            )
        except DuplicateUsername as e:
            raise RegistrationError(f"Username {username} is already taken") from e

        logger.info("Registered account %s (guid=%s)", username, guid)
        return guid

    def validate_account_data(
        self,
        username: str,
        password: PasswordInput,
        display_name: str | None,
        email: str,
        allow_multiple_emails: bool | None = None,
    ) -> ValidationResults:
        """
        Check registration data without creating anything.

        Never raises for bad input. password may be a
        (password, confirmation) pair; a mismatch is reported as a
        password failure. Password values are never echoed back in
        the results.
        """
        results = ValidationResults()
        username = self._normalize_username(username)
        email = self._normalize_email(email)

        try:
            self.validator.validate_username(username)
        except ValidationError as e:
            results.fail("username", username, e.reason)
        else:
            if self._username_taken(username):
                results.fail("username", username, "Username is already taken")
            else:
                results.pass_("username", username)

        if isinstance(password, (tuple, list)):
            password, confirmation = password[0], password[1]
        else:
            confirmation = password

        try:
            self.validator.validate_password(password)
        except ValidationError as e:
            results.fail("password", None, e.reason)
        else:
            if password != confirmation:
                results.fail("password", None, "Passwords do not match")
            else:
                results.pass_("password", None)

        display_name = self._normalize_display_name(display_name)
        try:
            self._validate_display_name(display_name)
        except ValidationError as e:
            results.fail("name", display_name, e.reason)
        else:
            results.pass_("name", display_name)

        try:
            self.validator.validate_email_address(email)
        except ValidationError as e:
            results.fail("email", email, e.reason)
        else:
            unique_email = not self._allow_multiple(allow_multiple_emails)
            if unique_email and self.accounts.get_by_email(email):
                results.fail("email", email, "Email address is already registered")
            else:
                results.pass_("email", email)

        return results

    def generate_invite_code(self, username: str) -> str:
        """
        Issue an invite code tied to the inviting username.

        Replaces the user's previous code. Raises NotFound for unknown users.
        """
        code = self.accounts.generate_invite_code(username)
        logger.info("Generated invite code for %s", username)
        return code

    def validate_invite_code(self, username: str, code: str) -> bool:
        """Check an invite code. Never mutates state."""
        return self.accounts.validate_invite_code(username, code)

    def _allow_multiple(self, override: bool | None) -> bool:
        return self.allow_multiple_emails if override is None else override

    def _username_taken(self, username: str) -> bool:
        try:
            self.accounts.get_by_username(username)
        except NotFound:
            return False
        return True

    def _normalize_username(self, username: str) -> str:
        return (username or "").strip()

    def _normalize_display_name(self, display_name: str | None) -> str:
        return (display_name or "").strip()

    def _validate_display_name(self, display_name: str) -> None:
        if not display_name:
            raise ValidationError("name", "Display name must not be empty")

    def _normalize_email(self, email: str) -> str:
        """
        Normalize email address for consistent storage and lookup.

        Applies: strip whitespace + lowercase
        """
        return (email or "").strip().lower()
