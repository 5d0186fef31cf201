"""
Validation engine - Username, password and email checks.

Single-field validators raise ValidationError on the first problem
found and return True otherwise. ValidationResults collects outcomes
for several fields so a caller can report every problem at once.
"""

import re
from dataclasses import dataclass, field

from email_validator import EmailNotValidError, validate_email

from .exceptions import ValidationError

# Letters, digits and . _ - only, starting and ending with a letter or digit.
# Keeps usernames safe as a filesystem path component.
_USERNAME_PATTERN = re.compile(r"[A-Za-z0-9](?:[A-Za-z0-9._-]*[A-Za-z0-9])?")


@dataclass(frozen=True)
class AccountPolicy:
    """Configurable limits applied by the Validator."""

    min_username_length: int = 4
    max_username_length: int = 128
    min_password_length: int = 6
    reserved_usernames: frozenset[str] = frozenset({"admin", "root", "system", "api"})


@dataclass
class Validator:
    """Deterministic, side-effect free field validation."""

    policy: AccountPolicy = field(default_factory=AccountPolicy)

    def validate_username(self, username: str) -> bool:
        if not username:
            raise ValidationError("username", "Username must not be empty")

        if len(username) < self.policy.min_username_length:
            raise ValidationError(
                "username",
                f"Username must be at least {self.policy.min_username_length} characters",
            )

        if len(username) > self.policy.max_username_length:
            raise ValidationError(
                "username",
                f"Username must be at most {self.policy.max_username_length} characters",
            )

        if not _USERNAME_PATTERN.fullmatch(username):
            raise ValidationError(
                "username",
                "Username may only contain letters, digits, '.', '_' and '-', "
                "and must start and end with a letter or digit",
            )

        reserved = {name.lower() for name in self.policy.reserved_usernames}
        if username.lower() in reserved:
            raise ValidationError("username", "Username is reserved")

        return True

    def validate_password(self, password: str) -> bool:
        if not password:
            raise ValidationError("password", "Password must not be empty")

        if len(password) < self.policy.min_password_length:
            raise ValidationError(
                "password",
                f"Password must be at least {self.policy.min_password_length} characters",
            )

        return True

    def validate_email_address(self, address: str) -> bool:
        if not address:
            raise ValidationError("email", "Email address must not be empty")

        try:
            validate_email(address, check_deliverability=False)
        except EmailNotValidError as e:
            raise ValidationError("email", "Invalid email address") from e

        return True


_default_validator = Validator()


def validate_username(username: str) -> bool:
    """Validate a username against the default policy."""
    return _default_validator.validate_username(username)


def validate_password(password: str) -> bool:
    """Validate a password against the default policy."""
    return _default_validator.validate_password(password)


def validate_email_address(address: str) -> bool:
    """Validate an email address."""
    return _default_validator.validate_email_address(address)


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating one field."""

    field: str
    value: object
    message: str = ""
    success: bool = True


class ValidationResults:
    """Ordered collection of per-field validation outcomes."""

    def __init__(self) -> None:
        self._results: list[ValidationResult] = []

    def pass_(self, field: str, value: object, message: str = "") -> None:
        self._results.append(ValidationResult(field, value, message, True))

    def fail(self, field: str, value: object, message: str) -> None:
        self._results.append(ValidationResult(field, value, message, False))

    def has_failures(self) -> bool:
        return any(not result.success for result in self._results)

    def get_failures(self) -> list[ValidationResult]:
        return [result for result in self._results if not result.success]

    def get_all(self) -> list[ValidationResult]:
        return list(self._results)

    def __iter__(self):
        return iter(self._results)

    def __len__(self) -> int:
        return len(self._results)
