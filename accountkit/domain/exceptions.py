"""
Domain exceptions - Semantic error types for account management.

This module defines domain-specific exceptions that communicate
business rule violations without leaking infrastructure details.
"""


class AccountError(Exception):
    """Base class for account domain errors."""

    pass


class ValidationError(AccountError):
    """A single field failed a syntactic or policy check.

    The reason is user-correctable and safe to show verbatim.
    """

    def __init__(self, field: str, reason: str) -> None:
        self.field = field
        self.reason = reason
        super().__init__(reason)


class DuplicateUsername(AccountError):
    """Username is already taken."""

    pass


class DuplicateEmail(AccountError):
    """Email is already registered and uniqueness is enforced."""

    pass


class InvalidToken(AccountError):
    """Reset code is missing, wrong, consumed or expired.

    Deliberately carries no sub-reason.
    """

    def __init__(self) -> None:
        super().__init__("Invalid or expired code")


class NotFound(AccountError):
    """Account lookup miss."""

    pass


class RegistrationError(AccountError):
    """Registration refused by policy or by a storage conflict."""

    pass


class RegistrationDisabled(RegistrationError):
    """New registrations are turned off."""

    pass
