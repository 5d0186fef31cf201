"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the interfaces (ports) that the domain requires
from infrastructure, plus the value types that cross them. Adapters
implement these protocols.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Protocol


class BanState(str, Enum):
    """Ban state of an account."""

    ACTIVE = "ACTIVE"
    BANNED = "BANNED"


class TokenState(str, Enum):
    """
    Reset token lifecycle states.

    State Transitions (forward-only):
    - ISSUED -> CONSUMED (first successful use)
    - ISSUED -> EXPIRED (TTL exceeded, token discarded on detection)

    Issuing a new token for the same account replaces the previous one,
    which becomes unreachable.
    """

    ISSUED = "ISSUED"
    CONSUMED = "CONSUMED"
    EXPIRED = "EXPIRED"


@dataclass
class Account:
    """A registered identity and its authentication material."""

    guid: int
    username: str
    email: str
    password_hash: str
    display_name: str
    ban_state: BanState = BanState.ACTIVE
    language: str = "en"
    last_action: datetime | None = None

    @property
    def is_banned(self) -> bool:
        return self.ban_state == BanState.BANNED


@dataclass
class ResetToken:
    """Time-limited, single-use password reset code for one account."""

    account_guid: int
    code: str
    issued_at: datetime
    expires_at: datetime
    consumed: bool = False

    def state(self, now: datetime) -> TokenState:
        if self.consumed:
            return TokenState.CONSUMED
        if now >= self.expires_at:
            return TokenState.EXPIRED
        return TokenState.ISSUED

    def is_active(self, now: datetime) -> bool:
        return self.state(now) == TokenState.ISSUED


class AccountRepository(Protocol):
    """Port interface for the credential store."""

    def create(
        self,
        username: str,
        password_hash: str,
        display_name: str,
        email: str,
        *,
        unique_email: bool = True,
        language: str = "en",
    ) -> int:
        """
        Atomically create an account.

        Username uniqueness is enforced by the storage layer. When
        unique_email is True, email uniqueness is enforced as well.

        Returns:
            The new account's guid

        Raises:
            DuplicateUsername: If the username is taken
            DuplicateEmail: If unique_email is set and the email is taken
        """
        ...

    def get(self, guid: int) -> Account:
        """Fetch an account by guid. Raises NotFound."""
        ...

    def get_by_username(self, username: str) -> Account:
        """Fetch an account by username (case-insensitive). Raises NotFound."""
        ...

    def get_by_email(self, email: str) -> list[Account]:
        """Fetch all accounts registered with an email (possibly empty)."""
        ...

    def set_password_hash(self, guid: int, password_hash: str) -> None:
        """Overwrite the password hash. Raises NotFound."""
        ...

    def set_ban_state(self, guid: int, state: BanState) -> bool:
        """
        Change the ban state.

        Returns:
            True if the state changed, False if it already had that value

        Raises:
            NotFound: If the account does not exist
        """
        ...

    def generate_invite_code(self, username: str) -> str:
        """Store a new random invite code for username, replacing any prior one. Raises NotFound."""
        ...

    def validate_invite_code(self, username: str, code: str) -> bool:
        """True iff the stored invite code for username equals code. No mutation."""
        ...

    def touch(self, guid: int, when: datetime) -> None:
        """Record the time of the account's latest action."""
        ...

    def find_active(self, since: datetime, limit: int, offset: int) -> list[Account]:
        """Accounts with last_action at or after since, most recent first."""
        ...

    def count_active(self, since: datetime) -> int:
        """Number of accounts with last_action at or after since."""
        ...


class ResetTokenRepository(Protocol):
    """Port interface for reset token persistence."""

    def replace(self, token: ResetToken) -> None:
        """Store token as the account's only token, overwriting any prior one."""
        ...

    def get(self, account_guid: int) -> ResetToken | None:
        """Return the account's current token, consumed or not."""
        ...

    def consume(self, account_guid: int, code: str, now: datetime) -> bool:
        """
        Atomically mark the token consumed (compare-and-swap).

        Succeeds only if the stored code equals code, the token is not
        yet consumed and not expired at now. Of concurrent callers, at
        most one receives True.
        """
        ...

    def discard(self, account_guid: int) -> None:
        """Delete the account's token if present."""
        ...


class NotificationTransport(Protocol):
    """Port interface for message delivery (email)."""

    def send(
        self,
        recipient_guid: int,
        address: str,
        subject: str,
        body: str,
        channel: str = "email",
    ) -> None:
        """
        Deliver a message to an account.

        Fire-and-forget: callers log failures and carry on.
        """
        ...
