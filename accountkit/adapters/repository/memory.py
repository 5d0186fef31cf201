"""
In-memory repository adapters - Implement the domain's storage ports.

Used by tests and local development. A lock per repository plays the
role of the database's uniqueness constraints and conditional updates,
so the atomicity guarantees match the PostgreSQL adapters. Accounts are
copied on the way in and out; callers never hold live references.
"""

import itertools
import secrets
import threading
from dataclasses import replace
from datetime import datetime

from accountkit.domain.exceptions import DuplicateEmail, DuplicateUsername, NotFound
from accountkit.domain.ports import Account, BanState, ResetToken


class InMemoryAccountRepository:
    """
    Implements AccountRepository protocol with dictionaries.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._accounts: dict[int, Account] = {}
        self._by_username: dict[str, int] = {}
        self._invite_codes: dict[int, str] = {}
        self._ids = itertools.count(1)

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
        key = username.lower()
        with self._lock:
            if key in self._by_username:
                raise DuplicateUsername(username)
            if unique_email and any(a.email == email for a in self._accounts.values()):
                raise DuplicateEmail(email)

            guid = next(self._ids)
            self._accounts[guid] = Account(
                guid=guid,
                username=username,
                email=email,
                password_hash=password_hash,
                display_name=display_name,
                language=language,
            )
            self._by_username[key] = guid
            return guid

    def get(self, guid: int) -> Account:
        with self._lock:
            return replace(self._get(guid))

    def get_by_username(self, username: str) -> Account:
        with self._lock:
            guid = self._by_username.get(username.lower())
            if guid is None:
                raise NotFound(username)
            return replace(self._accounts[guid])

    def get_by_email(self, email: str) -> list[Account]:
        with self._lock:
            return [replace(a) for a in self._accounts.values() if a.email == email]

    def set_password_hash(self, guid: int, password_hash: str) -> None:
        with self._lock:
            self._get(guid).password_hash = password_hash

    def set_ban_state(self, guid: int, state: BanState) -> bool:
        with self._lock:
            account = self._get(guid)
            if account.ban_state == state:
                return False
            account.ban_state = state
            return True

    def generate_invite_code(self, username: str) -> str:
        code = secrets.token_urlsafe(16)
        with self._lock:
            guid = self._by_username.get(username.lower())
            if guid is None:
                raise NotFound(username)
            self._invite_codes[guid] = code
        return code

    def validate_invite_code(self, username: str, code: str) -> bool:
        with self._lock:
            guid = self._by_username.get(username.lower())
            stored = self._invite_codes.get(guid) if guid is not None else None
        if stored is None:
            return False
        return secrets.compare_digest(stored.encode(), code.encode())

    def touch(self, guid: int, when: datetime) -> None:
        with self._lock:
            self._get(guid).last_action = when

    def find_active(self, since: datetime, limit: int, offset: int) -> list[Account]:
        with self._lock:
            active = [
                a for a in self._accounts.values()
                if a.last_action is not None and a.last_action >= since
            ]
            active.sort(key=lambda a: a.last_action, reverse=True)
            return [replace(a) for a in active[offset:offset + limit]]

    def count_active(self, since: datetime) -> int:
        with self._lock:
            return sum(
                1 for a in self._accounts.values()
                if a.last_action is not None and a.last_action >= since
            )

    def _get(self, guid: int) -> Account:
        account = self._accounts.get(guid)
        if account is None:
            raise NotFound(guid)
        return account


class InMemoryResetTokenRepository:
    """Implements ResetTokenRepository protocol with a dictionary."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._tokens: dict[int, ResetToken] = {}

    def replace(self, token: ResetToken) -> None:
        with self._lock:
            self._tokens[token.account_guid] = replace(token)

    def get(self, account_guid: int) -> ResetToken | None:
        with self._lock:
            token = self._tokens.get(account_guid)
            return replace(token) if token is not None else None

    def consume(self, account_guid: int, code: str, now: datetime) -> bool:
        with self._lock:
            token = self._tokens.get(account_guid)
            if token is None or token.code != code or not token.is_active(now):
                return False
            token.consumed = True
            return True

    def discard(self, account_guid: int) -> None:
        with self._lock:
            self._tokens.pop(account_guid, None)
