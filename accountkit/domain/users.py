"""
User lookups and administrative state changes.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta

from .exceptions import NotFound
from .hooks import EventBus
from .passwords import utcnow
from .ports import Account, AccountRepository, BanState

logger = logging.getLogger(__name__)


@dataclass
class UserDirectory:
    """Read access to accounts, returning None instead of raising on a miss."""

    accounts: AccountRepository
    clock: Callable[[], datetime] = utcnow

    def get_user(self, guid: int) -> Account | None:
        try:
            return self.accounts.get(guid)
        except NotFound:
            logger.error("No account with guid %s", guid)
            return None

    def get_user_by_username(self, username: str) -> Account | None:
        try:
            return self.accounts.get_by_username(username)
        except NotFound:
            return None

    def get_user_by_email(self, email: str) -> list[Account]:
        return self.accounts.get_by_email(email.strip().lower())

    def record_activity(self, guid: int) -> None:
        self.accounts.touch(guid, self.clock())

    def find_active_users(
        self, seconds: int = 600, limit: int = 10, offset: int = 0, count: bool = False
    ) -> list[Account] | int:
        """
        Accounts active within the last `seconds` seconds (default 10 minutes).

        With count=True the number of such accounts is returned instead.
        """
        since = self.clock() - timedelta(seconds=seconds)
        if count:
            return self.accounts.count_active(since)
        return self.accounts.find_active(since, limit, offset)


@dataclass
class AccountAdministration:
    """Ban and unban accounts, emitting events on real transitions only."""

    accounts: AccountRepository
    bus: EventBus

    def ban(self, guid: int) -> bool:
        return self._transition(guid, BanState.BANNED, "ban")

    def unban(self, guid: int) -> bool:
        return self._transition(guid, BanState.ACTIVE, "unban")

    def _transition(self, guid: int, state: BanState, event: str) -> bool:
        changed = self.accounts.set_ban_state(guid, state)
        if not changed:
            logger.info("Account %s already in state %s", guid, state.value)
            return False

        account = self.accounts.get(guid)
        logger.info("Account %s is now %s", guid, state.value)
        self.bus.emit(event, account)
        return True
