"""
PostgreSQL repository adapters - Implement the domain's storage ports.

This module provides the PostgreSQL implementations of the credential
store and reset token ports using psycopg3 with raw SQL.

Atomicity Design:
-----------------
1. **Username uniqueness**: a UNIQUE index on lower(username). Concurrent
   creates with the same username have exactly one winner; the losers
   get a UniqueViolation, mapped to DuplicateUsername.

2. **Email uniqueness (optional)**: duplicates may be allowed per call,
   so it cannot be a table constraint. When enforced, create() takes a
   transaction-scoped advisory lock keyed on the email before checking
   and inserting, which serializes competing registrations for that
   address inside the database.

3. **Reset token consumption**: a conditional UPDATE ... WHERE consumed =
   FALSE. Only one concurrent caller can flip the flag (rowcount == 1).

4. **Invite code comparison**: secrets.compare_digest(), against a dummy
   value when the user does not exist.
"""

import logging
import secrets
from datetime import datetime
from pathlib import Path

from psycopg import errors
from psycopg_pool import ConnectionPool

from accountkit.domain.exceptions import DuplicateEmail, DuplicateUsername, NotFound
from accountkit.domain.ports import Account, BanState, ResetToken

logger = logging.getLogger(__name__)

_ACCOUNT_COLUMNS = (
    "guid, username, email, password_hash, display_name, ban_state, language, last_action"
)


def _row_to_account(row: tuple) -> Account:
    return Account(
        guid=row[0],
        username=row[1],
        email=row[2],
        password_hash=row[3],
        display_name=row[4],
        ban_state=BanState(row[5]),
        language=row[6],
        last_action=row[7],
    )


class PostgresAccountRepository:
    """
    Implements AccountRepository protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    All SQL uses parameterized queries for security.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        """
        Initialize repository with connection pool.

        Args:
            pool: psycopg3 ConnectionPool for database connections
        """
        self._pool = pool

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

        Raises:
            DuplicateUsername: UNIQUE index on lower(username) violated
            DuplicateEmail: unique_email set and email already registered
        """
        insert_sql = """
            INSERT INTO accounts (username, email, password_hash, display_name, language)
            VALUES (%s, %s, %s, %s, %s)
            RETURNING guid
        """

        with self._pool.connection() as conn, conn.cursor() as cursor:
            if unique_email:
                cursor.execute("SELECT pg_advisory_xact_lock(hashtext(%s))", (email,))
                cursor.execute("SELECT 1 FROM accounts WHERE email = %s LIMIT 1", (email,))
                if cursor.fetchone() is not None:
                    conn.rollback()
                    raise DuplicateEmail(email)

            try:
                cursor.execute(
                    insert_sql, (username, email, password_hash, display_name, language)
                )
            except errors.UniqueViolation:
                conn.rollback()
                raise DuplicateUsername(username) from None

            guid = cursor.fetchone()[0]
            conn.commit()
            return guid

    def get(self, guid: int) -> Account:
        sql = f"SELECT {_ACCOUNT_COLUMNS} FROM accounts WHERE guid = %s"

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (guid,))
            row = cursor.fetchone()

        if row is None:
            raise NotFound(guid)
        return _row_to_account(row)

    def get_by_username(self, username: str) -> Account:
        sql = f"SELECT {_ACCOUNT_COLUMNS} FROM accounts WHERE lower(username) = lower(%s)"

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (username,))
            row = cursor.fetchone()

        if row is None:
            raise NotFound(username)
        return _row_to_account(row)

    def get_by_email(self, email: str) -> list[Account]:
        sql = f"SELECT {_ACCOUNT_COLUMNS} FROM accounts WHERE email = %s ORDER BY guid"

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (email,))
            rows = cursor.fetchall()

        return [_row_to_account(row) for row in rows]

    def set_password_hash(self, guid: int, password_hash: str) -> None:
        sql = "UPDATE accounts SET password_hash = %s WHERE guid = %s"

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (password_hash, guid))
            conn.commit()
            if cursor.rowcount != 1:
                raise NotFound(guid)

    def set_ban_state(self, guid: int, state: BanState) -> bool:
        """
        Change ban state with a conditional UPDATE.

        Returns True only when the row actually transitioned, so each
        transition is reported to exactly one caller.
        """
        update_sql = """
            UPDATE accounts SET ban_state = %s
            WHERE guid = %s AND ban_state <> %s
        """

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(update_sql, (state.value, guid, state.value))
            changed = cursor.rowcount == 1
            if not changed:
                cursor.execute("SELECT 1 FROM accounts WHERE guid = %s", (guid,))
                exists = cursor.fetchone() is not None
            conn.commit()

        if not changed and not exists:
            raise NotFound(guid)
        return changed

    def generate_invite_code(self, username: str) -> str:
        code = secrets.token_urlsafe(16)
        sql = "UPDATE accounts SET invite_code = %s WHERE lower(username) = lower(%s)"

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (code, username))
            conn.commit()
            if cursor.rowcount != 1:
                raise NotFound(username)

        return code

    def validate_invite_code(self, username: str, code: str) -> bool:
        sql = "SELECT invite_code FROM accounts WHERE lower(username) = lower(%s)"

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (username,))
            row = cursor.fetchone()

        stored = row[0] if row is not None else None
        # Compare against a throwaway value on a miss to keep timing uniform
        expected = stored if stored is not None else secrets.token_urlsafe(16)
        matches = secrets.compare_digest(expected.encode(), code.encode())
        return stored is not None and matches

    def touch(self, guid: int, when: datetime) -> None:
        sql = "UPDATE accounts SET last_action = %s WHERE guid = %s"

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (when, guid))
            conn.commit()
            if cursor.rowcount != 1:
                raise NotFound(guid)

    def find_active(self, since: datetime, limit: int, offset: int) -> list[Account]:
        sql = f"""
            SELECT {_ACCOUNT_COLUMNS} FROM accounts
            WHERE last_action >= %s
            ORDER BY last_action DESC
            LIMIT %s OFFSET %s
        """

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (since, limit, offset))
            rows = cursor.fetchall()

        return [_row_to_account(row) for row in rows]

    def count_active(self, since: datetime) -> int:
        sql = "SELECT COUNT(*) FROM accounts WHERE last_action >= %s"

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (since,))
            return cursor.fetchone()[0]


class PostgresResetTokenRepository:
    """
    Implements ResetTokenRepository protocol via psycopg3.

    One row per account: issuing a token upserts over the previous one.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        self._pool = pool

    def replace(self, token: ResetToken) -> None:
        sql = """
            INSERT INTO reset_tokens (account_guid, code, issued_at, expires_at, consumed)
            VALUES (%s, %s, %s, %s, FALSE)
            ON CONFLICT (account_guid) DO UPDATE
            SET code = EXCLUDED.code,
                issued_at = EXCLUDED.issued_at,
                expires_at = EXCLUDED.expires_at,
                consumed = FALSE
        """

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(
                sql, (token.account_guid, token.code, token.issued_at, token.expires_at)
            )
            conn.commit()

    def get(self, account_guid: int) -> ResetToken | None:
        sql = """
            SELECT account_guid, code, issued_at, expires_at, consumed
            FROM reset_tokens
            WHERE account_guid = %s
        """

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (account_guid,))
            row = cursor.fetchone()

        if row is None:
            return None
        return ResetToken(
            account_guid=row[0],
            code=row[1],
            issued_at=row[2],
            expires_at=row[3],
            consumed=row[4],
        )

    def consume(self, account_guid: int, code: str, now: datetime) -> bool:
        """
        Compare-and-swap the consumed flag.

        The WHERE clause re-checks code, consumed and expiry, so a token
        replaced or redeemed since the caller read it cannot be consumed.
        """
        sql = """
            UPDATE reset_tokens
            SET consumed = TRUE
            WHERE account_guid = %s
              AND code = %s
              AND consumed = FALSE
              AND expires_at > %s
        """

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (account_guid, code, now))
            conn.commit()
            return cursor.rowcount == 1

    def discard(self, account_guid: int) -> None:
        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute("DELETE FROM reset_tokens WHERE account_guid = %s", (account_guid,))
            conn.commit()


def run_migrations(pool: ConnectionPool) -> None:
    """
    Execute all SQL migration files from the migrations directory.

    Migrations are executed in sorted order (alphabetically by filename).
    Each migration should be idempotent (use IF NOT EXISTS, etc.).

    Args:
        pool: psycopg3 ConnectionPool instance
    """
    # Structure: accountkit/adapters/repository/postgres.py -> migrations/
    migrations_dir = Path(__file__).parent.parent.parent.parent / "migrations"

    if not migrations_dir.exists():
        logger.warning("Migrations directory not found: %s", migrations_dir)
        return

    sql_files = sorted(migrations_dir.glob("*.sql"))

    if not sql_files:
        logger.info("No migration files found")
        return

    logger.info("Running %d migration(s)", len(sql_files))

    for sql_file in sql_files:
        logger.info("Executing migration: %s", sql_file.name)
        try:
            sql_content = sql_file.read_text()

            with pool.connection() as conn:
                conn.execute(sql_content)

            logger.info("Migration complete: %s", sql_file.name)
        except Exception as e:
            logger.error("Migration failed: %s - %s", sql_file.name, e)
            raise RuntimeError(f"Database migration failed: {sql_file.name}") from e
