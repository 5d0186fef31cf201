"""Repository adapters - Database implementations."""

from .memory import InMemoryAccountRepository, InMemoryResetTokenRepository
from .postgres import PostgresAccountRepository, PostgresResetTokenRepository, run_migrations

__all__ = [
    "InMemoryAccountRepository",
    "InMemoryResetTokenRepository",
    "PostgresAccountRepository",
    "PostgresResetTokenRepository",
    "run_migrations",
]
