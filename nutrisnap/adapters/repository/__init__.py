"""Repository adapters - Database and in-memory implementations."""

from .accounts import PostgresAccountRepository
from .memory import InMemoryAccountRepository, InMemoryPendingRegistrationRepository
from .postgres import PostgresPendingRegistrationRepository, run_migrations

__all__ = [
    "InMemoryAccountRepository",
    "InMemoryPendingRegistrationRepository",
    "PostgresAccountRepository",
    "PostgresPendingRegistrationRepository",
    "run_migrations",
]
