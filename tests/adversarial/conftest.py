"""
Shared fixtures for adversarial tests.

Provides common test infrastructure for race condition tests against
PostgreSQL. Tests are skipped when no database is reachable.
"""

from collections.abc import Generator

import pytest
from psycopg_pool import ConnectionPool

from nutrisnap.adapters.repository import (
    PostgresAccountRepository,
    PostgresPendingRegistrationRepository,
)


@pytest.fixture
def pending(pg_pool: ConnectionPool) -> PostgresPendingRegistrationRepository:
    return PostgresPendingRegistrationRepository(pg_pool)


@pytest.fixture
def accounts(pg_pool: ConnectionPool) -> PostgresAccountRepository:
    return PostgresAccountRepository(pg_pool)


@pytest.fixture(autouse=True)
def clean_database(pg_pool: ConnectionPool) -> Generator[None, None, None]:
    """Clean all tables before each test."""
    with pg_pool.connection() as conn:
        conn.execute("DELETE FROM meus_dados")
        conn.execute("DELETE FROM usuarios")
        conn.execute("DELETE FROM codigos_verificacao")
        conn.commit()
    yield
