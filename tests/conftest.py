"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- A controllable clock for expiry tests
- In-memory repositories wired to that clock
- A session issuer with a test secret
- A PostgreSQL pool that skips dependent tests when no database is reachable
"""

from collections.abc import Generator
from datetime import datetime, timedelta, timezone

import pytest
from psycopg_pool import ConnectionPool, PoolTimeout

from nutrisnap.adapters.repository.memory import (
    InMemoryAccountRepository,
    InMemoryPendingRegistrationRepository,
)
from nutrisnap.adapters.repository.postgres import run_migrations
from nutrisnap.config.settings import get_settings
from nutrisnap.domain.sessions import SessionIssuer

TEST_SECRET = "test-secret-key-with-enough-length-for-hs256"


class FakeClock:
    """Callable clock whose time only moves when told to."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def pending_repository(clock: FakeClock) -> InMemoryPendingRegistrationRepository:
    return InMemoryPendingRegistrationRepository(ttl_minutes=15, clock=clock)


@pytest.fixture
def account_repository(clock: FakeClock) -> InMemoryAccountRepository:
    return InMemoryAccountRepository(clock=clock)


@pytest.fixture
def session_issuer() -> SessionIssuer:
    return SessionIssuer(secret_key=TEST_SECRET)


@pytest.fixture(scope="session")
def pg_pool() -> Generator[ConnectionPool, None, None]:
    """PostgreSQL pool with migrations applied; skips when unreachable."""
    pool = ConnectionPool(
        conninfo=get_settings().database_url,
        min_size=1,
        max_size=10,
        open=False,
    )
    try:
        pool.open(wait=True, timeout=3)
    except PoolTimeout:
        pool.close()
        pytest.skip("PostgreSQL is not reachable")

    run_migrations(pool)
    yield pool
    pool.close()
