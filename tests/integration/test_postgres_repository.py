"""
Integration tests for the PostgreSQL repositories.

Tests repository operations against a real PostgreSQL database.
Requires PostgreSQL to be running (via docker-compose); skipped otherwise.
"""

from collections.abc import Generator
from datetime import timedelta

import pytest
from psycopg import errors
from psycopg_pool import ConnectionPool

from nutrisnap.adapters.repository import (
    PostgresAccountRepository,
    PostgresPendingRegistrationRepository,
)
from nutrisnap.domain.exceptions import ConflictError, EmailInUseError, NotFoundError
from nutrisnap.domain.ports import (
    ExternalIdentity,
    ProfileData,
    VerificationExpired,
    VerificationInvalid,
    VerificationSuccess,
)

pytestmark = pytest.mark.integration

EMAIL = "ana@x.com"


@pytest.fixture(autouse=True)
def clean_database(pg_pool: ConnectionPool) -> Generator[None, None, None]:
    """Clean all tables before each test."""
    with pg_pool.connection() as conn:
        conn.execute("DELETE FROM meus_dados")
        conn.execute("DELETE FROM usuarios")
        conn.execute("DELETE FROM codigos_verificacao")
        conn.commit()
    yield


@pytest.fixture
def pending(pg_pool: ConnectionPool) -> PostgresPendingRegistrationRepository:
    return PostgresPendingRegistrationRepository(pg_pool)


@pytest.fixture
def accounts(pg_pool: ConnectionPool) -> PostgresAccountRepository:
    return PostgresAccountRepository(pg_pool)


def expire(pool: ConnectionPool, email: str) -> None:
    with pool.connection() as conn:
        conn.execute(
            "UPDATE codigos_verificacao SET expira_em = NOW() - INTERVAL '1 second' WHERE email = %s",
            (email,),
        )
        conn.commit()


class TestPendingRegistrations:
    def test_upsert_sets_15_minute_expiry(self, pending) -> None:
        pending.upsert("Ana", EMAIL, "$2b$10$hash", "123456")

        record = pending.find(EMAIL)

        assert record is not None
        assert record.code == "123456"
        assert record.expires_at - record.created_at == timedelta(minutes=15)

    def test_upsert_overwrites(self, pending) -> None:
        pending.upsert("Ana", EMAIL, "$2b$10$first", "111111")
        pending.upsert("Ana Maria", EMAIL, "$2b$10$second", "222222")

        record = pending.find(EMAIL)

        assert record.name == "Ana Maria"
        assert record.password_hash == "$2b$10$second"
        assert isinstance(pending.verify_and_consume(EMAIL, "111111"), VerificationInvalid)

    def test_success_consumes_record(self, pending) -> None:
        pending.upsert("Ana", EMAIL, "$2b$10$hash", "123456")

        outcome = pending.verify_and_consume(EMAIL, "123456")

        assert outcome == VerificationSuccess(name="Ana", email=EMAIL, password_hash="$2b$10$hash")
        assert pending.find(EMAIL) is None
        assert isinstance(pending.verify_and_consume(EMAIL, "123456"), VerificationInvalid)

    def test_wrong_code_keeps_record(self, pending) -> None:
        pending.upsert("Ana", EMAIL, "$2b$10$hash", "123456")

        assert isinstance(pending.verify_and_consume(EMAIL, "654321"), VerificationInvalid)
        assert pending.find(EMAIL) is not None

    def test_expired_record_is_deleted(self, pending, pg_pool) -> None:
        pending.upsert("Ana", EMAIL, "$2b$10$hash", "123456")
        expire(pg_pool, EMAIL)

        assert isinstance(pending.verify_and_consume(EMAIL, "123456"), VerificationExpired)
        assert pending.find(EMAIL) is None

    def test_code_shape_enforced_by_schema(self, pending) -> None:
        with pytest.raises(errors.CheckViolation):
            pending.upsert("Ana", EMAIL, "$2b$10$hash", "12ab")


class TestAccounts:
    def test_create_and_find(self, accounts) -> None:
        account = accounts.create_from_hash("Ana", EMAIL, "$2b$10$hash")

        assert account.email_verified is True
        assert accounts.find_by_email(EMAIL) == account
        assert accounts.find_by_id(account.id) == account

    def test_verified_email_conflicts(self, accounts) -> None:
        accounts.create_from_hash("Ana", EMAIL, "$2b$10$hash")

        with pytest.raises(ConflictError):
            accounts.create_from_hash("Other", EMAIL, "$2b$10$other")

    def test_unverified_row_overwritten(self, accounts) -> None:
        legacy = accounts.create_from_hash("Old", EMAIL, "$2b$10$old", email_verified=False)

        account = accounts.create_from_hash("Ana", EMAIL, "$2b$10$new")

        assert account.id == legacy.id
        assert account.name == "Ana"
        assert account.email_verified is True

    def test_identity_account(self, accounts) -> None:
        account = accounts.create_from_identity(
            ExternalIdentity(email="Gabi@X.com", name="Gabi", picture="http://pic")
        )

        assert account.email == "gabi@x.com"
        assert account.password_hash is None
        assert account.photo == "http://pic"

    def test_mark_email_verified(self, accounts) -> None:
        account = accounts.create_from_hash("Ana", EMAIL, "$2b$10$hash", email_verified=False)

        accounts.mark_email_verified(account.id)

        assert accounts.find_by_id(account.id).email_verified is True

    def test_profile_round_trip(self, accounts) -> None:
        account = accounts.create_from_hash("Ana", EMAIL, "$2b$10$hash")
        data = ProfileData(
            age=30,
            sex="F",
            height=1.65,
            current_weight=70.5,
            target_weight=65.0,
            goal="perder_peso",
            activity_level="moderado",
        )

        accounts.update_profile(account.id, "Ana Maria", EMAIL, data)
        profile = accounts.get_profile(account.id)

        assert profile.account.name == "Ana Maria"
        assert profile.data == data

    def test_profile_without_quiz_row(self, accounts) -> None:
        account = accounts.create_from_hash("Ana", EMAIL, "$2b$10$hash")

        assert accounts.get_profile(account.id).data == ProfileData()

    def test_update_profile_email_in_use(self, accounts) -> None:
        ana = accounts.create_from_hash("Ana", EMAIL, "$2b$10$hash")
        accounts.create_from_hash("Bia", "bia@x.com", "$2b$10$hash")

        with pytest.raises(EmailInUseError):
            accounts.update_profile(ana.id, "Ana", "bia@x.com", None)

    def test_update_missing_account(self, accounts) -> None:
        with pytest.raises(NotFoundError):
            accounts.update_profile(999999, "Ana", EMAIL, None)

    def test_update_password_hash(self, accounts) -> None:
        account = accounts.create_from_hash("Ana", EMAIL, "$2b$10$hash")

        accounts.update_password_hash(account.id, "$2b$10$new")

        assert accounts.find_by_id(account.id).password_hash == "$2b$10$new"
