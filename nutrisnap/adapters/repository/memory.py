"""
In-memory repository adapters - Implement the domain repository protocols.

For local development (storage_backend=memory) and tests. Each repository
guards its state with a lock so every operation is atomic per process,
mirroring the row-level guarantees of the PostgreSQL adapters. The clock
is injectable so expiry can be simulated.
"""

import itertools
import secrets
import threading
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime, timedelta, timezone

from nutrisnap.domain.exceptions import ConflictError, EmailInUseError, NotFoundError
from nutrisnap.domain.ports import (
    Account,
    ExternalIdentity,
    PendingRegistration,
    Profile,
    ProfileData,
    VerificationExpired,
    VerificationInvalid,
    VerificationOutcome,
    VerificationSuccess,
)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryPendingRegistrationRepository:
    """Implements PendingRegistrationRepository protocol with a dict and a lock."""

    def __init__(self, ttl_minutes: int = 15, clock: Clock = utc_now) -> None:
        self._ttl = timedelta(minutes=ttl_minutes)
        self._clock = clock
        self._records: dict[str, PendingRegistration] = {}
        self._lock = threading.Lock()

    def upsert(self, name: str, email: str, password_hash: str, code: str) -> None:
        now = self._clock()
        with self._lock:
            self._records[email] = PendingRegistration(
                name=name,
                email=email,
                password_hash=password_hash,
                code=code,
                expires_at=now + self._ttl,
                created_at=now,
            )

    def find(self, email: str) -> PendingRegistration | None:
        with self._lock:
            return self._records.get(email)

    def verify_and_consume(self, email: str, code: str) -> VerificationOutcome:
        with self._lock:
            record = self._records.get(email)
            if record is None:
                return VerificationInvalid()

            if self._clock() > record.expires_at:
                del self._records[email]
                return VerificationExpired()

            if not secrets.compare_digest(record.code.encode(), code.encode()):
                return VerificationInvalid()

            del self._records[email]
            return VerificationSuccess(
                name=record.name, email=record.email, password_hash=record.password_hash
            )

    def delete(self, email: str) -> None:
        with self._lock:
            self._records.pop(email, None)


class InMemoryAccountRepository:
    """Implements AccountRepository protocol with a dict and a lock."""

    def __init__(self, clock: Clock = utc_now) -> None:
        self._clock = clock
        self._accounts: dict[int, Account] = {}
        self._profiles: dict[int, ProfileData] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def find_by_email(self, email: str) -> Account | None:
        with self._lock:
            return self._by_email(email)

    def find_by_id(self, account_id: int) -> Account | None:
        with self._lock:
            return self._accounts.get(account_id)

    def create_from_hash(
        self, name: str, email: str, password_hash: str, email_verified: bool = True
    ) -> Account:
        now = self._clock()
        with self._lock:
            existing = self._by_email(email)
            if existing is not None:
                if existing.email_verified:
                    raise ConflictError(email)
                account = replace(
                    existing,
                    name=name,
                    password_hash=password_hash,
                    email_verified=email_verified,
                    updated_at=now,
                )
            else:
                account = Account(
                    id=next(self._ids),
                    name=name,
                    email=email,
                    password_hash=password_hash,
                    email_verified=email_verified,
                    created_at=now,
                    updated_at=now,
                )
            self._accounts[account.id] = account
            return account

    def create_from_identity(self, identity: ExternalIdentity) -> Account:
        email = identity.email.strip().lower()
        now = self._clock()
        with self._lock:
            if self._by_email(email) is not None:
                raise ConflictError(email)
            account = Account(
                id=next(self._ids),
                name=identity.name,
                email=email,
                password_hash=None,
                email_verified=True,
                photo=identity.picture,
                created_at=now,
                updated_at=now,
            )
            self._accounts[account.id] = account
            return account

    def mark_email_verified(self, account_id: int) -> None:
        with self._lock:
            account = self._accounts.get(account_id)
            if account is not None:
                self._accounts[account_id] = replace(
                    account, email_verified=True, updated_at=self._clock()
                )

    def get_profile(self, account_id: int) -> Profile | None:
        with self._lock:
            account = self._accounts.get(account_id)
            if account is None:
                return None
            return Profile(account=account, data=self._profiles.get(account_id, ProfileData()))

    def update_profile(
        self, account_id: int, name: str, email: str, data: ProfileData | None
    ) -> None:
        with self._lock:
            account = self._accounts.get(account_id)
            if account is None:
                raise NotFoundError(str(account_id))
            owner = self._by_email(email)
            if owner is not None and owner.id != account_id:
                raise EmailInUseError(email)
            self._accounts[account_id] = replace(
                account, name=name, email=email, updated_at=self._clock()
            )
            if data is not None:
                self._profiles[account_id] = data

    def update_password_hash(self, account_id: int, password_hash: str) -> None:
        with self._lock:
            account = self._accounts.get(account_id)
            if account is not None:
                self._accounts[account_id] = replace(
                    account, password_hash=password_hash, updated_at=self._clock()
                )

    def _by_email(self, email: str) -> Account | None:
        return next((a for a in self._accounts.values() if a.email == email), None)
