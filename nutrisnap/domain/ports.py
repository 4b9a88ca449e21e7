"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the interfaces (ports) that the domain requires
from infrastructure, along with the plain data types that cross them.
Adapters implement these protocols via structural subtyping.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol


@dataclass(frozen=True)
class PendingRegistration:
    """A not-yet-committed account request awaiting code confirmation."""

    name: str
    email: str
    password_hash: str
    code: str
    expires_at: datetime
    created_at: datetime


@dataclass(frozen=True)
class Account:
    """A committed user account."""

    id: int
    name: str
    email: str
    password_hash: str | None
    email_verified: bool
    photo: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class ProfileData:
    """Quiz answers stored alongside an account."""

    age: int | None = None
    sex: str | None = None
    height: float | None = None
    current_weight: float | None = None
    target_weight: float | None = None
    goal: str | None = None
    activity_level: str | None = None


@dataclass(frozen=True)
class Profile:
    """Account plus its quiz answers."""

    account: Account
    data: ProfileData = field(default_factory=ProfileData)


@dataclass(frozen=True)
class ExternalIdentity:
    """Identity asserted by an external OAuth provider."""

    email: str
    name: str
    picture: str | None = None


@dataclass(frozen=True)
class AuthSession:
    """Bearer token minted for a committed account."""

    token: str
    account: Account


@dataclass(frozen=True)
class VerificationSuccess:
    """Code matched before expiry; the pending record has been consumed."""

    name: str
    email: str
    password_hash: str


@dataclass(frozen=True)
class VerificationExpired:
    """Pending record was past its TTL and has been deleted."""


@dataclass(frozen=True)
class VerificationInvalid:
    """No pending record, or the code did not match."""


VerificationOutcome = VerificationSuccess | VerificationExpired | VerificationInvalid


class PendingRegistrationRepository(Protocol):
    """Port interface for in-flight registrations, one per email."""

    def upsert(self, name: str, email: str, password_hash: str, code: str) -> None:
        """
        Write or replace the pending record for email.

        Last write wins: name, password hash, code and expiry are all
        replaced, and created_at is refreshed.
        """
        ...

    def find(self, email: str) -> PendingRegistration | None:
        """Read-only lookup of the pending record for email."""
        ...

    def verify_and_consume(self, email: str, code: str) -> VerificationOutcome:
        """
        Check a submitted code and consume the pending record on success.

        Must be atomic per email so that only one concurrent caller can
        observe VerificationSuccess for a given record.

        Return values by scenario:
        - VerificationInvalid: no record, or code mismatch (record kept)
        - VerificationExpired: now > expires_at (record deleted)
        - VerificationSuccess: code matches before expiry (record deleted)
        """
        ...

    def delete(self, email: str) -> None:
        """Idempotently remove the pending record for email."""
        ...


class AccountRepository(Protocol):
    """Port interface for committed accounts."""

    def find_by_email(self, email: str) -> Account | None: ...

    def find_by_id(self, account_id: int) -> Account | None: ...

    def create_from_hash(
        self, name: str, email: str, password_hash: str, email_verified: bool = True
    ) -> Account:
        """
        Insert an account from an already-hashed password.

        An existing unverified row for the same email is overwritten.

        Raises:
            ConflictError: If a verified account already owns the email
        """
        ...

    def create_from_identity(self, identity: ExternalIdentity) -> Account:
        """
        Insert a verified, password-less account for an OAuth identity.

        Raises:
            ConflictError: If the email is already taken
        """
        ...

    def mark_email_verified(self, account_id: int) -> None: ...

    def get_profile(self, account_id: int) -> Profile | None: ...

    def update_profile(
        self, account_id: int, name: str, email: str, data: ProfileData | None
    ) -> None:
        """
        Update name/email and, when data is given, upsert the quiz answers.

        Raises:
            EmailInUseError: If another account owns the new email
        """
        ...

    def update_password_hash(self, account_id: int, password_hash: str) -> None: ...


class EmailSender(Protocol):
    """Port interface for email delivery."""

    def send_verification_code(self, email: str, code: str) -> None:
        """
        Send verification code to email address.

        Raises:
            EmailDeliveryError: If the transport fails or times out
        """
        ...


class IdentityProvider(Protocol):
    """Port interface for external OAuth token introspection."""

    def verify(self, id_token: str) -> ExternalIdentity:
        """
        Resolve an ID token into a verified identity.

        Raises:
            InvalidTokenError: If the provider rejects the token
            InternalError: If the provider cannot be reached
        """
        ...
