"""
Registration domain service - pending-registration email verification.

This module contains the core business logic for creating accounts. No
account row exists until the emailed code has been confirmed.

Registration lifecycle
======================

States (per email):
- Unregistered: no pending record and no verified account
- PendingVerification: a pending record with a live code exists
- Verified: terminal, the account has been committed

Transitions:
    Unregistered        -> PendingVerification  (register)
    PendingVerification -> PendingVerification  (register again: code, hash
                                                  and expiry are overwritten;
                                                  resend: same code re-sent;
                                                  wrong code: record kept)
    PendingVerification -> Verified             (verify_code with the right
                                                  code before expiry)
    PendingVerification -> Unregistered         (verify_code after expiry)

Atomicity of the consume step is enforced by the repository; the commit is
guarded by the unique email constraint of the account store.
"""

import logging
from dataclasses import dataclass

from email_validator import EmailNotValidError, validate_email

from .codes import generate_verification_code
from .exceptions import (
    ConflictError,
    EmailDeliveryError,
    ExpiredError,
    InvalidCodeError,
    ValidationError,
)
from .passwords import DEFAULT_ROUNDS, hash_password
from .ports import (
    AccountRepository,
    AuthSession,
    EmailSender,
    PendingRegistrationRepository,
    VerificationExpired,
    VerificationSuccess,
)
from .sessions import SessionIssuer

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


def normalize_email(email: str) -> str:
    """
    Normalize email address for consistent storage and lookup.

    Applies: strip whitespace + lowercase
    """
    return email.strip().lower()


@dataclass
class RegistrationService:
    """
    Domain service for two-phase account creation.

    Orchestrates password hashing, code generation, pending-record
    persistence, code delivery, and the final commit plus token issue.
    """

    pending: PendingRegistrationRepository
    accounts: AccountRepository
    email_sender: EmailSender
    sessions: SessionIssuer
    bcrypt_rounds: int = DEFAULT_ROUNDS

    def register(self, name: str, email: str, password: str) -> str:
        """
        Begin a registration and send the verification code.

        Args:
            name: Display name (must not be blank)
            email: User's email address (will be normalized)
            password: Plaintext password (will be hashed)

        Returns:
            Normalized email address

        Raises:
            ValidationError: If name, email or password fail the input policy
            ConflictError: If a verified account already owns the email
            EmailDeliveryError: If the code could not be sent; the pending
                record stays written so a resend can still succeed
        """
        name = name.strip()
        normalized_email = normalize_email(email)
        self._validate(name, normalized_email, password)

        existing = self.accounts.find_by_email(normalized_email)
        if existing is not None and existing.email_verified:
            raise ConflictError(normalized_email)

        password_hash = hash_password(password, rounds=self.bcrypt_rounds)
        code = generate_verification_code()
        self.pending.upsert(name, normalized_email, password_hash, code)

        self._deliver(normalized_email, code)
        logger.info("Pending registration saved and code sent for %s", normalized_email)
        return normalized_email

    def resend_code(self, email: str) -> bool:
        """
        Re-send the stored code for a pending registration.

        The code is not regenerated. Callers must respond identically
        whatever the return value, so absence is never revealed.

        Returns:
            True if a pending record existed and the code was sent
        """
        normalized_email = normalize_email(email)
        registration = self.pending.find(normalized_email)
        if registration is None:
            logger.info("Code requested for email with no pending registration")
            return False

        self._deliver(normalized_email, registration.code)
        logger.info("Verification code re-sent for %s", normalized_email)
        return True

    def verify_code(self, email: str, code: str) -> AuthSession:
        """
        Confirm a code, commit the account and mint a session token.

        Raises:
            ExpiredError: The code was past its TTL; the record is gone
            InvalidCodeError: Wrong code or no pending record (not
                distinguished, to prevent enumeration)
            ConflictError: The account was created through another path
                between consume and commit; the code is already spent
        """
        normalized_email = normalize_email(email)
        outcome = self.pending.verify_and_consume(normalized_email, code.strip())

        if isinstance(outcome, VerificationExpired):
            logger.warning("Expired verification code submitted for %s", normalized_email)
            raise ExpiredError(normalized_email)
        if not isinstance(outcome, VerificationSuccess):
            logger.warning("Invalid verification code submitted")
            raise InvalidCodeError("invalid code")

        try:
            account = self.accounts.create_from_hash(
                outcome.name, outcome.email, outcome.password_hash, email_verified=True
            )
        except ConflictError:
            logger.error(
                "Verified registration for %s lost the commit race; code consumed",
                outcome.email,
            )
            raise

        token = self.sessions.issue(account)
        logger.info("Registration committed: %s (ID: %s)", account.email, account.id)
        return AuthSession(token=token, account=account)

    def _deliver(self, email: str, code: str) -> None:
        try:
            self.email_sender.send_verification_code(email, code)
        except EmailDeliveryError:
            logger.error("Verification email delivery failed for %s", email)
            raise

    def _validate(self, name: str, email: str, password: str) -> None:
        errors = []
        if not name:
            errors.append("Nome é obrigatório")
        try:
            validate_email(email, check_deliverability=False)
        except EmailNotValidError:
            errors.append("Email inválido")
        if len(password) < MIN_PASSWORD_LENGTH:
            errors.append(f"Senha deve ter no mínimo {MIN_PASSWORD_LENGTH} caracteres")
        if errors:
            raise ValidationError(errors)
