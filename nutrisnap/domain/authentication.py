"""
Authentication domain service - password login, token checks, Google login.

Password checks always run bcrypt, against a dummy hash when the account
is missing or password-less, so response time does not leak whether an
email is registered.
"""

import logging
from dataclasses import dataclass

from .exceptions import (
    ConflictError,
    InvalidCredentialsError,
    InvalidTokenError,
    VerificationRequiredError,
)
from .passwords import verify_password
from .ports import Account, AccountRepository, AuthSession, IdentityProvider
from .registration import normalize_email
from .sessions import SessionIssuer

logger = logging.getLogger(__name__)


@dataclass
class AuthenticationService:
    """Issues sessions for committed accounts and resolves bearer tokens."""

    accounts: AccountRepository
    sessions: SessionIssuer
    identity_provider: IdentityProvider | None = None

    def login(self, email: str, password: str) -> AuthSession:
        """
        Authenticate with email and password.

        Raises:
            InvalidCredentialsError: Unknown email or wrong password
            VerificationRequiredError: Credentials match an unverified account
        """
        normalized_email = normalize_email(email)
        account = self.accounts.find_by_email(normalized_email)
        stored_hash = account.password_hash if account is not None else None

        if not verify_password(password, stored_hash) or account is None:
            logger.warning("Failed login attempt")
            raise InvalidCredentialsError("invalid credentials")

        if not account.email_verified:
            logger.warning("Login blocked for unverified account %s", account.id)
            raise VerificationRequiredError(normalized_email)

        logger.info("Login: %s (ID: %s)", account.email, account.id)
        return AuthSession(token=self.sessions.issue(account), account=account)

    def authenticate(self, token: str) -> Account:
        """
        Resolve a bearer token to its account.

        Raises:
            InvalidTokenError: Bad token or the account no longer exists
        """
        claims = self.sessions.verify(token)
        account = self.accounts.find_by_id(claims.account_id)
        if account is None:
            raise InvalidTokenError("account not found")
        return account

    def login_with_google(self, id_token: str) -> AuthSession:
        """
        Log in or sign up through Google.

        The account is created on first use (verified, no password); an
        existing unverified account gets its email marked verified.
        """
        if self.identity_provider is None:
            raise InvalidTokenError("identity provider not configured")

        identity = self.identity_provider.verify(id_token)
        email = normalize_email(identity.email)
        account = self.accounts.find_by_email(email)

        if account is None:
            try:
                account = self.accounts.create_from_identity(identity)
                logger.info("Account created via Google: %s (ID: %s)", account.email, account.id)
            except ConflictError:
                # Created concurrently through another path
                account = self.accounts.find_by_email(email)
                if account is None:
                    raise
        if not account.email_verified:
            self.accounts.mark_email_verified(account.id)
            account = self.accounts.find_by_id(account.id) or account

        logger.info("Google login: %s (ID: %s)", account.email, account.id)
        return AuthSession(token=self.sessions.issue(account), account=account)
