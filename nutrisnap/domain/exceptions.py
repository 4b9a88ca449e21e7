"""
Domain exceptions - Semantic error types for accounts and registration.

This module defines domain-specific exceptions that communicate
business rule violations without leaking infrastructure details.
The API layer maps each family onto an HTTP status.
"""


class NutriSnapError(Exception):
    """Base class for domain errors."""

    pass


class ValidationError(NutriSnapError):
    """Input failed schema checks (name, email, password policy)."""

    def __init__(self, errors: list[str]) -> None:
        super().__init__("; ".join(errors))
        self.errors = errors


class ConflictError(NutriSnapError):
    """Email already belongs to a verified account."""

    pass


class EmailInUseError(ConflictError):
    """Profile update targets an email owned by another account."""

    pass


class AuthError(NutriSnapError):
    """Base class for authentication failures."""

    pass


class InvalidCredentialsError(AuthError):
    """Email/password pair does not match a committed account."""

    pass


class VerificationRequiredError(AuthError):
    """Account exists but its email was never verified."""

    pass


class InvalidTokenError(AuthError):
    """Bearer or identity-provider token is missing, malformed or expired."""

    pass


class InvalidCodeError(AuthError):
    """Verification code is wrong or no pending registration exists."""

    pass


class ExpiredError(NutriSnapError):
    """Verification code is past its TTL."""

    pass


class NotFoundError(NutriSnapError):
    """Account lookup found nothing."""

    pass


class EmailDeliveryError(NutriSnapError):
    """Mail transport failed or timed out."""

    pass


class InternalError(NutriSnapError):
    """Unexpected failure in a collaborator."""

    pass
