"""
Domain layer - Pure business logic with zero framework imports.

This package contains the core business logic for NutriSnap accounts:
the pending-registration email verification flow, login, and profile
management. It defines its own port interfaces for infrastructure
abstraction.
"""

from .authentication import AuthenticationService
from .exceptions import (
    AuthError,
    ConflictError,
    EmailDeliveryError,
    EmailInUseError,
    ExpiredError,
    InternalError,
    InvalidCodeError,
    InvalidCredentialsError,
    InvalidTokenError,
    NotFoundError,
    NutriSnapError,
    ValidationError,
    VerificationRequiredError,
)
from .ports import (
    Account,
    AccountRepository,
    AuthSession,
    EmailSender,
    ExternalIdentity,
    IdentityProvider,
    PendingRegistration,
    PendingRegistrationRepository,
    Profile,
    ProfileData,
    VerificationExpired,
    VerificationInvalid,
    VerificationOutcome,
    VerificationSuccess,
)
from .profile import ProfileService
from .registration import RegistrationService
from .sessions import SessionIssuer, TokenClaims

__all__ = [
    "Account",
    "AccountRepository",
    "AuthError",
    "AuthSession",
    "AuthenticationService",
    "ConflictError",
    "EmailDeliveryError",
    "EmailInUseError",
    "EmailSender",
    "ExpiredError",
    "ExternalIdentity",
    "IdentityProvider",
    "InternalError",
    "InvalidCodeError",
    "InvalidCredentialsError",
    "InvalidTokenError",
    "NotFoundError",
    "NutriSnapError",
    "PendingRegistration",
    "PendingRegistrationRepository",
    "Profile",
    "ProfileData",
    "ProfileService",
    "RegistrationService",
    "SessionIssuer",
    "TokenClaims",
    "ValidationError",
    "VerificationExpired",
    "VerificationInvalid",
    "VerificationOutcome",
    "VerificationRequiredError",
    "VerificationSuccess",
]
