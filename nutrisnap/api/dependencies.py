"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting domain services
and infrastructure adapters into routes. Adapters are created once in the
application lifespan and stored in app.state.
"""

from fastapi import Depends, HTTPException, Request, status
from fastapi.concurrency import run_in_threadpool
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from nutrisnap.config.settings import get_settings
from nutrisnap.domain.authentication import AuthenticationService
from nutrisnap.domain.exceptions import InvalidTokenError
from nutrisnap.domain.ports import (
    Account,
    AccountRepository,
    EmailSender,
    IdentityProvider,
    PendingRegistrationRepository,
)
from nutrisnap.domain.profile import ProfileService
from nutrisnap.domain.registration import RegistrationService
from nutrisnap.domain.sessions import SessionIssuer


def get_pending_repository(request: Request) -> PendingRegistrationRepository:
    return request.app.state.pending_repository


def get_account_repository(request: Request) -> AccountRepository:
    return request.app.state.account_repository


def get_email_sender(request: Request) -> EmailSender:
    return request.app.state.email_sender


def get_session_issuer(request: Request) -> SessionIssuer:
    return request.app.state.session_issuer


def get_identity_provider(request: Request) -> IdentityProvider | None:
    return getattr(request.app.state, "identity_provider", None)


def get_registration_service(request: Request) -> RegistrationService:
    """
    Create registration service with injected dependencies.

    Wires together both repositories, the email sender and the session
    issuer for the domain service.
    """
    return RegistrationService(
        pending=get_pending_repository(request),
        accounts=get_account_repository(request),
        email_sender=get_email_sender(request),
        sessions=get_session_issuer(request),
        bcrypt_rounds=get_settings().bcrypt_cost,
    )


def get_authentication_service(request: Request) -> AuthenticationService:
    return AuthenticationService(
        accounts=get_account_repository(request),
        sessions=get_session_issuer(request),
        identity_provider=get_identity_provider(request),
    )


def get_profile_service(request: Request) -> ProfileService:
    return ProfileService(
        accounts=get_account_repository(request),
        bcrypt_rounds=get_settings().bcrypt_cost,
    )


# Bearer security scheme for OpenAPI documentation; missing headers are
# reported by get_current_account so the body keeps the `valido` flag.
http_bearer = HTTPBearer(auto_error=False)


async def get_current_account(
    credentials: HTTPAuthorizationCredentials | None = Depends(http_bearer),
    service: AuthenticationService = Depends(get_authentication_service),
) -> Account:
    """
    Resolve the Authorization: Bearer token to a committed account.

    Raises 401 with {"mensagem", "valido": false} when the token is
    missing, invalid, expired, or points to a deleted account.
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"mensagem": "Token ausente", "valido": False},
        )
    try:
        return await run_in_threadpool(service.authenticate, credentials.credentials)
    except InvalidTokenError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"mensagem": "Token inválido", "valido": False},
        ) from None
