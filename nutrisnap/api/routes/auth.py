"""
Authentication routes.

Registration with email verification, password login, token check and
Google login. Service calls run in the threadpool so bcrypt, JWT signing,
database and SMTP work never block the event loop.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.concurrency import run_in_threadpool

from nutrisnap.api.dependencies import (
    get_authentication_service,
    get_current_account,
    get_registration_service,
)
from nutrisnap.api.models import (
    AccountSummary,
    ErrorResponse,
    GoogleLoginRequest,
    GoogleLoginResponse,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    RegisterRequest,
    RegisterResponse,
    SendCodeRequest,
    VerifyCodeRequest,
    VerifyCodeResponse,
    VerifyTokenResponse,
)
from nutrisnap.domain.authentication import AuthenticationService
from nutrisnap.domain.exceptions import (
    ConflictError,
    EmailDeliveryError,
    ExpiredError,
    InvalidCodeError,
    InvalidCredentialsError,
    InvalidTokenError,
    ValidationError,
    VerificationRequiredError,
)
from nutrisnap.domain.ports import Account
from nutrisnap.domain.registration import RegistrationService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])

# Same body whether or not a pending registration exists
SEND_CODE_MESSAGE = "Se houver um cadastro pendente para este email, o código foi enviado."


def _invalid_input(error: ValidationError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={"mensagem": "Dados inválidos", "detalhes": error.errors},
    )


def _internal(message: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=message)


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_202_ACCEPTED,
    responses={
        400: {"description": "Validation error"},
        409: {"model": ErrorResponse, "description": "Email already verified"},
        500: {"model": ErrorResponse, "description": "Internal or delivery error"},
    },
    summary="Start a registration",
    description="Submit name, email and password. A 6-digit verification code "
    "valid for 15 minutes is emailed; the account is only created once it is confirmed.",
)
async def register(
    request_data: RegisterRequest,
    service: RegistrationService = Depends(get_registration_service),
) -> RegisterResponse:
    try:
        email = await run_in_threadpool(
            service.register, request_data.nome, request_data.email, request_data.senha
        )
    except ValidationError as e:
        raise _invalid_input(e) from None
    except ConflictError:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email já está cadastrado e verificado.",
        ) from None
    except EmailDeliveryError:
        raise _internal("Falha ao enviar e-mail de verificação. Solicite o reenvio do código.") from None
    except Exception:
        logger.exception("Unexpected error starting registration")
        raise _internal("Erro interno ao iniciar cadastro. Tente novamente.") from None

    return RegisterResponse(
        mensagem="Cadastro iniciado! Código de verificação enviado para seu email.",
        email=email,
    )


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={
        401: {"model": ErrorResponse, "description": "Bad credentials"},
        403: {"description": "Email verification required"},
    },
    summary="Log in with email and password",
)
async def login(
    request_data: LoginRequest,
    service: AuthenticationService = Depends(get_authentication_service),
) -> LoginResponse:
    try:
        session = await run_in_threadpool(service.login, request_data.email, request_data.senha)
    except InvalidCredentialsError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Email ou senha incorretos",
        ) from None
    except VerificationRequiredError:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={
                "mensagem": "Conta não verificada. Verifique seu email para acessar.",
                "acao": "VERIFICACAO_REQUERIDA",
            },
        ) from None
    except Exception:
        logger.exception("Unexpected error during login")
        raise _internal("Erro interno do servidor. Tente novamente.") from None

    return LoginResponse(
        token=session.token,
        usuario=AccountSummary.from_account(session.account),
        mensagem="Login realizado com sucesso!",
    )


@router.get(
    "/verify-token",
    response_model=VerifyTokenResponse,
    responses={401: {"description": "Missing or invalid token"}},
    summary="Check a bearer token",
)
async def verify_token(account: Account = Depends(get_current_account)) -> VerifyTokenResponse:
    return VerifyTokenResponse(
        valido=True,
        usuario=AccountSummary.from_account(account),
        mensagem="Token válido",
    )


@router.post(
    "/send-code",
    response_model=MessageResponse,
    responses={500: {"model": ErrorResponse, "description": "Delivery error"}},
    summary="Re-send the verification code",
    description="Always answers with the same message, whether or not a "
    "pending registration exists for the email.",
)
async def send_code(
    request_data: SendCodeRequest,
    service: RegistrationService = Depends(get_registration_service),
) -> MessageResponse:
    try:
        await run_in_threadpool(service.resend_code, request_data.email)
    except EmailDeliveryError:
        raise _internal("Erro ao processar a solicitação de código.") from None
    except Exception:
        logger.exception("Unexpected error re-sending verification code")
        raise _internal("Erro ao processar a solicitação de código.") from None

    return MessageResponse(mensagem=SEND_CODE_MESSAGE)


@router.post(
    "/verify-code",
    response_model=VerifyCodeResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Code expired"},
        401: {"model": ErrorResponse, "description": "Invalid code"},
        409: {"model": ErrorResponse, "description": "Account created elsewhere"},
    },
    summary="Confirm the verification code",
    description="Commits the account and logs the user in.",
)
async def verify_code(
    request_data: VerifyCodeRequest,
    service: RegistrationService = Depends(get_registration_service),
) -> VerifyCodeResponse:
    try:
        session = await run_in_threadpool(
            service.verify_code, request_data.email, request_data.codigo
        )
    except ExpiredError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="O código de verificação expirou.",
        ) from None
    except InvalidCodeError:
        # Wrong code and unknown email are indistinguishable
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Código inválido ou não encontrado.",
        ) from None
    except ConflictError:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email já está cadastrado e verificado.",
        ) from None
    except Exception:
        logger.exception("Unexpected error finishing registration")
        raise _internal("Erro ao finalizar o registro. Tente novamente.") from None

    return VerifyCodeResponse(
        mensagem="Registro e verificação concluídos com sucesso!",
        token=session.token,
        usuario=AccountSummary.from_account(session.account),
    )


@router.post(
    "/login/google",
    response_model=GoogleLoginResponse,
    responses={401: {"model": ErrorResponse, "description": "Invalid Google token"}},
    summary="Log in or sign up with Google",
)
async def login_google(
    request_data: GoogleLoginRequest,
    service: AuthenticationService = Depends(get_authentication_service),
) -> GoogleLoginResponse:
    try:
        session = await run_in_threadpool(service.login_with_google, request_data.idToken)
    except InvalidTokenError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token do Google inválido.",
        ) from None
    except Exception:
        logger.exception("Unexpected error during Google login")
        raise _internal("Erro ao autenticar com o Google.") from None

    return GoogleLoginResponse(
        usuario=AccountSummary.from_account(session.account),
        token=session.token,
    )
