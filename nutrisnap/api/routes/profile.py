"""Profile routes (auth required)."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.concurrency import run_in_threadpool

from nutrisnap.api.dependencies import get_current_account, get_profile_service
from nutrisnap.api.models import (
    ChangePasswordRequest,
    ErrorResponse,
    MessageResponse,
    ProfileResponse,
    ProfileUpdateRequest,
    ProfileUpdateResponse,
)
from nutrisnap.domain.exceptions import (
    EmailInUseError,
    InvalidCredentialsError,
    NotFoundError,
    ValidationError,
)
from nutrisnap.domain.ports import Account
from nutrisnap.domain.profile import ProfileService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["profile"])


@router.get(
    "/profile",
    response_model=ProfileResponse,
    responses={404: {"model": ErrorResponse, "description": "No such user"}},
    summary="Read the profile",
)
async def get_profile(
    account: Account = Depends(get_current_account),
    service: ProfileService = Depends(get_profile_service),
) -> ProfileResponse:
    try:
        profile = await run_in_threadpool(service.get_profile, account.id)
    except NotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Usuário não encontrado") from None
    except Exception:
        logger.exception("Unexpected error reading profile %s", account.id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Erro ao buscar perfil do usuário",
        ) from None
    return ProfileResponse.from_profile(profile)


@router.put(
    "/profile",
    response_model=ProfileUpdateResponse,
    responses={400: {"model": ErrorResponse, "description": "Email in use"}},
    summary="Update name, email and quiz answers",
)
async def update_profile(
    request_data: ProfileUpdateRequest,
    account: Account = Depends(get_current_account),
    service: ProfileService = Depends(get_profile_service),
) -> ProfileUpdateResponse:
    data = request_data.to_profile_data() if request_data.has_quiz_fields() else None
    try:
        profile = await run_in_threadpool(
            service.update_profile, account.id, request_data.nome, request_data.email, data
        )
    except EmailInUseError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Este email já está em uso por outro usuário",
        ) from None
    except ValidationError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Nome e email são obrigatórios",
        ) from None
    except NotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Usuário não encontrado") from None
    except Exception:
        logger.exception("Unexpected error updating profile %s", account.id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Erro ao atualizar perfil do usuário",
        ) from None

    return ProfileUpdateResponse(
        mensagem="Perfil atualizado com sucesso",
        usuario=ProfileResponse.from_profile(profile),
    )


@router.put(
    "/change-password",
    response_model=MessageResponse,
    responses={
        401: {"model": ErrorResponse, "description": "Wrong current password"},
        404: {"model": ErrorResponse, "description": "No such user"},
    },
    summary="Change the password",
)
async def change_password(
    request_data: ChangePasswordRequest,
    account: Account = Depends(get_current_account),
    service: ProfileService = Depends(get_profile_service),
) -> MessageResponse:
    try:
        await run_in_threadpool(
            service.change_password, account.id, request_data.senhaAtual, request_data.novaSenha
        )
    except ValidationError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Senha atual e nova senha são obrigatórias.",
        ) from None
    except NotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Usuário não encontrado.") from None
    except InvalidCredentialsError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Senha atual incorreta.") from None
    except Exception:
        logger.exception("Unexpected error changing password for %s", account.id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Erro ao alterar a senha do usuário.",
        ) from None

    return MessageResponse(mensagem="Senha alterada com sucesso!")
