"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
Field names follow the mobile client's JSON contract.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from nutrisnap.domain.ports import Account, Profile, ProfileData


class AccountSummary(BaseModel):
    """Public account fields."""

    id: int
    nome: str
    email: str

    @classmethod
    def from_account(cls, account: Account) -> "AccountSummary":
        return cls(id=account.id, nome=account.name, email=account.email)


class RegisterRequest(BaseModel):
    """Request model for starting a registration."""

    nome: str = Field(..., min_length=1, max_length=100, description="Display name")
    email: EmailStr
    senha: str = Field(..., min_length=6, description="Password (min 6 characters)")


class RegisterResponse(BaseModel):
    """Response model for an accepted registration."""

    mensagem: str
    email: str


class LoginRequest(BaseModel):
    email: EmailStr
    senha: str = Field(..., min_length=1)


class LoginResponse(BaseModel):
    token: str
    usuario: AccountSummary
    mensagem: str


class VerifyTokenResponse(BaseModel):
    valido: bool
    usuario: AccountSummary
    mensagem: str


class SendCodeRequest(BaseModel):
    email: EmailStr


class VerifyCodeRequest(BaseModel):
    """Request model for confirming a verification code."""

    email: EmailStr
    codigo: str = Field(..., min_length=1, max_length=16, description="6-digit code from email")


class VerifyCodeResponse(BaseModel):
    mensagem: str
    token: str
    usuario: AccountSummary


class ProfileFields(BaseModel):
    """Quiz answers shared by profile requests and responses."""

    idade: int | None = None
    sexo: str | None = None
    altura: float | None = None
    peso_atual: float | None = None
    peso_meta: float | None = None
    objetivo: str | None = None
    nivel_atividade: str | None = None

    def to_profile_data(self) -> ProfileData:
        return ProfileData(
            age=self.idade,
            sex=self.sexo,
            height=self.altura,
            current_weight=self.peso_atual,
            target_weight=self.peso_meta,
            goal=self.objetivo,
            activity_level=self.nivel_atividade,
        )

    def has_quiz_fields(self) -> bool:
        return bool(self.model_fields_set & set(ProfileFields.model_fields))


class ProfileUpdateRequest(ProfileFields):
    model_config = ConfigDict(extra="ignore")

    nome: str = Field(..., min_length=1, max_length=100)
    email: EmailStr


class ProfileResponse(ProfileFields):
    id: int
    nome: str
    email: str
    foto: str | None = None
    criado_em: datetime | None = None

    @classmethod
    def from_profile(cls, profile: Profile) -> "ProfileResponse":
        account, data = profile.account, profile.data
        return cls(
            id=account.id,
            nome=account.name,
            email=account.email,
            foto=account.photo,
            criado_em=account.created_at,
            idade=data.age,
            sexo=data.sex,
            altura=data.height,
            peso_atual=data.current_weight,
            peso_meta=data.target_weight,
            objetivo=data.goal,
            nivel_atividade=data.activity_level,
        )


class ProfileUpdateResponse(BaseModel):
    mensagem: str
    usuario: ProfileResponse


class ChangePasswordRequest(BaseModel):
    senhaAtual: str = Field(..., min_length=1)
    novaSenha: str = Field(..., min_length=6)


class GoogleLoginRequest(BaseModel):
    idToken: str = Field(..., min_length=1)


class GoogleLoginResponse(BaseModel):
    usuario: AccountSummary
    token: str


class MessageResponse(BaseModel):
    mensagem: str


class ErrorResponse(BaseModel):
    """Standard error response model."""

    mensagem: str
