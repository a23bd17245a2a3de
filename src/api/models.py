"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
JSON keys are camelCase (``previewUrl``, ``isVerified``).

Optional response fields (``otp``, ``previewUrl``, ``token``, ``user``) are
omitted from the body unless explicitly set; routes are declared with
``response_model_exclude_unset=True``.

Request fields default to empty strings so that a missing field reaches
the domain layer and gets the same message as a blank one.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from src.domain.account import Account, Role


class ApiModel(BaseModel):
    """Base model with camelCase aliases."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RegisterRequest(ApiModel):
    """Request model for user registration."""

    name: str = ""
    email: str = ""
    password: str = Field(default="", description="User password (6 characters to 72 bytes)")
    role: Role | None = Field(default=None, description="student (default) or teacher")

    @field_validator("role", mode="before")
    @classmethod
    def blank_role_is_default(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value


class LoginRequest(ApiModel):
    """Request model for login."""

    email: str = ""
    password: str = ""


class VerifyEmailRequest(ApiModel):
    """Request model for email verification."""

    email: str = ""
    otp: str = Field(default="", description="6-digit verification code")


class ResendOtpRequest(ApiModel):
    """Request model for resending the verification code."""

    email: str = ""


class PublicUser(ApiModel):
    id: str
    email: str
    role: Role

    @classmethod
    def from_account(cls, account: Account) -> "PublicUser":
        return cls(id=account.id, email=account.email, role=account.role)


class UserProfile(ApiModel):
    id: str
    name: str
    email: str
    role: Role

    @classmethod
    def from_account(cls, account: Account) -> "UserProfile":
        return cls(id=account.id, name=account.name, email=account.email, role=account.role)


class AccountData(ApiModel):
    """Account as returned by GET /me. Never includes the password hash or OTP."""

    id: str
    name: str
    email: str
    role: Role
    is_verified: bool
    created_at: datetime | None

    @classmethod
    def from_account(cls, account: Account) -> "AccountData":
        return cls(
            id=account.id,
            name=account.name,
            email=account.email,
            role=account.role,
            is_verified=account.is_verified,
            created_at=account.created_at,
        )


class RegisterResponse(ApiModel):
    """Response model for successful registration."""

    success: bool
    message: str
    user: PublicUser
    otp: str | None = None
    preview_url: str | None = None


class LoginResponse(ApiModel):
    """Response model for successful login."""

    success: bool
    token: str
    user: UserProfile


class VerifyEmailResponse(ApiModel):
    """Response model for email verification."""

    success: bool
    message: str
    token: str | None = None
    user: UserProfile | None = None


class ResendOtpResponse(ApiModel):
    """Response model for OTP resend."""

    success: bool
    message: str
    otp: str | None = None
    preview_url: str | None = None


class MeResponse(ApiModel):
    success: bool
    data: AccountData


class ErrorResponse(ApiModel):
    """Standard error response model."""

    success: bool = False
    error: str
