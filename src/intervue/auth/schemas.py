"""Request/response schemas for authentication endpoints."""

from __future__ import annotations

from pydantic import EmailStr, Field, field_validator

from intervue.schemas import ApiModel, NonBlankStr


class SignUpRequest(ApiModel):
    """Create an account with name, email and password."""

    name: NonBlankStr = Field(..., max_length=128)
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        """Normalize email to lowercase."""
        return v.lower().strip()


class SignInRequest(ApiModel):
    """Sign in with email + password."""

    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        """Normalize email to lowercase."""
        return v.lower().strip()


class AuthResult(ApiModel):
    success: bool
    message: str


class SignInResponse(AuthResult):
    token: str


class MeResponse(ApiModel):
    user_id: str
    name: str
    email: str
    profile_url: str | None = None
