"""
Pydantic schemas for authentication requests and responses.
Handles registration, login and password reset payloads.
"""

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import Optional
from rental_marketplace.models.user import UserRole
from rental_marketplace.schemas.user import UserResponse


class LoginRequest(BaseModel):
    """Login with either email or username."""

    user_identity: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Account email or username",
        examples=["host@example.com"]
    )
    password: str = Field(
        ...,
        min_length=1,
        max_length=128,
        description="Account password",
        examples=["securepassword123"]
    )

    @field_validator('user_identity')
    @classmethod
    def strip_identity(cls, v):
        return v.strip()


class ForgotPasswordRequest(BaseModel):
    email: EmailStr = Field(..., description="Account email address", examples=["host@example.com"])


class ResetPasswordRequest(BaseModel):
    """Complete a password reset with the emailed token."""

    token: str = Field(..., min_length=1, description="Reset token from the reset email")
    password: str = Field(
        ...,
        min_length=8,
        max_length=128,
        description="New password (minimum 8 characters)"
    )


class _Envelope(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    ok: bool = True
    status: int = 200


class MessageResponse(_Envelope):
    message: str


class RegisterResponse(_Envelope):
    message: str = "Register success"
    user: UserResponse


class LoginResponse(_Envelope):
    """Login response carrying the bearer token and the account role."""

    message: str = "Login success"
    token: str = Field(..., description="JWT access token")
    role: UserRole = Field(..., description="Role of the authenticated account", examples=["tenant"])
    token_type: str = Field("bearer", description="Token type")
    expires_in: int = Field(..., description="Access token lifetime in seconds", examples=[86400])


class CurrentUserResponse(_Envelope):
    user: UserResponse
    message: Optional[str] = None
