"""
Pydantic schemas for user requests and responses.
"""

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import Optional
from datetime import datetime
from rental_marketplace.models.user import UserRole
import uuid


class UserCreate(BaseModel):
    """Schema for registering a new account."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    fullname: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="User's full name",
        examples=["Jane Doe"]
    )
    email: EmailStr = Field(..., description="User's email address", examples=["jane@example.com"])
    password: str = Field(
        ...,
        min_length=8,
        max_length=128,
        description="Password (minimum 8 characters)",
        examples=["securepassword123"]
    )
    phone_number: Optional[str] = Field(None, max_length=32, examples=["+62812345678"])
    username: Optional[str] = Field(
        None,
        min_length=3,
        max_length=100,
        pattern=r"^[^@\s]+$",
        description="Login name; may not contain '@' or whitespace",
        examples=["janedoe"]
    )
    role: UserRole = Field(UserRole.USER, description="Account role: user (guest) or tenant (host)")

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v):
        return v.lower().strip()

    @field_validator('fullname')
    @classmethod
    def validate_fullname(cls, v):
        if not v.strip():
            raise ValueError("Full name cannot be empty")
        return v.strip()


class UserResponse(BaseModel):
    """
    Public view of an account.

    Only the fields listed here are ever serialized; credentials and reset
    tokens never leave the service.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: uuid.UUID = Field(..., description="User's unique identifier")
    fullname: str
    email: EmailStr
    username: Optional[str] = None
    phone_number: Optional[str] = None
    role: UserRole
    is_verified: bool
    is_active: bool
    created_at: datetime
