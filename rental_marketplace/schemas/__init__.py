"""
Pydantic schemas for request/response validation.
"""

# Authentication schemas
from .auth import (
    LoginRequest,
    LoginResponse,
    ForgotPasswordRequest,
    ResetPasswordRequest,
    MessageResponse,
    RegisterResponse,
    CurrentUserResponse
)

# User schemas
from .user import (
    UserCreate,
    UserResponse
)

# Property schemas
from .property import (
    CategoryCreate,
    PropertyCreate,
    PropertyUpdate,
    PropertyStatusUpdate,
    PropertyResponse,
    PropertyEnvelope,
    PropertyListResponse
)

# Error schemas
from .error import (
    ErrorDetail,
    ErrorResponse
)

__all__ = [
    "LoginRequest",
    "LoginResponse",
    "ForgotPasswordRequest",
    "ResetPasswordRequest",
    "MessageResponse",
    "RegisterResponse",
    "CurrentUserResponse",
    "UserCreate",
    "UserResponse",
    "CategoryCreate",
    "PropertyCreate",
    "PropertyUpdate",
    "PropertyStatusUpdate",
    "PropertyResponse",
    "PropertyEnvelope",
    "PropertyListResponse",
    "ErrorDetail",
    "ErrorResponse",
]
