"""
Utility modules for the Rental Marketplace API.
"""

from .auth import (
    create_access_token,
    verify_token,
    generate_reset_token,
    hash_reset_token,
    extract_token_from_header,
    TokenPayload
)

from .exceptions import (
    APIException,
    ValidationError,
    NotFoundError,
    UnauthorizedError,
    ForbiddenError,
    BadRequestError,
    DuplicateResourceError,
    InvalidCredentialsError,
    TokenExpiredError,
    InvalidTokenError,
    InactiveUserError,
    InsufficientPermissionsError,
    PropertyNotFoundError,
    PropertyOwnershipError
)

# Dependencies are imported directly where needed to avoid circular imports

__all__ = [
    "create_access_token",
    "verify_token",
    "generate_reset_token",
    "hash_reset_token",
    "extract_token_from_header",
    "TokenPayload",
    "APIException",
    "ValidationError",
    "NotFoundError",
    "UnauthorizedError",
    "ForbiddenError",
    "BadRequestError",
    "DuplicateResourceError",
    "InvalidCredentialsError",
    "TokenExpiredError",
    "InvalidTokenError",
    "InactiveUserError",
    "InsufficientPermissionsError",
    "PropertyNotFoundError",
    "PropertyOwnershipError",
]
