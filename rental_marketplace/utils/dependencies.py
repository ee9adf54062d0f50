"""
FastAPI dependency injection utilities for authentication and services.
"""

from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from rental_marketplace.database import get_db
from rental_marketplace.models.user import User
from rental_marketplace.services.auth import AuthService
from rental_marketplace.services.property import PropertyService
from rental_marketplace.utils.exceptions import (
    UnauthorizedError,
    InsufficientPermissionsError
)


# HTTP Bearer token security scheme
security = HTTPBearer(auto_error=False)


async def get_auth_service(db: AsyncSession = Depends(get_db)) -> AuthService:
    return AuthService(db)


async def get_property_service(db: AsyncSession = Depends(get_db)) -> PropertyService:
    return PropertyService(db)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> User:
    """
    Get current authenticated user from the bearer token.

    Raises:
        UnauthorizedError: If no token provided or token is invalid
        TokenExpiredError: If token is expired
        InactiveUserError: If user account is inactive
    """
    if not credentials:
        raise UnauthorizedError("Authentication token required")

    return await auth_service.get_current_user(credentials.credentials)


async def get_current_tenant_user(
    current_user: User = Depends(get_current_user)
) -> User:
    """
    Get current user with the host (tenant) role.

    Raises:
        InsufficientPermissionsError: If user is not a host
    """
    if not current_user.is_tenant:
        raise InsufficientPermissionsError("manage property listings")

    return current_user
