"""
Authentication API endpoints for registration, login and password reset.
"""

from fastapi import APIRouter, Depends, status
from rental_marketplace.models.user import User
from rental_marketplace.services.auth import AuthService
from rental_marketplace.schemas.auth import (
    LoginRequest,
    LoginResponse,
    ForgotPasswordRequest,
    ResetPasswordRequest,
    MessageResponse,
    RegisterResponse,
    CurrentUserResponse
)
from rental_marketplace.schemas.user import UserCreate, UserResponse
from rental_marketplace.schemas.error import get_error_responses
from rental_marketplace.utils.dependencies import get_auth_service, get_current_user


router = APIRouter(prefix="/auth", tags=["Authentication"])

FORGOT_PASSWORD_MESSAGE = "If the email is registered, a password reset link has been sent"


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new account",
    responses=get_error_responses(400, 422)
)
async def register(
    user_data: UserCreate,
    auth_service: AuthService = Depends(get_auth_service)
) -> RegisterResponse:
    """
    Create a guest or host account.

    Raises:
        DuplicateResourceError: If the email is already registered
    """
    user = await auth_service.register(user_data)
    return RegisterResponse(
        status=status.HTTP_201_CREATED,
        user=UserResponse.model_validate(user)
    )


@router.post(
    "/login",
    response_model=LoginResponse,
    status_code=status.HTTP_200_OK,
    summary="User login",
    description="Authenticate with email or username and password, returns a JWT",
    responses=get_error_responses(401, 422)
)
async def login(
    login_data: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service)
) -> LoginResponse:
    user, access_token = await auth_service.login(
        identity=login_data.user_identity,
        password=login_data.password
    )

    return LoginResponse(
        token=access_token,
        role=user.role,
        expires_in=auth_service.token_lifetime_seconds()
    )


@router.post(
    "/forgot-password",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Request a password reset",
    description="Always answers with the same message whether or not the email is registered"
)
async def forgot_password(
    request_data: ForgotPasswordRequest,
    auth_service: AuthService = Depends(get_auth_service)
) -> MessageResponse:
    await auth_service.forgot_password(request_data.email)
    return MessageResponse(message=FORGOT_PASSWORD_MESSAGE)


@router.post(
    "/reset-password",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Reset password with a reset token",
    responses=get_error_responses(400, 422)
)
async def reset_password(
    request_data: ResetPasswordRequest,
    auth_service: AuthService = Depends(get_auth_service)
) -> MessageResponse:
    await auth_service.reset_password(request_data.token, request_data.password)
    return MessageResponse(message="Password has been reset successfully")


@router.get(
    "/me",
    response_model=CurrentUserResponse,
    status_code=status.HTTP_200_OK,
    summary="Get current user",
    responses=get_error_responses(401, 403)
)
async def get_current_user_info(
    current_user: User = Depends(get_current_user)
) -> CurrentUserResponse:
    return CurrentUserResponse(user=UserResponse.model_validate(current_user))
