"""
Authentication service for registration, login, token validation and password reset.
"""

from typing import Optional, Tuple
from datetime import datetime, timedelta, timezone
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from rental_marketplace.config import settings
from rental_marketplace.repositories.user import UserRepository
from rental_marketplace.models.user import User
from rental_marketplace.schemas.user import UserCreate
from rental_marketplace.utils.auth import (
    create_access_token,
    verify_token,
    generate_reset_token,
    hash_reset_token
)
from rental_marketplace.utils.exceptions import (
    InvalidCredentialsError,
    InvalidTokenError,
    TokenExpiredError,
    InactiveUserError,
    InvalidResetTokenError,
    DuplicateResourceError,
    ValidationError
)
from jose import JWTError, ExpiredSignatureError
import uuid
import logging

logger = logging.getLogger(__name__)


class AuthService:
    """
    Authentication service for account lifecycle and bearer tokens.
    """

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.user_repo = UserRepository(db_session)

    async def register(self, user_data: UserCreate) -> User:
        """
        Register a new account.

        Args:
            user_data: Registration payload

        Returns:
            Created user instance

        Raises:
            DuplicateResourceError: If the email or username is already taken
            ValidationError: If the email or password is rejected
        """
        if not await self.user_repo.check_email_availability(user_data.email):
            logger.warning(f"Registration rejected, email already registered: {user_data.email}")
            raise DuplicateResourceError("Email already registered")

        if user_data.username and await self.user_repo.get_by_identity(user_data.username):
            raise DuplicateResourceError("Username already taken")

        try:
            user = await self.user_repo.create_user(user_data.model_dump())
        except ValueError as e:
            raise ValidationError(str(e))
        except IntegrityError:
            # Lost a race with a concurrent registration for the same email
            raise DuplicateResourceError("Email already registered")

        logger.info(f"User registered: {user.email} (ID: {user.id}, role: {user.role.value})")
        return user

    async def authenticate_user(self, identity: str, password: str) -> User:
        """
        Authenticate user with email or username and password.

        Raises:
            InvalidCredentialsError: If credentials are invalid or the account is inactive
        """
        user = await self.user_repo.authenticate_user(identity, password)

        if not user:
            logger.warning(f"Failed authentication attempt for: {identity}")
            raise InvalidCredentialsError()

        return user

    async def login(self, identity: str, password: str) -> Tuple[User, str]:
        """
        Authenticate user and issue an access token.

        Returns:
            Tuple of (user, access_token)
        """
        user = await self.authenticate_user(identity, password)
        access_token = create_access_token(
            user_id=user.id,
            email=user.email,
            role=user.role
        )
        return user, access_token

    @staticmethod
    def token_lifetime_seconds() -> int:
        return settings.access_token_expire_minutes * 60

    async def get_current_user(self, token: str) -> User:
        """
        Get current user from access token.

        Raises:
            InvalidTokenError: If token is invalid or its user no longer exists
            TokenExpiredError: If token is expired
            InactiveUserError: If user account is inactive
        """
        try:
            token_payload = verify_token(token)
            user_id = uuid.UUID(token_payload.user_id)
        except ExpiredSignatureError:
            raise TokenExpiredError()
        except (JWTError, ValueError) as e:
            raise InvalidTokenError(str(e))

        user = await self.user_repo.get_by_id(user_id)
        if not user:
            raise InvalidTokenError("User no longer exists")

        if not user.is_active:
            raise InactiveUserError()

        return user

    async def forgot_password(self, email: str) -> Optional[str]:
        """
        Issue a password reset token for the account with this email.

        Only the SHA-256 digest is stored. Delivery of the raw token is left to
        the mail integration.

        Returns:
            The raw token, or None when no active account uses the email
        """
        user = await self.user_repo.get_by_email(email)
        if not user or not user.is_active:
            logger.info(f"Password reset requested for unknown email: {email}")
            return None

        raw_token, token_hash = generate_reset_token()
        expires_at = datetime.now(timezone.utc) + timedelta(minutes=settings.reset_token_expire_minutes)
        await self.user_repo.set_reset_token(user, token_hash, expires_at)

        logger.info(f"Password reset token issued for user {user.id}")
        return raw_token

    async def reset_password(self, raw_token: str, new_password: str) -> User:
        """
        Set a new password using a reset token.

        Raises:
            InvalidResetTokenError: If the token is unknown or expired
        """
        user = await self.user_repo.get_by_reset_token(hash_reset_token(raw_token))
        if not user or not user.reset_token_expiry:
            raise InvalidResetTokenError()

        expiry = user.reset_token_expiry
        if expiry.tzinfo is None:
            # SQLite drops the offset
            expiry = expiry.replace(tzinfo=timezone.utc)
        if expiry < datetime.now(timezone.utc):
            raise InvalidResetTokenError()

        try:
            return await self.user_repo.update_password(user, new_password)
        except ValueError as e:
            raise ValidationError(str(e))
