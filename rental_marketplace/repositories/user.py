"""
User repository for authentication and account management operations.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from rental_marketplace.repositories.base import BaseRepository
from rental_marketplace.models.user import User, UserRole
from typing import Optional, Dict, Any
from datetime import datetime, timezone
import logging

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User]):
    """
    Repository for user accounts.
    Handles email normalization, password hashing and reset-token bookkeeping.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(User, db)

    async def create_user(self, user_data: Dict[str, Any]) -> User:
        """
        Create a new user with email validation and password hashing.

        Args:
            user_data: Dictionary containing user information
                      Must include: email, password, fullname
                      Optional: username, phone_number, role (defaults to USER)

        Returns:
            Created user instance

        Raises:
            ValueError: If the email, username or password is invalid
            Exception: If database operation fails
        """
        user_data = dict(user_data)
        email = User.validate_email_format(user_data.pop("email"))
        if user_data.get("username") and "@" in user_data["username"]:
            raise ValueError("Username may not contain '@'")
        hashed_password = User.hash_password(user_data.pop("password"))

        create_data = {
            **user_data,
            "email": email,
            "hashed_password": hashed_password,
            "role": user_data.get("role") or UserRole.USER,
            "is_active": user_data.get("is_active", True),
        }

        created_user = await self.create(create_data)
        logger.info(f"Created user: {created_user.email} (ID: {created_user.id})")
        return created_user

    async def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email address (case-insensitive)."""
        normalized_email = email.lower().strip()
        return await self.get_by_field("email", normalized_email)

    async def get_by_username(self, username: str) -> Optional[User]:
        return await self.get_by_field("username", username.strip())

    async def get_by_identity(self, identity: str) -> Optional[User]:
        """
        Get user by email address or username.

        An email match always wins over a username match.

        Args:
            identity: Either the account email or its username

        Returns:
            User instance if found, None otherwise
        """
        identity = identity.strip()
        user = await self.get_by_email(identity)
        if user is None:
            user = await self.get_by_username(identity)
        return user

    async def authenticate_user(self, identity: str, password: str) -> Optional[User]:
        """
        Authenticate user with email or username and password.

        Returns:
            User instance if authentication successful, None otherwise
        """
        user = await self.get_by_identity(identity)

        if not user:
            logger.debug(f"Authentication failed: user {identity} not found")
            return None

        if not user.is_active:
            logger.debug(f"Authentication failed: user {identity} is inactive")
            return None

        if not user.verify_password(password):
            logger.debug(f"Authentication failed: invalid password for {identity}")
            return None

        logger.info(f"User authenticated successfully: {user.email}")
        return user

    async def check_email_availability(self, email: str) -> bool:
        return await self.get_by_email(email) is None

    async def set_reset_token(self, user: User, token_hash: str, expires_at: datetime) -> User:
        """Store the digest of an issued password reset token."""
        return await self.update(user, {
            "reset_token": token_hash,
            "reset_token_expiry": expires_at,
        })

    async def get_by_reset_token(self, token_hash: str) -> Optional[User]:
        return await self.get_by_field("reset_token", token_hash)

    async def update_password(self, user: User, new_password: str) -> User:
        """
        Replace the user's password and clear any outstanding reset token.

        Raises:
            ValueError: If password validation fails
        """
        updated_user = await self.update(user, {
            "hashed_password": User.hash_password(new_password),
            "password_updated_at": datetime.now(timezone.utc),
            "reset_token": None,
            "reset_token_expiry": None,
        })
        logger.info(f"Password updated for user: {updated_user.email}")
        return updated_user
