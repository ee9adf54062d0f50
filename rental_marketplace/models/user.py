"""
User model with authentication and role management.
Handles accounts for guests and hosts (tenants) of the marketplace.
"""

from sqlalchemy import String, Boolean, Date, DateTime, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column
from rental_marketplace.database import Base
from passlib.context import CryptContext
from email_validator import validate_email, EmailNotValidError
from datetime import date, datetime
import enum
import uuid
from typing import Optional

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class UserRole(str, enum.Enum):
    """User role enumeration for role-based access control."""
    USER = "user"
    TENANT = "tenant"


class User(Base):
    """
    User model for authentication and authorization.

    Guests browse listings; tenants own and manage property listings.
    """

    __tablename__ = "users"

    # Identification and authentication
    fullname: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="User's full name"
    )

    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
        comment="User email address - must be unique and valid"
    )

    username: Mapped[Optional[str]] = mapped_column(
        String(100),
        unique=True,
        nullable=True,
        index=True,
        comment="Optional login handle"
    )

    hashed_password: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Bcrypt hashed password"
    )

    phone_number: Mapped[Optional[str]] = mapped_column(
        String(32),
        nullable=True
    )

    # Profile
    gender: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    date_of_birth: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    profile_picture: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    ktp_image: Mapped[Optional[str]] = mapped_column(
        String(500),
        nullable=True,
        comment="Identity card image used for host verification"
    )

    # Role and status
    role: Mapped[UserRole] = mapped_column(
        SQLEnum(UserRole),
        nullable=False,
        default=UserRole.USER,
        index=True,
        comment="User role for access control"
    )

    is_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        index=True,
        comment="Whether the user account is active"
    )

    # Password reset
    reset_token: Mapped[Optional[str]] = mapped_column(
        String(64),
        nullable=True,
        index=True,
        comment="SHA-256 digest of the outstanding reset token"
    )
    reset_token_expiry: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True
    )
    password_updated_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"

    @classmethod
    def validate_email_format(cls, email: str) -> str:
        """
        Validate email format using email-validator.

        Args:
            email: Email address to validate

        Returns:
            Normalized email address

        Raises:
            ValueError: If email format is invalid
        """
        try:
            valid_email = validate_email(email, check_deliverability=False)
            return valid_email.normalized.lower()
        except EmailNotValidError as e:
            raise ValueError(f"Invalid email format: {str(e)}")

    @classmethod
    def hash_password(cls, password: str) -> str:
        """
        Hash a password using bcrypt.

        Raises:
            ValueError: If the password is shorter than 8 characters
        """
        if not password or len(password) < 8:
            raise ValueError("Password must be at least 8 characters long")

        return pwd_context.hash(password)

    def verify_password(self, password: str) -> bool:
        """Verify a password against the stored hash."""
        return pwd_context.verify(password, self.hashed_password)

    def set_password(self, password: str) -> None:
        self.hashed_password = self.hash_password(password)

    @property
    def is_tenant(self) -> bool:
        """Check if user has the host (tenant) role."""
        return self.role == UserRole.TENANT

    def can_manage_property(self, property_owner_id: uuid.UUID) -> bool:
        """Hosts can only manage their own listings."""
        return self.is_tenant and self.id == property_owner_id
