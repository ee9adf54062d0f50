"""
Property listing models.
A Property is an aggregate root owning its images, its category (location and
type), its house rules and its amenities.
"""

from sqlalchemy import String, Text, Integer, Numeric, Boolean, Index, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from rental_marketplace.database import Base
from rental_marketplace.models.associations import property_categories
from decimal import Decimal
import uuid
from typing import List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from rental_marketplace.models.user import User
    from rental_marketplace.models.image import PropertyImage


class Property(Base):
    """
    Property model for rental listings.

    The cover image is always the first uploaded image; ``display_order`` on
    the images preserves upload order.
    """

    __tablename__ = "properties"

    property_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
        comment="Listing name"
    )

    description: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Detailed property description"
    )

    price: Mapped[Decimal] = mapped_column(
        Numeric(precision=12, scale=2),
        nullable=False,
        index=True,
        comment="Nightly price in local currency"
    )

    # Capacity
    bed_count: Mapped[int] = mapped_column(Integer, nullable=False)
    bedroom_count: Mapped[int] = mapped_column(Integer, nullable=False)
    max_guest_count: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    bathroom_count: Mapped[int] = mapped_column(Integer, nullable=False)

    cover_image: Mapped[Optional[str]] = mapped_column(
        String(500),
        nullable=True,
        comment="Stored file name of the first uploaded image"
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        index=True,
        comment="Whether the listing is visible in browse results"
    )

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="ID of the host who owns this property"
    )

    # Relationships
    owner: Mapped["User"] = relationship("User", lazy="selectin")

    images: Mapped[List["PropertyImage"]] = relationship(
        "PropertyImage",
        back_populates="property_rel",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="PropertyImage.display_order.asc()"
    )

    category: Mapped[Optional["Category"]] = relationship(
        "Category",
        secondary=property_categories,
        uselist=False,
        cascade="all, delete-orphan",
        single_parent=True,
        lazy="selectin"
    )

    rules: Mapped[List["PropertyRule"]] = relationship(
        "PropertyRule",
        back_populates="property_rel",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="PropertyRule.display_order.asc()"
    )

    amenities: Mapped[List["Amenity"]] = relationship(
        "Amenity",
        back_populates="property_rel",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="Amenity.display_order.asc()"
    )

    def __repr__(self) -> str:
        return f"<Property(id={self.id}, name={self.property_name[:30]}, price={self.price})>"


class Category(Base):
    """Location and type record attached to a single property."""

    __tablename__ = "categories"

    property_type: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    district: Mapped[str] = mapped_column(String(255), nullable=False)
    city: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    province: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    street_address: Mapped[str] = mapped_column(String(500), nullable=False)
    postal_code: Mapped[str] = mapped_column(String(20), nullable=False)


class PropertyRule(Base):
    """A single free-text house rule."""

    __tablename__ = "property_rules"

    property_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    rule: Mapped[str] = mapped_column(Text, nullable=False)
    display_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0, comment="Submission position")

    property_rel: Mapped["Property"] = relationship("Property", back_populates="rules")


class Amenity(Base):
    """A single amenity label such as ``wifi`` or ``kitchen``."""

    __tablename__ = "amenities"

    property_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    amenity: Mapped[str] = mapped_column(String(100), nullable=False)
    display_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0, comment="Submission position")

    property_rel: Mapped["Property"] = relationship("Property", back_populates="amenities")


# Composite index for the owner's listing page
owner_active_index = Index(
    'idx_properties_owner_active',
    Property.user_id,
    Property.is_active,
    Property.created_at.desc()
)

# Composite index for browse queries filtered by location
category_location_index = Index(
    'idx_categories_location',
    Category.province,
    Category.city,
    Category.property_type
)
