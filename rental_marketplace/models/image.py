"""
PropertyImage model for managing property image uploads.
"""

from sqlalchemy import String, Integer, ForeignKey, Index, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from rental_marketplace.database import Base
import uuid
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from rental_marketplace.models.property import Property


class PropertyImage(Base):
    """
    PropertyImage model for uploaded property images.
    Stores file metadata and the position of the image within its listing.
    """

    __tablename__ = "property_images"

    property_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="ID of the property this image belongs to"
    )

    image: Mapped[str] = mapped_column(
        String(500),
        nullable=False,
        unique=True,
        comment="Stored file name under the upload directory"
    )

    original_filename: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Filename supplied by the client"
    )

    file_size: Mapped[int] = mapped_column(Integer, nullable=False, comment="File size in bytes")

    mime_type: Mapped[str] = mapped_column(String(100), nullable=False)

    width: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    height: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    display_order: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        comment="Upload position; 0 is the cover image"
    )

    property_rel: Mapped["Property"] = relationship("Property", back_populates="images")

    def __repr__(self) -> str:
        return f"<PropertyImage(id={self.id}, image={self.image}, order={self.display_order})>"


# Index for fetching a listing's images in upload order
property_images_order_index = Index(
    'idx_property_images_property_order',
    PropertyImage.property_id,
    PropertyImage.display_order.asc()
)
