"""
Property service for managing listing aggregates.

Create, edit and delete each run as a single database transaction covering the
property row and all of its child rows. Uploaded files are validated before
anything is written and removed again when the transaction fails.
"""

from typing import List, Optional, Sequence, Tuple
from fastapi import UploadFile
from sqlalchemy.ext.asyncio import AsyncSession
from rental_marketplace.repositories.property import PropertyRepository, PropertySearchFilters
from rental_marketplace.models.property import Property, Category, PropertyRule, Amenity
from rental_marketplace.models.image import PropertyImage
from rental_marketplace.models.user import User
from rental_marketplace.schemas.property import PropertyCreate, PropertyUpdate
from rental_marketplace.utils.file_utils import FileValidator, FileStorage, ValidatedUpload
from rental_marketplace.utils.exceptions import (
    NotFoundError,
    ValidationError,
    InsufficientPermissionsError,
    PropertyNotFoundError,
    PropertyOwnershipError
)
import uuid
import logging

logger = logging.getLogger(__name__)


class PropertyService:
    """
    Property service handling listing workflows, ownership checks and browsing.
    """

    def __init__(self, db_session: AsyncSession, storage: Optional[FileStorage] = None):
        self.db = db_session
        self.property_repo = PropertyRepository(db_session)
        self.storage = storage or FileStorage()

    async def create_property(
        self,
        property_data: PropertyCreate,
        images: Sequence[UploadFile],
        current_user: User
    ) -> Property:
        """
        Create a listing with its images, category, rules and amenities.

        Args:
            property_data: Listing fields
            images: Uploaded images in submission order; the first becomes the cover
            current_user: Host creating the listing

        Returns:
            The persisted property with all children loaded

        Raises:
            InsufficientPermissionsError: If the user is not a host
            ValidationError: If no image was supplied or an image is invalid
        """
        if not current_user.is_tenant:
            raise InsufficientPermissionsError("create properties")

        if not images:
            raise ValidationError("Image(s) for the property are required")

        uploads = await FileValidator.validate_upload_files(images)
        stored_names = await self.storage.save_uploads(uploads)

        property_obj = Property(
            user_id=current_user.id,
            cover_image=stored_names[0],
            is_active=True,
            **property_data.scalar_fields()
        )
        property_obj.images = self._build_images(uploads, stored_names)
        property_obj.category = Category(**property_data.category.model_dump())
        property_obj.rules = self._build_rules(property_data.rules or [])
        property_obj.amenities = self._build_amenities(property_data.amenities or [])

        try:
            await self.property_repo.save(property_obj)
        except Exception:
            self.storage.delete_files(stored_names)
            raise

        logger.info(
            f"Property created by {current_user.email}: {property_obj.property_name} "
            f"(ID: {property_obj.id}, images: {len(stored_names)})"
        )
        return await self._reload(property_obj.id)

    async def edit_property(
        self,
        property_id: uuid.UUID,
        property_data: PropertyUpdate,
        images: Sequence[UploadFile],
        current_user: User
    ) -> Property:
        """
        Replace a listing's fields, images and category.

        Rules and amenities are replaced only when supplied. Old image files are
        removed once the new state is committed.

        Raises:
            PropertyNotFoundError: If the property doesn't exist
            PropertyOwnershipError: If the user doesn't own the property
            ValidationError: If no image was supplied or an image is invalid
        """
        property_obj = await self._get_owned_property(property_id, current_user)

        if not images:
            raise ValidationError("No images uploaded")

        uploads = await FileValidator.validate_upload_files(images)
        stored_names = await self.storage.save_uploads(uploads)
        old_names = [image.image for image in property_obj.images]

        for field, value in property_data.scalar_fields().items():
            setattr(property_obj, field, value)
        property_obj.cover_image = stored_names[0]
        property_obj.images = self._build_images(uploads, stored_names)
        property_obj.category = Category(**property_data.category.model_dump())

        if property_data.rules is not None:
            property_obj.rules = self._build_rules(property_data.rules)
        if property_data.amenities is not None:
            property_obj.amenities = self._build_amenities(property_data.amenities)

        try:
            await self.property_repo.save(property_obj)
        except Exception:
            self.storage.delete_files(stored_names)
            raise

        self.storage.delete_files(old_names)
        logger.info(f"Property updated by {current_user.email}: {property_id}")
        return await self._reload(property_id)

    async def get_property(self, property_id: uuid.UUID) -> Property:
        """
        Get a listing by ID.

        Raises:
            PropertyNotFoundError: If the property doesn't exist
        """
        property_obj = await self.property_repo.get_property_with_details(property_id)
        if not property_obj:
            raise PropertyNotFoundError()

        logger.debug(f"Retrieved property: {property_id}")
        return property_obj

    async def get_properties(
        self,
        filters: PropertySearchFilters,
        page: int = 1,
        limit: int = 100
    ) -> Tuple[List[Property], int]:
        """
        Browse listings.

        Returns:
            Tuple of (properties on this page, total matching count)

        Raises:
            ValidationError: If the sort key is unknown
            NotFoundError: If the page holds no properties
        """
        skip = (page - 1) * limit
        try:
            properties, total = await self.property_repo.search_properties(filters, skip=skip, limit=limit)
        except ValueError as e:
            raise ValidationError(str(e))

        if not properties:
            raise NotFoundError("Properties", detail="No properties found")

        return properties, total

    async def get_user_properties(
        self,
        current_user: User,
        page: int = 1,
        limit: int = 100
    ) -> Tuple[List[Property], int]:
        """
        List every listing owned by the current host, active or not.

        Raises:
            NotFoundError: If the host has no listings
        """
        skip = (page - 1) * limit
        properties, total = await self.property_repo.get_properties_by_owner(
            current_user.id, skip=skip, limit=limit
        )
        if not properties:
            raise NotFoundError("Properties", detail="No properties found")
        return properties, total

    async def set_property_status(
        self,
        property_id: uuid.UUID,
        is_active: bool,
        current_user: User
    ) -> Property:
        """Show or hide a listing in browse results."""
        property_obj = await self._get_owned_property(property_id, current_user)
        await self.property_repo.update_property_status(property_obj, is_active)
        return await self._reload(property_id)

    async def delete_property(self, property_id: uuid.UUID, current_user: User) -> None:
        """
        Delete a listing together with all of its child rows and image files.

        Raises:
            PropertyNotFoundError: If the property doesn't exist
            PropertyOwnershipError: If the user doesn't own the property
        """
        property_obj = await self._get_owned_property(property_id, current_user)
        image_names = [image.image for image in property_obj.images]

        await self.property_repo.delete_property(property_obj)

        self.storage.delete_files(image_names)
        logger.info(f"Property deleted by {current_user.email}: {property_id}")

    async def _get_owned_property(self, property_id: uuid.UUID, current_user: User) -> Property:
        property_obj = await self.property_repo.get_property_with_details(property_id)
        if not property_obj:
            raise PropertyNotFoundError()

        if not current_user.can_manage_property(property_obj.user_id):
            logger.warning(f"User {current_user.id} denied access to property {property_id}")
            raise PropertyOwnershipError()

        return property_obj

    async def _reload(self, property_id: uuid.UUID) -> Property:
        property_obj = await self.property_repo.get_property_with_details(property_id)
        if not property_obj:
            raise PropertyNotFoundError()
        return property_obj

    @staticmethod
    def _build_images(uploads: Sequence[ValidatedUpload], stored_names: Sequence[str]) -> List[PropertyImage]:
        return [
            PropertyImage(
                image=stored_name,
                original_filename=upload.original_filename,
                file_size=upload.file_size,
                mime_type=upload.mime_type,
                width=upload.width,
                height=upload.height,
                display_order=position
            )
            for position, (upload, stored_name) in enumerate(zip(uploads, stored_names))
        ]

    @staticmethod
    def _build_rules(rules: Sequence[str]) -> List[PropertyRule]:
        return [PropertyRule(rule=rule, display_order=position) for position, rule in enumerate(rules)]

    @staticmethod
    def _build_amenities(amenities: Sequence[str]) -> List[Amenity]:
        return [Amenity(amenity=amenity, display_order=position) for position, amenity in enumerate(amenities)]
