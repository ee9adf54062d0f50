"""
Base repository class with common persistence operations using async SQLAlchemy.
Every write commits exactly once and rolls back on failure, so a repository
call is one unit of work.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from rental_marketplace.database import Base
from typing import TypeVar, Generic, Optional, Dict, Any, Type
import uuid
import logging

logger = logging.getLogger(__name__)

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Base repository class providing common CRUD operations.
    Uses async SQLAlchemy for all database operations with proper error handling.
    """

    def __init__(self, model: Type[ModelType], db: AsyncSession):
        """
        Initialize repository with model class and database session.

        Args:
            model: SQLAlchemy model class
            db: Async database session
        """
        self.model = model
        self.db = db

    async def create(self, obj_in: Dict[str, Any]) -> ModelType:
        """
        Create a new record from field values.

        Raises:
            Exception: If database operation fails
        """
        return await self.save(self.model(**obj_in))

    async def save(self, db_obj: ModelType) -> ModelType:
        """
        Persist a new or modified instance together with any cascaded children.

        Args:
            db_obj: Model instance, possibly holding pending child objects

        Returns:
            The refreshed instance

        Raises:
            Exception: If database operation fails; the session is rolled back
        """
        try:
            self.db.add(db_obj)
            await self.db.commit()
            await self.db.refresh(db_obj)
            logger.debug(f"Saved {self.model.__name__} with id: {db_obj.id}")
            return db_obj
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to save {self.model.__name__}: {e}")
            raise

    async def update(self, db_obj: ModelType, obj_in: Dict[str, Any]) -> ModelType:
        """
        Assign field values on an instance and commit.

        Raises:
            Exception: If database operation fails
        """
        for field, value in obj_in.items():
            if hasattr(db_obj, field):
                setattr(db_obj, field, value)
        return await self.save(db_obj)

    async def delete(self, db_obj: ModelType) -> None:
        """
        Delete an instance; ORM cascades remove its children in the same transaction.

        Raises:
            Exception: If database operation fails
        """
        try:
            await self.db.delete(db_obj)
            await self.db.commit()
            logger.debug(f"Deleted {self.model.__name__} with id: {db_obj.id}")
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to delete {self.model.__name__} {db_obj.id}: {e}")
            raise

    async def get_by_id(self, id: uuid.UUID) -> Optional[ModelType]:
        """Get a record by its ID, or None."""
        try:
            result = await self.db.execute(select(self.model).where(self.model.id == id))
            obj = result.scalar_one_or_none()

            if obj is None:
                logger.debug(f"{self.model.__name__} with id {id} not found")
            return obj
        except Exception as e:
            logger.error(f"Failed to get {self.model.__name__} by id {id}: {e}")
            raise

    async def get_by_field(self, field: str, value: Any) -> Optional[ModelType]:
        """
        Get a record by a specific field value.

        Raises:
            ValueError: If the model has no such field
        """
        if not hasattr(self.model, field):
            raise ValueError(f"Field '{field}' does not exist on {self.model.__name__}")

        try:
            query = select(self.model).where(getattr(self.model, field) == value)
            result = await self.db.execute(query)
            return result.scalar_one_or_none()
        except Exception as e:
            logger.error(f"Failed to get {self.model.__name__} by {field}={value}: {e}")
            raise
