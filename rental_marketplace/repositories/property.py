"""
Property repository for listing aggregates and their browse queries.
A property is always loaded together with its images, category, rules and amenities.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, and_, or_, func, desc, asc
from sqlalchemy.orm import selectinload
from rental_marketplace.repositories.base import BaseRepository
from rental_marketplace.models.property import Property, Category
from typing import Optional, List, Tuple
import uuid
import logging

logger = logging.getLogger(__name__)

# Public sort keys mapped to columns
SORTABLE_FIELDS = {
    "name": Property.property_name,
    "price": Property.price,
    "createdAt": Property.created_at,
    "maxGuestCount": Property.max_guest_count,
}


class PropertySearchFilters:
    """Data class for property browse filters."""

    def __init__(
        self,
        category: Optional[str] = None,
        search: Optional[str] = None,
        filter_by: Optional[str] = None,
        is_active: Optional[bool] = True,
        user_id: Optional[uuid.UUID] = None,
        sort: str = "-createdAt"
    ):
        self.category = category
        self.search = search
        self.filter_by = filter_by
        self.is_active = is_active
        self.user_id = user_id
        self.sort = sort


def _contains_pattern(value: str) -> str:
    """ILIKE pattern matching ``value`` literally anywhere in a column."""
    escaped = value.strip().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def _with_details(query):
    return query.options(
        selectinload(Property.images),
        selectinload(Property.category),
        selectinload(Property.rules),
        selectinload(Property.amenities),
    )


class PropertyRepository(BaseRepository[Property]):
    """
    Repository for property aggregates with filtered, paginated browsing.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(Property, db)

    async def get_property_with_details(self, property_id: uuid.UUID) -> Optional[Property]:
        """
        Get property with all child collections freshly loaded.

        Args:
            property_id: UUID of the property

        Returns:
            Property with loaded relationships or None if not found
        """
        try:
            query = (
                _with_details(select(Property))
                .where(Property.id == property_id)
                .execution_options(populate_existing=True)
            )
            result = await self.db.execute(query)
            property_obj = result.scalar_one_or_none()

            if property_obj:
                logger.debug(f"Retrieved property with details: {property_id}")

            return property_obj
        except Exception as e:
            logger.error(f"Failed to get property with details {property_id}: {e}")
            raise

    async def search_properties(
        self,
        filters: PropertySearchFilters,
        skip: int = 0,
        limit: int = 100
    ) -> Tuple[List[Property], int]:
        """
        Search properties with filtering, ordering and pagination.

        Args:
            filters: PropertySearchFilters instance with search criteria
            skip: Number of records to skip for pagination
            limit: Maximum number of records to return

        Returns:
            Tuple of (properties list, total count)

        Raises:
            ValueError: If the sort key is not sortable
        """
        order_clause = self._build_order_clause(filters.sort)

        try:
            query = _with_details(select(Property))
            count_query = select(func.count(Property.id))

            conditions = self._build_filter_conditions(filters)
            if conditions:
                query = query.where(and_(*conditions))
                count_query = count_query.where(and_(*conditions))

            count_result = await self.db.execute(count_query)
            total_count = count_result.scalar()

            query = query.order_by(order_clause, Property.id).offset(skip).limit(limit)

            result = await self.db.execute(query)
            properties = result.scalars().all()

            logger.debug(f"Property search returned {len(properties)} of {total_count} total results")
            return list(properties), total_count
        except Exception as e:
            logger.error(f"Failed to search properties: {e}")
            raise

    @staticmethod
    def _build_order_clause(sort: Optional[str]):
        sort = sort or "-createdAt"
        descending = sort.startswith("-")
        field_name = sort.lstrip("-")

        column = SORTABLE_FIELDS.get(field_name)
        if column is None:
            raise ValueError(
                f"Invalid sort field '{field_name}'. Allowed: {', '.join(SORTABLE_FIELDS)}"
            )
        return desc(column) if descending else asc(column)

    def _build_filter_conditions(self, filters: PropertySearchFilters) -> List:
        """
        Build SQLAlchemy filter conditions from browse filters.

        Args:
            filters: PropertySearchFilters instance

        Returns:
            List of SQLAlchemy conditions
        """
        conditions = []

        if filters.is_active is not None:
            conditions.append(Property.is_active == filters.is_active)

        if filters.user_id:
            conditions.append(Property.user_id == filters.user_id)

        # Property type, case-insensitive exact match
        if filters.category:
            conditions.append(
                Property.category.has(
                    func.lower(Category.property_type) == filters.category.strip().lower()
                )
            )

        # Free text over name, description and location
        if filters.search:
            term = _contains_pattern(filters.search)
            conditions.append(
                or_(
                    Property.property_name.ilike(term, escape="\\"),
                    Property.description.ilike(term, escape="\\"),
                    Property.category.has(
                        or_(
                            Category.city.ilike(term, escape="\\"),
                            Category.district.ilike(term, escape="\\"),
                            Category.province.ilike(term, escape="\\"),
                        )
                    ),
                )
            )

        # Location narrowing by city or province
        if filters.filter_by:
            term = _contains_pattern(filters.filter_by)
            conditions.append(
                Property.category.has(
                    or_(
                        Category.city.ilike(term, escape="\\"),
                        Category.province.ilike(term, escape="\\"),
                    )
                )
            )

        return conditions

    async def get_properties_by_owner(
        self,
        user_id: uuid.UUID,
        skip: int = 0,
        limit: int = 100
    ) -> Tuple[List[Property], int]:
        """Get every listing owned by a host, active or not."""
        filters = PropertySearchFilters(user_id=user_id, is_active=None)
        return await self.search_properties(filters, skip=skip, limit=limit)

    async def update_property_status(self, property_obj: Property, is_active: bool) -> Property:
        updated = await self.update(property_obj, {"is_active": is_active})
        status = "activated" if is_active else "deactivated"
        logger.info(f"Property {updated.id} {status}")
        return updated

    async def delete_property(self, property_obj: Property) -> None:
        """Delete a property; images, category, rules and amenities go with it."""
        property_id = property_obj.id
        await self.delete(property_obj)
        logger.info(f"Deleted property {property_id} with all child records")
