"""
Association tables.
"""

from sqlalchemy import Table, Column, ForeignKey, Uuid
from rental_marketplace.database import Base

# A property links to exactly one category row; the primary key on
# property_id keeps it at most one.
property_categories = Table(
    "property_categories",
    Base.metadata,
    Column(
        "property_id",
        Uuid(as_uuid=True),
        ForeignKey("properties.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "category_id",
        Uuid(as_uuid=True),
        ForeignKey("categories.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    ),
)
