"""
Database models for the Rental Marketplace API.
"""

from rental_marketplace.models.user import User, UserRole
from rental_marketplace.models.associations import property_categories
from rental_marketplace.models.property import Property, Category, PropertyRule, Amenity
from rental_marketplace.models.image import PropertyImage
from rental_marketplace.models.booking import Order, Room

# Export all models for easy importing
__all__ = [
    "User",
    "UserRole",
    "Property",
    "Category",
    "PropertyRule",
    "Amenity",
    "PropertyImage",
    "property_categories",
    "Order",
    "Room",
]
