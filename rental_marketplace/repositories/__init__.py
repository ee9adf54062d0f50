"""
Repository layer for data access operations.
"""

from rental_marketplace.repositories.base import BaseRepository
from rental_marketplace.repositories.property import PropertyRepository, PropertySearchFilters
from rental_marketplace.repositories.user import UserRepository

__all__ = [
    "BaseRepository",
    "PropertyRepository",
    "PropertySearchFilters",
    "UserRepository"
]
