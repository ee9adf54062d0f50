"""
Pydantic schemas for property requests and responses.

Responses use camelCase keys on the wire; the property DTO flattens the
aggregate into ``categories``, ``amenities``, ``propertyImages`` and
``propertyRules`` lists.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import Optional, List
from datetime import datetime
from decimal import Decimal
from rental_marketplace.models.property import Property
import uuid


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class CategoryCreate(CamelModel):
    """Location and type of a listing."""

    property_type: str = Field(..., min_length=1, max_length=100, examples=["villa"])
    district: str = Field(..., min_length=1, max_length=255, examples=["Kuta"])
    city: str = Field(..., min_length=1, max_length=255, examples=["Badung"])
    province: str = Field(..., min_length=1, max_length=255, examples=["Bali"])
    street_address: str = Field(..., min_length=1, max_length=500, examples=["Jl. Pantai Kuta No. 1"])
    postal_code: str = Field(..., min_length=1, max_length=20, examples=["80361"])

    @field_validator('property_type', 'district', 'city', 'province', 'street_address', 'postal_code')
    @classmethod
    def strip_text(cls, v):
        if not v.strip():
            raise ValueError("Field cannot be blank")
        return v.strip()


class PropertyCreate(CamelModel):
    """
    Scalar fields, category and optional rules/amenities of a listing.

    ``rules`` and ``amenities`` set to None mean "not supplied"; on edit the
    existing rows are then kept.
    """

    property_name: str = Field(..., min_length=1, max_length=255, examples=["Sunset Villa"])
    description: str = Field(..., min_length=1, max_length=5000)
    price: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2, examples=[1500000])
    bed_count: int = Field(..., ge=0, le=100)
    bedroom_count: int = Field(..., ge=0, le=100)
    max_guest_count: int = Field(..., ge=1, le=500)
    bathroom_count: int = Field(..., ge=0, le=100)
    category: CategoryCreate
    rules: Optional[List[str]] = None
    amenities: Optional[List[str]] = None

    @field_validator('property_name', 'description')
    @classmethod
    def strip_text(cls, v):
        if not v.strip():
            raise ValueError("Field cannot be blank")
        return v.strip()

    @field_validator('rules', 'amenities')
    @classmethod
    def clean_items(cls, v):
        """Drop blank entries."""
        if v is None:
            return v
        return [item.strip() for item in v if item and item.strip()]

    def scalar_fields(self) -> dict:
        return self.model_dump(exclude={"category", "rules", "amenities"})


class PropertyUpdate(PropertyCreate):
    """Full replacement of a listing's scalar fields and category."""


class PropertyStatusUpdate(CamelModel):
    is_active: bool = Field(..., description="Whether the listing appears in browse results")


class CategoryResponse(CamelModel):
    id: uuid.UUID
    property_type: str
    district: str
    city: str
    province: str
    street_address: str
    postal_code: str


class AmenityResponse(CamelModel):
    id: uuid.UUID
    amenity: str


class PropertyImageResponse(CamelModel):
    id: uuid.UUID
    image: str


class PropertyRuleResponse(CamelModel):
    id: uuid.UUID
    rule: str


class PropertyResponse(CamelModel):
    """Flattened property aggregate."""

    id: uuid.UUID
    user_id: uuid.UUID
    name: str
    description: str
    price: float
    bed_count: int
    bedroom_count: int
    max_guest_count: int
    bathroom_count: int
    cover_image: Optional[str] = None
    is_active: bool
    categories: List[CategoryResponse] = Field(default_factory=list)
    amenities: List[AmenityResponse] = Field(default_factory=list)
    property_images: List[PropertyImageResponse] = Field(default_factory=list)
    property_rules: List[PropertyRuleResponse] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_property(cls, property_obj: Property) -> "PropertyResponse":
        """Build the DTO from a property loaded with its child collections."""
        return cls(
            id=property_obj.id,
            user_id=property_obj.user_id,
            name=property_obj.property_name,
            description=property_obj.description,
            price=float(property_obj.price),
            bed_count=property_obj.bed_count,
            bedroom_count=property_obj.bedroom_count,
            max_guest_count=property_obj.max_guest_count,
            bathroom_count=property_obj.bathroom_count,
            cover_image=property_obj.cover_image,
            is_active=property_obj.is_active,
            categories=[CategoryResponse.model_validate(property_obj.category)] if property_obj.category else [],
            amenities=[AmenityResponse.model_validate(a) for a in property_obj.amenities],
            property_images=[PropertyImageResponse.model_validate(i) for i in property_obj.images],
            property_rules=[PropertyRuleResponse.model_validate(r) for r in property_obj.rules],
            created_at=property_obj.created_at,
            updated_at=property_obj.updated_at,
        )


class PropertyEnvelope(CamelModel):
    ok: bool = True
    status: int = 200
    message: Optional[str] = None
    property: PropertyResponse


class PropertyListResponse(CamelModel):
    """Paginated property list."""

    ok: bool = True
    status: int = 200
    properties: List[PropertyResponse]
    total: int = Field(..., description="Total number of properties matching the criteria")
    page: int = Field(..., description="Current page number")
    limit: int = Field(..., description="Number of properties per page")
    total_pages: int = Field(..., description="Total number of pages")
