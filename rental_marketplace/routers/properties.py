"""
Property listing API endpoints.

Create and edit accept ``multipart/form-data`` with the listing fields and one
or more ``images`` files; reads are public.
"""

from fastapi import APIRouter, Depends, status, Query, Path, Form, File, UploadFile
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError as PydanticValidationError
from decimal import Decimal
from typing import Optional, List
from uuid import UUID
import math

from rental_marketplace.config import settings
from rental_marketplace.models.user import User
from rental_marketplace.repositories.property import PropertySearchFilters
from rental_marketplace.services.property import PropertyService
from rental_marketplace.schemas.auth import MessageResponse
from rental_marketplace.schemas.property import (
    PropertyCreate,
    PropertyUpdate,
    PropertyStatusUpdate,
    PropertyResponse,
    PropertyEnvelope,
    PropertyListResponse
)
from rental_marketplace.schemas.error import get_crud_error_responses, get_error_responses
from rental_marketplace.utils.dependencies import (
    get_current_tenant_user,
    get_property_service
)


router = APIRouter(prefix="/properties", tags=["Properties"])


async def get_property_form(
    property_name: str = Form(..., alias="propertyName", max_length=255),
    description: str = Form(..., max_length=5000),
    price: Decimal = Form(..., gt=0),
    bed_count: int = Form(..., alias="bedCount", ge=0),
    bedroom_count: int = Form(..., alias="bedroomCount", ge=0),
    max_guest_count: int = Form(..., alias="maxGuestCount", ge=1),
    bathroom_count: int = Form(..., alias="bathroomCount", ge=0),
    property_type: str = Form(..., alias="propertyType"),
    district: str = Form(...),
    city: str = Form(...),
    province: str = Form(...),
    street_address: str = Form(..., alias="streetAddress"),
    postal_code: str = Form(..., alias="postalCode"),
    property_rules: Optional[List[str]] = Form(None, alias="propertyRules"),
    property_amenities: Optional[List[str]] = Form(None, alias="propertyAmenities")
) -> PropertyCreate:
    """Collect multipart listing fields into a PropertyCreate."""
    try:
        return PropertyCreate(
            property_name=property_name,
            description=description,
            price=price,
            bed_count=bed_count,
            bedroom_count=bedroom_count,
            max_guest_count=max_guest_count,
            bathroom_count=bathroom_count,
            category={
                "property_type": property_type,
                "district": district,
                "city": city,
                "province": province,
                "street_address": street_address,
                "postal_code": postal_code,
            },
            rules=property_rules,
            amenities=property_amenities
        )
    except PydanticValidationError as e:
        raise RequestValidationError(e.errors())


async def get_property_update_form(
    form: PropertyCreate = Depends(get_property_form)
) -> PropertyUpdate:
    return PropertyUpdate.model_validate(form.model_dump())


def _list_response(properties, total: int, page: int, limit: int) -> PropertyListResponse:
    return PropertyListResponse(
        properties=[PropertyResponse.from_property(p) for p in properties],
        total=total,
        page=page,
        limit=limit,
        total_pages=math.ceil(total / limit) if total else 0
    )


@router.post(
    "",
    response_model=PropertyEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Create new property",
    description="Create a listing with images, category, rules and amenities. Requires the tenant role.",
    responses=get_crud_error_responses()
)
async def create_property(
    property_data: PropertyCreate = Depends(get_property_form),
    images: Optional[List[UploadFile]] = File(None, description="Listing images; the first is the cover"),
    current_user: User = Depends(get_current_tenant_user),
    property_service: PropertyService = Depends(get_property_service)
) -> PropertyEnvelope:
    """
    Create a new property listing.

    Raises:
        ValidationError: If no image was uploaded or an image is invalid
        InsufficientPermissionsError: If the user is not a host
    """
    property_obj = await property_service.create_property(property_data, images or [], current_user)

    return PropertyEnvelope(
        status=status.HTTP_201_CREATED,
        message="Property successfully created",
        property=PropertyResponse.from_property(property_obj)
    )


@router.get(
    "",
    response_model=PropertyListResponse,
    status_code=status.HTTP_200_OK,
    summary="List properties",
    description="Paginated list of listings with optional filtering and sorting",
    responses=get_error_responses(400, 404, 422)
)
async def list_properties(
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size, description="Properties per page"),
    page: int = Query(1, ge=1, description="Page number (starts from 1)"),
    sort: Optional[str] = Query(None, description="name, price, createdAt or maxGuestCount; prefix '-' for descending"),
    category: Optional[str] = Query(None, description="Property type, e.g. villa"),
    search: Optional[str] = Query(None, description="Text search over name, description and location"),
    filter_by: Optional[str] = Query(None, alias="filterBy", description="City or province"),
    is_active: bool = Query(True, alias="isActive", description="Filter by active status"),
    property_service: PropertyService = Depends(get_property_service)
) -> PropertyListResponse:
    """
    Browse listings.

    Raises:
        ValidationError: If the sort key is unknown
        NotFoundError: If no listing matches
    """
    filters = PropertySearchFilters(
        category=category,
        search=search,
        filter_by=filter_by,
        is_active=is_active,
        sort=sort or "-createdAt"
    )

    properties, total = await property_service.get_properties(filters, page=page, limit=limit)
    return _list_response(properties, total, page, limit)


@router.get(
    "/mine",
    response_model=PropertyListResponse,
    status_code=status.HTTP_200_OK,
    summary="List my properties",
    description="Every listing owned by the current host, active or not",
    responses=get_error_responses(401, 403, 404)
)
async def list_my_properties(
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    page: int = Query(1, ge=1),
    current_user: User = Depends(get_current_tenant_user),
    property_service: PropertyService = Depends(get_property_service)
) -> PropertyListResponse:
    properties, total = await property_service.get_user_properties(current_user, page=page, limit=limit)
    return _list_response(properties, total, page, limit)


@router.get(
    "/{property_id}",
    response_model=PropertyEnvelope,
    status_code=status.HTTP_200_OK,
    summary="Get property details",
    responses=get_error_responses(404, 422)
)
async def get_property(
    property_id: UUID = Path(..., description="Property ID"),
    property_service: PropertyService = Depends(get_property_service)
) -> PropertyEnvelope:
    property_obj = await property_service.get_property(property_id)
    return PropertyEnvelope(property=PropertyResponse.from_property(property_obj))


@router.put(
    "/{property_id}",
    response_model=PropertyEnvelope,
    status_code=status.HTTP_200_OK,
    summary="Update property",
    description="Replace a listing's fields, images and category. Only the owner can update.",
    responses=get_crud_error_responses()
)
async def update_property(
    property_id: UUID = Path(..., description="Property ID"),
    property_data: PropertyUpdate = Depends(get_property_update_form),
    images: Optional[List[UploadFile]] = File(None, description="Replacement images; the first is the cover"),
    current_user: User = Depends(get_current_tenant_user),
    property_service: PropertyService = Depends(get_property_service)
) -> PropertyEnvelope:
    """
    Update a listing.

    Raises:
        PropertyNotFoundError: If property doesn't exist
        PropertyOwnershipError: If the user doesn't own the property
        ValidationError: If no image was uploaded or an image is invalid
    """
    property_obj = await property_service.edit_property(
        property_id, property_data, images or [], current_user
    )

    return PropertyEnvelope(
        message="Property has been updated successfully",
        property=PropertyResponse.from_property(property_obj)
    )


@router.patch(
    "/{property_id}/status",
    response_model=PropertyEnvelope,
    status_code=status.HTTP_200_OK,
    summary="Activate or deactivate property",
    responses=get_crud_error_responses()
)
async def update_property_status(
    status_data: PropertyStatusUpdate,
    property_id: UUID = Path(..., description="Property ID"),
    current_user: User = Depends(get_current_tenant_user),
    property_service: PropertyService = Depends(get_property_service)
) -> PropertyEnvelope:
    property_obj = await property_service.set_property_status(
        property_id, status_data.is_active, current_user
    )
    state = "activated" if property_obj.is_active else "deactivated"
    return PropertyEnvelope(
        message=f"Property has been {state}",
        property=PropertyResponse.from_property(property_obj)
    )


@router.delete(
    "/{property_id}",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Delete property",
    description="Delete a listing with all of its images, category, rules and amenities. Only the owner can delete.",
    responses=get_error_responses(401, 403, 404, 422)
)
async def delete_property(
    property_id: UUID = Path(..., description="Property ID"),
    current_user: User = Depends(get_current_tenant_user),
    property_service: PropertyService = Depends(get_property_service)
) -> MessageResponse:
    await property_service.delete_property(property_id, current_user)
    return MessageResponse(message="Property has been successfully deleted")
