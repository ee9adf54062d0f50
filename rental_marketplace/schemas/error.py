"""
Error response schemas for API documentation and consistent error formatting.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import List, Optional, Any, Dict


class ErrorDetail(BaseModel):
    """Schema for individual error detail."""

    field: Optional[str] = Field(None, description="Field name that caused the error", examples=["email"])
    message: str = Field(..., description="Human-readable error message", examples=["Invalid email format"])
    type: Optional[str] = Field(None, description="Error type identifier", examples=["value_error"])
    input: Optional[Any] = Field(None, description="Input value that caused the error")


class ErrorResponse(BaseModel):
    """Error envelope returned by every failing endpoint."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    ok: bool = Field(False, description="Always false for errors")
    status: int = Field(..., description="HTTP status code", examples=[404])
    message: str = Field(..., description="Human-readable error message", examples=["Property not found"])
    code: str = Field(..., description="Error code identifier", examples=["NOT_FOUND"])
    request_id: Optional[str] = Field(None, description="Request identifier for log correlation", examples=["abc12345"])
    details: Optional[List[ErrorDetail]] = Field(None, description="Field-level validation errors")


_DESCRIPTIONS = {
    400: "Bad Request - validation or business rule failure",
    401: "Unauthorized - authentication required",
    403: "Forbidden - insufficient permissions",
    404: "Not Found - resource does not exist",
    422: "Unprocessable Entity - request schema validation failed",
    500: "Internal Server Error",
}


def get_error_responses(*status_codes: int) -> Dict[int, Dict[str, Any]]:
    """
    Get OpenAPI error response entries for specific status codes.

    Args:
        status_codes: HTTP status codes to include

    Returns:
        Dictionary usable as a route's ``responses`` argument
    """
    return {
        code: {"description": _DESCRIPTIONS[code], "model": ErrorResponse}
        for code in status_codes
        if code in _DESCRIPTIONS
    }


def get_auth_error_responses() -> Dict[int, Dict[str, Any]]:
    return get_error_responses(401, 403)


def get_crud_error_responses() -> Dict[int, Dict[str, Any]]:
    return get_error_responses(400, 401, 403, 404, 422, 500)
