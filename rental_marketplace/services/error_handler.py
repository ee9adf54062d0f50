"""
Error handling service for consistent error envelopes and logging.

Every failing request answers with
``{"ok": false, "status", "message", "code", "requestId", "details"?}``.
"""

from typing import Dict, Any, Optional, List, Sequence
from fastapi import Request, HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError, IntegrityError
from rental_marketplace.utils.exceptions import APIException
import logging
import uuid

logger = logging.getLogger(__name__)

_PRIMITIVES = (str, int, float, bool, type(None))


class ErrorHandlerService:
    """
    Formats exceptions into error envelopes and logs them at a level matching
    their severity.
    """

    @staticmethod
    def format_error_response(
        status_code: int,
        error_code: str,
        message: str,
        details: Optional[List[Dict[str, Any]]] = None,
        request_id: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Format error response in a consistent structure.

        Args:
            status_code: HTTP status code
            error_code: Error code identifier
            message: Human-readable error message
            details: Optional list of detailed error information
            request_id: Optional request identifier for tracking

        Returns:
            Formatted error response dictionary
        """
        response = {
            "ok": False,
            "status": status_code,
            "message": message,
            "code": error_code,
        }

        if request_id:
            response["requestId"] = request_id

        if details:
            response["details"] = details

        return response

    @staticmethod
    def handle_api_exception(
        exception: APIException,
        request: Optional[Request] = None
    ) -> JSONResponse:
        """Handle custom API exceptions with structured response."""
        request_id = ErrorHandlerService._generate_request_id()

        logger.warning(
            f"API Exception [{request_id}]: {exception.error_code} - {exception.detail}",
            extra={
                "error_code": exception.error_code,
                "status_code": exception.status_code,
                "request_id": request_id,
                "path": request.url.path if request else None
            }
        )

        error_response = ErrorHandlerService.format_error_response(
            status_code=exception.status_code,
            error_code=exception.error_code or "API_ERROR",
            message=exception.detail,
            request_id=request_id
        )

        return JSONResponse(
            status_code=exception.status_code,
            content=error_response,
            headers=exception.headers
        )

    @staticmethod
    def handle_validation_error(
        errors: Sequence[Dict[str, Any]],
        request: Optional[Request] = None
    ) -> JSONResponse:
        """
        Handle request schema validation errors with field details.

        Args:
            errors: Error list from a pydantic or FastAPI validation error
            request: Optional FastAPI request object

        Returns:
            JSON response with validation error details
        """
        request_id = ErrorHandlerService._generate_request_id()

        validation_details = []
        for error in errors:
            field_path = " -> ".join(str(loc) for loc in error.get("loc", ()))
            value = error.get("input")
            validation_details.append({
                "field": field_path,
                "message": error.get("msg", ""),
                "type": error.get("type"),
                "input": value if isinstance(value, _PRIMITIVES) else None
            })

        logger.warning(
            f"Validation Error [{request_id}]: {len(validation_details)} field errors",
            extra={
                "error_count": len(validation_details),
                "request_id": request_id,
                "path": request.url.path if request else None
            }
        )

        error_response = ErrorHandlerService.format_error_response(
            status_code=422,
            error_code="VALIDATION_ERROR",
            message="Request validation failed",
            details=validation_details,
            request_id=request_id
        )

        return JSONResponse(status_code=422, content=error_response)

    @staticmethod
    def handle_database_error(
        exception: SQLAlchemyError,
        request: Optional[Request] = None
    ) -> JSONResponse:
        """Handle database errors without exposing driver messages."""
        request_id = ErrorHandlerService._generate_request_id()

        if isinstance(exception, IntegrityError):
            error_code = "INTEGRITY_ERROR"
            message = "Data integrity constraint violation"
            status_code = 409
        else:
            error_code = "DATABASE_ERROR"
            message = "Database operation failed"
            status_code = 500

        logger.error(
            f"Database Error [{request_id}]: {error_code} - {exception}",
            extra={
                "error_code": error_code,
                "request_id": request_id,
                "path": request.url.path if request else None,
                "exception_type": type(exception).__name__
            },
            exc_info=exception
        )

        error_response = ErrorHandlerService.format_error_response(
            status_code=status_code,
            error_code=error_code,
            message=message,
            request_id=request_id
        )

        return JSONResponse(status_code=status_code, content=error_response)

    @staticmethod
    def handle_http_exception(
        exception: HTTPException,
        request: Optional[Request] = None
    ) -> JSONResponse:
        """Handle framework HTTP exceptions such as unknown routes."""
        request_id = ErrorHandlerService._generate_request_id()

        logger.warning(
            f"HTTP Exception [{request_id}]: {exception.status_code} - {exception.detail}",
            extra={
                "status_code": exception.status_code,
                "request_id": request_id,
                "path": request.url.path if request else None
            }
        )

        error_response = ErrorHandlerService.format_error_response(
            status_code=exception.status_code,
            error_code=f"HTTP_{exception.status_code}",
            message=str(exception.detail),
            request_id=request_id
        )

        return JSONResponse(
            status_code=exception.status_code,
            content=error_response,
            headers=getattr(exception, "headers", None)
        )

    @staticmethod
    def handle_unexpected_error(
        exception: Exception,
        request: Optional[Request] = None
    ) -> JSONResponse:
        """Handle unexpected errors with a generic 500 response."""
        request_id = ErrorHandlerService._generate_request_id()

        logger.error(
            f"Unexpected Error [{request_id}]: {type(exception).__name__} - {exception}",
            extra={
                "request_id": request_id,
                "path": request.url.path if request else None,
                "exception_type": type(exception).__name__
            },
            exc_info=exception
        )

        error_response = ErrorHandlerService.format_error_response(
            status_code=500,
            error_code="INTERNAL_SERVER_ERROR",
            message="Internal Server Error",
            request_id=request_id
        )

        return JSONResponse(status_code=500, content=error_response)

    @staticmethod
    def _generate_request_id() -> str:
        return str(uuid.uuid4())[:8]
