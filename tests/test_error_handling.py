"""
Tests for error handling.
Tests custom exceptions, error envelope formatting, and app-level handlers.
"""

import json
import pytest
from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError, OperationalError

from rental_marketplace.database import close_db_connection
from rental_marketplace.services.error_handler import ErrorHandlerService
from rental_marketplace.schemas.error import get_error_responses, get_crud_error_responses, ErrorResponse
from rental_marketplace.utils.exceptions import (
    APIException,
    ValidationError,
    NotFoundError,
    UnauthorizedError,
    ForbiddenError,
    DuplicateResourceError,
    PropertyNotFoundError,
    InsufficientPermissionsError,
    FileSizeExceededError
)


class TestExceptions:
    """Test exception status codes and messages."""

    @pytest.mark.parametrize("exception, status_code, error_code", [
        (ValidationError("bad"), 400, "VALIDATION_ERROR"),
        (NotFoundError("Property"), 404, "NOT_FOUND"),
        (UnauthorizedError(), 401, "UNAUTHORIZED"),
        (ForbiddenError(), 403, "FORBIDDEN"),
        (DuplicateResourceError("Email already registered"), 400, "DUPLICATE_RESOURCE"),
        (FileSizeExceededError(20, 10), 400, "VALIDATION_ERROR"),
    ])
    def test_status_and_code(self, exception: APIException, status_code, error_code):
        assert exception.status_code == status_code
        assert exception.error_code == error_code

    def test_messages(self):
        assert PropertyNotFoundError().detail == "Property not found"
        assert NotFoundError("Properties", detail="No properties found").detail == "No properties found"
        assert InsufficientPermissionsError("create properties").detail == "Insufficient permissions to create properties"
        assert FileSizeExceededError(20, 10).detail.startswith("File upload error: File size 20 bytes")


class TestErrorHandlerService:
    """Test error handler service functionality."""

    def test_format_error_response(self):
        response = ErrorHandlerService.format_error_response(
            status_code=400,
            error_code="TEST_ERROR",
            message="Test error message",
            details=[{"field": "test", "message": "Test field error"}],
            request_id="test123"
        )

        assert response == {
            "ok": False,
            "status": 400,
            "message": "Test error message",
            "code": "TEST_ERROR",
            "requestId": "test123",
            "details": [{"field": "test", "message": "Test field error"}],
        }

    def test_format_error_response_omits_empty_parts(self):
        response = ErrorHandlerService.format_error_response(404, "NOT_FOUND", "Missing")
        assert "details" not in response
        assert "requestId" not in response

    def test_handle_api_exception(self):
        exception = ValidationError("Test validation error")
        response = ErrorHandlerService.handle_api_exception(exception)

        assert response.status_code == 400
        body = json.loads(response.body)
        assert body["ok"] is False
        assert body["code"] == "VALIDATION_ERROR"
        assert body["message"] == "Test validation error"
        assert "details" not in body
        assert len(body["requestId"]) == 8

    def test_handle_api_exception_keeps_headers(self):
        response = ErrorHandlerService.handle_api_exception(UnauthorizedError())
        assert response.headers["www-authenticate"] == "Bearer"

    def test_handle_validation_error(self):
        errors = [
            {"loc": ("body", "email"), "msg": "Field required", "type": "missing", "input": None},
            {"loc": ("body", "price"), "msg": "Invalid value", "type": "value_error", "input": {"nested": 1}},
        ]

        response = ErrorHandlerService.handle_validation_error(errors)

        assert response.status_code == 422
        body = json.loads(response.body)
        assert body["code"] == "VALIDATION_ERROR"
        assert [d["field"] for d in body["details"]] == ["body -> email", "body -> price"]
        assert body["details"][1]["input"] is None

    def test_handle_database_error(self):
        integrity = ErrorHandlerService.handle_database_error(IntegrityError("INSERT", {}, Exception("dup")))
        operational = ErrorHandlerService.handle_database_error(OperationalError("SELECT", {}, Exception("down")))

        assert integrity.status_code == 409
        assert json.loads(integrity.body)["code"] == "INTEGRITY_ERROR"
        assert operational.status_code == 500
        body = json.loads(operational.body)
        assert body["code"] == "DATABASE_ERROR"
        assert "down" not in body["message"]

    def test_handle_http_exception(self):
        response = ErrorHandlerService.handle_http_exception(HTTPException(status_code=405, detail="Method Not Allowed"))

        assert response.status_code == 405
        assert json.loads(response.body)["code"] == "HTTP_405"

    def test_handle_unexpected_error(self):
        response = ErrorHandlerService.handle_unexpected_error(RuntimeError("secret detail"))

        assert response.status_code == 500
        body = json.loads(response.body)
        assert body["code"] == "INTERNAL_SERVER_ERROR"
        assert body["message"] == "Internal Server Error"
        assert "secret" not in response.body.decode()


class TestErrorSchemas:
    """Test OpenAPI error response helpers."""

    def test_get_error_responses(self):
        responses = get_error_responses(401, 404, 599)

        assert set(responses) == {401, 404}
        assert responses[404]["model"] is ErrorResponse

    def test_get_crud_error_responses(self):
        assert {400, 401, 403, 404, 422} <= set(get_crud_error_responses())


class TestAppErrorHandling:
    """Test handlers registered on the application."""

    async def test_unknown_route(self, async_client):
        response = await async_client.get("/does-not-exist")

        assert response.status_code == 404
        body = response.json()
        assert body["ok"] is False
        assert body["code"] == "HTTP_404"

    async def test_method_not_allowed(self, async_client):
        response = await async_client.delete("/auth/login")
        assert response.status_code == 405

    async def test_processing_time_header(self, async_client):
        response = await async_client.get("/")

        assert response.status_code == 200
        assert "x-processing-time" in response.headers
        assert response.json()["status"] == "healthy"

    async def test_health(self, async_client):
        try:
            response = await async_client.get("/health")
        finally:
            await close_db_connection()

        assert response.status_code == 200
        assert response.json()["database"] == "connected"
