"""
Tests for registration, login, token validation and password reset.
Covers AuthService directly and the /auth endpoints end to end.
"""

import logging
import pytest
import uuid
from datetime import datetime, timedelta, timezone
from sqlalchemy import select

from rental_marketplace.models.user import User, UserRole
from rental_marketplace.schemas.user import UserCreate
from rental_marketplace.services.auth import AuthService
from rental_marketplace.utils.auth import (
    create_access_token,
    verify_token,
    generate_reset_token,
    hash_reset_token,
    extract_token_from_header
)
from rental_marketplace.utils.exceptions import (
    DuplicateResourceError,
    InvalidCredentialsError,
    InvalidTokenError,
    TokenExpiredError,
    InactiveUserError,
    InvalidResetTokenError
)
from tests.conftest import TEST_PASSWORD, auth_headers, count_rows


class TestTokenUtilities:
    """Test JWT and reset token helpers."""

    def test_access_token_roundtrip(self, tenant_stub):
        token = create_access_token(tenant_stub.id, tenant_stub.email, tenant_stub.role)
        payload = verify_token(token)

        assert payload.user_id == str(tenant_stub.id)
        assert payload.email == tenant_stub.email
        assert payload.role == "tenant"
        assert payload.exp > datetime.now(timezone.utc)

    def test_reset_token_is_hashed(self):
        raw, digest = generate_reset_token()

        assert len(raw) == 40
        assert len(digest) == 64
        assert digest == hash_reset_token(raw)
        assert digest != raw

    def test_extract_token_from_header(self):
        assert extract_token_from_header("Bearer abc.def") == "abc.def"
        with pytest.raises(ValueError):
            extract_token_from_header("Basic abc")
        with pytest.raises(ValueError):
            extract_token_from_header("")

    @pytest.fixture
    def tenant_stub(self):
        return User(id=uuid.uuid4(), email="stub@example.com", fullname="Stub", hashed_password="x", role=UserRole.TENANT)


class TestAuthService:
    """Test AuthService functionality."""

    async def test_register(self, auth_service: AuthService, db_session):
        user = await auth_service.register(UserCreate(
            fullname="New Host",
            email="NewHost@Example.com",
            password="securepassword123",
            role=UserRole.TENANT
        ))

        assert user.email == "newhost@example.com"
        assert user.role == UserRole.TENANT
        assert user.verify_password("securepassword123")
        assert await count_rows(db_session, User) == 1

    async def test_register_duplicate_email(self, auth_service: AuthService, test_guest, db_session):
        with pytest.raises(DuplicateResourceError, match="Email already registered"):
            await auth_service.register(UserCreate(
                fullname="Someone Else",
                email="GUEST@example.com",
                password="securepassword123"
            ))
        assert await count_rows(db_session, User) == 1

    async def test_register_duplicate_username(self, auth_service: AuthService, test_tenant):
        with pytest.raises(DuplicateResourceError, match="Username already taken"):
            await auth_service.register(UserCreate(
                fullname="Someone Else",
                email="someone@example.com",
                password="securepassword123",
                username="testhost"
            ))

    async def test_login_with_email_or_username(self, auth_service: AuthService, test_tenant):
        user, token = await auth_service.login("host@example.com", TEST_PASSWORD)
        assert user.id == test_tenant.id
        assert verify_token(token).user_id == str(test_tenant.id)

        user, _ = await auth_service.login("testhost", TEST_PASSWORD)
        assert user.id == test_tenant.id

    async def test_login_invalid_credentials(self, auth_service: AuthService, test_tenant):
        with pytest.raises(InvalidCredentialsError):
            await auth_service.login("host@example.com", "wrongpassword")
        with pytest.raises(InvalidCredentialsError):
            await auth_service.login("nobody@example.com", TEST_PASSWORD)

    async def test_login_inactive_user(self, auth_service: AuthService, test_inactive_user):
        with pytest.raises(InvalidCredentialsError):
            await auth_service.login(test_inactive_user.email, TEST_PASSWORD)

    async def test_get_current_user(self, auth_service: AuthService, test_tenant):
        token = create_access_token(test_tenant.id, test_tenant.email, test_tenant.role)
        user = await auth_service.get_current_user(token)
        assert user.id == test_tenant.id

    async def test_get_current_user_expired(self, auth_service: AuthService, test_tenant):
        token = create_access_token(
            test_tenant.id, test_tenant.email, test_tenant.role,
            expires_delta=timedelta(seconds=-10)
        )
        with pytest.raises(TokenExpiredError):
            await auth_service.get_current_user(token)

    async def test_get_current_user_garbage_token(self, auth_service: AuthService):
        with pytest.raises(InvalidTokenError):
            await auth_service.get_current_user("not-a-jwt")

    async def test_get_current_user_deleted_account(self, auth_service: AuthService, user_repository, test_guest):
        token = create_access_token(test_guest.id, test_guest.email, test_guest.role)
        await user_repository.delete(test_guest)

        with pytest.raises(InvalidTokenError, match="no longer exists"):
            await auth_service.get_current_user(token)

    async def test_get_current_user_inactive(self, auth_service: AuthService, test_inactive_user):
        token = create_access_token(test_inactive_user.id, test_inactive_user.email, test_inactive_user.role)
        with pytest.raises(InactiveUserError):
            await auth_service.get_current_user(token)

    async def test_forgot_and_reset_password(self, auth_service: AuthService, test_guest):
        raw_token = await auth_service.forgot_password("guest@example.com")

        assert raw_token is not None
        assert test_guest.reset_token == hash_reset_token(raw_token)

        user = await auth_service.reset_password(raw_token, "anothergoodpassword")
        assert user.verify_password("anothergoodpassword")
        assert user.reset_token is None

        # A reset token works once
        with pytest.raises(InvalidResetTokenError):
            await auth_service.reset_password(raw_token, "yetanotherpassword")

    async def test_forgot_password_never_logs_raw_token(self, auth_service: AuthService, test_guest, caplog):
        caplog.set_level(logging.DEBUG)

        raw_token = await auth_service.forgot_password("guest@example.com")

        assert raw_token is not None
        assert caplog.records
        assert not any(raw_token in record.getMessage() for record in caplog.records)

    async def test_register_username_matching_an_email(self, auth_service: AuthService, test_guest):
        with pytest.raises(DuplicateResourceError, match="Username already taken"):
            await auth_service.register(UserCreate.model_construct(
                fullname="Mallory",
                email="mallory@example.com",
                password="securepassword123",
                username="guest@example.com",
                role=UserRole.USER
            ))

    async def test_login_by_email_prefers_email_owner(self, auth_service: AuthService, user_repository, test_guest, db_session):
        # Rows written before usernames were restricted
        db_session.add(User(
            email="mallory@example.com",
            username="guest@example.com",
            fullname="Mallory",
            hashed_password=User.hash_password("mallorypassword")
        ))
        await db_session.commit()

        user, _ = await auth_service.login("guest@example.com", TEST_PASSWORD)
        assert user.id == test_guest.id
        assert (await user_repository.get_by_identity("GUEST@example.com")).id == test_guest.id

    async def test_forgot_password_unknown_email(self, auth_service: AuthService):
        assert await auth_service.forgot_password("unknown@example.com") is None

    async def test_reset_password_expired_token(self, auth_service: AuthService, user_repository, test_guest):
        raw_token, digest = generate_reset_token()
        await user_repository.set_reset_token(
            test_guest, digest, datetime.now(timezone.utc) - timedelta(minutes=1)
        )

        with pytest.raises(InvalidResetTokenError):
            await auth_service.reset_password(raw_token, "anothergoodpassword")

    async def test_reset_password_unknown_token(self, auth_service: AuthService):
        with pytest.raises(InvalidResetTokenError):
            await auth_service.reset_password("deadbeef", "anothergoodpassword")


class TestAuthEndpoints:
    """Test the /auth API."""

    async def test_register_returns_public_fields_only(self, async_client, db_session):
        response = await async_client.post("/auth/register", json={
            "fullname": "Jane Doe",
            "email": "jane@example.com",
            "password": "securepassword123",
            "phoneNumber": "+62812345678",
            "role": "tenant"
        })

        assert response.status_code == 201
        body = response.json()
        assert body["ok"] is True
        assert body["status"] == 201
        assert body["message"] == "Register success"
        assert body["user"]["email"] == "jane@example.com"
        assert body["user"]["role"] == "tenant"
        assert body["user"]["phoneNumber"] == "+62812345678"
        assert "password" not in body["user"]
        assert "hashedPassword" not in body["user"]
        assert "securepassword123" not in response.text

        stored = (await db_session.execute(select(User))).scalar_one()
        assert stored.hashed_password != "securepassword123"

    async def test_register_duplicate_email(self, async_client, test_guest, db_session):
        response = await async_client.post("/auth/register", json={
            "fullname": "Other Guest",
            "email": "guest@example.com",
            "password": "securepassword123"
        })

        assert response.status_code == 400
        body = response.json()
        assert body["ok"] is False
        assert body["code"] == "DUPLICATE_RESOURCE"
        assert body["message"] == "Email already registered"
        assert await count_rows(db_session, User) == 1

    async def test_register_schema_errors(self, async_client):
        response = await async_client.post("/auth/register", json={
            "fullname": "Jane",
            "email": "not-an-email",
            "password": "short"
        })

        assert response.status_code == 422
        body = response.json()
        assert body["code"] == "VALIDATION_ERROR"
        fields = {detail["field"] for detail in body["details"]}
        assert "body -> email" in fields
        assert "body -> password" in fields

    async def test_register_rejects_email_shaped_username(self, async_client, test_guest, db_session):
        response = await async_client.post("/auth/register", json={
            "fullname": "Mallory",
            "email": "mallory@example.com",
            "password": "securepassword123",
            "username": "guest@example.com"
        })

        assert response.status_code == 422
        assert "body -> username" in {detail["field"] for detail in response.json()["details"]}
        assert await count_rows(db_session, User) == 1

    async def test_login(self, async_client, test_tenant):
        response = await async_client.post("/auth/login", json={
            "user_identity": "host@example.com",
            "password": TEST_PASSWORD
        })

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Login success"
        assert body["role"] == "tenant"
        assert body["tokenType"] == "bearer"
        assert body["expiresIn"] > 0
        assert verify_token(body["token"]).email == "host@example.com"

    async def test_login_by_username(self, async_client, test_tenant):
        response = await async_client.post("/auth/login", json={
            "user_identity": "testhost",
            "password": TEST_PASSWORD
        })
        assert response.status_code == 200

    async def test_login_wrong_password(self, async_client, test_tenant):
        response = await async_client.post("/auth/login", json={
            "user_identity": "host@example.com",
            "password": "wrongpassword"
        })

        assert response.status_code == 401
        body = response.json()
        assert body["ok"] is False
        assert body["message"] == "Invalid username/email or password"
        assert response.headers["www-authenticate"] == "Bearer"

    async def test_me(self, async_client, test_tenant):
        response = await async_client.get("/auth/me", headers=auth_headers(test_tenant))

        assert response.status_code == 200
        assert response.json()["user"]["id"] == str(test_tenant.id)

    async def test_me_requires_token(self, async_client):
        response = await async_client.get("/auth/me")

        assert response.status_code == 401
        assert response.json()["message"] == "Authentication token required"

    async def test_me_rejects_bad_token(self, async_client):
        response = await async_client.get("/auth/me", headers={"Authorization": "Bearer garbage"})
        assert response.status_code == 401
        assert response.json()["code"] == "UNAUTHORIZED"

    async def test_forgot_password_same_answer_for_unknown_email(self, async_client, test_guest):
        known = await async_client.post("/auth/forgot-password", json={"email": "guest@example.com"})
        unknown = await async_client.post("/auth/forgot-password", json={"email": "nobody@example.com"})

        assert known.status_code == 200
        assert unknown.status_code == 200
        assert known.json()["message"] == unknown.json()["message"]
        assert test_guest.reset_token is not None

    async def test_reset_password_flow(self, async_client, auth_service, test_guest):
        raw_token = await auth_service.forgot_password(test_guest.email)

        response = await async_client.post("/auth/reset-password", json={
            "token": raw_token,
            "password": "freshpassword123"
        })
        assert response.status_code == 200
        assert response.json()["message"] == "Password has been reset successfully"

        login = await async_client.post("/auth/login", json={
            "user_identity": test_guest.email,
            "password": "freshpassword123"
        })
        assert login.status_code == 200

    async def test_reset_password_invalid_token(self, async_client):
        response = await async_client.post("/auth/reset-password", json={
            "token": "unknown",
            "password": "freshpassword123"
        })

        assert response.status_code == 400
        assert response.json()["message"] == "Reset token is invalid or has expired"
