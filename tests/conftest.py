"""
Test configuration and fixtures for the rental marketplace API.
Provides database fixtures, test data factories, and common test utilities.
"""

import os
import tempfile

# Settings are read at import time, so the environment must be prepared first
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-for-the-rental-marketplace-suite")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="rental-uploads-"))

import io
import pytest
from decimal import Decimal
from typing import AsyncGenerator, List, Optional
from PIL import Image
from httpx import AsyncClient, ASGITransport
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool
from starlette.datastructures import Headers, UploadFile

from rental_marketplace.main import app
from rental_marketplace.database import Base, get_db
from rental_marketplace.models.user import User, UserRole
from rental_marketplace.models.property import Property
from rental_marketplace.repositories.user import UserRepository
from rental_marketplace.repositories.property import PropertyRepository
from rental_marketplace.schemas.property import PropertyCreate
from rental_marketplace.services.auth import AuthService
from rental_marketplace.services.property import PropertyService
from rental_marketplace.utils.auth import create_access_token
from rental_marketplace.utils.file_utils import FileStorage
import rental_marketplace.models  # noqa: F401

TEST_DATABASE_URL = "sqlite+aiosqlite://"
TEST_PASSWORD = "testpassword123"


@pytest.fixture
async def test_engine():
    """Fresh in-memory database per test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False}
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    session_factory = async_sessionmaker(bind=test_engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        try:
            yield session
        finally:
            await session.rollback()
            await session.close()


@pytest.fixture
async def async_client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client with database session override."""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def upload_dir(tmp_path):
    directory = tmp_path / "uploads"
    directory.mkdir()
    return directory


@pytest.fixture
def file_storage(upload_dir) -> FileStorage:
    return FileStorage(upload_dir)


@pytest.fixture
def user_repository(db_session: AsyncSession) -> UserRepository:
    return UserRepository(db_session)


@pytest.fixture
def property_repository(db_session: AsyncSession) -> PropertyRepository:
    return PropertyRepository(db_session)


@pytest.fixture
def auth_service(db_session: AsyncSession) -> AuthService:
    return AuthService(db_session)


@pytest.fixture
def property_service(db_session: AsyncSession, file_storage: FileStorage) -> PropertyService:
    return PropertyService(db_session, storage=file_storage)


def make_image_bytes(fmt: str = "JPEG", size=(200, 200), color: str = "red") -> bytes:
    """Render a solid-colour image in memory."""
    buffer = io.BytesIO()
    Image.new("RGB", size, color=color).save(buffer, format=fmt)
    return buffer.getvalue()


def make_upload(
    filename: str = "photo.jpg",
    content: Optional[bytes] = None,
    content_type: str = "image/jpeg"
) -> UploadFile:
    """Build an UploadFile as FastAPI would hand it to a route."""
    if content is None:
        content = make_image_bytes()
    return UploadFile(
        file=io.BytesIO(content),
        filename=filename,
        headers=Headers({"content-type": content_type})
    )


def image_files(count: int = 2) -> List[tuple]:
    """Multipart ``files`` entries for httpx."""
    return [
        ("images", (f"photo{i}.jpg", make_image_bytes(), "image/jpeg"))
        for i in range(count)
    ]


def auth_headers(user: User) -> dict:
    token = create_access_token(user_id=user.id, email=user.email, role=user.role)
    return {"Authorization": f"Bearer {token}"}


async def count_rows(session: AsyncSession, model) -> int:
    result = await session.execute(select(func.count()).select_from(model))
    return result.scalar()


class UserFactory:
    """Factory for creating test users."""

    @staticmethod
    def create_user_data(
        email: str = "user@example.com",
        password: str = TEST_PASSWORD,
        fullname: str = "Test User",
        username: Optional[str] = None,
        role: UserRole = UserRole.USER,
        is_active: bool = True
    ) -> dict:
        """Create user data dictionary."""
        return {
            "email": email,
            "password": password,
            "fullname": fullname,
            "username": username,
            "role": role,
            "is_active": is_active
        }

    @staticmethod
    async def create_user(
        user_repo: UserRepository,
        email: str = "user@example.com",
        password: str = TEST_PASSWORD,
        fullname: str = "Test User",
        username: Optional[str] = None,
        role: UserRole = UserRole.USER,
        is_active: bool = True
    ) -> User:
        """Create a test user in the database."""
        user_data = UserFactory.create_user_data(
            email=email,
            password=password,
            fullname=fullname,
            username=username,
            role=role,
            is_active=is_active
        )
        return await user_repo.create_user(user_data)


class PropertyFactory:
    """Factory for creating test listings."""

    @staticmethod
    def create_property_data(
        property_name: str = "Sunset Villa",
        description: str = "A quiet villa close to the beach",
        price: Decimal = Decimal("1500000"),
        max_guest_count: int = 4,
        property_type: str = "villa",
        city: str = "Badung",
        province: str = "Bali",
        district: str = "Kuta",
        rules: Optional[List[str]] = None,
        amenities: Optional[List[str]] = None
    ) -> PropertyCreate:
        """Create a listing payload."""
        return PropertyCreate(
            property_name=property_name,
            description=description,
            price=price,
            bed_count=2,
            bedroom_count=2,
            max_guest_count=max_guest_count,
            bathroom_count=1,
            category={
                "property_type": property_type,
                "district": district,
                "city": city,
                "province": province,
                "street_address": "Jl. Pantai Kuta No. 1",
                "postal_code": "80361",
            },
            rules=rules,
            amenities=amenities
        )

    @staticmethod
    def create_form_data(
        property_name: str = "Sunset Villa",
        price: str = "1500000",
        property_type: str = "villa",
        city: str = "Badung",
        province: str = "Bali",
        rules: Optional[List[str]] = None,
        amenities: Optional[List[str]] = None
    ) -> dict:
        """Create multipart form fields for the listing endpoints."""
        data = {
            "propertyName": property_name,
            "description": "A quiet villa close to the beach",
            "price": price,
            "bedCount": "2",
            "bedroomCount": "2",
            "maxGuestCount": "4",
            "bathroomCount": "1",
            "propertyType": property_type,
            "district": "Kuta",
            "city": city,
            "province": province,
            "streetAddress": "Jl. Pantai Kuta No. 1",
            "postalCode": "80361",
        }
        if rules is not None:
            data["propertyRules"] = rules
        if amenities is not None:
            data["propertyAmenities"] = amenities
        return data

    @staticmethod
    async def create_property(
        property_service: PropertyService,
        owner: User,
        image_count: int = 1,
        **overrides
    ) -> Property:
        """Create a test listing through the service."""
        property_data = PropertyFactory.create_property_data(**overrides)
        images = [make_upload(f"photo{i}.jpg") for i in range(image_count)]
        return await property_service.create_property(property_data, images, owner)


# Common test fixtures
@pytest.fixture
async def test_tenant(user_repository: UserRepository) -> User:
    """Create a host account."""
    return await UserFactory.create_user(
        user_repository,
        email="host@example.com",
        fullname="Test Host",
        username="testhost",
        role=UserRole.TENANT
    )


@pytest.fixture
async def other_tenant(user_repository: UserRepository) -> User:
    return await UserFactory.create_user(
        user_repository,
        email="otherhost@example.com",
        fullname="Other Host",
        role=UserRole.TENANT
    )


@pytest.fixture
async def test_guest(user_repository: UserRepository) -> User:
    """Create a guest account."""
    return await UserFactory.create_user(
        user_repository,
        email="guest@example.com",
        fullname="Test Guest",
        role=UserRole.USER
    )


@pytest.fixture
async def test_inactive_user(user_repository: UserRepository) -> User:
    return await UserFactory.create_user(
        user_repository,
        email="inactive@example.com",
        fullname="Inactive User",
        is_active=False
    )


@pytest.fixture
async def test_property(property_service: PropertyService, test_tenant: User) -> Property:
    """Create a listing with two images, rules and amenities."""
    return await PropertyFactory.create_property(
        property_service,
        test_tenant,
        image_count=2,
        rules=["No smoking", "No pets"],
        amenities=["wifi", "pool", "kitchen"]
    )


@pytest.fixture
def tenant_headers(test_tenant: User) -> dict:
    return auth_headers(test_tenant)


@pytest.fixture
def guest_headers(test_guest: User) -> dict:
    return auth_headers(test_guest)
