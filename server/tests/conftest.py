"""Test configuration and fixtures."""

from datetime import date

import jwt
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from marketplace.core.config import settings
from marketplace.core.database import Base, get_db
from marketplace.models import *  # noqa: F403 - Import all models
from marketplace.schemas.tour import (
    AvailabilityWindow,
    CreateTourRequest,
    RoomTypeInput,
    TourStatusValue,
    UpdateTourStatusRequest,
)
from marketplace.schemas.vendor import CreateVendorRequest
from marketplace.services.tour_service import TourService
from marketplace.services.vendor_service import VendorService

# Test database URL (in-memory SQLite for speed)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


def make_token(user_id: str) -> str:
    """Bearer token signed the way the upstream identity service signs them."""
    return jwt.encode(
        {"sub": user_id, "username": user_id, "roles": ["customer"]},
        settings.bearer_token_secret,
        algorithm="HS256",
    )


@pytest.fixture
def auth_headers():
    """Build an Authorization header for a given user."""
    def _headers(user_id: str = "user-1") -> dict:
        return {"Authorization": f"Bearer {make_token(user_id)}"}
    return _headers


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create a test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def test_session(test_engine):
    """Create a test database session."""
    async_session = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    async with async_session() as session:
        yield session


@pytest_asyncio.fixture(scope="function")
async def test_app(test_session):
    """The real application with its database dependency pointed at the test session."""
    from marketplace.main import create_app

    app = create_app()

    async def override_get_db():
        yield test_session

    app.dependency_overrides[get_db] = override_get_db

    yield app

    app.dependency_overrides.clear()


@pytest_asyncio.fixture(scope="function")
async def test_client(test_app):
    """Create a test HTTP client."""
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def sample_vendor_data():
    """Sample vendor data for testing."""
    return {
        "name": "Fjord Expeditions",
        "email": "ops@fjord-expeditions.example",
        "commission_rate": 15,
    }


@pytest.fixture
def sample_tour_data():
    """Sample tour data for testing; the vendor ID is filled in by the test."""
    return {
        "name": "Northern Lights Adventure",
        "slug": "northern-lights-adventure",
        "description": "Experience the magical Aurora Borealis in Iceland",
        "currency": "USD",
        "availability_window": {
            "available_from": "2024-06-01",
            "available_to": "2024-06-30",
            "blackout_days": ["2024-06-15"],
        },
        "room_types": [
            {"name": "Double", "net_price": 10000, "child_occupancy": 0, "adult_occupancy": 2},
            {"name": "Family", "net_price": 25000, "child_occupancy": 2, "adult_occupancy": 2},
        ],
    }


@pytest_asyncio.fixture
async def sample_vendor(test_session, sample_vendor_data):
    """A vendor charging the default 15% commission."""
    return await VendorService(test_session).create_vendor(
        CreateVendorRequest(**sample_vendor_data)
    )


@pytest_asyncio.fixture
async def sample_tour(test_session, sample_vendor):
    """A pending tour open through June 2024 with a blackout on the 15th."""
    return await TourService(test_session).create_tour(
        CreateTourRequest(
            vendor_id=sample_vendor.id,
            name="Northern Lights Adventure",
            slug="northern-lights-adventure",
            description="Experience the magical Aurora Borealis in Iceland",
            availability_window=AvailabilityWindow(
                available_from=date(2024, 6, 1),
                available_to=date(2024, 6, 30),
                blackout_days=[date(2024, 6, 15)],
            ),
            room_types=[
                RoomTypeInput(name="Double", net_price=10000, adult_occupancy=2),
                RoomTypeInput(name="Family", net_price=25000, child_occupancy=2, adult_occupancy=2),
            ],
        )
    )


@pytest_asyncio.fixture
async def accepted_tour(test_session, sample_tour):
    """The sample tour after an admin accepted it."""
    return await TourService(test_session).set_status(
        UpdateTourStatusRequest(tour_id=sample_tour.id, status=TourStatusValue.ACCEPTED)
    )
