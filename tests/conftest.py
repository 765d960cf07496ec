"""
Pytest configuration and fixtures.
"""

import os

# The engine is created at import time, point it at SQLite first
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "testing")

from datetime import date
from typing import AsyncGenerator

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

import scholardesk.models  # noqa: F401
from scholardesk.core.config import settings
from scholardesk.core.database import Base, get_db
from scholardesk.main import app
from scholardesk.schemas.quotation import BusinessIdentity, LineItem, QuotationDocument


# Test database URL (in-memory SQLite shared through a single connection)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

QUOTE_REQUEST_PAYLOAD = {
    "name": "Tendai Moyo",
    "email": "tendai@example.com",
    "phone": "+263 77 123 4567",
    "university": "University of Zimbabwe",
    "course": "BSc Computer Science",
    "project_type": "Machine Learning",
    "package_tier": "Standard",
    "budget": "$150 - $300",
    "description": "Crop disease detection from leaf images using a CNN.",
}


@pytest.fixture
async def test_engine():
    """Create a fresh database per test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create test database session."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def storage(tmp_path, monkeypatch):
    """Store generated quotation PDFs in a temporary directory."""
    path = tmp_path / "quotations"
    monkeypatch.setattr(settings, "QUOTATION_STORAGE_PATH", str(path))
    monkeypatch.setattr(settings, "SMTP_USER", None)
    monkeypatch.setattr(settings, "SMTP_PASSWORD", None)
    return path


@pytest.fixture
async def client(session_factory, storage) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with database session override."""

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
async def auth_client(client: AsyncClient) -> AsyncClient:
    """Create authenticated test client."""
    response = await client.post(
        "/api/v1/auth/login",
        json={
            "username": settings.ADMIN_USERNAME,
            "password": settings.ADMIN_DEFAULT_PASSWORD,
        },
    )
    token = response.json()["access_token"]

    client.headers["Authorization"] = f"Bearer {token}"
    return client


@pytest.fixture
def create_quote_request(client: AsyncClient):
    """Submit a quote request through the public endpoint."""

    async def _create(**overrides) -> int:
        payload = {**QUOTE_REQUEST_PAYLOAD, **overrides}
        response = await client.post("/api/v1/quote-requests", json=payload)
        assert response.status_code == 201, response.text
        return response.json()["id"]

    return _create


@pytest.fixture
def identity() -> BusinessIdentity:
    return BusinessIdentity(
        company_name="SCHOLARXAFRICA",
        tagline=("Academic Project Services",),
        email="projects@example.com",
        whatsapp="+263 78 000 0000",
        website="www.example.com",
        terms_and_conditions=(
            "This quotation is valid for the period specified above.",
            "A 50% deposit is required before project commencement.",
            "Final balance is due upon project completion and before delivery.",
        ),
    )


@pytest.fixture
def make_document():
    """Build a quotation document with sensible defaults."""

    def _make(**overrides) -> QuotationDocument:
        fields = {
            "quotation_number": "ZS-202501-0042",
            "date_issued": date(2025, 1, 5),
            "valid_until": date(2025, 2, 4),
            "status_label": "Pending Acceptance",
            "line_items": (LineItem(description="Development", quantity=1, unit_price="150.00"),),
            "payment_terms": "50% deposit, balance on delivery.",
            "client_name": "Tendai Moyo",
            "client_email": "tendai@example.com",
            "client_phone": "+263 77 123 4567",
            "university": "University of Zimbabwe",
            "course": "BSc Computer Science",
            "project_type": "Machine Learning",
            "description": "Crop disease detection from leaf images.",
        }
        fields.update(overrides)
        return QuotationDocument(**fields)

    return _make
