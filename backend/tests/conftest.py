"""
NoteMap Backend: Test Configuration (conftest.py)
==================================================

What:  Shared fixtures for the whole suite.
How:   Environment variables are set before any `app` import so the
       settings singleton picks them up. Each test gets a fresh in-memory
       SQLite database (aiosqlite) swapped into app.database, so the session
       dependency, the identity middleware and /health all use it.

Fixture Hierarchy:
    db_engine ─┬─ session_factory ─┬─ db_session
               │                   └─ test_client (ASGITransport)
               └─ (patched onto app.database.engine)
    fake_geocoder, fake_matrix: in-memory provider doubles that count calls
    make_facility: builds Facility rows with sensible defaults
"""

import base64
import os
import tempfile

# ══════════════════════════════════════════════════════════════════════════
# Environment Setup (before any app import)
# ══════════════════════════════════════════════════════════════════════════

os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["GEMINI_API_KEY"] = "test-gemini-key"
os.environ["GOOGLE_MAPS_API_KEY"] = "test-maps-key"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="notemap_test_")
os.environ["ENVIRONMENT"] = "test"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["RETRY_MAX_ATTEMPTS"] = "3"
os.environ["RETRY_MIN_WAIT"] = "0"

from typing import Dict, List, Union  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app import database  # noqa: E402
from app.database import Base  # noqa: E402
import app.models  # noqa: E402,F401
from app.models.facility import Facility  # noqa: E402
from app.schemas.geo import Coordinate  # noqa: E402
from app.services.distance_matrix_service import MatrixElement  # noqa: E402


# ══════════════════════════════════════════════════════════════════════════
# Database Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def db_engine(monkeypatch):
    """
    Fresh in-memory database per test.

    StaticPool keeps one connection so every session sees the same
    in-memory database.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    monkeypatch.setattr(database, "engine", engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(db_engine, monkeypatch):
    factory = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)
    monkeypatch.setattr(database, "async_session_factory", factory)
    return factory


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def test_client(session_factory):
    """
    HTTPX AsyncClient talking to the app in-process.

    Cookies persist across requests on the same client, like a browser.
    """
    from app.main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


# ══════════════════════════════════════════════════════════════════════════
# Data Builders
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def make_facility():
    """
    Builds a Facility. Capability flags default to False; pass them as kwargs.

    Usage:
        make_facility("f1", lat=31.5, lng=-85.3, telehealth=True)
    """

    def _make(facility_id: str, state: str = "AL", **kwargs) -> Facility:
        values = {
            "name": f"Facility {facility_id}",
            "address": f"{facility_id} Main St",
            "city": "Dothan",
            "zip": "36301",
            "phone": "555-0100",
        }
        values.update(kwargs)
        return Facility(facility_id=facility_id, state=state, **values)

    return _make


# ══════════════════════════════════════════════════════════════════════════
# Provider Doubles
# ══════════════════════════════════════════════════════════════════════════

class FakeGeocoder:
    """
    Stands in for GeocodingService.

    `results` maps an address to a Coordinate or to an exception instance to
    raise. Unknown addresses raise NoResult. Every call is recorded.
    """

    def __init__(self, results: Dict[str, Union[Coordinate, Exception]] = None):
        self.results = dict(results or {})
        self.calls: List[str] = []

    async def geocode(self, address: str) -> Coordinate:
        from app.exceptions import NoResult

        self.calls.append(address)
        outcome = self.results.get(address)
        if outcome is None:
            raise NoResult(address)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class FakeMatrix:
    """Stands in for DistanceMatrixService; returns a fixed element or raises."""

    def __init__(self, element: Union[MatrixElement, Exception]):
        self.element = element
        self.calls: List[tuple] = []

    async def lookup(self, origin: str, destination: str) -> MatrixElement:
        self.calls.append((origin, destination))
        if isinstance(self.element, Exception):
            raise self.element
        return self.element


@pytest.fixture
def fake_geocoder():
    return FakeGeocoder()


@pytest.fixture
def fake_matrix():
    return FakeMatrix(
        MatrixElement(status="OK", distance_text="12.4 mi", duration_text="18 mins")
    )


@pytest.fixture
def sample_image_bytes():
    """Smallest valid JPEG: SOI + JFIF header + EOI. Not decodable as a photo."""
    return (
        b"\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00"
        b"\xff\xd9"
    )


@pytest.fixture
def sample_png_bytes():
    """A 1x1 transparent PNG."""
    return base64.b64decode(
        "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
    )
