"""
Identity tests: cookie issuance, users rows, and the degraded profile path.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app import database
from app.config import settings
from app.models.user import User
from app.services.identity_service import IdentityService


@pytest_asyncio.fixture
async def broken_database(tmp_path, monkeypatch, session_factory):
    """Points the app at a database file that cannot be opened."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path}/missing-dir/none.db")
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    monkeypatch.setattr(database, "engine", engine)
    monkeypatch.setattr(database, "async_session_factory", factory)
    yield
    await engine.dispose()


def _failing_session():
    session = AsyncMock()
    error = OperationalError("SELECT", {}, Exception("connection refused"))
    session.get = AsyncMock(side_effect=error)
    session.execute = AsyncMock(side_effect=error)
    session.rollback = AsyncMock()
    session.add = MagicMock()
    return session


class TestIdentityService:
    @pytest.mark.asyncio
    async def test_get_profile_creates_missing_row(self, db_session):
        outcome = await IdentityService().get_profile(db_session, "uid-1")

        assert outcome.degraded is False
        assert outcome.profile.id == "uid-1"
        assert outcome.profile.created_at is not None
        assert await db_session.get(User, "uid-1") is not None

    @pytest.mark.asyncio
    async def test_update_name_trims_and_upserts(self, db_session):
        outcome = await IdentityService().update_name(db_session, "uid-2", "  Ada  ")

        assert outcome.profile.name == "Ada"
        stored = await db_session.get(User, "uid-2")
        assert stored.name == "Ada"

        outcome = await IdentityService().update_name(db_session, "uid-2", "Grace")
        assert outcome.profile.name == "Grace"

    @pytest.mark.asyncio
    async def test_get_profile_degrades_on_datastore_error(self):
        session = _failing_session()

        outcome = await IdentityService().get_profile(session, "uid-3")

        assert outcome.degraded is True
        assert outcome.reason == "OperationalError"
        assert outcome.profile.model_dump() == {"id": "uid-3", "name": None, "created_at": None}
        session.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_update_name_degrades_and_echoes_name(self):
        session = _failing_session()

        outcome = await IdentityService().update_name(session, "uid-4", " Ada ")

        assert outcome.degraded is True
        assert outcome.profile.name == "Ada"
        assert outcome.profile.created_at is None


class TestIdentityCookie:
    @pytest.mark.asyncio
    async def test_new_client_gets_cookie_and_row(self, test_client, db_session):
        response = await test_client.get("/api/me")

        assert response.status_code == 200
        uid = response.cookies[settings.cookie_name]
        assert response.json()["id"] == uid
        assert response.json()["created_at"] is not None

        set_cookie = response.headers["set-cookie"].lower()
        assert "httponly" in set_cookie
        assert "samesite=lax" in set_cookie
        assert f"max-age={settings.cookie_max_age_seconds}" in set_cookie
        assert "secure" not in set_cookie

        assert await db_session.get(User, uid) is not None

    @pytest.mark.asyncio
    async def test_replayed_cookie_keeps_identity(self, test_client):
        first = await test_client.get("/api/me")
        uid = first.cookies[settings.cookie_name]

        second = await test_client.get("/api/me")

        assert "set-cookie" not in second.headers
        assert second.json()["id"] == uid

    @pytest.mark.asyncio
    async def test_new_browser_gets_new_identity(self, test_client):
        first = await test_client.get("/api/me")
        test_client.cookies.clear()
        second = await test_client.get("/api/me")

        assert second.cookies[settings.cookie_name] != first.cookies[settings.cookie_name]

    @pytest.mark.asyncio
    async def test_secure_cookie_in_production(self, test_client, monkeypatch):
        monkeypatch.setattr(settings, "environment", "production")
        response = await test_client.get("/api/me")
        assert "secure" in response.headers["set-cookie"].lower()


class TestMeEndpoints:
    @pytest.mark.asyncio
    async def test_set_and_read_name(self, test_client):
        response = await test_client.post("/api/me", json={"name": "  Ada Lovelace "})
        assert response.status_code == 200
        assert response.json()["name"] == "Ada Lovelace"

        response = await test_client.get("/api/me")
        assert response.json()["name"] == "Ada Lovelace"
        assert "x-identity-degraded" not in response.headers

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [{"name": "   "}, {"name": ""}, {}])
    async def test_blank_or_missing_name_is_400(self, test_client, body):
        response = await test_client.post("/api/me", json=body)
        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"

    @pytest.mark.asyncio
    async def test_blank_name_message(self, test_client):
        response = await test_client.post("/api/me", json={"name": "  "})
        assert response.json()["message"] == "Name is required."

    @pytest.mark.asyncio
    async def test_get_me_degraded_when_datastore_down(self, test_client, broken_database):
        response = await test_client.get("/api/me")

        assert response.status_code == 200
        assert response.headers["x-identity-degraded"] == "true"
        body = response.json()
        assert body["id"] == response.cookies[settings.cookie_name]
        assert body["name"] is None
        assert body["created_at"] is None

    @pytest.mark.asyncio
    async def test_post_me_degraded_echoes_name(self, test_client, broken_database):
        response = await test_client.post("/api/me", json={"name": " Ada "})

        assert response.status_code == 200
        assert response.headers["x-identity-degraded"] == "true"
        assert response.json()["name"] == "Ada"
        assert response.json()["created_at"] is None
