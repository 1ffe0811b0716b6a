"""
Transcription workflow tests: POST /api/analyze and GET /api/entries.

The vision provider is replaced by a stub that records the temp file it was
handed, so the tests can check the file existed during transcription and is
gone afterwards.
"""

import os
from datetime import datetime, timedelta, timezone
from typing import List, Optional

import pytest

from app.config import settings
from app.exceptions import TranscriptionError
from app.models.entry import Entry
from app.services.entry_service import entry_service
from app.services.vision_base import VisionTranscriber


class StubTranscriber(VisionTranscriber):
    def __init__(self, text: str = "Buy milk", error: Optional[Exception] = None):
        self.text = text
        self.error = error
        self.paths: List[str] = []
        self.existed: List[bool] = []

    async def transcribe(self, image_path: str, mime_type: str) -> str:
        self.paths.append(image_path)
        self.existed.append(os.path.exists(image_path))
        if self.error:
            raise self.error
        return self.text

    async def health_check(self) -> bool:
        return True


@pytest.fixture
def stub_transcriber(monkeypatch):
    stub = StubTranscriber()
    monkeypatch.setattr(entry_service, "transcriber", stub)
    return stub


def _upload(content: bytes, filename: str = "note.jpg", content_type: str = "image/jpeg"):
    return {"image": (filename, content, content_type)}


class TestAnalyze:
    @pytest.mark.asyncio
    async def test_transcribes_and_stores(self, test_client, stub_transcriber, sample_image_bytes):
        response = await test_client.post("/api/analyze", files=_upload(sample_image_bytes))

        assert response.status_code == 200
        body = response.json()
        assert body["text"] == "Buy milk"
        assert body["id"]
        assert body["created_at"]

        entries = (await test_client.get("/api/entries")).json()
        assert [e["id"] for e in entries] == [body["id"]]
        assert entries[0]["text"] == "Buy milk"
        assert entries[0]["user_id"] == test_client.cookies[settings.cookie_name]

    @pytest.mark.asyncio
    async def test_temp_file_removed_after_success(self, test_client, stub_transcriber, sample_image_bytes):
        await test_client.post("/api/analyze", files=_upload(sample_image_bytes))

        assert stub_transcriber.existed == [True]
        assert not os.path.exists(stub_transcriber.paths[0])

    @pytest.mark.asyncio
    async def test_transcription_failure_returns_500_and_cleans_up(
        self, test_client, stub_transcriber, sample_image_bytes
    ):
        stub_transcriber.error = TranscriptionError(message="quota exceeded")

        response = await test_client.post("/api/analyze", files=_upload(sample_image_bytes))

        assert response.status_code == 500
        assert response.json()["error"] == "transcription_error"
        assert response.json()["message"] == "quota exceeded"
        assert not os.path.exists(stub_transcriber.paths[0])
        assert (await test_client.get("/api/entries")).json() == []

    @pytest.mark.asyncio
    async def test_missing_image(self, test_client, stub_transcriber):
        response = await test_client.post("/api/analyze", data={"other": "x"})

        assert response.status_code == 400
        assert response.json()["message"] == "No image uploaded."
        assert stub_transcriber.paths == []

    @pytest.mark.asyncio
    async def test_unsupported_extension(self, test_client, stub_transcriber):
        response = await test_client.post(
            "/api/analyze", files=_upload(b"%PDF-1.4", filename="scan.pdf", content_type="application/pdf")
        )

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"
        assert stub_transcriber.paths == []

    @pytest.mark.asyncio
    async def test_renamed_non_image(self, test_client, stub_transcriber):
        response = await test_client.post(
            "/api/analyze", files=_upload(b"plain text pretending to be a photo\n", filename="note.png", content_type="image/png")
        )

        assert response.status_code == 400
        assert "not an image" in response.json()["message"]
        assert stub_transcriber.paths == []

    @pytest.mark.asyncio
    async def test_empty_upload(self, test_client, stub_transcriber):
        response = await test_client.post("/api/analyze", files=_upload(b""))

        assert response.status_code == 400
        assert response.json()["message"] == "Uploaded image is empty."

    @pytest.mark.asyncio
    async def test_empty_transcription_is_stored(self, test_client, stub_transcriber, sample_image_bytes):
        stub_transcriber.text = ""

        response = await test_client.post("/api/analyze", files=_upload(sample_image_bytes))

        assert response.status_code == 200
        assert response.json()["text"] == ""


class TestEntries:
    @pytest.mark.asyncio
    async def test_newest_first(self, test_client, db_session):
        await test_client.get("/api/me")
        uid = test_client.cookies[settings.cookie_name]
        base = datetime(2026, 1, 1, tzinfo=timezone.utc)
        db_session.add_all(
            [
                Entry(user_id=uid, text="first", created_at=base),
                Entry(user_id=uid, text="third", created_at=base + timedelta(hours=2)),
                Entry(user_id=uid, text="second", created_at=base + timedelta(hours=1)),
            ]
        )
        await db_session.commit()

        response = await test_client.get("/api/entries")

        assert response.status_code == 200
        assert [e["text"] for e in response.json()] == ["third", "second", "first"]

    @pytest.mark.asyncio
    async def test_scoped_to_identity(self, test_client, db_session):
        await test_client.get("/api/me")
        db_session.add(Entry(user_id="someone-else", text="not yours"))
        await db_session.commit()

        response = await test_client.get("/api/entries")

        assert response.status_code == 200
        assert response.json() == []

    @pytest.mark.asyncio
    async def test_new_identity_has_empty_history(self, test_client):
        response = await test_client.get("/api/entries")

        assert response.status_code == 200
        assert response.json() == []
        assert settings.cookie_name in response.cookies


class TestEntryModel:
    def test_created_at_has_database_default(self):
        column = Entry.__table__.c.created_at
        assert "CURRENT_TIMESTAMP" in str(column.server_default.arg)

    def test_text_is_a_column(self):
        assert "text" in Entry.__table__.c
