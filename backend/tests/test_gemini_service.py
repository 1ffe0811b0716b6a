"""
Gemini transcriber tests. The SDK module is patched; no network is used.
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from google.api_core import exceptions as google_exceptions
from tenacity import wait_none

from app.config import settings
from app.exceptions import ConfigurationError, TranscriptionError
from app.services.gemini_service import GeminiTranscriber


@pytest.fixture
def image_file(tmp_path, sample_image_bytes):
    path = tmp_path / "note.jpg"
    path.write_bytes(sample_image_bytes)
    return str(path)


@pytest.fixture
def mock_genai():
    with patch("app.services.gemini_service.genai") as genai:
        model = MagicMock()
        model.generate_content_async = AsyncMock()
        genai.GenerativeModel.return_value = model
        yield genai


class TestTranscribe:
    @pytest.mark.asyncio
    async def test_returns_stripped_text(self, mock_genai, image_file, sample_image_bytes):
        model = mock_genai.GenerativeModel.return_value
        model.generate_content_async.return_value = MagicMock(text="  Buy milk\nCall mom \n")

        text = await GeminiTranscriber(wait=wait_none()).transcribe(image_file, "image/jpeg")

        assert text == "Buy milk\nCall mom"
        mock_genai.configure.assert_called_once_with(api_key=settings.gemini_api_key)
        parts = model.generate_content_async.call_args.args[0]
        assert parts[0] == GeminiTranscriber.TRANSCRIBE_PROMPT
        assert parts[1] == {"mime_type": "image/jpeg", "data": sample_image_bytes}

    @pytest.mark.asyncio
    async def test_transient_errors_are_retried(self, mock_genai, image_file):
        model = mock_genai.GenerativeModel.return_value
        model.generate_content_async.side_effect = [
            google_exceptions.ServiceUnavailable("overloaded"),
            google_exceptions.ServiceUnavailable("overloaded"),
            MagicMock(text="hello"),
        ]

        text = await GeminiTranscriber(wait=wait_none()).transcribe(image_file, "image/jpeg")

        assert text == "hello"
        assert model.generate_content_async.await_count == 3

    @pytest.mark.asyncio
    async def test_exhausted_retries_raise_transcription_error(self, mock_genai, image_file):
        model = mock_genai.GenerativeModel.return_value
        model.generate_content_async.side_effect = google_exceptions.ServiceUnavailable("overloaded")

        with pytest.raises(TranscriptionError, match="overloaded"):
            await GeminiTranscriber(wait=wait_none()).transcribe(image_file, "image/jpeg")
        assert model.generate_content_async.await_count == settings.retry_max_attempts

    @pytest.mark.asyncio
    async def test_permanent_error_is_not_retried(self, mock_genai, image_file):
        model = mock_genai.GenerativeModel.return_value
        model.generate_content_async.side_effect = google_exceptions.InvalidArgument("bad image")

        with pytest.raises(TranscriptionError, match="bad image"):
            await GeminiTranscriber(wait=wait_none()).transcribe(image_file, "image/jpeg")
        assert model.generate_content_async.await_count == 1

    @pytest.mark.asyncio
    async def test_missing_key_is_configuration_error(self, mock_genai, image_file, monkeypatch):
        monkeypatch.setattr(settings, "gemini_api_key", "")
        with pytest.raises(ConfigurationError):
            await GeminiTranscriber().transcribe(image_file, "image/jpeg")
        mock_genai.GenerativeModel.return_value.generate_content_async.assert_not_awaited()


class TestHealthCheck:
    @pytest.mark.asyncio
    async def test_reachable(self, mock_genai):
        mock_genai.list_models.return_value = [SimpleNamespace(name=f"models/{settings.gemini_model}")]
        assert await GeminiTranscriber().health_check() is True

    @pytest.mark.asyncio
    async def test_api_error_is_unhealthy(self, mock_genai):
        mock_genai.list_models.side_effect = google_exceptions.PermissionDenied("bad key")
        assert await GeminiTranscriber().health_check() is False
