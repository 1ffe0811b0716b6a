"""
NoteMap Backend: Google Gemini Transcriber
===========================================

What:  VisionTranscriber backed by the Gemini vision models.
How:   Sends a fixed transcription prompt plus the image as an inline blob
       and returns the response text. Transient API failures are retried
       with tenacity (exponential backoff + jitter).
Who:   Singleton used by EntryService for POST /api/analyze.

Retried:      ServiceUnavailable, DeadlineExceeded, ResourceExhausted,
              InternalServerError, ConnectionError, TimeoutError
Not retried:  everything else (bad key, blocked prompt, invalid image)

Whatever escapes the retries is wrapped in TranscriptionError carrying the
provider's message, which the API returns with HTTP 500.
"""

import asyncio
import logging
import time
import uuid
from pathlib import Path
from typing import Optional

import aiofiles
import google.generativeai as genai
from google.api_core import exceptions as google_exceptions
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)
from tenacity.wait import wait_base

from app.config import settings
from app.exceptions import ConfigurationError, TranscriptionError
from app.services.vision_base import VisionTranscriber

logger = logging.getLogger(__name__)

TRANSIENT_ERRORS = (
    google_exceptions.ServiceUnavailable,
    google_exceptions.DeadlineExceeded,
    google_exceptions.ResourceExhausted,
    google_exceptions.InternalServerError,
    ConnectionError,
    TimeoutError,
)


class GeminiTranscriber(VisionTranscriber):
    TRANSCRIBE_PROMPT = (
        "Transcribe all the handwritten text in this image exactly as written. "
        "Return only the transcribed text, nothing else."
    )

    def __init__(self, wait: Optional[wait_base] = None):
        self._wait = wait
        self._model: Optional[genai.GenerativeModel] = None
        self._configured_key: Optional[str] = None

    @property
    def model(self) -> genai.GenerativeModel:
        """The SDK model, (re)built when the configured key changes."""
        key = settings.gemini_api_key
        if not key:
            raise ConfigurationError(
                "GEMINI_API_KEY",
                message="Transcription is not configured: GEMINI_API_KEY is not set",
            )
        if self._model is None or key != self._configured_key:
            # The SDK keeps credentials in module-level state
            genai.configure(api_key=key)
            self._model = genai.GenerativeModel(settings.gemini_model)
            self._configured_key = key
            logger.info("Gemini model initialized: %s", settings.gemini_model)
        return self._model

    async def transcribe(self, image_path: str, mime_type: str) -> str:
        request_id = str(uuid.uuid4())[:8]
        model = self.model

        async with aiofiles.open(image_path, "rb") as f:
            image_bytes = await f.read()

        logger.info(
            "[%s] Transcribing %s (%d bytes, %s)",
            request_id,
            Path(image_path).name,
            len(image_bytes),
            mime_type,
        )

        wait = self._wait or wait_exponential_jitter(
            initial=settings.retry_min_wait,
            max=settings.retry_max_wait,
            jitter=1,
        )
        try:
            async for attempt in AsyncRetrying(
                retry=retry_if_exception_type(TRANSIENT_ERRORS),
                stop=stop_after_attempt(settings.retry_max_attempts),
                wait=wait,
                before_sleep=before_sleep_log(logger, logging.WARNING),
                reraise=True,
            ):
                with attempt:
                    return await self._generate(model, image_bytes, mime_type, request_id)
        except google_exceptions.GoogleAPIError as e:
            logger.error("[%s] Gemini request failed: %s", request_id, str(e))
            raise TranscriptionError(
                message=getattr(e, "message", None) or str(e),
                context={"request_id": request_id, "error_type": type(e).__name__},
            ) from e
        except (ConnectionError, TimeoutError, ValueError) as e:
            # ValueError: response had no text part (e.g. blocked by safety filters)
            logger.error("[%s] Gemini transcription failed: %s", request_id, str(e))
            raise TranscriptionError(
                message=str(e) or "Handwriting transcription failed",
                context={"request_id": request_id, "error_type": type(e).__name__},
            ) from e
        raise TranscriptionError(context={"request_id": request_id})

    async def _generate(
        self,
        model: genai.GenerativeModel,
        image_bytes: bytes,
        mime_type: str,
        request_id: str,
    ) -> str:
        start_time = time.time()
        response = await model.generate_content_async(
            [self.TRANSCRIBE_PROMPT, {"mime_type": mime_type, "data": image_bytes}],
            request_options={"timeout": settings.gemini_timeout_seconds},
        )
        text = (response.text or "").strip()
        logger.info(
            "[%s] Gemini transcription completed in %.0fms, %d chars",
            request_id,
            (time.time() - start_time) * 1000,
            len(text),
        )
        return text

    async def health_check(self) -> bool:
        """Lists models (no token cost) to confirm the key and connectivity."""
        try:
            self.model
            models = await asyncio.to_thread(lambda: list(genai.list_models()))
        except (ConfigurationError, google_exceptions.GoogleAPIError, OSError) as e:
            logger.warning("Gemini health check failed: %s", str(e))
            return False
        target = f"models/{settings.gemini_model}"
        if target not in {m.name for m in models}:
            logger.warning("Configured model %s not found in available models", target)
        return True


# ── Singleton Instance ────────────────────────────────────────────────────
gemini_transcriber = GeminiTranscriber()
