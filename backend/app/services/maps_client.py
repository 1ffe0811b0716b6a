"""
NoteMap Backend: Google Maps HTTP Client
=========================================

What:  Shared GET-and-decode helper for the Google Maps JSON web services.
How:   httpx with a bounded timeout per call; tenacity retries connection
       failures, timeouts and 5xx responses with exponential backoff + jitter.
Who:   GeocodingService and DistanceMatrixService.

Translation of transport-level failures:
    httpx timeout / connect / other transport error → TransientServiceError (retried)
    HTTP 5xx                                         → TransientServiceError (retried)
    other non-2xx HTTP status                        → TransientServiceError (not retried)
    body that is not JSON                            → ProviderError("INVALID_RESPONSE")

Provider-level statuses inside the JSON body ("status": "ZERO_RESULTS" ...)
are left to the callers; each API reports them differently.
"""

import logging
from typing import Any, Dict, Optional

import httpx
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential_jitter,
)
from tenacity.wait import wait_base

from app.config import settings
from app.exceptions import ProviderError, TransientServiceError

logger = logging.getLogger(__name__)


def _is_retryable(exc: BaseException) -> bool:
    return isinstance(exc, TransientServiceError) and exc.retryable


class MapsClient:
    """
    Thin async client for `{maps_base_url}/<api>/json` endpoints.

    Args:
        client: Optional shared httpx.AsyncClient. When omitted a short-lived
                client is opened per request. Tests pass one built on
                httpx.MockTransport.
        wait:   Optional tenacity wait strategy overriding the configured
                exponential backoff.
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        wait: Optional[wait_base] = None,
    ):
        self._client = client
        self._wait = wait

    async def get_json(self, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        """
        GET `{maps_base_url}/{path}` and return the decoded JSON object.

        Raises:
            TransientServiceError: after the final attempt for retryable
                failures, or immediately for non-retryable HTTP statuses.
            ProviderError: when the body cannot be decoded.
        """
        wait = self._wait or wait_exponential_jitter(
            initial=settings.retry_min_wait,
            max=settings.retry_max_wait,
            jitter=1,
        )
        async for attempt in AsyncRetrying(
            retry=retry_if_exception(_is_retryable),
            stop=stop_after_attempt(settings.retry_max_attempts),
            wait=wait,
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        ):
            with attempt:
                return await self._get_once(path, params)
        # AsyncRetrying with reraise=True either returns or raises above
        raise TransientServiceError("Maps request did not complete")

    async def _get_once(self, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{settings.maps_base_url.rstrip('/')}/{path.lstrip('/')}"
        timeout = settings.http_timeout_seconds

        try:
            if self._client is not None:
                response = await self._client.get(url, params=params, timeout=timeout)
            else:
                async with httpx.AsyncClient(timeout=timeout) as client:
                    response = await client.get(url, params=params)
        except httpx.TimeoutException as exc:
            # Log the path only; the query string carries the API key
            logger.warning("Maps request to %s timed out: %s", path, type(exc).__name__)
            raise TransientServiceError(
                message="Maps service timed out",
                context={"path": path},
            ) from exc
        except httpx.TransportError as exc:
            logger.warning("Maps request to %s failed: %s", path, type(exc).__name__)
            raise TransientServiceError(
                message="Maps service is unreachable",
                context={"path": path},
            ) from exc

        if not response.is_success:
            logger.warning("Maps request to %s returned HTTP %d", path, response.status_code)
            raise TransientServiceError(
                message=f"Maps service returned HTTP {response.status_code}",
                status_code=response.status_code,
                retryable=response.status_code >= 500,
                context={"path": path},
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise ProviderError("INVALID_RESPONSE", context={"path": path}) from exc
        if not isinstance(data, dict):
            raise ProviderError("INVALID_RESPONSE", context={"path": path})
        return data


# ── Singleton Instance ────────────────────────────────────────────────────
maps_client = MapsClient()
