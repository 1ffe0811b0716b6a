"""
NoteMap Backend: Custom Exception Hierarchy
============================================

What:  Application-specific exceptions for every failure the API can report.
How:   Each exception carries a user-facing message and an optional context
       dict. Global handlers (registered in main.py) translate them into
       JSON error responses with the right HTTP status.
Who:   Raised by services, repositories and middleware; caught by handlers.

Exception Hierarchy:
    NoteMapError (base)
    ├── ValidationError            → 400 Bad Request
    ├── NotFoundError              → 404 Not Found
    ├── ConfigurationError         → 500 (fatal, fix the deployment)
    ├── GeocodingError             (provider failures, never raised directly)
    │   ├── TransientServiceError  → 503 Service Unavailable (retryable)
    │   ├── RequestDenied          → 502 Bad Gateway (operator must act)
    │   ├── NoResult               → 422 (the address matched nothing)
    │   └── ProviderError          → 502 Bad Gateway (unlisted status)
    ├── RepositoryError            → 500 (datastore unavailable / query failed)
    ├── TranscriptionError         → 500 (vision provider failed)
    └── FileStorageError           → 500 (temp upload could not be written)

ConfigurationError sits outside GeocodingError on purpose: the route
distance lookup treats every GeocodingError as "no straight-line distance"
but must still fail the whole call when the key is missing.
"""

from typing import Any, Dict, Optional


class NoteMapError(Exception):
    """
    Base exception for all NoteMap application errors.

    Attributes:
        message:  User-facing error description (returned in the API response)
        context:  Additional debug info (logged and returned as `details`
                  only by handlers that opt in)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(NoteMapError):
    """
    Raised when client input fails validation.

    HTTP: 400 Bad Request. Request-schema failures detected by FastAPI are
    rendered the same way so clients see a single error shape.
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class NotFoundError(NoteMapError):
    """
    Raised when a requested resource does not exist.

    For facilities this is distinct from "not yet geocoded": an unknown id
    is a NotFoundError, a known id without coordinates triggers geocoding.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class ConfigurationError(NoteMapError):
    """
    Raised when a required credential or setting is missing.

    Raised before any network call is attempted.
    """

    def __init__(
        self,
        setting: str,
        message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["setting"] = setting
        super().__init__(message=message or f"{setting} is not set", context=ctx)
        self.setting = setting


class GeocodingError(NoteMapError):
    """Base class for failures reported by the geocoding provider."""


class TransientServiceError(GeocodingError):
    """
    The provider could not be reached or answered with a non-success HTTP status.

    `retryable` is True for connection failures, timeouts and 5xx responses;
    those are retried by the adapter before this error escapes.
    """

    def __init__(
        self,
        message: str = "Geocoding service is temporarily unavailable",
        status_code: Optional[int] = None,
        retryable: bool = True,
        retry_after: int = 5,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if status_code is not None:
            ctx["status_code"] = status_code
        super().__init__(message=message, context=ctx)
        self.status_code = status_code
        self.retryable = retryable
        self.retry_after = retry_after


class RequestDenied(GeocodingError):
    """Provider status REQUEST_DENIED (bad key, API disabled, quota)."""

    def __init__(self, reason: Optional[str] = None, context: Optional[Dict[str, Any]] = None):
        message = f"Geocoding request denied: {reason or 'unknown reason'}"
        super().__init__(message=message, context=context)
        self.reason = reason


class NoResult(GeocodingError):
    """The provider processed the request but found no location for the address."""

    def __init__(self, address: Optional[str] = None, context: Optional[Dict[str, Any]] = None):
        ctx = context or {}
        if address is not None:
            ctx["address"] = address
        super().__init__(
            message="ZERO_RESULTS: no location found for the given address",
            context=ctx,
        )
        self.address = address


class ProviderError(GeocodingError):
    """Any other non-OK provider status; the raw status string is preserved."""

    def __init__(self, status: str, context: Optional[Dict[str, Any]] = None):
        ctx = context or {}
        ctx["provider_status"] = status
        super().__init__(message=f"Geocoding provider returned status: {status}", context=ctx)
        self.status = status


class RepositoryError(NoteMapError):
    """
    Raised when a datastore query or write fails.

    The message carries the underlying driver message so operators can see
    what failed; the identity paths catch this and degrade instead.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class TranscriptionError(NoteMapError):
    """
    Raised when the vision provider fails after all retries.

    HTTP: 500 with the provider's message, matching the analyze contract.
    """

    def __init__(
        self,
        message: str = "Handwriting transcription failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class FileStorageError(NoteMapError):
    """Raised when the temporary upload cannot be written to disk."""

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
