"""
Shared response shapes: the error envelope and the health report.
"""

from typing import Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """
    What:  Standardized error response format for all API errors.

    Example:
        {
            "error": "no_result",
            "message": "ZERO_RESULTS: no location found for the given address",
            "details": {"address": "nowhere at all"},
            "request_id": "a1b2c3d4"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """
    What:  Health check response showing service and dependency status.
    Who:   Returned by GET /health for container and load balancer probes.
    """
    status: str = Field(description="Overall service status: healthy, degraded, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    vision: str = Field(description="Transcription provider: available, unavailable, unconfigured")
    maps: str = Field(description="Maps provider credentials: configured, unconfigured")
    uptime_seconds: float = Field(description="Seconds since service started")
