"""
LinkUp Backend: Shared Response Schemas
=========================================

What:  Error envelope, upload result and health check models used across
       route modules (and in their OpenAPI `responses=` declarations).
"""

from typing import Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """
    Standardized error response format for API errors.

    Example:
        {
            "error": "not_found",
            "message": "User not found",
            "request_id": "a1b2c3d4"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class UploadResponse(BaseModel):
    success: bool = Field(default=True)
    url: str = Field(description="Absolute URL the uploaded file is served from")


class UploadErrorResponse(BaseModel):
    success: bool = Field(default=False)
    message: str
    error: Optional[str] = None


class HealthResponse(BaseModel):
    """
    Health check response showing service and dependency status.

    A backend that can't reach its database is effectively down, so the
    database probe decides between healthy and unhealthy.
    """
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
