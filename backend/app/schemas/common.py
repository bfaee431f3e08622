"""
SchoolMap Backend - Shared Schemas & Response Envelope
======================================================

What:  Base model for every API schema plus the two envelope variants.
How:   Every response is discriminated by `success`:

       success  {"success": true,  "data": ..., "message": "..."|null}
       failure  {"success": false, "error": "<code>", "message": "...",
                 "details": {...}|null, "request_id": "..."}

       Field names are camelCase on the wire (`schoolId`, `classNum`);
       snake_case is accepted on input as well.
"""

from typing import Generic, Literal, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class APIModel(BaseModel):
    """Base for request and response bodies: camelCase aliases, ORM input."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        str_strip_whitespace=True,
    )


class SuccessResponse(BaseModel, Generic[T]):
    """Success variant of the response envelope."""

    success: Literal[True] = True
    data: T
    message: Optional[str] = Field(default=None, description="Human-readable note")


class ErrorResponse(BaseModel):
    """
    Failure variant of the response envelope.

    Example:
        {
            "success": false,
            "error": "conflict",
            "message": "Login ID 'minji' is already taken",
            "details": null,
            "request_id": "a1b2c3d4"
        }
    """

    success: Literal[False] = False
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Returned by GET /health."""

    status: str = Field(description="Overall service status: healthy, degraded, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    directory: str = Field(description="NEIS API status: available, unavailable")
    uptime_seconds: float = Field(description="Seconds since service started")
