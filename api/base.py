"""Unified API response format and error codes."""

from typing import Any
from datetime import datetime
from uuid import uuid4

from pydantic import BaseModel, Field

from utils.timezone import now_utc


class APIError(BaseModel):
    """Error details in API response."""

    code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: list[str] = Field(default_factory=list, description="Every validation message, when several")


class APIMeta(BaseModel):
    """Metadata included in every API response."""

    timestamp: datetime = Field(..., description="Response timestamp (UTC)")
    request_id: str = Field(..., description="Unique request identifier for tracing")
    message: str | None = Field(None, description="Human-readable outcome of a command")


class APIResponse(BaseModel):
    """
    Unified response format for all API endpoints.

    Every endpoint returns this structure, making client parsing predictable.
    """

    success: bool
    data: Any | None = None
    error: APIError | None = None
    meta: APIMeta


def success_response(data: Any, message: str | None = None) -> APIResponse:
    """Create a success response."""
    return APIResponse(
        success=True,
        data=data,
        error=None,
        meta=APIMeta(timestamp=now_utc(), request_id=str(uuid4()), message=message),
    )


def error_response(code: str, message: str, details: list[str] | None = None) -> APIResponse:
    """Create an error response."""
    return APIResponse(
        success=False,
        data=None,
        error=APIError(code=code, message=message, details=details or []),
        meta=APIMeta(timestamp=now_utc(), request_id=str(uuid4())),
    )


class ErrorCodes:
    """Standard error codes for consistent error handling."""

    # Request context
    MISSING_CONTEXT = "MISSING_CONTEXT"
    UNAUTHORIZED = "UNAUTHORIZED"

    # Resource Errors
    NOT_FOUND = "NOT_FOUND"

    # Validation Errors
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_REQUEST = "INVALID_REQUEST"

    # Invoice Lifecycle
    INVALID_TRANSITION = "INVALID_TRANSITION"

    # Infrastructure
    INTERNAL_ERROR = "INTERNAL_ERROR"


HTTP_STATUS_BY_CODE = {
    ErrorCodes.MISSING_CONTEXT: 401,
    ErrorCodes.UNAUTHORIZED: 403,
    ErrorCodes.NOT_FOUND: 404,
    ErrorCodes.INVALID_TRANSITION: 409,
    ErrorCodes.VALIDATION_ERROR: 422,
    ErrorCodes.INVALID_REQUEST: 400,
    ErrorCodes.INTERNAL_ERROR: 500,
}
