"""Structured error response schemas."""
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ErrorDetail(BaseModel):
    """Detailed error information."""

    code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    field: str | None = Field(default=None, description="Field that caused the error (for validation errors)")
    value: Any | None = Field(default=None, description="Invalid value (for validation errors)")


class ErrorResponse(BaseModel):
    """Standard error response structure.

    Carries the same success/message pair as successful analytics responses
    plus machine-readable details and the request ID for tracing.
    """

    success: bool = Field(default=False, description="Always false for errors")
    error: str = Field(..., description="Error type (e.g., 'ValidationError', 'DataSourceError')")
    message: str = Field(..., description="Primary error message")
    details: list[ErrorDetail] | None = Field(default=None, description="Detailed error information")
    remediation: str | None = Field(default=None, description="Suggestion for fixing the error")
    request_id: str | None = Field(default=None, description="Request ID for tracing")
    timestamp: datetime = Field(default_factory=datetime.utcnow, description="Error timestamp")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "success": False,
                "error": "DataSourceError",
                "message": "Error processing analytics data",
                "details": [
                    {
                        "code": "data_source_error",
                        "message": "Query on 'payments' failed",
                    }
                ],
                "remediation": "Retry the request; the snapshot was not written.",
                "request_id": "req_1234567890ab",
                "timestamp": "2025-07-22T10:30:00Z",
            }
        }
    )


# Error codes enum for consistency
class ErrorCode:
    """Standard error codes used across the API."""

    # Validation errors (400, 422)
    BAD_REQUEST = "bad_request"
    VALIDATION_ERROR = "validation_error"

    # Conflict (409)
    DUPLICATE_SNAPSHOT = "duplicate_snapshot"

    # Not found (404)
    SNAPSHOT_NOT_FOUND = "snapshot_not_found"

    # Authorization errors (401, 403)
    AUTHENTICATION_REQUIRED = "authentication_required"
    INSUFFICIENT_PERMISSIONS = "insufficient_permissions"

    # External service errors
    DATA_SOURCE_ERROR = "data_source_error"
    DATABASE_ERROR = "database_error"

    # Internal errors (500)
    INTERNAL_ERROR = "internal_error"


# Remediation hints for common errors
REMEDIATION_HINTS = {
    ErrorCode.BAD_REQUEST: "Use YYYY-MM-DD dates, a range of day, week, month or year, and at least one allow-listed field on updates",
    ErrorCode.VALIDATION_ERROR: "Check the API documentation for correct request format at /docs",
    ErrorCode.AUTHENTICATION_REQUIRED: "Send a valid admin access token as a Bearer Authorization header",
    ErrorCode.INSUFFICIENT_PERMISSIONS: "Ask a super admin to grant the analytics permission",
    ErrorCode.DUPLICATE_SNAPSHOT: "Snapshots are created once; use PUT to correct an existing snapshot",
    ErrorCode.SNAPSHOT_NOT_FOUND: "Create the snapshot with POST before reading or updating it",
    ErrorCode.DATA_SOURCE_ERROR: "Retry the request; the snapshot was not written.",
    ErrorCode.DATABASE_ERROR: "Database temporarily unavailable. Please try again in a few moments.",
}
