"""Pydantic schemas for API request/response validation."""

from logistics.schemas.analytics_snapshot import (
    AnalyticsRangeResponse,
    AnalyticsResponse,
    AnalyticsSnapshot,
    AnalyticsSnapshotUpdate,
    AnalyticsUpdateResponse,
    SnapshotMetrics,
)
from logistics.schemas.error import ErrorCode, ErrorDetail, ErrorResponse

__all__ = [
    "AnalyticsRangeResponse",
    "AnalyticsResponse",
    "AnalyticsSnapshot",
    "AnalyticsSnapshotUpdate",
    "AnalyticsUpdateResponse",
    "SnapshotMetrics",
    "ErrorCode",
    "ErrorDetail",
    "ErrorResponse",
]
