"""
Analytics API endpoints for marketplace snapshots.

Provides endpoints for:
- POST /analytics/{date} - Aggregate and store the snapshot for a period
- GET /analytics/{date} - Retrieve a stored snapshot
- PUT /analytics/{date} - Correct allow-listed metric fields of a snapshot
- GET /analytics?startDate&endDate - Snapshots anchored within a date range

Every endpoint accepts ``range`` (day, week, month, year; default day).
Dates use the YYYY-MM-DD format.
"""

from datetime import date
from typing import Optional, Tuple

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status
from pydantic import ValidationError
from pydantic.alias_generators import to_camel
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from logistics.api.deps import get_current_user, get_db, get_metrics_source
from logistics.auth.rbac import Permission, require_permissions
from logistics.config import settings
from logistics.exceptions import DuplicateSnapshotError, InvalidPeriodError, NotFoundError
from logistics.schemas.analytics_snapshot import (
    AnalyticsRangeResponse,
    AnalyticsResponse,
    AnalyticsSnapshot,
    AnalyticsSnapshotUpdate,
    AnalyticsUpdateResponse,
)
from logistics.services.analytics_service import AnalyticsService
from logistics.services.metrics_source import MetricsDataSource
from logistics.utils.periods import PeriodKind, parse_anchor, parse_period_kind

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/analytics", tags=["Analytics"])

RANGE_DESCRIPTION = "Period kind: day, week, month or year"


def _bad_request(error: InvalidPeriodError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))


def _parse_period(anchor_date: str, period: str) -> Tuple[date, PeriodKind]:
    """Validate the path date and range query, mapping failures to 400."""
    try:
        return parse_anchor(anchor_date), parse_period_kind(period)
    except InvalidPeriodError as e:
        raise _bad_request(e) from e


@router.post(
    "/{anchor_date}",
    response_model=AnalyticsResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Process and create analytics data for a period",
)
@require_permissions(Permission.MANAGE_ANALYTICS, Permission.SUPER_ADMIN)
async def create_analytics(
    anchor_date: str,
    period: str = Query(settings.analytics_default_range, alias="range", description=RANGE_DESCRIPTION),
    db: AsyncSession = Depends(get_db),
    source: MetricsDataSource = Depends(get_metrics_source),
    current_user: dict = Depends(get_current_user),
) -> AnalyticsResponse:
    """
    Aggregate metrics for the period containing the date and store them.

    Compares every metric against the preceding period of the same kind.
    A snapshot is created once; re-creating it returns 409.
    """
    anchor, kind = _parse_period(anchor_date, period)
    service = AnalyticsService(db, source)

    try:
        snapshot = await service.create_snapshot(anchor, kind)
        # Validate before commit so a snapshot that cannot be served is never stored
        data = AnalyticsSnapshot.model_validate(snapshot)
        await db.commit()
    except DuplicateSnapshotError as e:
        await db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e
    except ValidationError:
        await db.rollback()
        raise

    logger.info("analytics_created_via_api", snapshot_id=snapshot.id, user_id=current_user.get("sub"))

    return AnalyticsResponse(
        message="Analytics data processed and created successfully",
        data=data,
    )


@router.get(
    "/{anchor_date}",
    response_model=AnalyticsResponse,
    summary="Get analytics data for a period",
)
@require_permissions(Permission.VIEW_ANALYTICS, Permission.SUPER_ADMIN)
async def get_analytics(
    anchor_date: str,
    period: str = Query(settings.analytics_default_range, alias="range", description=RANGE_DESCRIPTION),
    db: AsyncSession = Depends(get_db),
    source: MetricsDataSource = Depends(get_metrics_source),
    current_user: dict = Depends(get_current_user),
) -> AnalyticsResponse:
    """Retrieve the stored snapshot for a date; 404 if it was never created."""
    anchor, kind = _parse_period(anchor_date, period)
    service = AnalyticsService(db, source)

    try:
        snapshot = await service.get_snapshot(anchor, kind)
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e

    return AnalyticsResponse(
        message="Analytics data retrieved successfully",
        data=AnalyticsSnapshot.model_validate(snapshot),
    )


@router.put(
    "/{anchor_date}",
    response_model=AnalyticsUpdateResponse,
    summary="Update analytics data for a period",
)
@require_permissions(Permission.MANAGE_ANALYTICS, Permission.SUPER_ADMIN)
async def update_analytics(
    anchor_date: str,
    update_data: AnalyticsSnapshotUpdate = Body(...),
    period: str = Query(settings.analytics_default_range, alias="range", description=RANGE_DESCRIPTION),
    db: AsyncSession = Depends(get_db),
    source: MetricsDataSource = Depends(get_metrics_source),
    current_user: dict = Depends(get_current_user),
) -> AnalyticsUpdateResponse:
    """
    Overwrite allow-listed metric fields.

    Unknown fields are ignored. Comparisons are not recomputed.
    """
    anchor, kind = _parse_period(anchor_date, period)

    changes = update_data.changes()
    if not changes:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No valid fields provided for update",
        )

    service = AnalyticsService(db, source)
    try:
        applied = await service.update_snapshot(anchor, changes, kind)
        await db.commit()
    except NotFoundError as e:
        await db.rollback()
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e

    return AnalyticsUpdateResponse(
        message="Analytics data updated successfully",
        data={to_camel(name): value for name, value in applied.items()},
    )


@router.get(
    "",
    response_model=AnalyticsRangeResponse,
    summary="Get analytics data for a date range",
)
@require_permissions(Permission.VIEW_ANALYTICS, Permission.SUPER_ADMIN)
async def get_analytics_range(
    start_date: Optional[str] = Query(None, alias="startDate", description="First anchor date (inclusive)"),
    end_date: Optional[str] = Query(None, alias="endDate", description="Last anchor date (inclusive)"),
    period: str = Query(settings.analytics_default_range, alias="range", description=RANGE_DESCRIPTION),
    db: AsyncSession = Depends(get_db),
    source: MetricsDataSource = Depends(get_metrics_source),
    current_user: dict = Depends(get_current_user),
) -> AnalyticsRangeResponse:
    """Snapshots anchored within [startDate, endDate], ordered by date ascending."""
    if not start_date or not end_date:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid startDate or endDate format. Use YYYY-MM-DD",
        )

    try:
        start = parse_anchor(start_date)
        end = parse_anchor(end_date)
        kind = parse_period_kind(period)
    except InvalidPeriodError as e:
        raise _bad_request(e) from e

    span_days = (end - start).days + 1
    if span_days > settings.analytics_max_range_days:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Date range spans {span_days} days; maximum is {settings.analytics_max_range_days}",
        )

    service = AnalyticsService(db, source)
    try:
        snapshots = await service.get_snapshot_range(start, end, kind)
    except InvalidPeriodError as e:
        raise _bad_request(e) from e

    return AnalyticsRangeResponse(
        message="Analytics data for range retrieved successfully",
        data=[AnalyticsSnapshot.model_validate(snapshot) for snapshot in snapshots],
    )
