"""
Analytics service for marketplace period snapshots.

create_snapshot composes the engine:
1. Resolve the current window and the window of the preceding period
2. Collect the metric set for both windows
3. Compare current against previous (percent change per metric)
4. Persist one snapshot row

Nothing is written unless every step succeeds. Reads and partial updates
are delegated to SnapshotStore.
"""

import time
from datetime import date, datetime
from typing import Any, Dict, List, Mapping

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from logistics.exceptions import DataSourceError, DuplicateSnapshotError
from logistics.metrics import (
    analytics_aggregation_duration_seconds,
    analytics_snapshot_failures_total,
    analytics_snapshot_updates_total,
    analytics_snapshots_created_total,
)
from logistics.models.analytics_snapshot import AnalyticsSnapshot
from logistics.services.metrics_collector import MetricsCollector
from logistics.services.metrics_source import MetricsDataSource
from logistics.services.snapshot_store import SnapshotStore
from logistics.utils.comparisons import compare
from logistics.utils.periods import (
    PeriodKind,
    parse_period_kind,
    resolve_previous_window,
    resolve_window,
    snapshot_key,
)

logger = structlog.get_logger(__name__)


class AnalyticsService:
    """
    Service for aggregating and storing marketplace analytics snapshots.

    Runs on demand from the API and on schedule from workers/analytics.py.
    Holds no state beyond its session and data-source handles.
    """

    def __init__(self, db: AsyncSession, source: MetricsDataSource):
        """
        Initialize analytics service.

        Args:
            db: Async database session used for snapshot reads and writes
            source: Data source the metrics are collected from
        """
        self.db = db
        self.store = SnapshotStore(db)
        self.collector = MetricsCollector(source)

    async def create_snapshot(self, anchor: date, kind: PeriodKind = PeriodKind.DAY) -> AnalyticsSnapshot:
        """
        Aggregate and persist the snapshot for the period containing anchor.

        Args:
            anchor: Anchor date of the period
            kind: Period kind (day, week, month, year)

        Returns:
            Persisted AnalyticsSnapshot

        Raises:
            InvalidPeriodError: If kind is unknown
            DuplicateSnapshotError: If the snapshot already exists
            DataSourceError: If a metrics query fails (nothing is written)
        """
        kind = parse_period_kind(kind)
        key = snapshot_key(kind, anchor)

        logger.info("creating_analytics_snapshot", snapshot_id=key)

        if await self.store.exists(anchor, kind):
            analytics_snapshot_failures_total.labels(range=kind.value, reason="duplicate").inc()
            raise DuplicateSnapshotError(key)

        window = resolve_window(anchor, kind)
        previous_window = resolve_previous_window(anchor, kind)

        started = time.perf_counter()
        try:
            current = await self.collector.collect(window)
            previous = await self.collector.collect(previous_window)
        except DataSourceError as e:
            analytics_snapshot_failures_total.labels(range=kind.value, reason="data_source").inc()
            logger.error("analytics_snapshot_aborted", snapshot_id=key, error=str(e))
            raise
        comparisons = compare(current, previous)
        analytics_aggregation_duration_seconds.labels(range=kind.value).observe(time.perf_counter() - started)

        now = datetime.utcnow()
        snapshot = AnalyticsSnapshot(
            id=key,
            range=kind.value,
            date=anchor,
            start_date=window.start,
            end_date=window.end,
            comparisons=comparisons,
            created_at=now,
            updated_at=now,
            **current,
        )

        try:
            snapshot = await self.store.insert(snapshot)
        except DuplicateSnapshotError:
            # Lost the race against a concurrent create for the same key
            analytics_snapshot_failures_total.labels(range=kind.value, reason="duplicate").inc()
            raise

        analytics_snapshots_created_total.labels(range=kind.value).inc()

        logger.info(
            "analytics_snapshot_completed",
            snapshot_id=key,
            previous_anchor=previous_window.anchor.isoformat(),
            first_day=window.first_day.isoformat(),
            last_day=window.last_day.isoformat(),
            days=window.days,
        )
        return snapshot

    async def get_snapshot(self, anchor: date, kind: PeriodKind = PeriodKind.DAY) -> AnalyticsSnapshot:
        """Get a snapshot; raises NotFoundError if absent."""
        return await self.store.get(anchor, kind)

    async def update_snapshot(
        self,
        anchor: date,
        fields: Mapping[str, Any],
        kind: PeriodKind = PeriodKind.DAY,
    ) -> Dict[str, Any]:
        """Overwrite metric fields of a snapshot without recomputing comparisons."""
        changes = await self.store.update(anchor, fields, kind)
        analytics_snapshot_updates_total.inc()
        return changes

    async def get_snapshot_range(
        self,
        start: date,
        end: date,
        kind: PeriodKind = PeriodKind.DAY,
    ) -> List[AnalyticsSnapshot]:
        """Snapshots anchored within [start, end], ordered by anchor date."""
        return await self.store.get_range(start, end, kind)
