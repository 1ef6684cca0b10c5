"""Persistence for analytics snapshots."""
from datetime import date, datetime
from typing import Any, Dict, List, Mapping

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from logistics.exceptions import DuplicateSnapshotError, InvalidPeriodError, InvalidSnapshotFieldError, NotFoundError
from logistics.models.analytics_snapshot import AnalyticsSnapshot
from logistics.services.metrics_collector import METRIC_NAMES
from logistics.utils.periods import PeriodKind, parse_period_kind, snapshot_key

logger = structlog.get_logger(__name__)


class SnapshotStore:
    """
    Store for analytics snapshot rows, keyed "<range>_<date>".

    Creation is reject-on-duplicate: an existing key raises
    DuplicateSnapshotError, including when a concurrent writer inserts the
    same key first. Methods flush; committing is left to the caller.
    """

    def __init__(self, db: AsyncSession):
        """Initialize snapshot store with database session."""
        self.db = db

    async def _find(self, anchor: date, kind: PeriodKind) -> AnalyticsSnapshot | None:
        result = await self.db.execute(
            select(AnalyticsSnapshot).where(AnalyticsSnapshot.id == snapshot_key(kind, anchor))
        )
        return result.scalar_one_or_none()

    async def exists(self, anchor: date, kind: PeriodKind = PeriodKind.DAY) -> bool:
        return await self._find(anchor, parse_period_kind(kind)) is not None

    async def insert(self, snapshot: AnalyticsSnapshot) -> AnalyticsSnapshot:
        """
        Persist a new snapshot.

        Raises:
            DuplicateSnapshotError: If a snapshot with the same key exists
        """
        self.db.add(snapshot)
        try:
            await self.db.flush()
        except IntegrityError as e:
            await self.db.rollback()
            logger.warning("analytics_snapshot_duplicate", snapshot_id=snapshot.id)
            raise DuplicateSnapshotError(snapshot.id) from e

        await self.db.refresh(snapshot)

        logger.info(
            "analytics_snapshot_created",
            snapshot_id=snapshot.id,
            range=snapshot.range,
            date=snapshot.date.isoformat(),
        )
        return snapshot

    async def get(self, anchor: date, kind: PeriodKind = PeriodKind.DAY) -> AnalyticsSnapshot:
        """
        Get snapshot by anchor date and period kind.

        Raises:
            NotFoundError: If no snapshot exists
        """
        kind = parse_period_kind(kind)
        snapshot = await self._find(anchor, kind)
        if snapshot is None:
            raise NotFoundError(snapshot_key(kind, anchor))
        return snapshot

    async def update(
        self,
        anchor: date,
        fields: Mapping[str, Any],
        kind: PeriodKind = PeriodKind.DAY,
    ) -> Dict[str, Any]:
        """
        Overwrite metric fields of an existing snapshot.

        comparisons are left untouched; updated_at is refreshed.

        Args:
            anchor: Anchor date of the snapshot
            fields: Metric name -> new value
            kind: Period kind of the snapshot

        Returns:
            The applied fields plus the new updated_at

        Raises:
            InvalidSnapshotFieldError: If a field is not a snapshot metric
            NotFoundError: If no snapshot exists
        """
        unknown = sorted(set(fields) - set(METRIC_NAMES))
        if unknown:
            raise InvalidSnapshotFieldError(f"Fields cannot be updated: {', '.join(unknown)}")

        snapshot = await self.get(anchor, kind)

        changes = dict(fields)
        changes["updated_at"] = datetime.utcnow()
        for name, value in changes.items():
            setattr(snapshot, name, value)

        await self.db.flush()

        logger.info(
            "analytics_snapshot_updated",
            snapshot_id=snapshot.id,
            fields=sorted(fields),
        )
        return changes

    async def get_range(
        self,
        start: date,
        end: date,
        kind: PeriodKind = PeriodKind.DAY,
    ) -> List[AnalyticsSnapshot]:
        """
        Snapshots whose anchor date lies in [start, end], oldest first.

        Raises:
            InvalidPeriodError: If start is after end
        """
        if start > end:
            raise InvalidPeriodError(f"startDate {start.isoformat()} is after endDate {end.isoformat()}")

        kind = parse_period_kind(kind)
        stmt = (
            select(AnalyticsSnapshot)
            .where(
                AnalyticsSnapshot.range == kind.value,
                AnalyticsSnapshot.date >= start,
                AnalyticsSnapshot.date <= end,
            )
            .order_by(AnalyticsSnapshot.date.asc())
        )

        result = await self.db.execute(stmt)
        return list(result.scalars().all())
