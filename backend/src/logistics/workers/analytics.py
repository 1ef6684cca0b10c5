"""
Background worker for scheduled analytics snapshots.

Each job snapshots the period that just ended, anchored at yesterday:
- Daily: every day at 00:30 UTC
- Weekly: Mondays (yesterday was Sunday, closing the week)
- Monthly: 1st of the month
- Yearly: January 1st

A snapshot that already exists is reported as skipped, so re-running a job
is harmless.

Usage (with ARQ):
    arq logistics.workers.analytics.WorkerSettings
"""

from datetime import date, datetime, timedelta
from typing import Optional

import structlog

from logistics.config import settings
from logistics.database import AsyncSessionLocal
from logistics.exceptions import DuplicateSnapshotError
from logistics.services.analytics_service import AnalyticsService
from logistics.services.metrics_source import SqlMetricsDataSource
from logistics.utils.periods import PeriodKind, parse_anchor, snapshot_key

logger = structlog.get_logger(__name__)


def yesterday(today: Optional[date] = None) -> date:
    """Anchor of the period that just ended."""
    return (today or datetime.utcnow().date()) - timedelta(days=1)


async def create_period_snapshot(ctx: dict, kind: PeriodKind, anchor: Optional[date] = None) -> dict:
    """
    Create and commit one snapshot.

    The session factory comes from ``ctx["session_factory"]`` when set,
    otherwise the application's AsyncSessionLocal.

    Args:
        ctx: ARQ context
        kind: Period kind to snapshot
        anchor: Anchor date (defaults to yesterday)

    Returns:
        Dict with status success, skipped or failed
    """
    anchor = anchor or yesterday()
    key = snapshot_key(kind, anchor)
    session_factory = ctx.get("session_factory", AsyncSessionLocal)

    logger.info("analytics_worker_started", snapshot_id=key, job_id=ctx.get("job_id"))

    async with session_factory() as db:
        service = AnalyticsService(db, SqlMetricsDataSource(session_factory))
        try:
            snapshot = await service.create_snapshot(anchor, kind)
            await db.commit()
        except DuplicateSnapshotError:
            await db.rollback()
            logger.info("analytics_snapshot_skipped", snapshot_id=key)
            return {"snapshot_id": key, "range": kind.value, "status": "skipped"}
        except Exception as e:
            await db.rollback()
            logger.exception("analytics_snapshot_failed", snapshot_id=key, error=str(e))
            return {"snapshot_id": key, "range": kind.value, "status": "failed", "error": str(e)}

    logger.info("analytics_snapshot_stored", snapshot_id=snapshot.id)
    return {"snapshot_id": snapshot.id, "range": kind.value, "status": "success"}


async def create_daily_snapshot(ctx: dict) -> dict:
    """Snapshot yesterday."""
    return await create_period_snapshot(ctx, PeriodKind.DAY)


async def create_weekly_snapshot(ctx: dict) -> dict:
    """Snapshot the week containing yesterday; scheduled on Mondays."""
    return await create_period_snapshot(ctx, PeriodKind.WEEK)


async def create_monthly_snapshot(ctx: dict) -> dict:
    """Snapshot the month containing yesterday; scheduled on the 1st."""
    return await create_period_snapshot(ctx, PeriodKind.MONTH)


async def create_yearly_snapshot(ctx: dict) -> dict:
    """Snapshot the year containing yesterday; scheduled on January 1st."""
    return await create_period_snapshot(ctx, PeriodKind.YEAR)


async def calculate_all_snapshots(ctx: dict, anchor: Optional[date] = None) -> dict:
    """
    Create the day, week, month and year snapshots for one anchor.

    Useful for manual triggering or backfilling a missed day.

    Args:
        ctx: ARQ context
        anchor: Anchor date (defaults to yesterday)

    Returns:
        Dict with per-range results and a summary
    """
    anchor = anchor or yesterday()
    logger.info("calculating_all_snapshots", anchor=anchor.isoformat())

    results = {
        "anchor": anchor.isoformat(),
        "started_at": datetime.utcnow().isoformat(),
        "snapshots": {},
    }

    for kind in PeriodKind:
        results["snapshots"][kind.value] = await create_period_snapshot(ctx, kind, anchor)

    results["completed_at"] = datetime.utcnow().isoformat()

    statuses = [r["status"] for r in results["snapshots"].values()]
    results["summary"] = {
        "total": len(statuses),
        "successful": statuses.count("success"),
        "skipped": statuses.count("skipped"),
        "failed": statuses.count("failed"),
    }

    logger.info("all_snapshots_completed", **results["summary"])

    return results


# ARQ Worker Configuration

class WorkerSettings:
    """
    ARQ worker settings for scheduled snapshots.

    Schedule (UTC):
    - Daily: 00:30 every day
    - Weekly: 00:45 on Mondays
    - Monthly: 01:00 on the 1st
    - Yearly: 01:15 on January 1st
    - All ranges: manual trigger

    Usage:
        arq logistics.workers.analytics.WorkerSettings
    """

    functions = [
        create_daily_snapshot,
        create_weekly_snapshot,
        create_monthly_snapshot,
        create_yearly_snapshot,
        calculate_all_snapshots,
    ]

    cron_jobs = [
        {
            "function": create_daily_snapshot,
            "cron": "30 0 * * *",
            "timeout": settings.analytics_worker_timeout_seconds,
        },
        {
            "function": create_weekly_snapshot,
            "cron": "45 0 * * 1",
            "timeout": settings.analytics_worker_timeout_seconds,
        },
        {
            "function": create_monthly_snapshot,
            "cron": "0 1 1 * *",
            "timeout": settings.analytics_worker_timeout_seconds,
        },
        {
            "function": create_yearly_snapshot,
            "cron": "15 1 1 1 *",
            "timeout": settings.analytics_worker_timeout_seconds,
        },
    ]

    # Job retention
    keep_result = 86400

    max_jobs = 4
    job_timeout = settings.analytics_worker_timeout_seconds


async def trigger_snapshots(anchor: Optional[date] = None) -> dict:
    """
    Manually create every snapshot for an anchor.

    Args:
        anchor: Anchor date (defaults to yesterday)

    Returns:
        Dict with snapshot results
    """
    logger.info("manual_snapshot_trigger", anchor=anchor.isoformat() if anchor else None)

    ctx = {"job_id": f"manual_{datetime.utcnow().isoformat()}"}
    return await calculate_all_snapshots(ctx, anchor)


if __name__ == "__main__":
    """
    Run the snapshot jobs manually.

    Usage:
        python -m logistics.workers.analytics [YYYY-MM-DD]
    """
    import asyncio
    import sys

    from logistics.middleware.logging import setup_logging

    setup_logging()

    async def main():
        anchor = parse_anchor(sys.argv[1]) if len(sys.argv) > 1 else None
        results = await trigger_snapshots(anchor)

        print("\n" + "=" * 60)
        print(f"Analytics Snapshots for {results['anchor']}")
        print("=" * 60)

        for range_name, result in results["snapshots"].items():
            print(f"\n[{result['status'].upper()}] {range_name}: {result['snapshot_id']}")
            if result["status"] == "failed":
                print(f"   Error: {result.get('error', 'Unknown error')}")

        summary = results["summary"]
        print("\n" + "=" * 60)
        print(
            f"Summary: {summary['successful']} created, {summary['skipped']} skipped, "
            f"{summary['failed']} failed of {summary['total']}"
        )
        print("=" * 60 + "\n")

        return 1 if summary["failed"] else 0

    sys.exit(asyncio.run(main()))
