"""
Metrics collector for marketplace analytics.

Reduces the record collections to the fixed snapshot metric set for one
period window:
- Activity: distinct active users, new users, user total
- Bookings: cargo/agri totals and completion rates (windowed and lifetime),
  average completion time in hours
- Fleet: approved transporters and brokers
- Subscribers: total and active
- Payments: revenue, failures and per-method success rates (percent)

Every ratio falls back to 0 on an empty denominator; no metric is ever None,
NaN or negative.
"""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List

import structlog

from logistics.models.account import ApprovalStatus
from logistics.models.booking import BookingStatus
from logistics.models.payment import PaymentMethod, PaymentStatus
from logistics.services.metrics_source import Collection, MetricsDataSource, Record
from logistics.utils.periods import Period

logger = structlog.get_logger(__name__)

# Snapshot metrics, in the order they are reported
METRIC_NAMES = (
    "active_users",
    "active_brokers",
    "total_cargo_bookings",
    "total_agri_bookings",
    "cargo_completion_rate",
    "agri_completion_rate",
    "cargo_completion_rate_all_time",
    "avg_completion_time",
    "total_revenue",
    "failed_payments",
    "total_users",
    "active_transporters",
    "active_bookings",
    "total_subscribers",
    "active_subscribers",
    "new_users",
    "mpesa_success_rate",
    "airtel_success_rate",
    "paystack_success_rate",
    "card_success_rate",
    "total_cargo_bookings_all_time",
    "total_agri_bookings_all_time",
)

SECONDS_PER_HOUR = 3600


def safe_ratio(numerator: float, denominator: float, scale: float = 1.0) -> float:
    """numerator / denominator * scale, or 0.0 when the denominator is 0."""
    if not denominator:
        return 0.0
    return numerator * scale / denominator


@dataclass
class BookingTally:
    """Booking counts for one domain."""

    total: int = 0
    completed: List[Record] = field(default_factory=list)
    total_all_time: int = 0
    completed_all_time: int = 0

    @property
    def completion_rate(self) -> float:
        return safe_ratio(len(self.completed), self.total)

    @property
    def completion_rate_all_time(self) -> float:
        return safe_ratio(self.completed_all_time, self.total_all_time)


def completion_hours(record: Record) -> float:
    """Hours between creation and completion; 0 when not measurable."""
    created_at: datetime | None = record.get("created_at")
    completed_at: datetime | None = record.get("completed_at")
    if created_at is None or completed_at is None or completed_at < created_at:
        return 0.0
    return (completed_at - created_at).total_seconds() / SECONDS_PER_HOUR


def average_completion_time(completed: List[Record]) -> float:
    """Mean completion time in hours over every completed record."""
    return safe_ratio(sum(map(completion_hours, completed)), len(completed))


async def gather_or_cancel(*aws):
    """
    Run awaitables concurrently, returning their results in order.

    On the first failure the remaining tasks are cancelled and awaited
    before the error propagates.
    """
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        return await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


def summarize_payments(payments: List[Record]) -> Dict[str, float]:
    """
    Revenue, failures and per-method success rates for windowed payments.

    Records without a method or status are skipped entirely.
    """
    attempts = {method: 0 for method in PaymentMethod}
    successes = {method: 0 for method in PaymentMethod}
    total_revenue = 0.0
    failed_payments = 0

    for payment in payments:
        method = payment.get("method")
        status = payment.get("status")
        if not method or not status:
            continue

        amount = float(payment.get("amount") or 0)
        if status == PaymentStatus.SUCCESS.value and amount > 0:
            # Refunds and reversals are not revenue
            total_revenue += amount
        if status == PaymentStatus.FAILED.value:
            failed_payments += 1

        try:
            channel = PaymentMethod(method.lower())
        except ValueError:
            # Channels outside the tracked set still count toward revenue
            continue
        attempts[channel] += 1
        if status == PaymentStatus.SUCCESS.value:
            successes[channel] += 1

    summary: Dict[str, float] = {
        "total_revenue": total_revenue,
        "failed_payments": failed_payments,
    }
    for method in PaymentMethod:
        summary[f"{method.value}_success_rate"] = safe_ratio(successes[method], attempts[method], scale=100)
    return summary


class MetricsCollector:
    """
    Collects snapshot metrics for a period window.

    Stateless: holds only the data-source handle, so one instance can serve
    concurrent collections.
    """

    def __init__(self, source: MetricsDataSource):
        """
        Initialize metrics collector.

        Args:
            source: Metrics data source to query
        """
        self.source = source

    async def collect(self, window: Period) -> Dict[str, Any]:
        """
        Collect the full metric set for a window.

        The eight domain queries are independent and run concurrently.

        Args:
            window: Period to aggregate

        Returns:
            Mapping of metric name (see METRIC_NAMES) to value

        Raises:
            DataSourceError: If any query fails
        """
        logger.info(
            "collecting_metrics",
            range=window.kind.value,
            start=window.start.isoformat(),
            end=window.end.isoformat(),
        )

        (
            activity,
            cargo,
            agri,
            payments,
            fleet_transporters,
            fleet_brokers,
            users,
            subscribers,
        ) = await gather_or_cancel(
            self._activity_metrics(window),
            self._booking_tally(Collection.CARGO_BOOKINGS, window),
            self._booking_tally(Collection.AGRI_BOOKINGS, window),
            self._payment_metrics(window),
            self.source.count(Collection.TRANSPORTERS, status=ApprovalStatus.APPROVED.value),
            self.source.count(Collection.BROKERS, status=ApprovalStatus.APPROVED.value),
            self._user_metrics(window),
            self._subscriber_metrics(),
        )

        metrics: Dict[str, Any] = {
            **activity,
            **users,
            **subscribers,
            **payments,
            "active_transporters": fleet_transporters,
            "active_brokers": fleet_brokers,
            "total_cargo_bookings": cargo.total,
            "total_agri_bookings": agri.total,
            "cargo_completion_rate": cargo.completion_rate,
            "agri_completion_rate": agri.completion_rate,
            "cargo_completion_rate_all_time": cargo.completion_rate_all_time,
            "total_cargo_bookings_all_time": cargo.total_all_time,
            "total_agri_bookings_all_time": agri.total_all_time,
            "avg_completion_time": average_completion_time(cargo.completed + agri.completed),
            "active_bookings": cargo.total + agri.total,
        }

        logger.info(
            "metrics_collected",
            range=window.kind.value,
            anchor=window.anchor.isoformat(),
            active_users=metrics["active_users"],
            active_bookings=metrics["active_bookings"],
            total_revenue=metrics["total_revenue"],
        )

        return {name: metrics[name] for name in METRIC_NAMES}

    async def _activity_metrics(self, window: Period) -> Dict[str, int]:
        records = await self.source.fetch(Collection.USER_ACTIVITY, window)
        user_ids = {record.get("user_id") for record in records} - {None}
        return {"active_users": len(user_ids)}

    async def _booking_tally(self, collection: Collection, window: Period) -> BookingTally:
        records = await self.source.fetch(collection, window)
        completed = [record for record in records if record.get("status") == BookingStatus.COMPLETED.value]

        total_all_time, completed_all_time = await gather_or_cancel(
            self.source.count(collection),
            self.source.count(collection, status=BookingStatus.COMPLETED.value),
        )

        return BookingTally(
            total=len(records),
            completed=completed,
            total_all_time=total_all_time,
            completed_all_time=completed_all_time,
        )

    async def _payment_metrics(self, window: Period) -> Dict[str, float]:
        records = await self.source.fetch(Collection.PAYMENTS, window)
        return summarize_payments(records)

    async def _user_metrics(self, window: Period) -> Dict[str, int]:
        total_users, new_users = await gather_or_cancel(
            self.source.count(Collection.USERS),
            self.source.count(Collection.USERS, window),
        )
        return {"total_users": total_users, "new_users": new_users}

    async def _subscriber_metrics(self) -> Dict[str, int]:
        total_subscribers, active_subscribers = await gather_or_cancel(
            self.source.count(Collection.SUBSCRIBERS),
            self.source.count(Collection.SUBSCRIBERS, is_active=True),
        )
        return {"total_subscribers": total_subscribers, "active_subscribers": active_subscribers}
