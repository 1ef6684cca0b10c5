"""
Analytics snapshot model for aggregated marketplace metrics.

One row per (range, date) pair, keyed "<range>_<YYYY-MM-DD>". Stores the
period window, the metrics computed for it and their percent change against
the preceding period of the same kind.
"""

from sqlalchemy import JSON, Column, Date, DateTime, Float, Index, Integer, String
from sqlalchemy.dialects.postgresql import JSONB

from logistics.models.base import Base


class AnalyticsSnapshot(Base):
    """
    Point-in-time metrics snapshot for one reporting period.

    Created once by AnalyticsService.create_snapshot; afterwards only metric
    columns are overwritten through partial updates. comparisons and the key
    never change.
    """

    __tablename__ = "analytics_snapshots"

    id = Column(String(32), primary_key=True, comment="Composite key: <range>_<YYYY-MM-DD>")

    # Period identification
    range = Column(String(10), nullable=False, comment="Period kind: day, week, month, year")
    date = Column(Date, nullable=False, index=True, comment="Anchor date of the period")
    start_date = Column(DateTime, nullable=False)
    end_date = Column(DateTime, nullable=False)

    # Users
    active_users = Column(Integer, nullable=False, default=0)
    total_users = Column(Integer, nullable=False, default=0)
    new_users = Column(Integer, nullable=False, default=0)

    # Bookings
    total_cargo_bookings = Column(Integer, nullable=False, default=0)
    total_agri_bookings = Column(Integer, nullable=False, default=0)
    active_bookings = Column(Integer, nullable=False, default=0)
    cargo_completion_rate = Column(Float, nullable=False, default=0.0)  # Ratio 0..1
    agri_completion_rate = Column(Float, nullable=False, default=0.0)  # Ratio 0..1
    cargo_completion_rate_all_time = Column(Float, nullable=False, default=0.0)
    total_cargo_bookings_all_time = Column(Integer, nullable=False, default=0)
    total_agri_bookings_all_time = Column(Integer, nullable=False, default=0)
    avg_completion_time = Column(Float, nullable=False, default=0.0)  # Hours

    # Fleet and subscriptions
    active_transporters = Column(Integer, nullable=False, default=0)
    active_brokers = Column(Integer, nullable=False, default=0)
    total_subscribers = Column(Integer, nullable=False, default=0)
    active_subscribers = Column(Integer, nullable=False, default=0)

    # Payments
    total_revenue = Column(Float, nullable=False, default=0.0)
    failed_payments = Column(Integer, nullable=False, default=0)
    mpesa_success_rate = Column(Float, nullable=False, default=0.0)  # Percent 0..100
    airtel_success_rate = Column(Float, nullable=False, default=0.0)
    paystack_success_rate = Column(Float, nullable=False, default=0.0)
    card_success_rate = Column(Float, nullable=False, default=0.0)

    # {"<metric>_change": percent} against the previous period
    comparisons = Column(JSON().with_variant(JSONB(), "postgresql"), nullable=False, default=dict)

    __table_args__ = (
        Index("ix_analytics_snapshots_range_date", "range", "date", unique=True),
    )

    def __repr__(self) -> str:
        return (
            f"<AnalyticsSnapshot("
            f"id={self.id}, "
            f"range={self.range}, "
            f"date={self.date}"
            f")>"
        )
