"""Business metrics for Prometheus monitoring."""
from prometheus_client import Counter, Histogram

# Snapshot lifecycle
analytics_snapshots_created_total = Counter(
    "analytics_snapshots_created_total",
    "Total analytics snapshots created",
    labelnames=["range"],  # day, week, month, year
)

analytics_snapshot_failures_total = Counter(
    "analytics_snapshot_failures_total",
    "Total analytics snapshot creations that failed",
    labelnames=["range", "reason"],  # reason: duplicate, data_source
)

analytics_snapshot_updates_total = Counter(
    "analytics_snapshot_updates_total",
    "Total partial updates applied to analytics snapshots",
)

# Aggregation cost (both windows plus comparison)
analytics_aggregation_duration_seconds = Histogram(
    "analytics_aggregation_duration_seconds",
    "Time spent aggregating metrics for one snapshot",
    labelnames=["range"],
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0],
)
