"""Exception types raised by the analytics engine.

Routes translate these into HTTP status codes (see api/v1/analytics.py);
divide-by-zero fallbacks in the collector and comparator are not errors and
never raise.
"""


class AnalyticsError(Exception):
    """Base class for analytics engine errors."""


class InvalidPeriodError(AnalyticsError, ValueError):
    """Anchor date, period kind or date range is malformed."""


class DataSourceError(AnalyticsError):
    """A query against the metrics data source failed."""

    def __init__(self, collection: str, message: str):
        self.collection = collection
        super().__init__(f"Query on '{collection}' failed: {message}")


class DuplicateSnapshotError(AnalyticsError):
    """A snapshot already exists for the (range, date) pair."""

    def __init__(self, snapshot_id: str):
        self.snapshot_id = snapshot_id
        super().__init__(f"Analytics snapshot {snapshot_id} already exists")


class NotFoundError(AnalyticsError, LookupError):
    """No snapshot exists for the requested (range, date) pair."""

    def __init__(self, snapshot_id: str):
        self.snapshot_id = snapshot_id
        super().__init__(f"Analytics snapshot {snapshot_id} not found")


class InvalidSnapshotFieldError(AnalyticsError, ValueError):
    """An update named a field that is not a snapshot metric."""
