"""In-memory MetricsDataSource implementations for collector and service tests."""
import asyncio
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from logistics.exceptions import DataSourceError
from logistics.services.metrics_source import Collection, Record
from logistics.utils.periods import Period


class InMemoryMetricsDataSource:
    """Serves records from dicts, applying windows and equality filters like the SQL source."""

    def __init__(self, records: Optional[Mapping[Collection, Iterable[Record]]] = None):
        self.records: Dict[Collection, List[Record]] = {collection: [] for collection in Collection}
        for collection, rows in (records or {}).items():
            self.records[collection].extend(rows)
        self.calls: List[Tuple[str, Collection, Optional[Period], Dict[str, Any]]] = []

    def add(self, collection: Collection, *rows: Record) -> None:
        self.records[collection].extend(rows)

    def _matches(self, collection: Collection, record: Record, window: Optional[Period], equals: Dict[str, Any]) -> bool:
        if window is not None:
            moment = record.get(collection.timestamp_field)
            if moment is None or not window.contains(moment):
                return False
        return all(record.get(field) == value for field, value in equals.items())

    async def fetch(self, collection: Collection, window: Optional[Period] = None, **equals: Any) -> List[Record]:
        self.calls.append(("fetch", collection, window, equals))
        return [dict(record) for record in self.records[collection] if self._matches(collection, record, window, equals)]

    async def count(self, collection: Collection, window: Optional[Period] = None, **equals: Any) -> int:
        self.calls.append(("count", collection, window, equals))
        return sum(1 for record in self.records[collection] if self._matches(collection, record, window, equals))


class FailingDataSource(InMemoryMetricsDataSource):
    """Raises DataSourceError for every query against one collection."""

    def __init__(self, failing: Collection, records: Optional[Mapping[Collection, Iterable[Record]]] = None):
        super().__init__(records)
        self.failing = failing

    async def fetch(self, collection: Collection, window: Optional[Period] = None, **equals: Any) -> List[Record]:
        if collection is self.failing:
            raise DataSourceError(collection.value, "connection reset by peer")
        return await super().fetch(collection, window, **equals)

    async def count(self, collection: Collection, window: Optional[Period] = None, **equals: Any) -> int:
        if collection is self.failing:
            raise DataSourceError(collection.value, "connection reset by peer")
        return await super().count(collection, window, **equals)


class StalledCountSource(FailingDataSource):
    """Counts never finish on their own; records how many were cancelled."""

    def __init__(self, failing: Collection, records: Optional[Mapping[Collection, Iterable[Record]]] = None):
        super().__init__(failing, records)
        self.started = 0
        self.cancelled = 0

    async def count(self, collection: Collection, window: Optional[Period] = None, **equals: Any) -> int:
        self.started += 1
        try:
            await asyncio.Event().wait()
        except asyncio.CancelledError:
            self.cancelled += 1
            raise
        return 0
