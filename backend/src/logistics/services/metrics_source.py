"""
Metrics data source: read-only query interface over the record collections.

The analytics engine only needs two operations per collection: fetch the
matching records, or count them. Both accept an optional inclusive time
window (applied to the collection's timestamp field) and field equality
filters. Collections are not consistency-linked; each query observes the
store as of its own execution.
"""

import enum
from typing import Any, Dict, List, Optional, Protocol

import structlog
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from logistics.exceptions import DataSourceError
from logistics.models.account import Broker, Subscriber, Transporter, User, UserActivity
from logistics.models.booking import AgriBooking, CargoBooking
from logistics.models.payment import Payment
from logistics.utils.periods import Period

logger = structlog.get_logger(__name__)

Record = Dict[str, Any]


class Collection(str, enum.Enum):
    """Record collections read by the metrics collector."""

    USER_ACTIVITY = "user_activity"
    CARGO_BOOKINGS = "cargo_bookings"
    AGRI_BOOKINGS = "agri_bookings"
    PAYMENTS = "payments"
    TRANSPORTERS = "transporters"
    BROKERS = "brokers"
    USERS = "users"
    SUBSCRIBERS = "subscribers"

    @property
    def timestamp_field(self) -> str:
        """Field a time window is applied to."""
        if self is Collection.USER_ACTIVITY:
            return "timestamp"
        return "created_at"


class MetricsDataSource(Protocol):
    """Query interface the metrics collector depends on."""

    async def fetch(self, collection: Collection, window: Optional[Period] = None, **equals: Any) -> List[Record]:
        """Return records of the collection matching the window and equality filters."""
        ...

    async def count(self, collection: Collection, window: Optional[Period] = None, **equals: Any) -> int:
        """Return the number of records matching the window and equality filters."""
        ...


COLLECTION_MODELS = {
    Collection.USER_ACTIVITY: UserActivity,
    Collection.CARGO_BOOKINGS: CargoBooking,
    Collection.AGRI_BOOKINGS: AgriBooking,
    Collection.PAYMENTS: Payment,
    Collection.TRANSPORTERS: Transporter,
    Collection.BROKERS: Broker,
    Collection.USERS: User,
    Collection.SUBSCRIBERS: Subscriber,
}


class SqlMetricsDataSource:
    """
    MetricsDataSource backed by the service database.

    Every query runs in its own short-lived session taken from the factory,
    so the collector may issue queries concurrently without sharing an
    AsyncSession between tasks.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        """
        Initialize data source.

        Args:
            session_factory: Factory producing read sessions
        """
        self.session_factory = session_factory

    def _where_clauses(self, collection: Collection, window: Optional[Period], equals: Dict[str, Any]) -> list:
        model = COLLECTION_MODELS[collection]
        clauses = []

        if window is not None:
            column = getattr(model, collection.timestamp_field)
            clauses.append(column.between(window.start, window.end))

        for field, value in equals.items():
            column = getattr(model, field, None)
            if column is None:
                raise DataSourceError(collection.value, f"unknown field '{field}'")
            clauses.append(column == value)

        return clauses

    def _query_failed(self, collection: Collection, error: SQLAlchemyError) -> DataSourceError:
        logger.error(
            "metrics_query_failed",
            collection=collection.value,
            error_type=type(error).__name__,
            error=str(error),
        )
        return DataSourceError(collection.value, str(error))

    async def fetch(self, collection: Collection, window: Optional[Period] = None, **equals: Any) -> List[Record]:
        model = COLLECTION_MODELS[collection]
        stmt = select(model).where(*self._where_clauses(collection, window, equals))
        columns = [attr.key for attr in model.__mapper__.column_attrs]

        try:
            async with self.session_factory() as session:
                result = await session.execute(stmt)
                return [{key: getattr(row, key) for key in columns} for row in result.scalars().all()]
        except SQLAlchemyError as e:
            raise self._query_failed(collection, e) from e

    async def count(self, collection: Collection, window: Optional[Period] = None, **equals: Any) -> int:
        model = COLLECTION_MODELS[collection]
        stmt = select(func.count()).select_from(model).where(*self._where_clauses(collection, window, equals))

        try:
            async with self.session_factory() as session:
                result = await session.execute(stmt)
                return result.scalar() or 0
        except SQLAlchemyError as e:
            raise self._query_failed(collection, e) from e
