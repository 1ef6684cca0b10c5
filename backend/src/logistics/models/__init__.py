"""SQLAlchemy ORM models for the logistics analytics service."""
# Import all models here to ensure they are registered with Alembic

from logistics.models.base import Base
from logistics.models.account import ApprovalStatus, Broker, Subscriber, Transporter, User, UserActivity
from logistics.models.booking import AgriBooking, BookingStatus, CargoBooking
from logistics.models.payment import Payment, PaymentMethod, PaymentStatus
from logistics.models.analytics_snapshot import AnalyticsSnapshot

__all__ = [
    "Base",
    "ApprovalStatus",
    "Broker",
    "Subscriber",
    "Transporter",
    "User",
    "UserActivity",
    "AgriBooking",
    "BookingStatus",
    "CargoBooking",
    "Payment",
    "PaymentMethod",
    "PaymentStatus",
    "AnalyticsSnapshot",
]
