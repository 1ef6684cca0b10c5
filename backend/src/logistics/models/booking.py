"""Cargo and agricultural booking records.

Both booking domains are written by the booking controllers and only read
here. Status is stored as a plain string so records with statuses outside
BookingStatus (legacy or future values) still load.
"""
import enum

from sqlalchemy import Column, DateTime, Numeric, String

from logistics.models.base import Base


class BookingStatus(str, enum.Enum):
    """Booking lifecycle status."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    IN_TRANSIT = "in_transit"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class BookingMixin:
    """Columns shared by both booking collections."""

    user_id = Column(String, nullable=True, index=True)  # Shipper or business account
    transporter_id = Column(String, nullable=True, index=True)
    status = Column(String(32), nullable=False, default=BookingStatus.PENDING.value, index=True)
    from_location = Column(String, nullable=True)
    to_location = Column(String, nullable=True)
    cost = Column(Numeric(14, 2), nullable=True)
    completed_at = Column(DateTime, nullable=True)


class CargoBooking(BookingMixin, Base):
    """General cargo booking."""

    __tablename__ = "cargo_bookings"

    cargo_type = Column(String, nullable=True)

    def __repr__(self) -> str:
        return f"<CargoBooking(id={self.id}, status={self.status})>"


class AgriBooking(BookingMixin, Base):
    """Agricultural produce booking."""

    __tablename__ = "agri_bookings"

    produce_type = Column(String, nullable=True)

    def __repr__(self) -> str:
        return f"<AgriBooking(id={self.id}, status={self.status})>"
