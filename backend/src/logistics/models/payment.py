"""Payment model for booking and subscription payments."""
import enum

from sqlalchemy import Column, Numeric, String

from logistics.models.base import Base


class PaymentStatus(str, enum.Enum):
    """Payment transaction status."""

    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"


class PaymentMethod(str, enum.Enum):
    """Payment channels tracked by analytics."""

    MPESA = "mpesa"
    AIRTEL = "airtel"
    PAYSTACK = "paystack"
    CARD = "card"


class Payment(Base):
    """
    Payment attempt through one of the supported channels.

    Method and status are nullable: gateway callbacks occasionally write a
    record before either is known, and analytics skips such records.
    """

    __tablename__ = "payments"

    user_id = Column(String, nullable=True, index=True)
    booking_id = Column(String, nullable=True, index=True)
    amount = Column(Numeric(14, 2), nullable=True)
    currency = Column(String(3), nullable=False, default="KES")
    method = Column(String(32), nullable=True, index=True)
    status = Column(String(32), nullable=True, index=True)
    reference = Column(String, nullable=True, unique=True)

    def __repr__(self) -> str:
        """String representation."""
        return f"<Payment(id={self.id}, method={self.method}, status={self.status}, amount={self.amount})>"
