"""Marketplace account records: users, transporters, brokers and subscribers."""
import enum
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, String

from logistics.models.base import Base


class ApprovalStatus(str, enum.Enum):
    """Vetting status of transporters and brokers."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    SUSPENDED = "suspended"


class User(Base):
    """Registered marketplace user (shipper, transporter, broker or business)."""

    __tablename__ = "users"

    email = Column(String, nullable=True, index=True)
    phone = Column(String, nullable=True)
    name = Column(String, nullable=True)
    role = Column(String(32), nullable=False, default="shipper")

    def __repr__(self) -> str:
        return f"<User(id={self.id}, role={self.role})>"


class Transporter(Base):
    """Transporter profile awaiting or holding approval."""

    __tablename__ = "transporters"

    user_id = Column(String, nullable=True, index=True)
    name = Column(String, nullable=True)
    status = Column(String(32), nullable=False, default=ApprovalStatus.PENDING.value, index=True)

    def __repr__(self) -> str:
        return f"<Transporter(id={self.id}, status={self.status})>"


class Broker(Base):
    """Broker profile awaiting or holding approval."""

    __tablename__ = "brokers"

    user_id = Column(String, nullable=True, index=True)
    name = Column(String, nullable=True)
    status = Column(String(32), nullable=False, default=ApprovalStatus.PENDING.value, index=True)

    def __repr__(self) -> str:
        return f"<Broker(id={self.id}, status={self.status})>"


class Subscriber(Base):
    """Subscription holder; is_active tracks whether the plan is current."""

    __tablename__ = "subscribers"

    user_id = Column(String, nullable=True, index=True)
    plan_id = Column(String, nullable=True)
    is_active = Column(Boolean, nullable=False, default=False, index=True)
    end_date = Column(DateTime, nullable=True)

    def __repr__(self) -> str:
        return f"<Subscriber(id={self.id}, is_active={self.is_active})>"


class UserActivity(Base):
    """One activity event; analytics counts distinct user_id per window."""

    __tablename__ = "user_activity"

    user_id = Column(String, nullable=True, index=True)
    action = Column(String, nullable=True)
    timestamp = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)

    def __repr__(self) -> str:
        return f"<UserActivity(user_id={self.user_id}, action={self.action})>"
