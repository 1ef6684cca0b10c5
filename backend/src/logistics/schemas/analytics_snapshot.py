"""Pydantic schemas for AnalyticsSnapshot model.

Field names are snake_case in Python and camelCase on the wire
(``total_cargo_bookings`` <-> ``totalCargoBookings``).
"""
from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer
from pydantic.alias_generators import to_camel

from logistics.utils.periods import PeriodKind


class CamelModel(BaseModel):
    """Base schema serializing field names as camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SnapshotMetrics(CamelModel):
    """Metric fields of a snapshot."""

    active_users: int = Field(..., ge=0, description="Distinct users with activity in the period")
    active_brokers: int = Field(..., ge=0, description="Approved brokers (current state)")
    total_cargo_bookings: int = Field(..., ge=0, description="Cargo bookings created in the period")
    total_agri_bookings: int = Field(..., ge=0, description="Agri bookings created in the period")
    cargo_completion_rate: float = Field(..., ge=0, le=1, description="Completed / total cargo bookings (0..1)")
    agri_completion_rate: float = Field(..., ge=0, le=1, description="Completed / total agri bookings (0..1)")
    cargo_completion_rate_all_time: float = Field(..., ge=0, le=1, description="Lifetime cargo completion ratio")
    avg_completion_time: float = Field(..., ge=0, description="Mean booking completion time in hours")
    total_revenue: float = Field(..., ge=0, description="Sum of successful payment amounts")
    failed_payments: int = Field(..., ge=0, description="Failed payments in the period")
    total_users: int = Field(..., ge=0, description="All registered users")
    active_transporters: int = Field(..., ge=0, description="Approved transporters (current state)")
    active_bookings: int = Field(..., ge=0, description="Cargo plus agri bookings in the period")
    total_subscribers: int = Field(..., ge=0, description="All subscribers")
    active_subscribers: int = Field(..., ge=0, description="Subscribers with an active plan")
    new_users: int = Field(..., ge=0, description="Users registered in the period")
    mpesa_success_rate: float = Field(..., ge=0, le=100, description="M-Pesa success percentage")
    airtel_success_rate: float = Field(..., ge=0, le=100, description="Airtel Money success percentage")
    paystack_success_rate: float = Field(..., ge=0, le=100, description="Paystack success percentage")
    card_success_rate: float = Field(..., ge=0, le=100, description="Card success percentage")
    total_cargo_bookings_all_time: int = Field(..., ge=0, description="Lifetime cargo bookings")
    total_agri_bookings_all_time: int = Field(..., ge=0, description="Lifetime agri bookings")


class AnalyticsSnapshot(SnapshotMetrics):
    """Schema for returning analytics snapshot data."""

    id: str = Field(..., description="Snapshot key: <range>_<YYYY-MM-DD>")
    period: PeriodKind = Field(..., alias="range", description="Period kind")
    anchor: date = Field(..., alias="date", description="Anchor date of the period")
    start_date: datetime
    end_date: datetime
    comparisons: dict[str, float] = Field(
        default_factory=dict,
        description="Percent change per metric against the previous period",
    )
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)

    @field_serializer("comparisons")
    def serialize_comparisons(self, comparisons: dict[str, float]) -> dict[str, float]:
        # Keys already in camelCase (re-validated responses) pass through
        return {to_camel(name) if "_" in name else name: value for name, value in comparisons.items()}


class AnalyticsSnapshotUpdate(CamelModel):
    """
    Allow-listed fields for a partial snapshot update.

    Fields outside the list are ignored; at least one field must be given.
    """

    active_users: int | None = Field(default=None, ge=0)
    total_revenue: float | None = Field(default=None, ge=0)
    failed_payments: int | None = Field(default=None, ge=0)
    active_transporters: int | None = Field(default=None, ge=0)
    active_bookings: int | None = Field(default=None, ge=0)
    active_subscribers: int | None = Field(default=None, ge=0)
    new_users: int | None = Field(default=None, ge=0)
    mpesa_success_rate: float | None = Field(default=None, ge=0, le=100)
    airtel_success_rate: float | None = Field(default=None, ge=0, le=100)
    paystack_success_rate: float | None = Field(default=None, ge=0, le=100)
    card_success_rate: float | None = Field(default=None, ge=0, le=100)
    avg_completion_time: float | None = Field(default=None, ge=0)

    def changes(self) -> dict[str, Any]:
        """Fields explicitly provided with a value, keyed by snake_case name."""
        return self.model_dump(exclude_unset=True, exclude_none=True)


class AnalyticsResponse(BaseModel):
    """Envelope for a single snapshot."""

    success: bool = True
    message: str
    data: AnalyticsSnapshot


class AnalyticsRangeResponse(BaseModel):
    """Envelope for a list of snapshots ordered by anchor date."""

    success: bool = True
    message: str
    data: list[AnalyticsSnapshot]


class AnalyticsUpdateResponse(BaseModel):
    """Envelope for the fields applied by a partial update."""

    success: bool = True
    message: str
    data: dict[str, Any]
