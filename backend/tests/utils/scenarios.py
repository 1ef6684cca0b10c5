"""Seed data for a known marketplace day, shared by unit and integration tests.

On the anchor day (2025-07-22):
- 10 cargo bookings, 6 completed after 2, 4, 6, 8, 10 and 12 hours
- 4 agri bookings, 2 completed after 3 and 5 hours
- activity from 3 distinct users (plus one anonymous event)
- 4 new users out of 10
- payments: mpesa 3 success / 2 failed, airtel 1 success, paystack 1 failed,
  a "bank" payment counted as revenue only, and a record without a method

On the previous day: 5 cargo bookings (2 completed) and activity from 1 user,
unless the previous day is left empty.
Transporters, brokers and subscribers are current-state counts.
"""
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Dict, List

from logistics.services.metrics_source import Collection, Record

from utils.factories import (
    AgriBookingFactory,
    BrokerFactory,
    CargoBookingFactory,
    PaymentFactory,
    SubscriberFactory,
    TransporterFactory,
    UserActivityFactory,
    UserFactory,
)

ANCHOR = date(2025, 7, 22)

EXPECTED_DAY_METRICS = {
    "active_users": 3,
    "active_brokers": 2,
    "total_cargo_bookings": 10,
    "total_agri_bookings": 4,
    "cargo_completion_rate": 0.6,
    "agri_completion_rate": 0.5,
    "cargo_completion_rate_all_time": 8 / 15,
    "avg_completion_time": 6.25,
    "total_revenue": 3700.0,
    "failed_payments": 3,
    "total_users": 10,
    "active_transporters": 3,
    "active_bookings": 14,
    "total_subscribers": 5,
    "active_subscribers": 3,
    "new_users": 4,
    "mpesa_success_rate": 60.0,
    "airtel_success_rate": 100.0,
    "paystack_success_rate": 0.0,
    "card_success_rate": 0.0,
    "total_cargo_bookings_all_time": 15,
    "total_agri_bookings_all_time": 4,
}


def at(day: date, hour: int, minute: int = 0) -> datetime:
    return datetime.combine(day, time(hour, minute))


def _payment(day: date, method, status, amount) -> Record:
    return PaymentFactory.create({
        "created_at": at(day, 12),
        "updated_at": at(day, 12),
        "method": method,
        "status": status,
        "amount": Decimal(str(amount)) if amount is not None else None,
    })


def marketplace_day(anchor: date = ANCHOR, previous_day: bool = True) -> Dict[Collection, List[Record]]:
    """Records for the anchor day and, unless previous_day is False, the day before it."""
    previous = anchor - timedelta(days=1)

    cargo = []
    for i, hours in enumerate((2, 4, 6, 8, 10, 12)):
        cargo.append(CargoBookingFactory.completed(at(anchor, 1 + i), hours))
    for i in range(4):
        created = at(anchor, 8 + i)
        cargo.append(CargoBookingFactory.create({"created_at": created, "updated_at": created, "status": "in_transit"}))
    for i in range(5 if previous_day else 0):
        created = at(previous, 9 + i)
        if i < 2:
            cargo.append(CargoBookingFactory.completed(created, 1))
        else:
            cargo.append(CargoBookingFactory.create({"created_at": created, "updated_at": created}))

    agri = [
        AgriBookingFactory.completed(at(anchor, 6), 3),
        AgriBookingFactory.completed(at(anchor, 7), 5),
        AgriBookingFactory.create({"created_at": at(anchor, 14), "updated_at": at(anchor, 14), "status": "cancelled"}),
        AgriBookingFactory.create({"created_at": at(anchor, 15), "updated_at": at(anchor, 15)}),
    ]

    activity = [
        UserActivityFactory.create({"user_id": "user-1", "timestamp": at(anchor, 8)}),
        UserActivityFactory.create({"user_id": "user-1", "timestamp": at(anchor, 17)}),
        UserActivityFactory.create({"user_id": "user-2", "timestamp": at(anchor, 9)}),
        UserActivityFactory.create({"user_id": "user-3", "timestamp": at(anchor, 23, 59)}),
        UserActivityFactory.create({"user_id": None, "timestamp": at(anchor, 10)}),
    ]
    if previous_day:
        activity.append(UserActivityFactory.create({"user_id": "user-1", "timestamp": at(previous, 10)}))

    users = [
        UserFactory.create({"created_at": at(anchor, 10 + i), "updated_at": at(anchor, 10 + i)})
        for i in range(4)
    ] + [
        UserFactory.create({"created_at": at(date(2025, 7, 1), 9), "updated_at": at(date(2025, 7, 1), 9)})
        for _ in range(6)
    ]

    payments = [
        *[_payment(anchor, "mpesa", "success", 1000) for _ in range(3)],
        *[_payment(anchor, "mpesa", "failed", 1000) for _ in range(2)],
        _payment(anchor, "airtel", "success", 500),
        _payment(anchor, "paystack", "failed", 250),
        _payment(anchor, "bank", "success", 200),
        _payment(anchor, None, "success", 700),
    ]

    return {
        Collection.CARGO_BOOKINGS: cargo,
        Collection.AGRI_BOOKINGS: agri,
        Collection.USER_ACTIVITY: activity,
        Collection.USERS: users,
        Collection.PAYMENTS: payments,
        Collection.TRANSPORTERS: [TransporterFactory.create() for _ in range(3)]
        + [TransporterFactory.create({"status": "pending"})],
        Collection.BROKERS: [BrokerFactory.create() for _ in range(2)] + [BrokerFactory.create({"status": "rejected"})],
        Collection.SUBSCRIBERS: [SubscriberFactory.create() for _ in range(3)]
        + [SubscriberFactory.create({"is_active": False}) for _ in range(2)],
    }
