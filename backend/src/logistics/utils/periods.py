"""Calendar period resolution for analytics snapshots.

A snapshot covers one calendar unit (day, ISO week, month or year) that
contains its anchor date. Windows are inclusive on both ends and close at
23:59:59.999 of the unit's last day.

Previous-period anchors use clamped calendar subtraction: stepping one month
back from March 31 lands on the last day of February, never on a date in
March.
"""
import calendar
import enum
import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta

from logistics.exceptions import InvalidPeriodError

ANCHOR_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")

# Windows close on the last millisecond of the unit
END_OF_DAY = time(23, 59, 59, 999000)


class PeriodKind(str, enum.Enum):
    """Granularity of an analytics snapshot."""

    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


@dataclass(frozen=True)
class Period:
    """Inclusive [start, end] window for one calendar unit."""

    kind: PeriodKind
    anchor: date
    start: datetime
    end: datetime

    @property
    def first_day(self) -> date:
        return self.start.date()

    @property
    def last_day(self) -> date:
        return self.end.date()

    @property
    def days(self) -> int:
        """Number of calendar days covered by the window."""
        return (self.last_day - self.first_day).days + 1

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment <= self.end


def parse_anchor(value: str) -> date:
    """
    Parse an anchor date in strict YYYY-MM-DD form.

    Raises:
        InvalidPeriodError: If the value is not formatted as YYYY-MM-DD or
            does not name a real calendar date
    """
    if not isinstance(value, str) or not ANCHOR_PATTERN.match(value):
        raise InvalidPeriodError(f"Invalid date format: {value!r}. Use YYYY-MM-DD")
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise InvalidPeriodError(f"Invalid calendar date: {value}") from exc


def parse_period_kind(value) -> PeriodKind:
    """Coerce a string to a PeriodKind, raising InvalidPeriodError if unknown."""
    if isinstance(value, PeriodKind):
        return value
    try:
        return PeriodKind(str(value).lower())
    except ValueError as exc:
        allowed = ", ".join(kind.value for kind in PeriodKind)
        raise InvalidPeriodError(f"Invalid range: {value!r}. Use one of: {allowed}") from exc


def _last_day_of_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def _shift_months(anchor: date, months: int) -> date:
    """Move by whole months, clamping the day to the target month's length."""
    year = anchor.year + (anchor.month - 1 + months) // 12
    month = (anchor.month - 1 + months) % 12 + 1
    day = min(anchor.day, _last_day_of_month(year, month))
    return date(year, month, day)


def _bounds(kind: PeriodKind, anchor: date) -> tuple[date, date]:
    if kind is PeriodKind.DAY:
        return anchor, anchor
    if kind is PeriodKind.WEEK:
        monday = anchor - timedelta(days=anchor.weekday())
        return monday, monday + timedelta(days=6)
    if kind is PeriodKind.MONTH:
        return (
            anchor.replace(day=1),
            anchor.replace(day=_last_day_of_month(anchor.year, anchor.month)),
        )
    return date(anchor.year, 1, 1), date(anchor.year, 12, 31)


def resolve_window(anchor: date, kind) -> Period:
    """
    Resolve the calendar window containing the anchor.

    Args:
        anchor: Reference date
        kind: Period kind (PeriodKind or its string value)

    Returns:
        Period whose start is midnight of the unit's first day and whose end
        is 23:59:59.999 of its last day
    """
    kind = parse_period_kind(kind)
    first_day, last_day = _bounds(kind, anchor)
    return Period(
        kind=kind,
        anchor=anchor,
        start=datetime.combine(first_day, time.min),
        end=datetime.combine(last_day, END_OF_DAY),
    )


def resolve_previous_anchor(anchor: date, kind) -> date:
    """
    Step the anchor back by exactly one unit of the period kind.

    Month and year steps clamp to the end of the target month, so
    2025-03-31 -> 2025-02-28 and 2024-02-29 -> 2023-02-28.
    """
    kind = parse_period_kind(kind)
    if kind is PeriodKind.DAY:
        return anchor - timedelta(days=1)
    if kind is PeriodKind.WEEK:
        return anchor - timedelta(days=7)
    if kind is PeriodKind.MONTH:
        return _shift_months(anchor, -1)
    return _shift_months(anchor, -12)


def resolve_previous_window(anchor: date, kind) -> Period:
    """Window of the period immediately preceding the one containing anchor."""
    return resolve_window(resolve_previous_anchor(anchor, kind), kind)


def snapshot_key(kind, anchor: date) -> str:
    """Document key of a snapshot, e.g. ``day_2025-07-22``."""
    return f"{parse_period_kind(kind).value}_{anchor.isoformat()}"
