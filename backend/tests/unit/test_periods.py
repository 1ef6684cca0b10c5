"""Unit tests for calendar period resolution."""
from datetime import date, datetime, time

import pytest

from logistics.exceptions import InvalidPeriodError
from logistics.utils.periods import (
    END_OF_DAY,
    PeriodKind,
    parse_anchor,
    parse_period_kind,
    resolve_previous_anchor,
    resolve_previous_window,
    resolve_window,
    snapshot_key,
)


def test_day_window_covers_whole_day() -> None:
    """A day window runs from midnight to 23:59:59.999 of the anchor."""
    window = resolve_window(date(2025, 7, 22), PeriodKind.DAY)

    assert window.start == datetime(2025, 7, 22, 0, 0, 0)
    assert window.end == datetime(2025, 7, 22, 23, 59, 59, 999000)
    assert window.days == 1


def test_week_window_is_monday_to_sunday() -> None:
    """Weeks are ISO weeks starting on Monday."""
    window = resolve_window(date(2025, 7, 24), PeriodKind.WEEK)  # Thursday

    assert window.first_day == date(2025, 7, 21)
    assert window.last_day == date(2025, 7, 27)
    assert window.first_day.weekday() == 0
    assert window.days == 7


def test_week_window_on_monday_and_sunday_anchor() -> None:
    """Anchors on either edge of the week resolve to the same window."""
    monday = resolve_window(date(2025, 7, 21), "week")
    sunday = resolve_window(date(2025, 7, 27), "week")

    assert monday.start == sunday.start
    assert monday.end == sunday.end


def test_week_window_across_year_boundary() -> None:
    """A week spanning New Year keeps its Monday in the previous year."""
    window = resolve_window(date(2025, 1, 1), PeriodKind.WEEK)  # Wednesday

    assert window.first_day == date(2024, 12, 30)
    assert window.last_day == date(2025, 1, 5)


@pytest.mark.parametrize(
    "anchor, last_day",
    [
        (date(2024, 2, 10), date(2024, 2, 29)),
        (date(2025, 2, 10), date(2025, 2, 28)),
        (date(2025, 4, 30), date(2025, 4, 30)),
        (date(2025, 12, 1), date(2025, 12, 31)),
    ],
)
def test_month_window_ends_on_last_day(anchor: date, last_day: date) -> None:
    """Month windows respect month length and leap years."""
    window = resolve_window(anchor, PeriodKind.MONTH)

    assert window.first_day == anchor.replace(day=1)
    assert window.last_day == last_day
    assert window.end.time() == END_OF_DAY


def test_year_window() -> None:
    window = resolve_window(date(2024, 6, 15), PeriodKind.YEAR)

    assert window.start == datetime(2024, 1, 1)
    assert window.end == datetime.combine(date(2024, 12, 31), END_OF_DAY)
    assert window.days == 366


def test_window_contains_bounds() -> None:
    """Both ends of the window are inclusive."""
    window = resolve_window(date(2025, 7, 22), PeriodKind.DAY)

    assert window.contains(window.start)
    assert window.contains(window.end)
    assert not window.contains(datetime(2025, 7, 23, 0, 0, 0))
    assert not window.contains(datetime.combine(date(2025, 7, 21), time(23, 59, 59, 999999)))


@pytest.mark.parametrize(
    "anchor, kind, expected",
    [
        (date(2025, 7, 22), PeriodKind.DAY, date(2025, 7, 21)),
        (date(2025, 3, 1), PeriodKind.DAY, date(2025, 2, 28)),
        (date(2025, 7, 22), PeriodKind.WEEK, date(2025, 7, 15)),
        (date(2025, 3, 1), PeriodKind.MONTH, date(2025, 2, 1)),
        (date(2025, 3, 31), PeriodKind.MONTH, date(2025, 2, 28)),
        (date(2024, 3, 31), PeriodKind.MONTH, date(2024, 2, 29)),
        (date(2025, 1, 15), PeriodKind.MONTH, date(2024, 12, 15)),
        (date(2024, 2, 29), PeriodKind.YEAR, date(2023, 2, 28)),
        (date(2025, 7, 22), PeriodKind.YEAR, date(2024, 7, 22)),
    ],
)
def test_previous_anchor(anchor: date, kind: PeriodKind, expected: date) -> None:
    """Previous anchors step back one unit, clamping to the month end."""
    assert resolve_previous_anchor(anchor, kind) == expected


def test_previous_month_never_lands_in_current_month() -> None:
    """Stepping back from March 31 must resolve to February's window."""
    previous = resolve_previous_window(date(2025, 3, 31), PeriodKind.MONTH)

    assert previous.first_day == date(2025, 2, 1)
    assert previous.last_day == date(2025, 2, 28)


def test_previous_month_window_for_first_of_month() -> None:
    """2025-03-01 compares March against all of February."""
    current = resolve_window(date(2025, 3, 1), PeriodKind.MONTH)
    previous = resolve_previous_window(date(2025, 3, 1), PeriodKind.MONTH)

    assert current.first_day == date(2025, 3, 1)
    assert current.last_day == date(2025, 3, 31)
    assert previous.first_day == date(2025, 2, 1)
    assert previous.last_day == date(2025, 2, 28)


def test_previous_week_window_is_adjacent() -> None:
    current = resolve_window(date(2025, 1, 1), PeriodKind.WEEK)
    previous = resolve_previous_window(date(2025, 1, 1), PeriodKind.WEEK)

    assert (current.start - previous.start).days == 7
    assert previous.last_day == date(2024, 12, 29)


def test_parse_anchor_valid() -> None:
    assert parse_anchor("2025-07-22") == date(2025, 7, 22)
    assert parse_anchor("2024-02-29") == date(2024, 2, 29)


@pytest.mark.parametrize("value", ["2025-7-22", "22-07-2025", "2025/07/22", "", "yesterday", "2025-07-22T00:00:00"])
def test_parse_anchor_rejects_bad_format(value: str) -> None:
    with pytest.raises(InvalidPeriodError):
        parse_anchor(value)


@pytest.mark.parametrize("value", ["2025-02-29", "2025-13-01", "2025-04-31", "2025-00-10"])
def test_parse_anchor_rejects_impossible_dates(value: str) -> None:
    """Well-formed strings that name no calendar date are rejected."""
    with pytest.raises(InvalidPeriodError):
        parse_anchor(value)


def test_parse_anchor_error_is_value_error() -> None:
    with pytest.raises(ValueError):
        parse_anchor("not-a-date")


def test_parse_period_kind() -> None:
    assert parse_period_kind("month") is PeriodKind.MONTH
    assert parse_period_kind("WEEK") is PeriodKind.WEEK
    assert parse_period_kind(PeriodKind.YEAR) is PeriodKind.YEAR

    with pytest.raises(InvalidPeriodError):
        parse_period_kind("quarter")


def test_snapshot_key() -> None:
    assert snapshot_key(PeriodKind.DAY, date(2025, 7, 22)) == "day_2025-07-22"
    assert snapshot_key("month", date(2025, 3, 1)) == "month_2025-03-01"
