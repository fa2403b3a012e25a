from __future__ import annotations

from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Callable, Iterable, Literal, TypeVar
from zoneinfo import ZoneInfo

from propgen.core.config import settings

GroupMode = Literal["day", "week", "month"]
GROUP_MODES: tuple[str, ...] = ("day", "week", "month")

T = TypeVar("T")

MONTH_NAMES: tuple[str, ...] = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)


def display_timezone() -> tzinfo:
    return ZoneInfo(settings.display_timezone)


def _local(value: datetime, tz: tzinfo) -> datetime:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(tz)


def week_start(day: date) -> date:
    """Sunday on or before ``day``."""
    return day - timedelta(days=(day.weekday() + 1) % 7)


def _short_date(day: date) -> str:
    return f"{MONTH_NAMES[day.month - 1][:3]} {day.day}"


def bucket_label(created_at: datetime, mode: str, now: datetime, tz: tzinfo) -> str:
    day = _local(created_at, tz).date()
    today = _local(now, tz).date()

    if mode == "day":
        if day == today:
            return "Today"
        return f"{_short_date(day)}, {day.year}"

    if mode == "week":
        start = week_start(day)
        if start == week_start(today):
            return "This Week"
        return f"Week of {_short_date(start)}"

    if mode == "month":
        if (day.year, day.month) == (today.year, today.month):
            return "This Month"
        return f"{MONTH_NAMES[day.month - 1]} {day.year}"

    raise ValueError(f"Unknown grouping mode '{mode}'. Expected one of: {', '.join(GROUP_MODES)}")


def group_records(
    records: Iterable[T],
    mode: str,
    *,
    now: datetime | None = None,
    tz: tzinfo | None = None,
    key: Callable[[T], datetime] = lambda record: record.created_at,  # type: ignore[attr-defined]
) -> dict[str, list[T]]:
    """Bucket records by calendar period, keeping input and first-seen order.

    Callers pass records newest-first; nothing is re-sorted here.
    """
    if mode not in GROUP_MODES:
        raise ValueError(f"Unknown grouping mode '{mode}'. Expected one of: {', '.join(GROUP_MODES)}")
    tz = tz or display_timezone()
    now = now or datetime.now(tz)

    groups: dict[str, list[T]] = {}
    for record in records:
        label = bucket_label(key(record), mode, now, tz)
        groups.setdefault(label, []).append(record)
    return groups
