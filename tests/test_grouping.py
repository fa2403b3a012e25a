import locale
import random
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from zoneinfo import ZoneInfo

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from propgen.proposals.grouping import GROUP_MODES, group_records, week_start  # noqa: E402
from propgen.store.models import JobRecord  # noqa: E402

UTC = timezone.utc
NOW = datetime(2025, 3, 12, 15, 0, tzinfo=UTC)  # a Wednesday


def _record(ident: str, created_at: datetime) -> JobRecord:
    return JobRecord(
        id=ident,
        user_id="user-1",
        created_at=created_at,
        job_description=f"Job {ident}",
        proposal_text="Proposal",
        match_score=None,
    )


RECORDS = [
    _record("today", datetime(2025, 3, 12, 10, 0, tzinfo=UTC)),
    _record("sunday", datetime(2025, 3, 9, 8, 0, tzinfo=UTC)),
    _record("saturday", datetime(2025, 3, 8, 23, 0, tzinfo=UTC)),
    _record("february", datetime(2025, 2, 20, 12, 0, tzinfo=UTC)),
    _record("new-years-eve", datetime(2024, 12, 31, 9, 0, tzinfo=UTC)),
]


def _labels(groups: dict) -> dict[str, list[str]]:
    return {label: [r.id for r in items] for label, items in groups.items()}


def test_day_mode_labels() -> None:
    groups = group_records(RECORDS, "day", now=NOW, tz=UTC)

    assert _labels(groups) == {
        "Today": ["today"],
        "Mar 9, 2025": ["sunday"],
        "Mar 8, 2025": ["saturday"],
        "Feb 20, 2025": ["february"],
        "Dec 31, 2024": ["new-years-eve"],
    }


def test_week_mode_uses_sunday_week_start() -> None:
    groups = group_records(RECORDS, "week", now=NOW, tz=UTC)

    assert _labels(groups) == {
        "This Week": ["today", "sunday"],
        "Week of Mar 2": ["saturday"],
        "Week of Feb 16": ["february"],
        "Week of Dec 29": ["new-years-eve"],
    }


def test_month_mode_labels() -> None:
    groups = group_records(RECORDS, "month", now=NOW, tz=UTC)

    assert _labels(groups) == {
        "This Month": ["today", "sunday", "saturday"],
        "February 2025": ["february"],
        "December 2024": ["new-years-eve"],
    }


def test_buckets_follow_first_seen_order_without_resorting() -> None:
    shuffled = [RECORDS[3], RECORDS[0], RECORDS[4], RECORDS[1]]
    groups = group_records(shuffled, "month", now=NOW, tz=UTC)

    assert list(groups) == ["February 2025", "This Month", "December 2024"]
    assert [r.id for r in groups["This Month"]] == ["today", "sunday"]


def test_calendar_day_is_taken_in_display_timezone() -> None:
    late_evening_new_york = _record("ny", datetime(2025, 3, 12, 2, 0, tzinfo=UTC))

    groups = group_records([late_evening_new_york], "day", now=NOW, tz=ZoneInfo("America/New_York"))

    assert list(groups) == ["Mar 11, 2025"]


def test_naive_timestamps_are_treated_as_utc() -> None:
    naive = _record("naive", datetime(2025, 3, 12, 1, 0))

    groups = group_records([naive], "day", now=NOW, tz=UTC)

    assert list(groups) == ["Today"]


def test_week_start() -> None:
    assert week_start(datetime(2025, 3, 9).date()) == datetime(2025, 3, 9).date()
    assert week_start(datetime(2025, 3, 15).date()) == datetime(2025, 3, 9).date()


def test_unknown_mode_rejected() -> None:
    with pytest.raises(ValueError):
        group_records(RECORDS, "year", now=NOW, tz=UTC)


def test_empty_input_gives_no_buckets() -> None:
    assert group_records([], "day", now=NOW, tz=UTC) == {}


@pytest.mark.parametrize("mode", GROUP_MODES)
def test_every_record_lands_in_exactly_one_bucket(mode: str) -> None:
    rng = random.Random(7)
    records = [
        _record(f"r{i}", NOW - timedelta(hours=rng.randint(0, 24 * 400)))
        for i in range(200)
    ]
    records.sort(key=lambda r: r.created_at, reverse=True)

    groups = group_records(records, mode, now=NOW, tz=UTC)
    flattened = [r for items in groups.values() for r in items]

    assert len(flattened) == len(records)
    assert sorted(r.id for r in flattened) == sorted(r.id for r in records)
    position = {r.id: index for index, r in enumerate(records)}
    for items in groups.values():
        indices = [position[r.id] for r in items]
        assert indices == sorted(indices)


@pytest.mark.parametrize(
    ("month", "day_label", "month_label"),
    [(1, "Jan 15, 2024", "January 2024"), (5, "May 15, 2024", "May 2024"), (9, "Sep 15, 2024", "September 2024")],
)
def test_labels_use_english_month_names(month: int, day_label: str, month_label: str) -> None:
    record = _record("old", datetime(2024, month, 15, 12, 0, tzinfo=UTC))

    assert list(group_records([record], "day", now=NOW, tz=UTC)) == [day_label]
    assert list(group_records([record], "month", now=NOW, tz=UTC)) == [month_label]


def test_labels_ignore_process_locale() -> None:
    previous = locale.setlocale(locale.LC_TIME)
    try:
        locale.setlocale(locale.LC_TIME, "de_DE.UTF-8")
    except locale.Error:
        pytest.skip("de_DE.UTF-8 locale not installed")
    try:
        groups = group_records(RECORDS, "month", now=NOW, tz=UTC)
    finally:
        locale.setlocale(locale.LC_TIME, previous)

    assert list(groups) == ["This Month", "February 2025", "December 2024"]
