"""Timezone shift — threshold, truncated hours, schedule ramp, labels."""

from datetime import timedelta

import pytest

from somni.core.errors import InvalidArgumentError
from somni.core.timezone_shift import (
    build_adjustment_schedule,
    compute_timezone_adjustment,
    format_utc_offset,
    latest_completed_offset,
)

from tests.fakes import FIXED_INSTANT, completed, make_session


def _minutes(schedule):
    return [int(step / timedelta(minutes=1)) for step in schedule]


# ─── build_adjustment_schedule ───────────────────────────────────

def test_schedule_for_zero_hours_is_empty():
    assert build_adjustment_schedule(0) == []


def test_schedule_for_two_hours_ramps_in_half_hours():
    assert _minutes(build_adjustment_schedule(2)) == [30, 60, 90, 120]


def test_schedule_for_three_hours_has_six_steps_ending_at_full_shift():
    schedule = build_adjustment_schedule(3)
    assert len(schedule) == 6
    assert schedule[-1] == timedelta(minutes=180)


def test_schedule_rejects_negative_hours():
    with pytest.raises(InvalidArgumentError):
        build_adjustment_schedule(-1)


# ─── compute_timezone_adjustment ─────────────────────────────────

def test_no_history_returns_none():
    assert compute_timezone_adjustment([], 180) is None


def test_only_open_sessions_returns_none():
    assert compute_timezone_adjustment([make_session(timezone_offset_minutes=0)], 300) is None


def test_one_hour_change_is_not_meaningful():
    assert compute_timezone_adjustment([completed(60, timezone_offset_minutes=0)], 60) is None
    assert compute_timezone_adjustment([completed(60, timezone_offset_minutes=0)], -60) is None


def test_three_hour_eastward_change():
    adj = compute_timezone_adjustment([completed(60, timezone_offset_minutes=0)], 180)
    assert adj is not None
    assert adj.hours_difference == 3
    assert adj.estimated_days == 6
    assert len(adj.adjustment_schedule) == 6
    assert adj.old_timezone == "UTC+0"
    assert adj.new_timezone == "UTC+3"


def test_westward_change_keeps_sign_and_truncates():
    adj = compute_timezone_adjustment([completed(60, timezone_offset_minutes=60)], -150)
    # -210 minutes -> -3 hours (truncated toward zero, not floored to -4)
    assert adj.hours_difference == -3
    assert adj.estimated_days == 6
    assert adj.old_timezone == "UTC+1"
    assert adj.new_timezone == "UTC-2:30"


def test_ninety_minute_change_truncates_to_one_hour():
    adj = compute_timezone_adjustment([completed(60, timezone_offset_minutes=0)], 90)
    assert adj.hours_difference == 1
    assert _minutes(adj.adjustment_schedule) == [30, 60]


def test_supplied_label_used_for_new_timezone():
    adj = compute_timezone_adjustment(
        [completed(60, timezone_offset_minutes=-300)], 60, "Europe/Paris",
    )
    assert adj.new_timezone == "Europe/Paris"
    assert adj.old_timezone == "UTC-5"


def test_blank_label_falls_back_to_offset():
    adj = compute_timezone_adjustment([completed(60)], 540, "   ")
    assert adj.new_timezone == "UTC+9"


def test_latest_offset_follows_modified_at_not_end_time():
    older_edit = completed(
        60, end_time=FIXED_INSTANT, session_id="a",
        timezone_offset_minutes=0, modified_at=FIXED_INSTANT,
    )
    newer_edit = completed(
        60, end_time=FIXED_INSTANT - timedelta(hours=5), session_id="b",
        timezone_offset_minutes=240, modified_at=FIXED_INSTANT + timedelta(hours=1),
    )
    assert latest_completed_offset([older_edit, newer_edit]) == 240


@pytest.mark.parametrize("offset, label", [
    (0, "UTC+0"), (330, "UTC+5:30"), (-570, "UTC-9:30"), (-60, "UTC-1"), (45, "UTC+0:45"),
])
def test_format_utc_offset(offset, label):
    assert format_utc_offset(offset) == label
