"""Timezone Shift — detect an offset change and ramp the schedule over days.

Invariants:
    - |current - last| <= TIMEZONE_CHANGE_THRESHOLD_MINUTES -> no adjustment
    - hours_difference truncates toward zero and keeps the sign
    - Schedule entries grow by INCREMENT_MINUTES per day, chronological
    - estimated_days == len(adjustment_schedule)

Design Decisions:
    - Truncation instead of rounding: keeps schedule lengths stable for
      offsets that are not whole hours
"""

import math
from dataclasses import dataclass
from datetime import timedelta
from typing import Iterable

from somni.core.errors import InvalidArgumentError
from somni.core.sleep_session import SleepSession

TIMEZONE_LOOKBACK_DAYS = 7
TIMEZONE_CHANGE_THRESHOLD_MINUTES = 60
INCREMENT_MINUTES = 30


@dataclass(frozen=True)
class TimezoneAdjustment:
    old_timezone: str
    new_timezone: str
    hours_difference: int
    adjustment_schedule: tuple[timedelta, ...]

    @property
    def estimated_days(self) -> int:
        return len(self.adjustment_schedule)


def build_adjustment_schedule(hours_difference: int) -> list[timedelta]:
    """Daily cumulative shifts in INCREMENT_MINUTES steps covering the gap."""
    if hours_difference < 0:
        raise InvalidArgumentError(
            "hours_difference must be non-negative for schedule",
            field="hours_difference",
        )
    steps = math.ceil(hours_difference * 60 / INCREMENT_MINUTES)
    return [timedelta(minutes=i * INCREMENT_MINUTES) for i in range(1, steps + 1)]


def format_utc_offset(offset_minutes: int) -> str:
    """UTC+5, UTC-3:30, UTC+0."""
    sign = "+" if offset_minutes >= 0 else "-"
    hours, minutes = divmod(abs(offset_minutes), 60)
    if minutes == 0:
        return f"UTC{sign}{hours}"
    return f"UTC{sign}{hours}:{minutes:02d}"


def _truncated_hours(delta_minutes: int) -> int:
    hours = abs(delta_minutes) // 60
    return -hours if delta_minutes < 0 else hours


def latest_completed_offset(sessions: Iterable[SleepSession]) -> int | None:
    """Offset of the most recently modified completed session, if any."""
    completed = [s for s in sessions if s.end_time is not None]
    if not completed:
        return None
    return max(completed, key=lambda s: s.modified_at).timezone_offset_minutes


def compute_timezone_adjustment(
    sessions: Iterable[SleepSession],
    current_offset_minutes: int,
    current_timezone_label: str = "",
) -> TimezoneAdjustment | None:
    """Adjustment plan when the current offset moved more than an hour. Pure."""
    last_offset = latest_completed_offset(sessions)
    if last_offset is None:
        return None

    delta = current_offset_minutes - last_offset
    if abs(delta) <= TIMEZONE_CHANGE_THRESHOLD_MINUTES:
        return None

    hours_difference = _truncated_hours(delta)
    schedule = build_adjustment_schedule(abs(hours_difference))
    new_label = current_timezone_label.strip() or format_utc_offset(current_offset_minutes)

    return TimezoneAdjustment(
        old_timezone=format_utc_offset(last_offset),
        new_timezone=new_label,
        hours_difference=hours_difference,
        adjustment_schedule=tuple(schedule),
    )
