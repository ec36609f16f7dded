"""Adaptive Wake Window — quality-driven adjustment of the age baseline.

Invariants:
    - 0.70 * baseline <= duration <= 1.30 * baseline for every input
    - Empty quality window -> baseline, no reason, BASELINE_CONFIDENCE
    - adjustment_multiplier == duration / baseline_window
    - Pure: sessions and "now" are passed in, nothing is read or written

Design Decisions:
    - Quality ratio averages the whole window, most recent session included.
      This dampens sensitivity; kept as-is for compatibility with existing
      recommendations
    - Bounds applied twice: once on the multiplier, once on the final duration
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from statistics import fmean
from typing import Iterable

from somni.core.baseline_window import compute_baseline
from somni.core.sleep_session import SleepSession

QUALITY_LOOKBACK_DAYS = 14
QUALITY_WINDOW_SIZE = 5
MIN_SESSIONS_FOR_ADJUSTMENT = 1

POOR_QUALITY_THRESHOLD = 0.70
EXCELLENT_QUALITY_THRESHOLD = 1.10
EXCESS_RATIO_SPAN = 0.5

REDUCE_MIN = 0.10
REDUCE_MAX = 0.15
INCREASE_MIN = 0.05
INCREASE_MAX = 0.10

BOUNDS_MIN_MULTIPLIER = 0.70
BOUNDS_MAX_MULTIPLIER = 1.30

BASELINE_CONFIDENCE = 0.85
ADAPTIVE_CONFIDENCE = 0.75

REDUCE_REASON = "recent sleep shorter than expected; reducing wake window"
INCREASE_REASON = "recent sleep longer than expected; increasing wake window"


@dataclass(frozen=True)
class WakeWindowRecommendation:
    duration: timedelta
    adjustment_reason: str | None
    confidence: float
    next_sleep_time: datetime
    baseline_window: timedelta
    adjustment_multiplier: float


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def select_quality_window(sessions: Iterable[SleepSession]) -> list[SleepSession]:
    """Most recent completed sessions, newest first, at most QUALITY_WINDOW_SIZE."""
    completed = [s for s in sessions if s.is_complete]
    completed.sort(key=lambda s: s.end_time, reverse=True)
    return completed[:QUALITY_WINDOW_SIZE]


def compute_quality_ratio(window: list[SleepSession]) -> float:
    """Newest duration over the window mean. 1.0 when the mean is zero."""
    durations = [s.duration_minutes for s in window]
    expected = fmean(durations)
    if expected == 0:
        return 1.0
    return durations[0] / expected


def reduce_multiplier(ratio: float) -> float:
    factor = 1 - ratio / POOR_QUALITY_THRESHOLD
    return 1 - (REDUCE_MIN + (REDUCE_MAX - REDUCE_MIN) * factor)


def increase_multiplier(ratio: float) -> float:
    excess = _clamp(
        (ratio - EXCELLENT_QUALITY_THRESHOLD) / EXCESS_RATIO_SPAN, 0.0, 1.0,
    )
    return 1 + (INCREASE_MIN + (INCREASE_MAX - INCREASE_MIN) * excess)


def adjustment_from_ratio(ratio: float) -> tuple[float, str | None, float]:
    """Map a quality ratio to (multiplier, reason, confidence)."""
    if ratio < POOR_QUALITY_THRESHOLD:
        multiplier = _clamp(
            reduce_multiplier(ratio), BOUNDS_MIN_MULTIPLIER, BOUNDS_MAX_MULTIPLIER,
        )
        return multiplier, REDUCE_REASON, ADAPTIVE_CONFIDENCE
    if ratio > EXCELLENT_QUALITY_THRESHOLD:
        multiplier = _clamp(
            increase_multiplier(ratio), BOUNDS_MIN_MULTIPLIER, BOUNDS_MAX_MULTIPLIER,
        )
        return multiplier, INCREASE_REASON, ADAPTIVE_CONFIDENCE
    return 1.0, None, BASELINE_CONFIDENCE


def clamp_to_bounds(adjusted: timedelta, baseline: timedelta) -> timedelta:
    lower = baseline * BOUNDS_MIN_MULTIPLIER
    upper = baseline * BOUNDS_MAX_MULTIPLIER
    if adjusted < lower:
        return lower
    if adjusted > upper:
        return upper
    return adjusted


def recommend_wake_window(
    age_in_weeks: int,
    sessions: Iterable[SleepSession],
    now: datetime,
) -> WakeWindowRecommendation:
    """Build a bounded, explained wake-window recommendation. Pure."""
    baseline = compute_baseline(age_in_weeks)
    window = select_quality_window(sessions)

    if len(window) < MIN_SESSIONS_FOR_ADJUSTMENT:
        multiplier, reason, confidence = 1.0, None, BASELINE_CONFIDENCE
    else:
        multiplier, reason, confidence = adjustment_from_ratio(
            compute_quality_ratio(window),
        )

    duration = clamp_to_bounds(baseline * multiplier, baseline)
    wake_time = window[0].end_time if window else now

    return WakeWindowRecommendation(
        duration=duration,
        adjustment_reason=reason,
        confidence=confidence,
        next_sleep_time=wake_time + duration,
        baseline_window=baseline,
        adjustment_multiplier=duration / baseline,
    )
