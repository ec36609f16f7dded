"""Baseline Wake Window — age-based default wake window lookup.

Invariants:
    - Monotonically non-decreasing in age
    - Upper bounds are inclusive (12 weeks -> 75 minutes)
    - Negative age raises InvalidArgumentError
"""

from datetime import timedelta

from somni.core.errors import InvalidArgumentError

# (max age in weeks, wake window) — first matching row wins
BASELINE_TABLE: tuple[tuple[int, timedelta], ...] = (
    (4, timedelta(minutes=45)),
    (8, timedelta(minutes=60)),
    (12, timedelta(minutes=75)),
    (16, timedelta(minutes=90)),
    (24, timedelta(minutes=120)),
    (36, timedelta(minutes=150)),
    (52, timedelta(minutes=180)),
)
OLDER_BASELINE = timedelta(minutes=240)


def compute_baseline(age_in_weeks: int) -> timedelta:
    """Default wake window for an infant of the given age."""
    if age_in_weeks < 0:
        raise InvalidArgumentError(
            "age_in_weeks must be non-negative", field="age_in_weeks",
        )
    for max_weeks, window in BASELINE_TABLE:
        if age_in_weeks <= max_weeks:
            return window
    return OLDER_BASELINE
