"""Sleep Session Schemas — Pydantic models with field-level validation for API boundaries.

Invariants:
    - Request timestamps must carry a timezone
    - Offsets limited to real-world UTC offsets (-14h..+14h)
    - Durations in responses are whole or fractional minutes, never timedelta

Design Decisions:
    - from_domain() classmethods keep the mapping next to the wire shape
"""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from somni.core.adaptive_window import WakeWindowRecommendation
from somni.core.sleep_session import SleepSession
from somni.core.timezone_shift import TimezoneAdjustment

MAX_OFFSET_MINUTES = 14 * 60


class SessionStart(BaseModel):
    subject_id: str = Field(min_length=1, max_length=64)
    device_id: str = Field(min_length=1, max_length=128)
    timezone_offset_minutes: int = Field(
        0, ge=-MAX_OFFSET_MINUTES, le=MAX_OFFSET_MINUTES,
    )


class SessionEdit(BaseModel):
    """Manual correction; omitted fields keep the stored values."""
    start_time: datetime | None = None
    end_time: datetime | None = None

    @field_validator("start_time", "end_time")
    @classmethod
    def require_timezone(cls, v: datetime | None) -> datetime | None:
        if v is not None and v.tzinfo is None:
            raise ValueError("timestamp must include a timezone offset")
        return v


class SessionResponse(BaseModel):
    session_id: str
    subject_id: str
    start_time: datetime
    end_time: datetime | None
    duration_minutes: int | None
    quality_score: float | None
    timezone_offset_minutes: int
    sync_status: str
    initiator_device_id: str
    phase: str
    modified_at: datetime
    created_at: datetime

    @classmethod
    def from_domain(cls, s: SleepSession) -> "SessionResponse":
        return cls(
            session_id=s.session_id,
            subject_id=s.subject_id,
            start_time=s.start_time,
            end_time=s.end_time,
            duration_minutes=s.duration_minutes,
            quality_score=s.quality_score,
            timezone_offset_minutes=s.timezone_offset_minutes,
            sync_status=s.sync_status.value,
            initiator_device_id=s.initiator_device_id,
            phase=s.phase.value,
            modified_at=s.modified_at,
            created_at=s.created_at,
        )


class WakeWindowResponse(BaseModel):
    duration_minutes: float
    baseline_minutes: float
    adjustment_multiplier: float
    adjustment_reason: str | None
    confidence: float
    next_sleep_time: datetime

    @classmethod
    def from_domain(cls, r: WakeWindowRecommendation) -> "WakeWindowResponse":
        return cls(
            duration_minutes=r.duration.total_seconds() / 60,
            baseline_minutes=r.baseline_window.total_seconds() / 60,
            adjustment_multiplier=r.adjustment_multiplier,
            adjustment_reason=r.adjustment_reason,
            confidence=r.confidence,
            next_sleep_time=r.next_sleep_time,
        )


class TimezoneAdjustmentResponse(BaseModel):
    old_timezone: str
    new_timezone: str
    hours_difference: int
    adjustment_schedule_minutes: list[int]
    estimated_days: int

    @classmethod
    def from_domain(cls, a: TimezoneAdjustment) -> "TimezoneAdjustmentResponse":
        return cls(
            old_timezone=a.old_timezone,
            new_timezone=a.new_timezone,
            hours_difference=a.hours_difference,
            adjustment_schedule_minutes=[
                int(step.total_seconds() // 60) for step in a.adjustment_schedule
            ],
            estimated_days=a.estimated_days,
        )
