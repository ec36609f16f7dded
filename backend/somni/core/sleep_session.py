"""Sleep Session — immutable record of one sleep period for a tracked subject.

Invariants:
    - end_time is None <=> duration_minutes is None
    - end_time >= start_time whenever end_time is set
    - All instants are timezone-aware datetimes
    - At most one open session per subject: enforced by SleepSessionManager,
      not by this shape

Design Decisions:
    - Frozen dataclass: transitions build a new value with dataclasses.replace
"""

from dataclasses import dataclass
from datetime import datetime, timedelta

from somni.core.domain_types import (
    DeviceId, OffsetMinutes, QualityScore, SessionId, SessionPhase, SubjectId, SyncStatus,
)

MINUTE = timedelta(minutes=1)


@dataclass(frozen=True)
class SleepSession:
    session_id: SessionId
    subject_id: SubjectId
    start_time: datetime
    end_time: datetime | None
    duration_minutes: int | None
    quality_score: QualityScore | None
    timezone_offset_minutes: OffsetMinutes
    sync_status: SyncStatus
    initiator_device_id: DeviceId
    modified_at: datetime
    created_at: datetime

    @property
    def is_active(self) -> bool:
        return self.end_time is None

    @property
    def phase(self) -> SessionPhase:
        if self.is_active:
            return SessionPhase.ACTIVE_SESSION
        return SessionPhase.COMPLETED_SESSION

    @property
    def is_complete(self) -> bool:
        """Both end_time and duration are recorded (counts toward quality)."""
        return self.end_time is not None and self.duration_minutes is not None


def whole_minutes_between(start: datetime, end: datetime) -> int:
    """Elapsed whole minutes, sub-minute remainder dropped, never negative."""
    return max(0, (end - start) // MINUTE)
