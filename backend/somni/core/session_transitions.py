"""Session Transitions — pure start/end/edit rules for sleep sessions.

Invariants:
    - open_session refuses when the subject already has an open session
    - close_session refuses a session that already has an end_time
    - edit_session rejects effective_end < effective_start
    - Every transition stamps modified_at = now and recomputes duration_minutes
    - Inputs are never mutated; a new SleepSession is returned

Design Decisions:
    - Existence checks (NotFound) live in the service, which owns the lookup;
      these functions only see sessions that exist
"""

from dataclasses import replace
from datetime import datetime

from somni.core.domain_types import DeviceId, OffsetMinutes, SessionId, SubjectId, SyncStatus
from somni.core.errors import (
    ActiveSessionConflictError, ErrorContext, InvalidArgumentError, InvalidStateError,
)
from somni.core.sleep_session import SleepSession, whole_minutes_between


def open_session(
    session_id: SessionId,
    subject_id: SubjectId,
    device_id: DeviceId,
    timezone_offset_minutes: OffsetMinutes,
    now: datetime,
    active: SleepSession | None,
) -> SleepSession:
    """NoActiveSession -> ActiveSession."""
    if active is not None and active.is_active:
        raise ActiveSessionConflictError(subject_id, active.session_id)
    return SleepSession(
        session_id=session_id,
        subject_id=subject_id,
        start_time=now,
        end_time=None,
        duration_minutes=None,
        quality_score=None,
        timezone_offset_minutes=timezone_offset_minutes,
        sync_status=SyncStatus.PENDING,
        initiator_device_id=device_id,
        modified_at=now,
        created_at=now,
    )


def close_session(existing: SleepSession, now: datetime) -> SleepSession:
    """ActiveSession -> CompletedSession."""
    if not existing.is_active:
        raise InvalidStateError(
            f"Session {existing.session_id} is already completed",
            ErrorContext(subject_id=existing.subject_id, session_id=existing.session_id),
        )
    return replace(
        existing,
        end_time=now,
        duration_minutes=whole_minutes_between(existing.start_time, now),
        modified_at=now,
    )


def edit_session(
    existing: SleepSession,
    new_start: datetime | None,
    new_end: datetime | None,
    now: datetime,
) -> SleepSession:
    """Manual correction of start and/or end. Omitted values keep the stored ones."""
    start = new_start if new_start is not None else existing.start_time
    end = new_end if new_end is not None else existing.end_time

    if end is not None and end < start:
        raise InvalidArgumentError(
            f"end_time ({end.isoformat()}) must be >= start_time ({start.isoformat()})",
            field="end_time",
            context=ErrorContext(
                subject_id=existing.subject_id, session_id=existing.session_id,
            ),
        )

    return replace(
        existing,
        start_time=start,
        end_time=end,
        duration_minutes=whole_minutes_between(start, end) if end is not None else None,
        modified_at=now,
    )
