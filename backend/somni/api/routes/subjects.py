"""Subject Routes — per-subject reads: active session, history, wake window, timezone shift.

Invariants:
    - GET routes have no side effects; reminder scheduling is a separate POST
"""

from fastapi import APIRouter, Depends, Query, Response, status

from somni.api.dependencies import get_session_manager, get_sleep_calculator
from somni.config import get_settings
from somni.core.domain_types import SubjectId
from somni.schemas.sleep_session import (
    MAX_OFFSET_MINUTES, SessionResponse, TimezoneAdjustmentResponse, WakeWindowResponse,
)
from somni.services.session_manager import SleepSessionManager
from somni.services.sleep_calculator import SleepCalculator

router = APIRouter(prefix="/api/v1/subjects", tags=["subjects"])


@router.get("/{subject_id}/active-session", response_model=SessionResponse | None)
async def get_active_session(
    subject_id: str,
    manager: SleepSessionManager = Depends(get_session_manager),
):
    session = await manager.get_active_session(SubjectId(subject_id))
    return SessionResponse.from_domain(session) if session else None


@router.get("/{subject_id}/sleep-sessions", response_model=list[SessionResponse])
async def get_sleep_history(
    subject_id: str,
    days: int | None = Query(None, ge=1, le=366),
    manager: SleepSessionManager = Depends(get_session_manager),
):
    window = days or get_settings().default_history_days
    sessions = await manager.get_sleep_history(SubjectId(subject_id), window)
    return [SessionResponse.from_domain(s) for s in sessions]


@router.get("/{subject_id}/wake-window", response_model=WakeWindowResponse)
async def get_wake_window(
    subject_id: str,
    age_in_weeks: int = Query(..., ge=0),
    calculator: SleepCalculator = Depends(get_sleep_calculator),
):
    recommendation = await calculator.compute_adaptive_wake_window(
        SubjectId(subject_id), age_in_weeks,
    )
    return WakeWindowResponse.from_domain(recommendation)


@router.post(
    "/{subject_id}/wake-window/reminders",
    response_model=WakeWindowResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
async def schedule_wake_window_reminder(
    subject_id: str,
    age_in_weeks: int = Query(..., ge=0),
    calculator: SleepCalculator = Depends(get_sleep_calculator),
):
    """Compute the recommendation and queue its reminder; delivery is not awaited."""
    recommendation = await calculator.recommend_and_notify(
        SubjectId(subject_id), age_in_weeks,
    )
    return WakeWindowResponse.from_domain(recommendation)


@router.get(
    "/{subject_id}/timezone-change",
    response_model=TimezoneAdjustmentResponse,
    responses={204: {"description": "No meaningful timezone change"}},
)
async def get_timezone_change(
    subject_id: str,
    offset_minutes: int = Query(..., ge=-MAX_OFFSET_MINUTES, le=MAX_OFFSET_MINUTES),
    tz_label: str = Query("", max_length=64),
    calculator: SleepCalculator = Depends(get_sleep_calculator),
):
    adjustment = await calculator.detect_timezone_change(
        SubjectId(subject_id), offset_minutes, tz_label,
    )
    if adjustment is None:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return TimezoneAdjustmentResponse.from_domain(adjustment)
