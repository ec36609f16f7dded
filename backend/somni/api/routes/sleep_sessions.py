"""Sleep Session Routes — start, end, edit, delete, and sync bookkeeping.

Invariants:
    - Routes hold no logic: validate body, call SleepSessionManager, map result
    - Domain errors propagate to the global SomniError handler
"""

from fastapi import APIRouter, Depends, status

from somni.api.dependencies import get_session_manager
from somni.core.domain_types import DeviceId, OffsetMinutes, SessionId, SubjectId
from somni.schemas.sleep_session import SessionEdit, SessionResponse, SessionStart
from somni.services.session_manager import SleepSessionManager

router = APIRouter(prefix="/api/v1/sleep-sessions", tags=["sleep-sessions"])


@router.post(
    "", response_model=SessionResponse, status_code=status.HTTP_201_CREATED,
)
async def start_session(
    body: SessionStart,
    manager: SleepSessionManager = Depends(get_session_manager),
):
    session = await manager.start_session(
        SubjectId(body.subject_id),
        DeviceId(body.device_id),
        OffsetMinutes(body.timezone_offset_minutes),
    )
    return SessionResponse.from_domain(session)


@router.get("/pending-sync", response_model=list[SessionResponse])
async def list_pending_sync(
    manager: SleepSessionManager = Depends(get_session_manager),
):
    sessions = await manager.get_pending_sync_sessions()
    return [SessionResponse.from_domain(s) for s in sessions]


@router.post("/{session_id}/end", response_model=SessionResponse)
async def end_session(
    session_id: str,
    manager: SleepSessionManager = Depends(get_session_manager),
):
    return SessionResponse.from_domain(await manager.end_session(SessionId(session_id)))


@router.patch("/{session_id}", response_model=SessionResponse)
async def edit_session(
    session_id: str,
    body: SessionEdit,
    manager: SleepSessionManager = Depends(get_session_manager),
):
    session = await manager.update_session(SessionId(session_id), body.start_time, body.end_time)
    return SessionResponse.from_domain(session)


@router.post("/{session_id}/synced", status_code=status.HTTP_204_NO_CONTENT)
async def mark_synced(
    session_id: str,
    manager: SleepSessionManager = Depends(get_session_manager),
):
    await manager.mark_synced(SessionId(session_id))


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_session(
    session_id: str,
    manager: SleepSessionManager = Depends(get_session_manager),
):
    await manager.delete_session(SessionId(session_id))
