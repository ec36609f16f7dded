"""Sleep Session Manager — start/end/edit sessions against the repository.

Invariants:
    - At most one open session per subject
    - Every check-then-write sequence for a subject runs inside that subject's lock
    - Reads (active session, history, pending sync) take no lock
    - Repository failures propagate unchanged (PersistenceError); no retries here

Design Decisions:
    - Per-subject asyncio.Lock instead of a storage uniqueness constraint:
      works with any SleepRepository implementation, including in-memory ones.
      One manager instance per process; multi-process deployments must share
      a single writer
    - Pure transition rules live in core/session_transitions.py; this class only
      sequences reads, rules, and writes
"""

import asyncio
import logging
from datetime import datetime
from weakref import WeakValueDictionary

from somni.core.domain_types import DeviceId, OffsetMinutes, SessionId, SubjectId
from somni.core.errors import ErrorContext, ResourceNotFoundError
from somni.core.repository_protocols import SleepRepository, TimeProvider
from somni.core.session_ids import DefaultSessionIdGenerator, SessionIdGenerator
from somni.core.session_transitions import close_session, edit_session, open_session
from somni.core.sleep_session import SleepSession

logger = logging.getLogger(__name__)


class SubjectLocks:
    """Lazily created asyncio.Lock per subject id, held weakly.

    A lock lives only while a holder or waiter references it, so the map
    stays bounded by the number of subjects currently being written.
    """

    def __init__(self):
        self._locks: WeakValueDictionary[SubjectId, asyncio.Lock] = WeakValueDictionary()

    def for_subject(self, subject_id: SubjectId) -> asyncio.Lock:
        lock = self._locks.get(subject_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[subject_id] = lock
        return lock

    def __len__(self) -> int:
        return len(self._locks)


class SleepSessionManager:
    """Orchestrates session lifecycle transitions for all subjects."""

    def __init__(
        self,
        repository: SleepRepository,
        time_provider: TimeProvider,
        id_generator: SessionIdGenerator | None = None,
        locks: SubjectLocks | None = None,
    ):
        self.repository = repository
        self.time_provider = time_provider
        self.id_generator = id_generator or DefaultSessionIdGenerator(time_provider)
        self.locks = locks if locks is not None else SubjectLocks()

    async def start_session(
        self,
        subject_id: SubjectId,
        device_id: DeviceId,
        timezone_offset_minutes: OffsetMinutes = OffsetMinutes(0),
    ) -> SleepSession:
        async with self.locks.for_subject(subject_id):
            active = await self.repository.get_active_session(subject_id)
            session = open_session(
                session_id=self.id_generator.generate(),
                subject_id=subject_id,
                device_id=device_id,
                timezone_offset_minutes=timezone_offset_minutes,
                now=self.time_provider.now(),
                active=active,
            )
            await self.repository.insert_session(session)

        logger.info(
            "Sleep session started",
            extra={"subject_id": subject_id, "session_id": session.session_id},
        )
        return session

    async def end_session(self, session_id: SessionId) -> SleepSession:
        existing = await self._get_or_404(session_id)
        async with self.locks.for_subject(existing.subject_id):
            current = await self._get_or_404(session_id)
            updated = close_session(current, self.time_provider.now())
            await self.repository.update_session(updated)

        logger.info(
            f"Sleep session ended after {updated.duration_minutes} min",
            extra={"subject_id": updated.subject_id, "session_id": session_id},
        )
        return updated

    async def update_session(
        self,
        session_id: SessionId,
        start_time: datetime | None = None,
        end_time: datetime | None = None,
    ) -> SleepSession:
        existing = await self._get_or_404(session_id)
        async with self.locks.for_subject(existing.subject_id):
            current = await self._get_or_404(session_id)
            updated = edit_session(current, start_time, end_time, self.time_provider.now())
            await self.repository.update_session(updated)

        logger.info(
            "Sleep session edited",
            extra={"subject_id": updated.subject_id, "session_id": session_id},
        )
        return updated

    async def delete_session(self, session_id: SessionId) -> None:
        existing = await self._get_or_404(session_id)
        async with self.locks.for_subject(existing.subject_id):
            await self.repository.delete_session(session_id)
        logger.info(
            "Sleep session deleted",
            extra={"subject_id": existing.subject_id, "session_id": session_id},
        )

    async def get_active_session(self, subject_id: SubjectId) -> SleepSession | None:
        return await self.repository.get_active_session(subject_id)

    async def get_sleep_history(self, subject_id: SubjectId, days: int) -> list[SleepSession]:
        return await self.repository.get_sessions(subject_id, days)

    async def get_pending_sync_sessions(self) -> list[SleepSession]:
        return await self.repository.get_pending_sync_sessions()

    async def mark_synced(self, session_id: SessionId) -> None:
        await self._get_or_404(session_id)
        await self.repository.mark_synced(session_id, self.time_provider.now())

    async def _get_or_404(self, session_id: SessionId) -> SleepSession:
        session = await self.repository.get_session(session_id)
        if session is None:
            raise ResourceNotFoundError(
                "Session", session_id, ErrorContext(session_id=session_id),
            )
        return session
