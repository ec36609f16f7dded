"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - All IO operations accessed through Protocol types
    - Implementations provided by shell via dependency injection
    - TimeProvider is the only source of "now" for core and services

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy
    - Async in Protocol: boundary methods are async because implementations do IO,
      but core pure functions that USE their results are never async themselves —
      services/ orchestrates the async calls around the pure logic
"""

from datetime import datetime
from typing import TYPE_CHECKING, Protocol

from somni.core.baby_profile import BabyProfile
from somni.core.domain_types import SessionId, SubjectId
from somni.core.sleep_session import SleepSession

if TYPE_CHECKING:
    from somni.core.adaptive_window import WakeWindowRecommendation


class TimeProvider(Protocol):
    """Current instant, timezone-aware (UTC)."""
    def now(self) -> datetime: ...


class SleepRepository(Protocol):
    """Contract for sleep session persistence — implemented by shell."""
    async def get_sessions(self, subject_id: SubjectId, days: int) -> list[SleepSession]: ...
    async def get_session(self, session_id: SessionId) -> SleepSession | None: ...
    async def get_active_session(self, subject_id: SubjectId) -> SleepSession | None: ...
    async def insert_session(self, session: SleepSession) -> None: ...
    async def update_session(self, session: SleepSession) -> None: ...
    async def delete_session(self, session_id: SessionId) -> None: ...
    async def get_pending_sync_sessions(self) -> list[SleepSession]: ...
    async def mark_synced(self, session_id: SessionId, synced_at: datetime) -> None: ...


class BabyProfileRepository(Protocol):
    """Contract for baby profile persistence — implemented by shell."""
    async def get_all_profiles(self) -> list[BabyProfile]: ...
    async def get_profile(self, baby_id: SubjectId) -> BabyProfile | None: ...
    async def get_active_profile(self, user_id: str) -> BabyProfile | None: ...
    async def insert_profile(self, profile: BabyProfile) -> None: ...
    async def update_profile(self, profile: BabyProfile) -> None: ...
    async def delete_profile(self, baby_id: SubjectId) -> None: ...
    async def set_active_profile(self, user_id: str, baby_id: SubjectId) -> None: ...


class NotificationScheduler(Protocol):
    """One-way delivery of a wake-window reminder. Return value is ignored."""
    async def schedule_wake_window_notification(
        self, recommendation: "WakeWindowRecommendation",
    ) -> None: ...
