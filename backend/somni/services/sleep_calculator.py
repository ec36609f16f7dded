"""Sleep Calculator — reads session history and applies the pure scheduling rules.

Invariants:
    - Reads only; never writes to the repository
    - Each call reads a fresh snapshot (no cache)
    - Notification delivery is fire-and-forget: it runs as a background task,
      so neither a failing nor a hanging scheduler delays or fails the
      recommendation that triggered it
    - Every pending delivery task is referenced until it finishes; failures
      are logged at WARNING by the done-callback

Design Decisions:
    - Impureim sandwich: await repository -> pure core function -> return
"""

import asyncio
import logging
from datetime import timedelta

from somni.core.adaptive_window import (
    QUALITY_LOOKBACK_DAYS, WakeWindowRecommendation, recommend_wake_window,
)
from somni.core.baseline_window import compute_baseline
from somni.core.domain_types import SubjectId
from somni.core.errors import ErrorContext, InvalidArgumentError, ResourceNotFoundError
from somni.core.repository_protocols import (
    BabyProfileRepository, NotificationScheduler, SleepRepository, TimeProvider,
)
from somni.core.timezone_shift import (
    TIMEZONE_LOOKBACK_DAYS, TimezoneAdjustment, compute_timezone_adjustment,
)

logger = logging.getLogger(__name__)


class SleepCalculator:
    """Wake-window and timezone-shift calculations for one subject at a time."""

    def __init__(
        self,
        sleep_repository: SleepRepository,
        notification_scheduler: NotificationScheduler,
        time_provider: TimeProvider,
        profile_repository: BabyProfileRepository | None = None,
    ):
        self.sleep_repository = sleep_repository
        self.notification_scheduler = notification_scheduler
        self.time_provider = time_provider
        self.profile_repository = profile_repository
        self._notifications: set[asyncio.Task] = set()

    def compute_baseline_wake_window(self, age_in_weeks: int) -> timedelta:
        return compute_baseline(age_in_weeks)

    async def compute_adaptive_wake_window(
        self, subject_id: SubjectId, age_in_weeks: int,
    ) -> WakeWindowRecommendation:
        if age_in_weeks < 0:
            raise InvalidArgumentError(
                "age_in_weeks must be non-negative", field="age_in_weeks",
                context=ErrorContext(subject_id=subject_id),
            )
        sessions = await self.sleep_repository.get_sessions(
            subject_id, QUALITY_LOOKBACK_DAYS,
        )
        return recommend_wake_window(age_in_weeks, sessions, self.time_provider.now())

    async def detect_timezone_change(
        self,
        subject_id: SubjectId,
        current_offset_minutes: int,
        current_timezone_label: str = "",
    ) -> TimezoneAdjustment | None:
        sessions = await self.sleep_repository.get_sessions(
            subject_id, TIMEZONE_LOOKBACK_DAYS,
        )
        adjustment = compute_timezone_adjustment(
            sessions, current_offset_minutes, current_timezone_label,
        )
        if adjustment is not None:
            logger.info(
                f"Timezone shift {adjustment.old_timezone} -> {adjustment.new_timezone} "
                f"over {adjustment.estimated_days} days",
                extra={"subject_id": subject_id},
            )
        return adjustment

    def schedule_wake_window_notification(
        self, recommendation: WakeWindowRecommendation,
    ) -> asyncio.Task:
        """Start delivery in the background and return without waiting for it."""
        task = asyncio.create_task(
            self.notification_scheduler.schedule_wake_window_notification(recommendation),
        )
        self._notifications.add(task)
        task.add_done_callback(self._notification_done)
        return task

    def _notification_done(self, task: asyncio.Task) -> None:
        self._notifications.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.warning(f"Wake window notification failed: {exc}", exc_info=exc)

    @property
    def pending_notifications(self) -> frozenset[asyncio.Task]:
        return frozenset(self._notifications)

    async def wait_for_notifications(self) -> None:
        """Wait until every delivery started so far has finished."""
        await asyncio.gather(*self._notifications, return_exceptions=True)

    async def close(self) -> None:
        """Cancel deliveries still in flight (shutdown)."""
        pending = list(self._notifications)
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        self._notifications.clear()

    async def recommend_and_notify(
        self, subject_id: SubjectId, age_in_weeks: int,
    ) -> WakeWindowRecommendation:
        recommendation = await self.compute_adaptive_wake_window(subject_id, age_in_weeks)
        self.schedule_wake_window_notification(recommendation)
        return recommendation

    async def recommend_for_profile(self, baby_id: SubjectId) -> WakeWindowRecommendation:
        """Recommendation for a stored baby, age derived from its birthdate."""
        if self.profile_repository is None:
            raise RuntimeError("SleepCalculator has no profile repository")
        profile = await self.profile_repository.get_profile(baby_id)
        if profile is None:
            raise ResourceNotFoundError(
                "BabyProfile", baby_id, ErrorContext(subject_id=baby_id),
            )
        today = self.time_provider.now().date()
        return await self.recommend_and_notify(baby_id, profile.age_in_weeks(today))
