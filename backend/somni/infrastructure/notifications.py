"""Notification Schedulers — shell implementations of NotificationScheduler.

Invariants:
    - scheduling never returns a value the caller depends on
    - Push delivery itself is owned by the mobile clients; the backend only
      records what it would schedule
"""

import logging

from somni.core.adaptive_window import WakeWindowRecommendation

logger = logging.getLogger(__name__)


class LoggingNotificationScheduler:
    """Logs each wake-window reminder instead of delivering it."""

    async def schedule_wake_window_notification(
        self, recommendation: WakeWindowRecommendation,
    ) -> None:
        minutes = recommendation.duration.total_seconds() / 60
        logger.info(
            f"Wake window reminder at {recommendation.next_sleep_time.isoformat()} "
            f"({minutes:.0f} min, confidence {recommendation.confidence:.2f})",
        )


class DisabledNotificationScheduler:
    """Drops every reminder. Used when notifications are switched off."""

    async def schedule_wake_window_notification(
        self, recommendation: WakeWindowRecommendation,
    ) -> None:
        return None
