"""System clock — production TimeProvider."""

from datetime import datetime, timezone


class SystemTimeProvider:
    """Wall-clock UTC now."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)
