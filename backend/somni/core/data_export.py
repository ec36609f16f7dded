"""Data Export — JSON-safe snapshot of everything stored for a household.

Invariants:
    - Output contains only str, int, float, None, list and dict
    - Timestamps serialized as ISO-8601, enums by name
    - Never raises on empty inputs
"""

from datetime import datetime

from somni.core.baby_profile import BabyProfile
from somni.core.sleep_session import SleepSession


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def export_session(s: SleepSession) -> dict:
    return {
        "session_id": s.session_id,
        "subject_id": s.subject_id,
        "start_time": _iso(s.start_time),
        "end_time": _iso(s.end_time),
        "duration_minutes": s.duration_minutes,
        "quality_score": s.quality_score,
        "timezone_offset_minutes": s.timezone_offset_minutes,
        "sync_status": s.sync_status.name,
        "initiator_device_id": s.initiator_device_id,
        "modified_at": _iso(s.modified_at),
        "created_at": _iso(s.created_at),
    }


def export_profile(p: BabyProfile) -> dict:
    return {
        "baby_id": p.baby_id,
        "name": p.name,
        "birthdate": p.birthdate.isoformat(),
        "created_at": _iso(p.created_at),
    }


def build_data_export(
    sessions: list[SleepSession],
    profiles: list[BabyProfile],
    settings: dict[str, str],
    exported_at: datetime,
) -> dict:
    """Assemble the export document. Pure, no IO."""
    return {
        "exported_at": exported_at.isoformat(),
        "sleep_sessions": [export_session(s) for s in sessions],
        "baby_profiles": [export_profile(p) for p in profiles],
        "user_settings": dict(settings),
    }
