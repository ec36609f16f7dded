"""SQL Sleep Store — SQLAlchemy implementation of the repository Protocols.

Invariants:
    - Implements SleepRepository and BabyProfileRepository (core/repository_protocols.py)
    - Every public write is one transaction: commit or full rollback
    - Every read opens a fresh session; nothing is cached between calls
    - Failures surface as PersistenceError via DatabaseSessionManager

Design Decisions:
    - History cutoff uses the injected TimeProvider, same clock as the services
    - update_session on an unknown id is a silent no-op; existence is checked
      by the services before any write
"""

import json
import logging
from datetime import datetime, timedelta, timezone

from sqlalchemy import delete, select, update

from somni.core.baby_profile import BabyProfile
from somni.core.data_export import build_data_export
from somni.core.domain_types import (
    DeviceId, OffsetMinutes, QualityScore, SessionId, SubjectId, SyncStatus,
)
from somni.core.repository_protocols import TimeProvider
from somni.core.sleep_session import SleepSession
from somni.infrastructure.database import DatabaseSessionManager
from somni.models.baby_profile import ActiveProfileRecord, BabyProfileRecord
from somni.models.sleep_session import SleepSessionRecord
from somni.models.user_setting import UserSettingRecord

logger = logging.getLogger(__name__)


# ─── Row mapping ─────────────────────────────────────────────────

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
MILLISECOND = timedelta(milliseconds=1)


def to_ms(value: datetime) -> int:
    return (value - EPOCH) // MILLISECOND


def from_ms(value: int) -> datetime:
    return EPOCH + value * MILLISECOND


def _optional_ms(value: datetime | None) -> int | None:
    return to_ms(value) if value is not None else None


def _parse_sync_status(raw: str) -> SyncStatus:
    try:
        return SyncStatus[raw]
    except KeyError:
        logger.warning(f"Unknown sync status {raw!r}; treating as PENDING")
        return SyncStatus.PENDING


def to_session(row: SleepSessionRecord) -> SleepSession:
    return SleepSession(
        session_id=SessionId(row.session_id),
        subject_id=SubjectId(row.subject_id),
        start_time=from_ms(row.start_time_ms),
        end_time=from_ms(row.end_time_ms) if row.end_time_ms is not None else None,
        duration_minutes=row.duration_minutes,
        quality_score=(
            QualityScore(row.quality_score) if row.quality_score is not None else None
        ),
        timezone_offset_minutes=OffsetMinutes(row.timezone_offset_minutes),
        sync_status=_parse_sync_status(row.sync_status),
        initiator_device_id=DeviceId(row.initiator_device_id),
        modified_at=from_ms(row.modified_at_ms),
        created_at=from_ms(row.created_at_ms),
    )


def _apply_session(row: SleepSessionRecord, session: SleepSession) -> None:
    row.subject_id = session.subject_id
    row.start_time_ms = to_ms(session.start_time)
    row.end_time_ms = _optional_ms(session.end_time)
    row.duration_minutes = session.duration_minutes
    row.quality_score = session.quality_score
    row.timezone_offset_minutes = session.timezone_offset_minutes
    row.sync_status = session.sync_status.name
    row.initiator_device_id = session.initiator_device_id
    row.modified_at_ms = to_ms(session.modified_at)
    row.created_at_ms = to_ms(session.created_at)


def to_profile(row: BabyProfileRecord) -> BabyProfile:
    return BabyProfile(
        baby_id=SubjectId(row.baby_id),
        name=row.name,
        birthdate=row.birthdate,
        created_at=from_ms(row.created_at_ms),
    )


# ─── Store ───────────────────────────────────────────────────────

class SqlSleepStore:
    """Sleep sessions, baby profiles, and settings in one SQL database."""

    def __init__(self, db: DatabaseSessionManager, time_provider: TimeProvider):
        self.db = db
        self.time_provider = time_provider

    # Sleep sessions

    async def get_sessions(self, subject_id: SubjectId, days: int) -> list[SleepSession]:
        cutoff = to_ms(self.time_provider.now() - timedelta(days=days))
        async with self.db.session() as db:
            result = await db.execute(
                select(SleepSessionRecord)
                .where(SleepSessionRecord.subject_id == subject_id)
                .where(SleepSessionRecord.start_time_ms >= cutoff)
                .order_by(SleepSessionRecord.start_time_ms.desc()),
            )
            return [to_session(r) for r in result.scalars().all()]

    async def get_session(self, session_id: SessionId) -> SleepSession | None:
        async with self.db.session() as db:
            row = await db.get(SleepSessionRecord, session_id)
            return to_session(row) if row is not None else None

    async def get_active_session(self, subject_id: SubjectId) -> SleepSession | None:
        async with self.db.session() as db:
            result = await db.execute(
                select(SleepSessionRecord)
                .where(SleepSessionRecord.subject_id == subject_id)
                .where(SleepSessionRecord.end_time_ms.is_(None))
                .order_by(SleepSessionRecord.start_time_ms.desc())
                .limit(1),
            )
            row = result.scalar_one_or_none()
            return to_session(row) if row is not None else None

    async def insert_session(self, session: SleepSession) -> None:
        async with self.db.session() as db:
            row = SleepSessionRecord(session_id=session.session_id)
            _apply_session(row, session)
            db.add(row)
            await db.commit()

    async def update_session(self, session: SleepSession) -> None:
        async with self.db.session() as db:
            row = await db.get(SleepSessionRecord, session.session_id)
            if row is None:
                return
            _apply_session(row, session)
            await db.commit()

    async def delete_session(self, session_id: SessionId) -> None:
        async with self.db.session() as db:
            await db.execute(
                delete(SleepSessionRecord)
                .where(SleepSessionRecord.session_id == session_id),
            )
            await db.commit()

    async def get_pending_sync_sessions(self) -> list[SleepSession]:
        async with self.db.session() as db:
            result = await db.execute(
                select(SleepSessionRecord)
                .where(SleepSessionRecord.sync_status == SyncStatus.PENDING.name)
                .order_by(SleepSessionRecord.start_time_ms),
            )
            return [to_session(r) for r in result.scalars().all()]

    async def mark_synced(self, session_id: SessionId, synced_at: datetime) -> None:
        async with self.db.session() as db:
            await db.execute(
                update(SleepSessionRecord)
                .where(SleepSessionRecord.session_id == session_id)
                .values(
                    sync_status=SyncStatus.SYNCED.name,
                    modified_at_ms=to_ms(synced_at),
                ),
            )
            await db.commit()

    # Baby profiles

    async def get_all_profiles(self) -> list[BabyProfile]:
        async with self.db.session() as db:
            result = await db.execute(
                select(BabyProfileRecord).order_by(BabyProfileRecord.created_at_ms),
            )
            return [to_profile(r) for r in result.scalars().all()]

    async def get_profile(self, baby_id: SubjectId) -> BabyProfile | None:
        async with self.db.session() as db:
            row = await db.get(BabyProfileRecord, baby_id)
            return to_profile(row) if row is not None else None

    async def get_active_profile(self, user_id: str) -> BabyProfile | None:
        async with self.db.session() as db:
            result = await db.execute(
                select(BabyProfileRecord)
                .join(
                    ActiveProfileRecord,
                    ActiveProfileRecord.active_baby_id == BabyProfileRecord.baby_id,
                )
                .where(ActiveProfileRecord.user_id == user_id),
            )
            row = result.scalar_one_or_none()
            return to_profile(row) if row is not None else None

    async def insert_profile(self, profile: BabyProfile) -> None:
        async with self.db.session() as db:
            db.add(BabyProfileRecord(
                baby_id=profile.baby_id,
                name=profile.name,
                birthdate=profile.birthdate,
                created_at_ms=to_ms(profile.created_at),
            ))
            await db.commit()

    async def update_profile(self, profile: BabyProfile) -> None:
        async with self.db.session() as db:
            await db.execute(
                update(BabyProfileRecord)
                .where(BabyProfileRecord.baby_id == profile.baby_id)
                .values(name=profile.name, birthdate=profile.birthdate),
            )
            await db.commit()

    async def delete_profile(self, baby_id: SubjectId) -> None:
        async with self.db.session() as db:
            await db.execute(
                delete(ActiveProfileRecord)
                .where(ActiveProfileRecord.active_baby_id == baby_id),
            )
            await db.execute(
                delete(BabyProfileRecord).where(BabyProfileRecord.baby_id == baby_id),
            )
            await db.commit()

    async def set_active_profile(self, user_id: str, baby_id: SubjectId) -> None:
        async with self.db.session() as db:
            row = await db.get(ActiveProfileRecord, user_id)
            if row is None:
                db.add(ActiveProfileRecord(user_id=user_id, active_baby_id=baby_id))
            else:
                row.active_baby_id = baby_id
            await db.commit()

    # Settings, export, erase

    async def save_setting(self, key: str, value: str) -> None:
        async with self.db.session() as db:
            row = await db.get(UserSettingRecord, key)
            if row is None:
                db.add(UserSettingRecord(key=key, value=value))
            else:
                row.value = value
            await db.commit()

    async def get_setting(self, key: str) -> str | None:
        async with self.db.session() as db:
            row = await db.get(UserSettingRecord, key)
            return row.value if row is not None else None

    async def export_all_data(self) -> str:
        """Everything stored, as one JSON document."""
        async with self.db.session() as db:
            sessions = (await db.execute(
                select(SleepSessionRecord).order_by(SleepSessionRecord.start_time_ms),
            )).scalars().all()
            profiles = (await db.execute(
                select(BabyProfileRecord).order_by(BabyProfileRecord.created_at_ms),
            )).scalars().all()
            settings = (await db.execute(select(UserSettingRecord))).scalars().all()

            document = build_data_export(
                sessions=[to_session(r) for r in sessions],
                profiles=[to_profile(r) for r in profiles],
                settings={s.key: s.value for s in settings},
                exported_at=self.time_provider.now(),
            )
        return json.dumps(document, ensure_ascii=False)

    async def delete_all_data(self) -> None:
        async with self.db.session() as db:
            await db.execute(delete(ActiveProfileRecord))
            await db.execute(delete(SleepSessionRecord))
            await db.execute(delete(UserSettingRecord))
            await db.execute(delete(BabyProfileRecord))
            await db.commit()
        logger.info("All stored data deleted")
