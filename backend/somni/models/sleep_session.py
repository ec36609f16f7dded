"""Sleep Session ORM — one row per sleep period.

Invariants:
    - session_id is the primary key; a duplicate insert is an IntegrityError
    - end_time_ms IS NULL <=> duration_minutes IS NULL
    - sync_status holds a SyncStatus name

Design Decisions:
    - Epoch-millisecond integers instead of DateTime: identical precision on
      SQLite and PostgreSQL, no naive/aware conversion on read
"""

from sqlalchemy import BigInteger, Float, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from somni.db.base import Base


class SleepSessionRecord(Base):
    __tablename__ = "sleep_sessions"
    __table_args__ = (
        Index("ix_sleep_sessions_subject_start", "subject_id", "start_time_ms"),
    )

    session_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    subject_id: Mapped[str] = mapped_column(String(64), nullable=False)
    start_time_ms: Mapped[int] = mapped_column(BigInteger, nullable=False)
    end_time_ms: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    duration_minutes: Mapped[int | None] = mapped_column(Integer, nullable=True)
    quality_score: Mapped[float | None] = mapped_column(Float, nullable=True)
    timezone_offset_minutes: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0,
    )
    sync_status: Mapped[str] = mapped_column(
        String(10), nullable=False, default="PENDING", index=True,
    )
    initiator_device_id: Mapped[str] = mapped_column(String(128), nullable=False)
    modified_at_ms: Mapped[int] = mapped_column(BigInteger, nullable=False)
    created_at_ms: Mapped[int] = mapped_column(BigInteger, nullable=False)
