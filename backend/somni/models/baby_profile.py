"""Baby Profile ORM — tracked subjects and each user's active selection."""

from datetime import date

from sqlalchemy import BigInteger, Date, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from somni.db.base import Base


class BabyProfileRecord(Base):
    __tablename__ = "baby_profiles"

    baby_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    birthdate: Mapped[date] = mapped_column(Date, nullable=False)
    created_at_ms: Mapped[int] = mapped_column(BigInteger, nullable=False)


class ActiveProfileRecord(Base):
    """Which profile a user currently tracks. One row per user."""
    __tablename__ = "active_profiles"

    user_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    active_baby_id: Mapped[str] = mapped_column(
        String(64), ForeignKey("baby_profiles.baby_id", ondelete="CASCADE"),
        nullable=False,
    )
