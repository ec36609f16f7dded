"""User Setting ORM — free-form key/value preferences."""

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from somni.db.base import Base


class UserSettingRecord(Base):
    __tablename__ = "user_settings"

    key: Mapped[str] = mapped_column(String(128), primary_key=True)
    value: Mapped[str] = mapped_column(Text, nullable=False)
