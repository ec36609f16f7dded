"""ORM Models — SQLAlchemy declarative models for persisted entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Timestamps stored as epoch milliseconds (BigInteger), UTC

Design Decisions:
    - One file per entity
    - All models imported here so Base.metadata is complete before create_all
      or alembic autogenerate runs
"""

from somni.models.sleep_session import SleepSessionRecord  # noqa: F401
from somni.models.baby_profile import BabyProfileRecord, ActiveProfileRecord  # noqa: F401
from somni.models.user_setting import UserSettingRecord  # noqa: F401
