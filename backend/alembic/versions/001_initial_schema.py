"""Initial schema — sleep_sessions, baby_profiles, active_profiles, user_settings.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "sleep_sessions",
        sa.Column("session_id", sa.String(64), primary_key=True),
        sa.Column("subject_id", sa.String(64), nullable=False),
        sa.Column("start_time_ms", sa.BigInteger, nullable=False),
        sa.Column("end_time_ms", sa.BigInteger, nullable=True),
        sa.Column("duration_minutes", sa.Integer, nullable=True),
        sa.Column("quality_score", sa.Float, nullable=True),
        sa.Column("timezone_offset_minutes", sa.Integer, nullable=False, server_default="0"),
        sa.Column("sync_status", sa.String(10), nullable=False, server_default="PENDING"),
        sa.Column("initiator_device_id", sa.String(128), nullable=False),
        sa.Column("modified_at_ms", sa.BigInteger, nullable=False),
        sa.Column("created_at_ms", sa.BigInteger, nullable=False),
    )
    op.create_index(
        "ix_sleep_sessions_subject_start", "sleep_sessions",
        ["subject_id", "start_time_ms"],
    )
    op.create_index(
        "ix_sleep_sessions_sync_status", "sleep_sessions", ["sync_status"],
    )

    op.create_table(
        "baby_profiles",
        sa.Column("baby_id", sa.String(64), primary_key=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("birthdate", sa.Date, nullable=False),
        sa.Column("created_at_ms", sa.BigInteger, nullable=False),
    )

    op.create_table(
        "active_profiles",
        sa.Column("user_id", sa.String(64), primary_key=True),
        sa.Column(
            "active_baby_id", sa.String(64),
            sa.ForeignKey("baby_profiles.baby_id", ondelete="CASCADE"),
            nullable=False,
        ),
    )

    op.create_table(
        "user_settings",
        sa.Column("key", sa.String(128), primary_key=True),
        sa.Column("value", sa.Text, nullable=False),
    )


def downgrade() -> None:
    op.drop_table("user_settings")
    op.drop_table("active_profiles")
    op.drop_table("baby_profiles")
    op.drop_index("ix_sleep_sessions_sync_status", table_name="sleep_sessions")
    op.drop_index("ix_sleep_sessions_subject_start", table_name="sleep_sessions")
    op.drop_table("sleep_sessions")
