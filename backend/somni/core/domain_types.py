"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - SubjectId, SessionId, DeviceId type every id in core, service and
      repository signatures; shell code wraps raw strings where they enter
      (routes, row mapping)
    - QualityScore is bounded 0.0–1.0 when present
    - All valid states encoded as Enums — no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders
    - "No active session" is not a phase of any stored session; it is the
      absence of one (get_active_session returns None)
"""

from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

SubjectId = NewType("SubjectId", str)
SessionId = NewType("SessionId", str)
DeviceId = NewType("DeviceId", str)


# ─── Value Types ─────────────────────────────────────────────────

QualityScore = NewType("QualityScore", float)       # 0.0–1.0
OffsetMinutes = NewType("OffsetMinutes", int)       # UTC offset, signed


# ─── Enums ───────────────────────────────────────────────────────

class SyncStatus(str, Enum):
    """Upload state of a session against the remote backend."""
    PENDING = "PENDING"
    SYNCED = "SYNCED"
    FAILED = "FAILED"


class SessionPhase(str, Enum):
    """Lifecycle phase of one stored session. COMPLETED stays editable."""
    ACTIVE_SESSION = "active_session"
    COMPLETED_SESSION = "completed_session"
