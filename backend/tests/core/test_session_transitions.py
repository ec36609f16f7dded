"""Session transitions — pure start/end/edit rules.

Tests cover:
    - open_session builds a pending, open session stamped at now
    - open_session refuses when the subject already has an open session
    - close_session floors elapsed minutes and refuses completed sessions
    - edit_session recomputes duration and rejects end before start
"""

from datetime import timedelta

import pytest

from somni.core.domain_types import SessionPhase, SyncStatus
from somni.core.errors import (
    ActiveSessionConflictError, ConflictError, InvalidArgumentError, InvalidStateError,
)
from somni.core.session_transitions import close_session, edit_session, open_session

from tests.fakes import FIXED_INSTANT, make_session


def _open(active=None):
    return open_session(
        session_id="new-1", subject_id="baby1", device_id="watch",
        timezone_offset_minutes=-300, now=FIXED_INSTANT, active=active,
    )


# ─── open_session ────────────────────────────────────────────────

def test_open_session_fields():
    s = _open()
    assert s.session_id == "new-1"
    assert s.subject_id == "baby1"
    assert s.initiator_device_id == "watch"
    assert s.start_time == FIXED_INSTANT
    assert s.end_time is None
    assert s.duration_minutes is None
    assert s.sync_status == SyncStatus.PENDING
    assert s.modified_at == s.created_at == FIXED_INSTANT
    assert s.timezone_offset_minutes == -300
    assert s.phase == SessionPhase.ACTIVE_SESSION


def test_open_session_conflict_names_existing_session():
    with pytest.raises(ActiveSessionConflictError) as exc:
        _open(active=make_session(session_id="active-1"))
    assert exc.value.existing_session_id == "active-1"
    assert "active-1" in str(exc.value)
    assert isinstance(exc.value, ConflictError)
    assert exc.value.http_status == 409


def test_open_session_ignores_completed_lookup_result():
    done = make_session(session_id="done-1", end_time=FIXED_INSTANT - timedelta(minutes=5))
    assert not done.is_active
    assert _open(active=done).is_active


# ─── close_session ───────────────────────────────────────────────

def test_close_session_sets_end_and_duration():
    closed = close_session(make_session(), FIXED_INSTANT + timedelta(minutes=90))
    assert closed.end_time == FIXED_INSTANT + timedelta(minutes=90)
    assert closed.duration_minutes == 90
    assert closed.modified_at == closed.end_time
    assert closed.phase == SessionPhase.COMPLETED_SESSION


def test_close_session_truncates_sub_minute_remainder():
    closed = close_session(make_session(), FIXED_INSTANT + timedelta(minutes=45, seconds=30))
    assert closed.duration_minutes == 45


def test_close_session_never_negative():
    closed = close_session(make_session(), FIXED_INSTANT - timedelta(minutes=3))
    assert closed.duration_minutes == 0


def test_close_session_rejects_completed():
    done = make_session(end_time=FIXED_INSTANT + timedelta(minutes=60))
    with pytest.raises(InvalidStateError):
        close_session(done, FIXED_INSTANT + timedelta(minutes=90))


def test_close_session_does_not_mutate_input():
    original = make_session()
    close_session(original, FIXED_INSTANT + timedelta(minutes=5))
    assert original.end_time is None


# ─── edit_session ────────────────────────────────────────────────

def _done():
    return make_session(end_time=FIXED_INSTANT + timedelta(minutes=60))


def test_edit_start_keeps_end_and_recomputes_duration():
    now = FIXED_INSTANT + timedelta(days=1)
    edited = edit_session(_done(), FIXED_INSTANT + timedelta(minutes=15), None, now)
    assert edited.end_time == FIXED_INSTANT + timedelta(minutes=60)
    assert edited.duration_minutes == 45
    assert edited.modified_at == now


def test_edit_end_keeps_start():
    edited = edit_session(_done(), None, FIXED_INSTANT + timedelta(minutes=90), FIXED_INSTANT)
    assert edited.start_time == FIXED_INSTANT
    assert edited.duration_minutes == 90


def test_edit_open_session_start_only_stays_open():
    edited = edit_session(make_session(), FIXED_INSTANT - timedelta(minutes=10), None, FIXED_INSTANT)
    assert edited.end_time is None
    assert edited.duration_minutes is None


def test_edit_can_close_an_open_session():
    edited = edit_session(make_session(), None, FIXED_INSTANT + timedelta(minutes=30), FIXED_INSTANT)
    assert edited.duration_minutes == 30


def test_edit_rejects_end_before_start():
    with pytest.raises(InvalidArgumentError) as exc:
        edit_session(_done(), None, FIXED_INSTANT - timedelta(minutes=10), FIXED_INSTANT)
    assert exc.value.field == "end_time"


def test_edit_rejects_start_moved_after_existing_end():
    with pytest.raises(InvalidArgumentError):
        edit_session(_done(), FIXED_INSTANT + timedelta(hours=2), None, FIXED_INSTANT)


def test_edit_allows_zero_length_session():
    edited = edit_session(_done(), None, FIXED_INSTANT, FIXED_INSTANT)
    assert edited.duration_minutes == 0
