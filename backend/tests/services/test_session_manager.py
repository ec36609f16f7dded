"""Sleep session manager — lifecycle orchestration over an in-memory repository.

Tests cover:
    - start/end/edit/delete happy paths with a controllable clock
    - Conflict, NotFound, InvalidState, InvalidArgument failures
    - concurrent starts for one subject yield exactly one open session
    - repository failures pass through unchanged
"""

import asyncio
import gc
from datetime import timedelta

import pytest

from somni.core.domain_types import SyncStatus
from somni.core.errors import (
    ActiveSessionConflictError,
    InvalidArgumentError,
    InvalidStateError,
    PersistenceError,
    ResourceNotFoundError,
)
from somni.services.session_manager import SleepSessionManager, SubjectLocks

from tests.fakes import (
    FIXED_INSTANT, CountingIdGenerator, FixedClock, InMemorySleepRepository, make_session,
)


def _manager(sessions=None, clock=None):
    clock = clock or FixedClock()
    repo = InMemorySleepRepository(sessions, clock)
    return SleepSessionManager(repo, clock, CountingIdGenerator()), repo, clock


# ─── start ───────────────────────────────────────────────────────

async def test_start_session_persists_open_session():
    manager, repo, _ = _manager()

    session = await manager.start_session("baby1", "device1", 120)

    assert session.session_id == "session-test-1"
    assert session.start_time == FIXED_INSTANT
    assert session.end_time is None
    assert session.duration_minutes is None
    assert session.timezone_offset_minutes == 120
    assert session.sync_status == SyncStatus.PENDING
    assert repo.sessions["session-test-1"] == session


async def test_start_session_conflict_names_active_session():
    manager, repo, _ = _manager([make_session(session_id="active-1")])

    with pytest.raises(ActiveSessionConflictError) as exc:
        await manager.start_session("baby1", "device1")

    assert "active-1" in exc.value.message
    assert exc.value.existing_session_id == "active-1"
    assert repo.inserts == 0


async def test_other_subject_may_start_while_one_is_active():
    manager, _, _ = _manager([make_session(session_id="active-1", subject_id="baby1")])
    session = await manager.start_session("baby2", "device1")
    assert session.subject_id == "baby2"


async def test_concurrent_starts_for_same_subject_allow_only_one():
    manager, repo, _ = _manager()

    results = await asyncio.gather(
        *(manager.start_session("baby1", f"device{i}") for i in range(5)),
        return_exceptions=True,
    )

    started = [r for r in results if not isinstance(r, Exception)]
    conflicts = [r for r in results if isinstance(r, ActiveSessionConflictError)]
    assert len(started) == 1
    assert len(conflicts) == 4
    assert repo.inserts == 1
    assert all(c.existing_session_id == started[0].session_id for c in conflicts)


async def test_concurrent_starts_for_different_subjects_all_succeed():
    manager, repo, _ = _manager()
    results = await asyncio.gather(
        *(manager.start_session(f"baby{i}", "device") for i in range(3)),
    )
    assert {s.subject_id for s in results} == {"baby0", "baby1", "baby2"}
    assert repo.inserts == 3


# ─── end ─────────────────────────────────────────────────────────

async def test_end_session_computes_duration():
    manager, repo, clock = _manager()
    started = await manager.start_session("baby1", "device1")
    clock.advance(timedelta(minutes=127))

    ended = await manager.end_session(started.session_id)

    assert ended.end_time == FIXED_INSTANT + timedelta(minutes=127)
    assert ended.duration_minutes == 127
    assert ended.modified_at == ended.end_time
    assert repo.sessions[started.session_id] == ended
    assert await manager.get_active_session("baby1") is None


async def test_end_session_truncates_seconds():
    manager, _, clock = _manager()
    started = await manager.start_session("baby1", "device1")
    clock.advance(timedelta(minutes=45, seconds=30))

    ended = await manager.end_session(started.session_id)

    assert ended.duration_minutes == 45


async def test_end_unknown_session_raises_not_found():
    manager, _, _ = _manager()
    with pytest.raises(ResourceNotFoundError):
        await manager.end_session("missing")


async def test_end_completed_session_raises_invalid_state():
    done = make_session(session_id="done", end_time=FIXED_INSTANT + timedelta(minutes=60))
    manager, _, _ = _manager([done])
    with pytest.raises(InvalidStateError):
        await manager.end_session("done")


async def test_new_session_allowed_after_end():
    manager, _, clock = _manager()
    first = await manager.start_session("baby1", "device1")
    clock.advance(timedelta(minutes=30))
    await manager.end_session(first.session_id)
    clock.advance(timedelta(minutes=90))

    second = await manager.start_session("baby1", "device1")

    assert second.session_id != first.session_id
    assert second.start_time == FIXED_INSTANT + timedelta(minutes=120)


# ─── update ──────────────────────────────────────────────────────

async def test_update_session_recomputes_duration_and_stamps_now():
    done = make_session(session_id="s-edit", end_time=FIXED_INSTANT + timedelta(minutes=60))
    clock = FixedClock(FIXED_INSTANT + timedelta(hours=3))
    manager, repo, _ = _manager([done], clock)

    updated = await manager.update_session(
        "s-edit", start_time=FIXED_INSTANT + timedelta(minutes=15),
    )

    assert updated.duration_minutes == 45
    assert updated.modified_at == FIXED_INSTANT + timedelta(hours=3)
    assert repo.sessions["s-edit"] == updated


async def test_update_session_rejects_end_before_start():
    done = make_session(session_id="s-edit", end_time=FIXED_INSTANT + timedelta(minutes=60))
    manager, repo, _ = _manager([done])

    with pytest.raises(InvalidArgumentError):
        await manager.update_session("s-edit", end_time=FIXED_INSTANT - timedelta(minutes=10))

    assert repo.sessions["s-edit"] == done


async def test_update_unknown_session_raises_not_found():
    manager, _, _ = _manager()
    with pytest.raises(ResourceNotFoundError):
        await manager.update_session("missing", start_time=FIXED_INSTANT)


# ─── reads, delete, sync ─────────────────────────────────────────

async def test_history_is_pass_through_with_lookback():
    old = make_session(session_id="old", start_time=FIXED_INSTANT - timedelta(days=20),
                       end_time=FIXED_INSTANT - timedelta(days=20) + timedelta(hours=1))
    recent = make_session(session_id="recent", start_time=FIXED_INSTANT - timedelta(days=2),
                          end_time=FIXED_INSTANT - timedelta(days=2) + timedelta(hours=1))
    manager, _, _ = _manager([old, recent])

    assert [s.session_id for s in await manager.get_sleep_history("baby1", 7)] == ["recent"]
    assert [s.session_id for s in await manager.get_sleep_history("baby1", 30)] == ["recent", "old"]


async def test_delete_session():
    manager, repo, _ = _manager([make_session(session_id="gone")])
    await manager.delete_session("gone")
    assert "gone" not in repo.sessions


async def test_delete_unknown_session_raises_not_found():
    manager, _, _ = _manager()
    with pytest.raises(ResourceNotFoundError):
        await manager.delete_session("missing")


async def test_mark_synced_removes_from_pending():
    manager, repo, _ = _manager([make_session(session_id="p1"), make_session(session_id="p2", subject_id="b2")])

    await manager.mark_synced("p1")

    pending = await manager.get_pending_sync_sessions()
    assert [s.session_id for s in pending] == ["p2"]
    assert repo.sessions["p1"].sync_status == SyncStatus.SYNCED


async def test_mark_synced_unknown_raises_not_found():
    manager, _, _ = _manager()
    with pytest.raises(ResourceNotFoundError):
        await manager.mark_synced("missing")


async def test_persistence_error_passes_through_unchanged():
    manager, repo, _ = _manager()
    failure = PersistenceError("disk full", "commit")

    async def broken_insert(session):
        raise failure

    repo.insert_session = broken_insert

    with pytest.raises(PersistenceError) as exc:
        await manager.start_session("baby1", "device1")
    assert exc.value is failure


def test_subject_locks_are_per_subject_and_released_when_unused():
    locks = SubjectLocks()
    a = locks.for_subject("a")
    b = locks.for_subject("b")

    assert locks.for_subject("a") is a
    assert b is not a
    assert len(locks) == 2

    del a, b
    gc.collect()
    assert len(locks) == 0


async def test_locks_do_not_accumulate_across_many_subjects():
    manager, repo, clock = _manager()

    for i in range(200):
        session = await manager.start_session(f"baby{i}", "device1")
        clock.advance(timedelta(minutes=1))
        await manager.end_session(session.session_id)

    gc.collect()
    assert len(manager.locks) == 0
    assert repo.inserts == 200


async def test_waiters_share_one_lock_while_it_is_held():
    manager, repo, _ = _manager()

    results = await asyncio.gather(
        *(manager.start_session("baby1", "device1") for _ in range(3)),
        return_exceptions=True,
    )

    assert sum(1 for r in results if not isinstance(r, Exception)) == 1
    assert repo.inserts == 1
    del results
    gc.collect()
    assert len(manager.locks) == 0


def test_injected_empty_lock_registry_is_kept():
    locks = SubjectLocks()
    manager = SleepSessionManager(InMemorySleepRepository(), FixedClock(), locks=locks)
    assert manager.locks is locks
