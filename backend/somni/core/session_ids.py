"""Session Ids — timestamp-plus-random identifiers for new sleep sessions.

Invariants:
    - Format: session-<epoch milliseconds>-<6 lowercase hex digits>
    - Timestamp comes from the injected TimeProvider, never the system clock
    - Uniqueness is finally guaranteed by the repository primary key; a
      collision surfaces as PersistenceError
"""

import random
from datetime import datetime, timedelta, timezone
from typing import Callable, Protocol

from somni.core.domain_types import SessionId
from somni.core.repository_protocols import TimeProvider

RANDOM_SUFFIX_BITS = 24
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
MILLISECOND = timedelta(milliseconds=1)


class SessionIdGenerator(Protocol):
    def generate(self) -> SessionId: ...


class DefaultSessionIdGenerator:
    """Combines clock milliseconds with a 24-bit random suffix."""

    def __init__(
        self,
        time_provider: TimeProvider,
        randbits: Callable[[int], int] = random.getrandbits,
    ):
        self._time_provider = time_provider
        self._randbits = randbits

    def generate(self) -> SessionId:
        ms = (self._time_provider.now() - EPOCH) // MILLISECOND
        suffix = self._randbits(RANDOM_SUFFIX_BITS)
        return SessionId(f"session-{ms}-{suffix:06x}")
