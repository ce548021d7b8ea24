"""Process-local response cache with exact tag invalidation.

Every entry belongs to exactly one tag. Mutations name a `MutationKind`, and
`INVALIDATION_MAP` decides which tags it clears. Entries are never matched by
substring. The cache is not a source of truth: bypassing or clearing it is
always safe, the only promise is that nothing is served past its tag's TTL.
"""
from __future__ import annotations

import logging
import threading
import time
from collections.abc import Hashable
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Mapping, Optional

logger = logging.getLogger(__name__)


class CacheTag(str, Enum):
    STUDENT_DAYS = "student-days"
    STUDENT_SESSIONS = "student-sessions"
    ADMIN_DAYS = "admin-days"
    ADMIN_SESSIONS = "admin-sessions"
    ADMIN_PROGRESS = "admin-progress"
    SYNC = "sync"


class MutationKind(str, Enum):
    DAY_CHANGED = "day-changed"
    SESSION_CHANGED = "session-changed"
    ATTENDANCE_WINDOW_CHANGED = "attendance-window-changed"
    ATTENDANCE_OVERRIDDEN = "attendance-overridden"
    SESSIONS_AUTO_CLOSED = "sessions-auto-closed"
    ATTENDANCE_MARKED = "attendance-marked"
    ASSIGNMENT_SUBMITTED = "assignment-submitted"


INVALIDATION_MAP: Mapping[MutationKind, frozenset[CacheTag]] = {
    MutationKind.DAY_CHANGED: frozenset(
        {
            CacheTag.ADMIN_DAYS,
            CacheTag.STUDENT_DAYS,
            CacheTag.ADMIN_SESSIONS,
            CacheTag.STUDENT_SESSIONS,
            CacheTag.ADMIN_PROGRESS,
            CacheTag.SYNC,
        }
    ),
    MutationKind.SESSION_CHANGED: frozenset({CacheTag.ADMIN_SESSIONS, CacheTag.STUDENT_SESSIONS, CacheTag.SYNC}),
    MutationKind.ATTENDANCE_WINDOW_CHANGED: frozenset(
        {CacheTag.ADMIN_SESSIONS, CacheTag.STUDENT_SESSIONS, CacheTag.ADMIN_PROGRESS, CacheTag.SYNC}
    ),
    MutationKind.ATTENDANCE_OVERRIDDEN: frozenset({CacheTag.ADMIN_PROGRESS}),
    MutationKind.SESSIONS_AUTO_CLOSED: frozenset(
        {CacheTag.ADMIN_SESSIONS, CacheTag.STUDENT_SESSIONS, CacheTag.ADMIN_PROGRESS, CacheTag.SYNC}
    ),
    MutationKind.ATTENDANCE_MARKED: frozenset({CacheTag.ADMIN_PROGRESS}),
    MutationKind.ASSIGNMENT_SUBMITTED: frozenset({CacheTag.ADMIN_PROGRESS}),
}

DEFAULT_TTLS: Mapping[CacheTag, float] = {
    CacheTag.STUDENT_SESSIONS: 1.0,
    CacheTag.STUDENT_DAYS: 30.0,
    CacheTag.ADMIN_DAYS: 30.0,
    CacheTag.ADMIN_SESSIONS: 30.0,
    CacheTag.ADMIN_PROGRESS: 60.0,
    CacheTag.SYNC: 5.0,
}


@dataclass(frozen=True)
class CacheKey:
    tag: CacheTag
    identity: Optional[str]
    params: tuple[tuple[str, Hashable], ...]


@dataclass(frozen=True)
class CacheEntry:
    value: Any
    written_at: float


def normalize_params(params: Optional[Mapping[str, Any]]) -> tuple[tuple[str, Hashable], ...]:
    if not params:
        return ()
    out = []
    for k in sorted(params):
        v = params[k]
        if isinstance(v, (list, tuple)):
            v = tuple(str(x) for x in v)
        elif not isinstance(v, Hashable):
            v = repr(v)
        out.append((str(k), v))
    return tuple(out)


class ResponseCache:
    """Thread-safe TTL cache keyed by (tag, identity, params)."""

    def __init__(
        self,
        ttls: Optional[Mapping[CacheTag | str, float]] = None,
        *,
        clock: Callable[[], float] = time.monotonic,
        enabled: bool = True,
    ):
        merged = dict(DEFAULT_TTLS)
        for tag, ttl in (ttls or {}).items():
            merged[CacheTag(tag)] = float(ttl)
        self._ttls = merged
        self._clock = clock
        self._enabled = enabled
        self._entries: dict[CacheKey, CacheEntry] = {}
        # Bumped on every invalidation so a compute that started before a
        # mutation cannot store its (pre-mutation) result afterwards.
        self._generations: dict[CacheTag, int] = {tag: 0 for tag in CacheTag}
        self._lock = threading.Lock()

    @staticmethod
    def make_key(tag: CacheTag, identity: Optional[str] = None, params: Optional[Mapping[str, Any]] = None) -> CacheKey:
        return CacheKey(tag=CacheTag(tag), identity=identity, params=normalize_params(params))

    def get(self, key: CacheKey) -> Optional[Any]:
        if not self._enabled:
            return None
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._clock() - entry.written_at >= self._ttls[key.tag]:
                del self._entries[key]
                return None
            return entry.value

    def generation(self, tag: CacheTag) -> int:
        with self._lock:
            return self._generations[CacheTag(tag)]

    def set(self, key: CacheKey, value: Any, *, generation: Optional[int] = None) -> bool:
        if not self._enabled:
            return False
        with self._lock:
            if generation is not None and generation != self._generations[key.tag]:
                return False
            now = self._clock()
            self._evict_expired(now)
            self._entries[key] = CacheEntry(value=value, written_at=now)
            return True

    def _evict_expired(self, now: float) -> None:
        # Keys carry identity and query params, so entries that are never read
        # again must still go once their TTL has passed. Caller holds the lock.
        stale = [k for k, e in self._entries.items() if now - e.written_at >= self._ttls[k.tag]]
        for k in stale:
            del self._entries[k]

    def invalidate_tags(self, tags) -> int:
        tags = {CacheTag(t) for t in tags}
        with self._lock:
            for tag in tags:
                self._generations[tag] += 1
            doomed = [k for k in self._entries if k.tag in tags]
            for k in doomed:
                del self._entries[k]
        if doomed:
            logger.debug("Cache cleared %s entries for %s", len(doomed), sorted(t.value for t in tags))
        return len(doomed)

    def invalidate(self, kind: MutationKind) -> int:
        return self.invalidate_tags(INVALIDATION_MAP[kind])

    def clear(self) -> int:
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
            for tag in self._generations:
                self._generations[tag] += 1
        logger.info("Cache cleared: ALL (%s entries)", count)
        return count

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
