"""
Session and Derivation Caches

Sessions hold a loaded dataset with its inferred summary. Derived chart
data is memoized per session in a bounded TTL cache so repeated dashboard
requests skip recomputation.
"""

import hashlib
import time
from collections import OrderedDict
from dataclasses import dataclass, field
from threading import Lock
from typing import Any, Callable, Optional, TypeVar

from api.schemas.responses import DatasetSummary
from config import get_settings
from core.dataset import Dataset
from core.logging_config import cache_logger as logger


T = TypeVar("T")

_MISSING = object()


@dataclass
class _Entry:
    value: Any
    expires_at: float


class TTLCache:
    """
    Bounded LRU map whose entries expire after a fixed lifetime.

    Safe to share between request threads.
    """

    def __init__(self, maxsize: int = 128, ttl_seconds: int = 3600, enabled: bool = True):
        self.maxsize = maxsize
        self.ttl_seconds = ttl_seconds
        self.enabled = enabled
        self.hits = 0
        self.misses = 0
        self._entries: OrderedDict[str, _Entry] = OrderedDict()
        self._lock = Lock()

    @staticmethod
    def make_key(*parts: Any, **options: Any) -> str:
        """Digest of positional parts and sorted keyword options."""
        text = "|".join(
            [repr(p) for p in parts] + [f"{k}={options[k]!r}" for k in sorted(options)]
        )
        return hashlib.md5(text.encode()).hexdigest()

    def session_key(self, session_id: str, *parts: Any, **options: Any) -> str:
        """Key prefixed by the session id, so a session's entries can be dropped together."""
        return f"{session_id}:{self.make_key(*parts, **options)}"

    def _lookup(self, key: str) -> Any:
        entry = self._entries.get(key)
        if entry is None:
            return _MISSING
        if entry.expires_at <= time.monotonic():
            del self._entries[key]
            return _MISSING
        self._entries.move_to_end(key)
        return entry.value

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            value = self._lookup(key)
        return default if value is _MISSING else value

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._entries.pop(key, None)
            while self._entries and len(self._entries) >= self.maxsize:
                self._entries.popitem(last=False)
            self._entries[key] = _Entry(value, time.monotonic() + self.ttl_seconds)

    def get_or_compute(self, key: str, compute: Callable[[], T]) -> T:
        """
        Return the cached value for `key`, computing it on a miss.

        Two threads missing the same key may both compute; the later
        result wins, which is harmless for pure derivations.
        """
        if not self.enabled:
            return compute()

        with self._lock:
            value = self._lookup(key)
            if value is not _MISSING:
                self.hits += 1
                return value
            self.misses += 1

        value = compute()
        self.set(key, value)
        return value

    def invalidate_prefix(self, prefix: str) -> int:
        """Drop every entry whose key starts with `prefix`."""
        with self._lock:
            stale = [key for key in self._entries if key.startswith(prefix)]
            for key in stale:
                del self._entries[key]
        return len(stale)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self.hits = self.misses = 0

    def stats(self) -> dict[str, int]:
        with self._lock:
            return {"size": len(self._entries), "hits": self.hits, "misses": self.misses}

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


@dataclass
class Session:
    """A loaded dataset and its inferred column summary."""

    session_id: str
    name: str
    dataset: Dataset
    summary: DatasetSummary
    created_at: float = field(default_factory=time.time)


class SessionStore:
    """In-memory sessions; a dataset lives only as long as its session."""

    def __init__(self, ttl_seconds: Optional[float] = None):
        if ttl_seconds is None:
            ttl_seconds = get_settings().session_ttl_hours * 3600
        self.ttl_seconds = ttl_seconds
        self._sessions: dict[str, Session] = {}
        self._lock = Lock()

    def _expired(self, session: Session, now: float) -> bool:
        return now - session.created_at > self.ttl_seconds

    def _evict_expired(self) -> None:
        now = time.time()
        for sid in [s for s, session in self._sessions.items() if self._expired(session, now)]:
            del self._sessions[sid]
            logger.debug(f"Session {sid} expired")

    def create(self, session: Session) -> None:
        with self._lock:
            self._sessions[session.session_id] = session
        logger.info(f"Session {session.session_id} created ({session.dataset.row_count} rows)")

    def get(self, session_id: str) -> Optional[Session]:
        """The live session with this id, or None when unknown or expired."""
        with self._lock:
            self._evict_expired()
            return self._sessions.get(session_id)

    def delete(self, session_id: str) -> bool:
        with self._lock:
            return self._sessions.pop(session_id, None) is not None

    def list_sessions(self) -> list[Session]:
        with self._lock:
            self._evict_expired()
            return list(self._sessions.values())

    def clear_all(self) -> int:
        """Remove every session, returning how many were dropped."""
        with self._lock:
            count = len(self._sessions)
            self._sessions.clear()
        return count


# Global instances
_settings = get_settings()
derivation_cache = TTLCache(
    maxsize=_settings.cache.max_size,
    ttl_seconds=_settings.cache.ttl_seconds,
    enabled=_settings.cache.enabled,
)
session_store = SessionStore()
