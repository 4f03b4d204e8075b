"""
Session Store

Per-session, append-only utterance logs keyed by a client-generated session
id. Two backends share one async interface:

  InMemorySessionStore: process-local, per-session locks, TTL measured from
                        last activity, bounded entries per session
  RedisSessionStore:    one Redis list per session (RPUSH + LTRIM + EXPIRE
                        in a single transaction) for multi-worker deployments

`record` appends and returns a snapshot taken atomically with the append, so
the last entry of the snapshot is always the one just recorded even when
requests for the same session interleave.

Entries of one session are returned in the order the store received them.
"""

from __future__ import annotations

import json
import threading
import time
from collections import deque
from dataclasses import asdict, dataclass
from typing import Callable, Optional, Protocol

import redis.asyncio as aioredis

from jeetable.logging_config import get_logger
from jeetable.pipeline_logger import log_error, log_session

logger = get_logger(__name__)


@dataclass(frozen=True)
class SessionEntry:
    utterance: str
    timestamp: float
    page_url: str = ""
    intent: Optional[str] = None

    def to_json(self) -> str:
        return json.dumps(asdict(self), ensure_ascii=False)

    @classmethod
    def from_json(cls, raw: str) -> "SessionEntry":
        data = json.loads(raw)
        return cls(
            utterance=data.get("utterance", ""),
            timestamp=float(data.get("timestamp", 0.0)),
            page_url=data.get("page_url") or "",
            intent=data.get("intent"),
        )


class SessionStore(Protocol):
    async def append(self, session_id: str, entry: SessionEntry) -> int:
        """Append ``entry`` and return the log length afterwards."""
        ...

    async def record(self, session_id: str, entry: SessionEntry) -> list[SessionEntry]:
        """Append ``entry`` and return the log as it stood right after it, ending with ``entry``."""
        ...

    async def get_history(self, session_id: str) -> list[SessionEntry]:
        ...

    async def evict(self, session_id: str) -> bool:
        ...

    async def evict_expired(self) -> int:
        ...

    async def get_stats(self) -> dict:
        ...

    async def close(self) -> None:
        ...


# ============================================================================
# In-memory backend
# ============================================================================


class _SessionLog:
    __slots__ = ("entries", "last_seen", "lock")

    def __init__(self, max_entries: int, now: float):
        self.entries: deque[SessionEntry] = deque(maxlen=max_entries)
        self.last_seen = now
        self.lock = threading.Lock()


class InMemorySessionStore:
    """
    Process-local session store.

    Usage:
        store = InMemorySessionStore(ttl_seconds=1800, max_entries=200)
        await store.append("sess-1", SessionEntry("open jobs", time.time(), "/"))
        history = await store.get_history("sess-1")

    A session idle for longer than ``ttl_seconds`` is dropped and the next
    append starts a fresh log. Once a log holds ``max_entries`` entries the
    oldest one is discarded on each append. Expired sessions are swept at
    most every ``sweep_interval`` seconds during appends.
    """

    def __init__(
        self,
        ttl_seconds: float = 1800,
        max_entries: int = 200,
        sweep_interval: float = 60,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self._ttl = ttl_seconds
        self._max_entries = max_entries
        self._sweep_interval = sweep_interval
        self._clock = clock
        self._sessions: dict[str, _SessionLog] = {}
        self._map_lock = threading.Lock()
        self._last_sweep = clock()

    @property
    def backend(self) -> str:
        return "memory"

    def _expired(self, log: _SessionLog, now: float) -> bool:
        return self._ttl > 0 and now - log.last_seen > self._ttl

    def _get_or_create(self, session_id: str, now: float) -> _SessionLog:
        with self._map_lock:
            log = self._sessions.get(session_id)
            if log is None or self._expired(log, now):
                log = _SessionLog(self._max_entries, now)
                self._sessions[session_id] = log
            return log

    async def _append(self, session_id: str, entry: SessionEntry) -> list[SessionEntry]:
        now = self._clock()
        log = self._get_or_create(session_id, now)
        with log.lock:
            if len(log.entries) == self._max_entries:
                log_session("Session log full, dropping oldest entry", {"session": session_id})
            log.entries.append(entry)
            log.last_seen = now
            snapshot = list(log.entries)

        if now - self._last_sweep >= self._sweep_interval:
            await self.evict_expired()
        return snapshot

    async def append(self, session_id: str, entry: SessionEntry) -> int:
        return len(await self._append(session_id, entry))

    async def record(self, session_id: str, entry: SessionEntry) -> list[SessionEntry]:
        return await self._append(session_id, entry)

    async def get_history(self, session_id: str) -> list[SessionEntry]:
        now = self._clock()
        with self._map_lock:
            log = self._sessions.get(session_id)
            if log is None:
                return []
            if self._expired(log, now):
                del self._sessions[session_id]
                return []
        with log.lock:
            return list(log.entries)

    async def evict(self, session_id: str) -> bool:
        with self._map_lock:
            return self._sessions.pop(session_id, None) is not None

    async def evict_expired(self) -> int:
        now = self._clock()
        with self._map_lock:
            expired = [sid for sid, log in self._sessions.items() if self._expired(log, now)]
            for sid in expired:
                del self._sessions[sid]
            self._last_sweep = now
        if expired:
            log_session("Evicted expired sessions", {"count": len(expired)})
        return len(expired)

    async def get_stats(self) -> dict:
        with self._map_lock:
            sessions = len(self._sessions)
        return {
            "available": True,
            "backend": self.backend,
            "sessions": sessions,
            "ttl_seconds": self._ttl,
            "max_entries": self._max_entries,
        }

    async def close(self):
        return None


# ============================================================================
# Redis backend
# ============================================================================


class RedisSessionStore:
    """
    Redis-backed session store.

    Usage:
        store = RedisSessionStore(redis_host="redis")
        if not await store.connect():
            ...  # fall back to InMemorySessionStore

    Key format: {key_prefix}{session_id}, a Redis list of JSON entries.
    Redis applies the TTL; it is refreshed on every append.
    """

    def __init__(
        self,
        redis_host: str = "127.0.0.1",
        redis_port: int = 6379,
        redis_password: str = "",
        redis_db: int = 0,
        ttl_seconds: int = 1800,
        max_entries: int = 200,
        key_prefix: str = "session:v1:",
    ):
        self._host = redis_host
        self._port = redis_port
        self._password = redis_password or None
        self._db = redis_db
        self._ttl = ttl_seconds
        self._max_entries = max_entries
        self._prefix = key_prefix
        self._redis: Optional[aioredis.Redis] = None

    @property
    def backend(self) -> str:
        return "redis"

    @property
    def available(self) -> bool:
        return self._redis is not None

    def _key(self, session_id: str) -> str:
        return f"{self._prefix}{session_id}"

    def _client(self) -> aioredis.Redis:
        if self._redis is None:
            raise RuntimeError("RedisSessionStore not connected. Call connect() first.")
        return self._redis

    async def connect(self) -> bool:
        """Connect to Redis. Returns True if successful."""
        try:
            self._redis = aioredis.Redis(
                host=self._host,
                port=self._port,
                password=self._password,
                db=self._db,
                decode_responses=True,
            )
            await self._redis.ping()
            log_session("RedisSessionStore connected", {"host": self._host, "port": self._port})
            return True
        except Exception as e:
            log_error("SESSION", f"Redis connection failed: {e}", e)
            self._redis = None
            return False

    async def _write(self, session_id: str, entry: SessionEntry, snapshot: bool) -> list:
        key = self._key(session_id)
        async with self._client().pipeline(transaction=True) as pipe:
            pipe.rpush(key, entry.to_json())
            pipe.ltrim(key, -self._max_entries, -1)
            if self._ttl > 0:
                pipe.expire(key, int(self._ttl))
            if snapshot:
                pipe.lrange(key, 0, -1)
            return await pipe.execute()

    async def append(self, session_id: str, entry: SessionEntry) -> int:
        with logger.session_span("append", session=session_id):
            results = await self._write(session_id, entry, snapshot=False)
        return min(int(results[0]), self._max_entries)

    async def record(self, session_id: str, entry: SessionEntry) -> list[SessionEntry]:
        with logger.session_span("record", session=session_id):
            results = await self._write(session_id, entry, snapshot=True)
        return [SessionEntry.from_json(row) for row in results[-1]]

    async def get_history(self, session_id: str) -> list[SessionEntry]:
        with logger.session_span("get_history", session=session_id):
            rows = await self._client().lrange(self._key(session_id), 0, -1)
        return [SessionEntry.from_json(row) for row in rows]

    async def evict(self, session_id: str) -> bool:
        with logger.session_span("evict", session=session_id):
            return bool(await self._client().delete(self._key(session_id)))

    async def evict_expired(self) -> int:
        # Redis expires keys on its own
        return 0

    async def get_stats(self) -> dict:
        if not self._redis:
            return {"available": False, "backend": self.backend}

        try:
            cursor = 0
            count = 0
            while True:
                cursor, keys = await self._redis.scan(cursor, match=f"{self._prefix}*", count=100)
                count += len(keys)
                if cursor == 0:
                    break

            return {
                "available": True,
                "backend": self.backend,
                "sessions": count,
                "host": self._host,
                "ttl_seconds": self._ttl,
                "max_entries": self._max_entries,
            }
        except Exception as e:
            return {"available": False, "backend": self.backend, "error": str(e)}

    async def close(self):
        if self._redis:
            await self._redis.aclose()
            self._redis = None
