"""
TTL response cache for idempotent, non-generative AI calls (key validation
pings, research lookups). Code generation results are never cached.

Entries expire lazily on read and via a periodic sweep. There is no size
bound. Concurrent writers on the same key: last write wins.
"""

import asyncio
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Protocol

from sqlalchemy.engine import Engine

from ai_editor.core.config import CacheConfig
from ai_editor.core.database import get_session_factory, init_db
from ai_editor.core.logging import get_logger
from ai_editor.models import CachedResponse

logger = get_logger()


@dataclass(frozen=True)
class CacheEntry:
    key: str
    value: Any
    inserted_at: float
    ttl_seconds: float

    def is_expired(self, now: float) -> bool:
        return now >= self.inserted_at + self.ttl_seconds


class CacheStore(Protocol):
    """Key/value backend for ResponseCache."""

    def get(self, key: str) -> Optional[CacheEntry]: ...

    def put(self, entry: CacheEntry) -> None: ...

    def delete(self, key: str) -> bool: ...

    def clear(self) -> int: ...

    def purge_expired(self, now: float) -> int: ...

    def count(self) -> int: ...


class MemoryCacheStore:
    """In-process dict store (default)."""

    def __init__(self):
        self._entries: Dict[str, CacheEntry] = {}

    def get(self, key: str) -> Optional[CacheEntry]:
        return self._entries.get(key)

    def put(self, entry: CacheEntry) -> None:
        self._entries[entry.key] = entry

    def delete(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    def clear(self) -> int:
        count = len(self._entries)
        self._entries.clear()
        return count

    def purge_expired(self, now: float) -> int:
        expired = [k for k, e in list(self._entries.items()) if e.is_expired(now)]
        for key in expired:
            self._entries.pop(key, None)
        return len(expired)

    def count(self) -> int:
        return len(self._entries)


class SQLCacheStore:
    """SQLite-backed store so cached lookups survive restarts."""

    def __init__(self, engine: Optional[Engine] = None):
        init_db(engine)
        self._session_factory = get_session_factory(engine)

    def get(self, key: str) -> Optional[CacheEntry]:
        with self._session_factory() as db:
            row = db.get(CachedResponse, key)
            if row is None:
                return None
            return CacheEntry(row.key, row.value, row.inserted_at, row.ttl_seconds)

    def put(self, entry: CacheEntry) -> None:
        with self._session_factory() as db:
            db.merge(
                CachedResponse(
                    key=entry.key,
                    value=entry.value,
                    inserted_at=entry.inserted_at,
                    ttl_seconds=entry.ttl_seconds,
                )
            )
            db.commit()

    def delete(self, key: str) -> bool:
        with self._session_factory() as db:
            count = db.query(CachedResponse).filter(CachedResponse.key == key).delete()
            db.commit()
            return count > 0

    def clear(self) -> int:
        with self._session_factory() as db:
            count = db.query(CachedResponse).delete()
            db.commit()
            return count

    def purge_expired(self, now: float) -> int:
        with self._session_factory() as db:
            count = (
                db.query(CachedResponse)
                .filter(CachedResponse.inserted_at + CachedResponse.ttl_seconds <= now)
                .delete(synchronize_session=False)
            )
            db.commit()
            return count

    def count(self) -> int:
        with self._session_factory() as db:
            return db.query(CachedResponse).count()


class ResponseCache:
    """TTL cache in front of a CacheStore."""

    def __init__(
        self,
        store: Optional[CacheStore] = None,
        default_ttl: float = 120,
        check_period: float = 60,
        clock: Callable[[], float] = time.time,
    ):
        self._store = store if store is not None else MemoryCacheStore()
        self.default_ttl = default_ttl
        self.check_period = check_period
        self._clock = clock
        self._hits = 0
        self._misses = 0
        self._sweeper: Optional[asyncio.Task] = None

    def get(self, key: str) -> Optional[Any]:
        """Return the cached value, or None if absent or expired."""
        entry = self._store.get(key)
        if entry is None:
            self._misses += 1
            return None
        if entry.is_expired(self._clock()):
            self._store.delete(key)
            self._misses += 1
            return None
        self._hits += 1
        return entry.value

    def set(self, key: str, value: Any, ttl_seconds: Optional[float] = None) -> None:
        if value is None:
            raise ValueError("Cannot cache None")
        ttl = self.default_ttl if ttl_seconds is None else ttl_seconds
        if ttl <= 0:
            raise ValueError("ttl_seconds must be positive")
        self._store.put(CacheEntry(key, value, self._clock(), float(ttl)))

    def delete(self, key: str) -> bool:
        return self._store.delete(key)

    def clear(self) -> int:
        count = self._store.clear()
        logger.info("Cleared %d cached responses", count)
        return count

    def sweep(self) -> int:
        """Drop every expired entry; returns how many were removed."""
        removed = self._store.purge_expired(self._clock())
        if removed:
            logger.debug("Cache sweep removed %d expired entries", removed)
        return removed

    def stats(self) -> dict:
        return {
            "entries": self._store.count(),
            "hits": self._hits,
            "misses": self._misses,
            "default_ttl": self.default_ttl,
            "check_period": self.check_period,
        }

    def start_sweeper(self) -> None:
        """Start the periodic sweep on the running event loop."""
        if self._sweeper is None or self._sweeper.done():
            self._sweeper = asyncio.create_task(self._sweep_forever())

    async def stop_sweeper(self) -> None:
        """Cancel the periodic sweep. Never raises, so shutdown can continue."""
        sweeper, self._sweeper = self._sweeper, None
        if sweeper is None:
            return
        sweeper.cancel()
        try:
            await sweeper
        except asyncio.CancelledError:
            pass
        except Exception:
            logger.exception("Cache sweeper ended with an error")

    async def _sweep_forever(self) -> None:
        while True:
            await asyncio.sleep(self.check_period)
            try:
                self.sweep()
            except Exception:
                # Expired entries are still dropped lazily on read.
                logger.exception("Cache sweep failed; retrying in %ss", self.check_period)


def create_response_cache(config: CacheConfig) -> ResponseCache:
    """Build the cache from config ("memory" or "sqlite" backend)."""
    backend = (config.backend or "memory").strip().lower()
    if backend == "sqlite":
        store: CacheStore = SQLCacheStore()
    elif backend == "memory":
        store = MemoryCacheStore()
    else:
        raise ValueError(f"Unknown cache backend: {backend}. Available: memory, sqlite")
    logger.info("Response cache backend: %s (default ttl %ss)", backend, config.default_ttl)
    return ResponseCache(store, default_ttl=config.default_ttl, check_period=config.check_period)
