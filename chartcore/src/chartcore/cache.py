"""Versioned, date-bucketed cache for derived chart results.

An entry is only served when it was created for the caller's current local
date and its key carries the current ``SCHEMA_VERSION``. Anything else reads
as a miss, so a new local day or a version bump invalidates every entry
without a delete or migration step.

``today`` is always passed in by the caller, who reads the clock once per
logical operation (see ``local_today``).

Backends hold ``CacheEntry`` records. Backend errors never propagate: reads
become misses and writes are dropped, both with a warning.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import threading
from collections import OrderedDict
from collections.abc import Awaitable, Callable
from datetime import UTC, date, datetime, time, timedelta, tzinfo
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from skyloom.config import Settings, get_settings
from skyloom.schemas.cache import CacheEntry, CacheKey

logger = logging.getLogger(__name__)

# Bump whenever the shape or derivation of any cached value changes.
SCHEMA_VERSION = 4


def _zone(tz_name: str) -> tzinfo:
    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Invalid timezone '%s', falling back to UTC", tz_name)
        return UTC


def local_today(tz_name: str = "UTC", now: datetime | None = None) -> date:
    """Current calendar date in ``tz_name``; read once per logical operation."""
    now = now or datetime.now(UTC)
    return now.astimezone(_zone(tz_name)).date()


def next_local_midnight(today: date, tz_name: str = "UTC") -> datetime:
    """Start of the day after ``today`` in ``tz_name``."""
    return datetime.combine(today + timedelta(days=1), time(0, 0), tzinfo=_zone(tz_name))


def cache_key(subject_id: str, computation_kind: str, today: date) -> CacheKey:
    """Key for today's bucket under the current schema version."""
    return CacheKey(
        subject_id=subject_id,
        computation_kind=computation_kind,
        bucket_date=today,
        schema_version=SCHEMA_VERSION,
    )


def needs_regeneration(stored_version: int | None) -> bool:
    """Whether a persisted chart was derived under an older schema version."""
    return stored_version != SCHEMA_VERSION


class MemoryCacheBackend:
    """In-process backend: an LRU dict guarded by a lock, with hit/miss counters.

    Holds at most ``max_entries`` entries. Writing an entry for a newer day
    drops every entry created for an earlier one.
    """

    def __init__(self, max_entries: int = 1024) -> None:
        if max_entries < 1:
            raise ValueError(f"max_entries must be >= 1, got {max_entries}")
        self.max_entries = max_entries
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._lock = threading.Lock()
        self._latest_day: date | None = None
        self.hits = 0
        self.misses = 0

    async def read(self, storage_key: str) -> CacheEntry | None:
        with self._lock:
            entry = self._entries.get(storage_key)
            if entry is None:
                self.misses += 1
            else:
                self.hits += 1
                self._entries.move_to_end(storage_key)
            return entry

    async def write(self, storage_key: str, entry: CacheEntry, expires_at: datetime) -> None:
        with self._lock:
            if self._latest_day is None or entry.created_for > self._latest_day:
                self._latest_day = entry.created_for
                self._drop(lambda e: e.created_for < entry.created_for)
            self._entries[storage_key] = entry
            self._entries.move_to_end(storage_key)
            while len(self._entries) > self.max_entries:
                self._entries.popitem(last=False)

    async def delete(self, storage_key: str) -> None:
        with self._lock:
            self._entries.pop(storage_key, None)

    async def clear(self, prefix: str) -> int:
        with self._lock:
            return self._drop_keys([k for k in self._entries if k.startswith(f"{prefix}:")])

    def purge_stale(self, today: date) -> int:
        """Drop entries not created for ``today``; returns how many were removed."""
        with self._lock:
            return self._drop(lambda e: e.created_for != today)

    def _drop(self, predicate: Callable[[CacheEntry], bool]) -> int:
        return self._drop_keys([k for k, e in self._entries.items() if predicate(e)])

    def _drop_keys(self, keys: list[str]) -> int:
        for k in keys:
            del self._entries[k]
        return len(keys)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class RedisCacheBackend:
    """Redis backend storing entries as JSON, expiring after local midnight."""

    def __init__(self, client=None, redis_url: str | None = None, grace_seconds: int = 3600) -> None:
        self._client = client
        self._redis_url = redis_url
        self._grace_seconds = grace_seconds

    def _get_client(self):
        if self._client is None:
            import redis.asyncio as aioredis

            self._client = aioredis.from_url(self._redis_url or get_settings().redis_url)
        return self._client

    async def read(self, storage_key: str) -> CacheEntry | None:
        raw = await self._get_client().get(storage_key)
        if not raw:
            return None
        return CacheEntry.model_validate_json(raw)

    async def write(self, storage_key: str, entry: CacheEntry, expires_at: datetime) -> None:
        exat = int(expires_at.timestamp()) + self._grace_seconds
        await self._get_client().set(storage_key, entry.model_dump_json(by_alias=True), exat=exat)

    async def delete(self, storage_key: str) -> None:
        await self._get_client().delete(storage_key)

    async def clear(self, prefix: str) -> int:
        client = self._get_client()
        removed = 0
        async for storage_key in client.scan_iter(match=f"{prefix}:*"):
            removed += await client.delete(storage_key)
        return removed

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None


class _InFlight:
    """Per-key lock shared by every caller waiting on the same computation."""

    __slots__ = ("lock", "waiters")

    def __init__(self) -> None:
        self.lock = asyncio.Lock()
        self.waiters = 0


class ChartCache:
    """Read-through cache keyed by ``CacheKey``.

    Values must be JSON-serializable for the Redis backend and must not be
    ``None`` (``None`` means "absent").
    """

    def __init__(
        self,
        backend: MemoryCacheBackend | RedisCacheBackend | None = None,
        prefix: str = "chartcache",
        timezone: str = "UTC",
    ) -> None:
        self.backend = backend
        self.prefix = prefix
        self.timezone = timezone
        self._inflight: dict[str, _InFlight] = {}

    def _is_current(self, key: CacheKey, today: date) -> bool:
        if key.schema_version != SCHEMA_VERSION:
            logger.debug(
                "Cache key schema v%d is not current v%d", key.schema_version, SCHEMA_VERSION
            )
            return False
        return key.bucket_date == today

    async def get(self, key: CacheKey, today: date) -> Any | None:
        """Cached value for ``key``, or None when absent or stale."""
        if self.backend is None or not self._is_current(key, today):
            return None
        storage_key = key.storage_key(self.prefix)
        try:
            entry = await self.backend.read(storage_key)
        except Exception as e:
            logger.warning("Chart cache read failed: %s", e)
            return None
        if entry is None:
            logger.debug("Chart cache miss: %s", storage_key)
            return None
        if entry.created_for != today or entry.key != key:
            logger.debug("Chart cache entry stale: %s (created for %s)", storage_key, entry.created_for)
            return None
        return entry.value

    async def set(self, key: CacheKey, value: Any, today: date) -> None:
        """Store ``value`` for ``today``; last writer wins."""
        if value is None:
            raise ValueError("Cannot cache None")
        if key.schema_version != SCHEMA_VERSION:
            raise ValueError(
                f"Cache key schema v{key.schema_version} does not match current v{SCHEMA_VERSION}"
            )
        if key.bucket_date != today:
            raise ValueError(f"Cache key bucket {key.bucket_date} is not today ({today})")
        if self.backend is None:
            return

        storage_key = key.storage_key(self.prefix)
        entry = CacheEntry(key=key, value=value, created_for=today)
        try:
            await self.backend.write(storage_key, entry, next_local_midnight(today, self.timezone))
        except Exception as e:
            logger.warning("Chart cache write failed: %s", e)

    async def get_or_compute(
        self,
        key: CacheKey,
        today: date,
        compute: Callable[[], Any] | Callable[[], Awaitable[Any]],
    ) -> Any:
        """Return the cached value or compute, store and return a fresh one.

        Concurrent callers for the same key wait on one computation.
        """
        cached = await self.get(key, today)
        if cached is not None:
            return cached

        storage_key = key.storage_key(self.prefix)
        inflight = self._inflight.get(storage_key)
        if inflight is None:
            inflight = self._inflight[storage_key] = _InFlight()
        inflight.waiters += 1
        try:
            async with inflight.lock:
                cached = await self.get(key, today)
                if cached is not None:
                    return cached
                value = compute()
                if inspect.isawaitable(value):
                    value = await value
                if value is not None and self._is_current(key, today):
                    await self.set(key, value, today)
                return value
        finally:
            inflight.waiters -= 1
            if inflight.waiters == 0 and self._inflight.get(storage_key) is inflight:
                del self._inflight[storage_key]

    async def remove(self, key: CacheKey) -> None:
        """Delete the entry stored under ``key``, if any."""
        if self.backend is None:
            return
        try:
            await self.backend.delete(key.storage_key(self.prefix))
        except Exception as e:
            logger.warning("Chart cache delete failed: %s", e)

    async def clear(self) -> int:
        """Delete every entry under this cache's prefix; returns how many went."""
        if self.backend is None:
            return 0
        try:
            removed = await self.backend.clear(self.prefix)
        except Exception as e:
            logger.warning("Chart cache clear failed: %s", e)
            return 0
        logger.info("Cleared %d chart cache entries under '%s'", removed, self.prefix)
        return removed


def build_chart_cache(settings: Settings | None = None) -> ChartCache:
    """Create a ChartCache using the configured backend."""
    settings = settings or get_settings()
    backend_name = settings.chart_cache_backend.strip().lower()
    if backend_name == "memory":
        backend = MemoryCacheBackend(max_entries=settings.chart_cache_max_entries)
    elif backend_name == "redis":
        backend = RedisCacheBackend(
            redis_url=settings.redis_url,
            grace_seconds=settings.chart_cache_grace_seconds,
        )
    elif backend_name == "none":
        backend = None
    else:
        raise ValueError(f"Unknown chart cache backend: {settings.chart_cache_backend!r}")
    return ChartCache(backend=backend, prefix=settings.chart_cache_prefix, timezone=settings.timezone)
