#!/usr/bin/env python3
"""
Revalidating Cache

A named, tag-addressable cache in front of a persistence accessor.

Algorithm (resolve(key)):
    1. Read the stored entry and the current versions of the cache's tags
    2. No entry                          → fetch (blocking)
    3. Entry recorded an older tag version → fetch (blocking, never stale)
    4. Entry younger than the window     → return it
    5. Entry older than the window
         stale-while-revalidate on  → return it, refresh in the background
         stale-while-revalidate off → fetch (blocking)

    fetch: read tag versions, call the accessor, store the result together
    with the versions read BEFORE the call. An invalidation that lands
    while the fetch is in flight therefore makes the new entry invalid
    immediately.

Rules:
    - Absent results are never stored (no negative caching)
    - Accessor errors are never stored; they propagate to the caller and
      the next resolve fetches again
    - At most one background refresh per key per process
    - Store failures degrade to a direct fetch; the cache is additive

Author: Refactored for clarity and maintainability
Date: 2025-12-13
"""

import asyncio
import time
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from typing import Any

from biolink.core.config.constants import REVALIDATE_SECONDS, Stage
from biolink.core.exceptions import CacheError
from biolink.core.interfaces.cache import RevalidationEntry, RevalidationStore, ValueCodec
from biolink.core.logging.logger import get_logger, log_stage
from biolink.infrastructure.cache.codecs import IdentityCodec
from biolink.infrastructure.monitoring.metrics_collector import (
    MetricsCollector,
    get_metrics_collector,
)

logger = get_logger(__name__)

FetchFn = Callable[[str], Awaitable[Any]]


@dataclass
class RevalidationStats:
    hits: int = 0
    stale_hits: int = 0
    misses: int = 0
    invalidated: int = 0
    expired: int = 0
    fetches: int = 0
    fetch_errors: int = 0
    refreshes: int = 0
    refresh_failures: int = 0
    store_errors: int = 0


class RevalidatingCache:
    """
    Tag-addressable cache with a revalidate window.

    STAGE-3: Revalidating cache

    Usage:
        cache = RevalidatingCache(
            "profile",
            fetch=repository.fetch_by_username,
            store=InMemoryRevalidationStore(),
            tags=["profile"],
        )
        profile = await cache.resolve("alice")
        await store.bump_tag("profile")    # next resolve fetches again

    Args:
        name: Cache name, also the storage key prefix
        fetch: Accessor returning the record or None
        store: Entry and tag version storage
        tags: Tags carried by every entry (defaults to [name])
        revalidate_seconds: Revalidate window
        stale_while_revalidate: Serve stale entries while refreshing
        codec: Value ↔ payload conversion (IdentityCodec by default)
        clock: Wall-clock time source (seconds)
    """

    def __init__(
        self,
        name: str,
        fetch: FetchFn,
        store: RevalidationStore,
        tags: Iterable[str] | None = None,
        revalidate_seconds: float = REVALIDATE_SECONDS,
        stale_while_revalidate: bool = True,
        codec: ValueCodec | None = None,
        clock: Callable[[], float] = time.time,
        metrics: MetricsCollector | None = None,
    ):
        if revalidate_seconds <= 0:
            raise ValueError("revalidate_seconds must be positive")
        self.name = name
        self.tags = list(tags) if tags is not None else [name]
        self._fetch = fetch
        self._store = store
        self._revalidate_seconds = revalidate_seconds
        self._stale_while_revalidate = stale_while_revalidate
        self._codec = codec or IdentityCodec()
        self._clock = clock
        self._metrics = metrics or get_metrics_collector()
        self._refreshing: dict[str, asyncio.Task] = {}
        self._stats = RevalidationStats()

    def _storage_key(self, key: str) -> str:
        return f"{self.name}:{key}"

    # -------------------------------------------------------------------------
    # Core Operation
    # -------------------------------------------------------------------------

    async def resolve(self, key: str) -> Any | None:
        """
        Return the record for key, or None when it does not exist.

        STAGE-3.0: Revalidating cache lookup

        Raises:
            Whatever the accessor raises (e.g. PersistenceError)
        """
        storage_key = self._storage_key(key)

        try:
            entry = await self._store.get_entry(storage_key)
            current = await self._store.get_tag_versions(self.tags)
        except CacheError as e:
            self._record_store_error("read", key, e)
            return await self._fetch_and_store(key, storage_key, versions=None)

        if entry is None:
            outcome = "miss"
            self._stats.misses += 1
        elif not self._is_current(entry, current):
            outcome = "invalidated"
            self._stats.invalidated += 1
        else:
            age = self._clock() - entry.stored_at
            value = self._decode(entry, key)
            if value is None:
                outcome = "miss"
                self._stats.misses += 1
            elif age < self._revalidate_seconds:
                self._stats.hits += 1
                self._metrics.record_cache_lookup("revalidating", self.name, "hit")
                log_stage(logger, Stage.REVALIDATING_CACHE_LOOKUP, "Revalidating cache hit",
                          level="debug", cache=self.name, key=key, age=round(age, 3))
                return value
            elif self._stale_while_revalidate:
                self._stats.stale_hits += 1
                self._metrics.record_cache_lookup("revalidating", self.name, "stale")
                self._schedule_refresh(key, storage_key, current)
                return value
            else:
                outcome = "expired"
                self._stats.expired += 1

        self._metrics.record_cache_lookup("revalidating", self.name, outcome)
        log_stage(logger, Stage.REVALIDATING_CACHE_LOOKUP, "Revalidating cache miss",
                  level="debug", cache=self.name, key=key, outcome=outcome)
        return await self._fetch_and_store(key, storage_key, versions=current)

    def _is_current(self, entry: RevalidationEntry, current: dict[str, int]) -> bool:
        return all(entry.tag_versions.get(tag) == version for tag, version in current.items())

    def _decode(self, entry: RevalidationEntry, key: str) -> Any | None:
        try:
            return self._codec.decode(entry.payload)
        except ValueError as e:
            logger.warning("Discarding undecodable cached value", cache=self.name, key=key, error=str(e))
            return None

    # -------------------------------------------------------------------------
    # Fetch Paths
    # -------------------------------------------------------------------------

    async def _call_accessor(self, key: str) -> Any | None:
        self._stats.fetches += 1
        started = time.perf_counter()
        try:
            value = await self._fetch(key)
        except Exception:
            self._stats.fetch_errors += 1
            self._metrics.record_fetch(self.name, "error", time.perf_counter() - started)
            raise
        self._metrics.record_fetch(
            self.name, "absent" if value is None else "found", time.perf_counter() - started
        )
        return value

    async def fetch_uncached(self, key: str) -> Any | None:
        """Call the accessor without reading or writing the store."""
        return await self._call_accessor(key)

    async def _fetch_and_store(
        self, key: str, storage_key: str, versions: dict[str, int] | None
    ) -> Any | None:
        """
        Blocking fetch.

        STAGE-4.0: Persistence fetch
        """
        if versions is None:
            versions = await self._read_versions(key)

        value = await self._call_accessor(key)

        if value is None:
            await self._discard(storage_key, key)
        elif versions is not None:
            await self._write(storage_key, key, value, versions)
        return value

    def _schedule_refresh(self, key: str, storage_key: str, versions: dict[str, int]) -> None:
        if key in self._refreshing:
            return
        task = asyncio.create_task(
            self._refresh(key, storage_key, versions), name=f"revalidate:{self.name}:{key}"
        )
        self._refreshing[key] = task
        task.add_done_callback(lambda _task: self._refreshing.pop(key, None))
        log_stage(logger, Stage.BACKGROUND_REVALIDATION, "Serving stale entry, refresh scheduled",
                  level="debug", cache=self.name, key=key)

    async def _refresh(self, key: str, storage_key: str, versions: dict[str, int]) -> None:
        """
        Background refresh of a stale entry.

        STAGE-3.1: Background revalidation

        Failures keep the stale entry; the next stale read schedules
        another attempt.
        """
        self._stats.refreshes += 1
        try:
            value = await self._call_accessor(key)
        except Exception as e:
            self._stats.refresh_failures += 1
            self._metrics.record_background_revalidation(self.name, "failure")
            log_stage(logger, Stage.BACKGROUND_REVALIDATION, "Background revalidation failed",
                      level="warning", cache=self.name, key=key,
                      error_type=type(e).__name__, error=str(e))
            return

        if value is None:
            self._metrics.record_background_revalidation(self.name, "absent")
            await self._discard(storage_key, key)
        else:
            self._metrics.record_background_revalidation(self.name, "success")
            await self._write(storage_key, key, value, versions)

    # -------------------------------------------------------------------------
    # Store Access (failures degrade, never propagate)
    # -------------------------------------------------------------------------

    async def _read_versions(self, key: str) -> dict[str, int] | None:
        try:
            return await self._store.get_tag_versions(self.tags)
        except CacheError as e:
            self._record_store_error("read", key, e)
            return None

    async def _write(self, storage_key: str, key: str, value: Any, versions: dict[str, int]) -> None:
        entry = RevalidationEntry(
            payload=self._codec.encode(value),
            stored_at=self._clock(),
            tag_versions=dict(versions),
        )
        try:
            await self._store.set_entry(storage_key, entry)
        except CacheError as e:
            self._record_store_error("write", key, e)

    async def _discard(self, storage_key: str, key: str) -> None:
        try:
            await self._store.delete_entry(storage_key)
        except CacheError as e:
            self._record_store_error("delete", key, e)

    def _record_store_error(self, operation: str, key: str, error: Exception) -> None:
        self._stats.store_errors += 1
        logger.warning(
            "Revalidation store unavailable, bypassing cache",
            stage=Stage.REVALIDATING_CACHE_LOOKUP.value,
            cache=self.name,
            key=key,
            operation=operation,
            error=str(error),
        )

    # -------------------------------------------------------------------------
    # Lifecycle / Monitoring
    # -------------------------------------------------------------------------

    async def invalidate_tag(self, tag: str) -> int:
        """
        Invalidate every entry carrying tag (in every cache sharing the store).

        STAGE-3.2: Tag invalidation
        """
        return await self._store.bump_tag(tag)

    async def drain(self) -> None:
        """Wait for in-flight background refreshes to finish."""
        while self._refreshing:
            await asyncio.gather(*list(self._refreshing.values()), return_exceptions=True)

    @property
    def revalidate_seconds(self) -> float:
        return self._revalidate_seconds

    def stats(self) -> dict[str, Any]:
        s = self._stats
        lookups = s.hits + s.stale_hits + s.misses + s.invalidated + s.expired
        return {
            "name": self.name,
            "tags": self.tags,
            "revalidate_seconds": self._revalidate_seconds,
            "stale_while_revalidate": self._stale_while_revalidate,
            "hits": s.hits,
            "stale_hits": s.stale_hits,
            "misses": s.misses,
            "invalidated": s.invalidated,
            "expired": s.expired,
            "hit_rate": round((s.hits + s.stale_hits) / lookups, 3) if lookups > 0 else 0.0,
            "fetches": s.fetches,
            "fetch_errors": s.fetch_errors,
            "refreshes": s.refreshes,
            "refresh_failures": s.refresh_failures,
            "refreshing": len(self._refreshing),
            "store_errors": s.store_errors,
        }
