#!/usr/bin/env python3
"""
Process Memory Cache

Architecture:
    ProcessMemoryCache (Public API)
        ├── CacheNamespace (one per resource type, bounded, TTL per entry)
        │   └── CacheEntry
        └── Sweeper task (periodic removal of expired entries)

Behavior:
    - get() never blocks and never raises for a missing key; it returns
      the MISSING sentinel so that a stored None is distinguishable
    - set() overwrites unconditionally and restarts the entry's TTL
    - Expired entries are removed lazily on read and by the sweeper
    - Each namespace holds at most max_keys entries; on overflow the
      oldest-inserted entry is evicted (an overwrite counts as a new
      insertion)
    - Values are stored and returned by reference. Callers must treat them
      as immutable.

Author: Refactored for clarity and maintainability
Date: 2025-12-13
"""

import asyncio
import time
from collections import OrderedDict
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from biolink.core.config.constants import Stage
from biolink.core.exceptions import CacheKeyError
from biolink.core.logging.logger import get_logger, log_stage
from biolink.infrastructure.monitoring.metrics_collector import (
    MetricsCollector,
    get_metrics_collector,
)

logger = get_logger(__name__)


class _Missing:
    """Sentinel type returned by get() when a key has no live entry."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()


# =============================================================================
# LAYER 1: ENTRY AND NAMESPACE STORAGE
# =============================================================================


@dataclass
class CacheEntry:
    key: str
    value: Any
    stored_at: float
    ttl_seconds: float

    def is_expired(self, now: float) -> bool:
        return now - self.stored_at >= self.ttl_seconds


@dataclass
class NamespaceStats:
    hits: int = 0
    misses: int = 0
    sets: int = 0
    evictions: int = 0
    expirations: int = 0


class CacheNamespace:
    """
    Bounded key space for one resource type.

    STAGE-2.0: Namespace storage

    Implementation Details:
    - OrderedDict keeps insertion order; the front is the oldest insertion
    - Overwriting a key moves it to the back
    - No lock: every operation is synchronous and runs to completion on
      the event loop
    """

    def __init__(self, name: str, max_keys: int, std_ttl: float):
        if max_keys <= 0:
            raise ValueError(f"max_keys must be positive for namespace '{name}'")
        self.name = name
        self.max_keys = max_keys
        self.std_ttl = std_ttl
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self.stats = NamespaceStats()

    def get(self, key: str, now: float) -> Any:
        entry = self._entries.get(key)
        if entry is None:
            self.stats.misses += 1
            return MISSING

        if entry.is_expired(now):
            # Lazy expiry: an expired entry read before the sweep is absent
            del self._entries[key]
            self.stats.expirations += 1
            self.stats.misses += 1
            return MISSING

        self.stats.hits += 1
        return entry.value

    def set(self, key: str, value: Any, ttl_seconds: float | None, now: float) -> int:
        """
        Store value under key. Returns the number of entries evicted.
        """
        ttl = self.std_ttl if ttl_seconds is None else ttl_seconds
        if ttl <= 0:
            raise ValueError("ttl_seconds must be positive")

        if key in self._entries:
            del self._entries[key]
        self._entries[key] = CacheEntry(key=key, value=value, stored_at=now, ttl_seconds=ttl)
        self.stats.sets += 1

        evicted = 0
        while len(self._entries) > self.max_keys:
            self._entries.popitem(last=False)
            evicted += 1
        self.stats.evictions += evicted
        return evicted

    def delete(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    def flush(self) -> int:
        count = len(self._entries)
        self._entries.clear()
        return count

    def sweep(self, now: float) -> int:
        """Remove every expired entry. Returns the number removed."""
        expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
        for key in expired:
            del self._entries[key]
        self.stats.expirations += len(expired)
        return len(expired)

    def keys(self) -> list[str]:
        """Keys in insertion order, oldest first (may include expired entries)."""
        return list(self._entries.keys())

    def __len__(self) -> int:
        return len(self._entries)

    def get_stats(self) -> dict[str, Any]:
        total = self.stats.hits + self.stats.misses
        return {
            "keys": len(self._entries),
            "max_keys": self.max_keys,
            "std_ttl": self.std_ttl,
            "hits": self.stats.hits,
            "misses": self.stats.misses,
            "hit_rate": round(self.stats.hits / total, 3) if total > 0 else 0.0,
            "sets": self.stats.sets,
            "evictions": self.stats.evictions,
            "expirations": self.stats.expirations,
        }


# =============================================================================
# LAYER 2: PUBLIC API
# =============================================================================


class ProcessMemoryCache:
    """
    In-process, namespaced key/value cache with TTL and bounded size.

    STAGE-2: Process memory cache

    One instance is constructed at startup and injected into the public
    resolver; tests construct their own with a fake clock.

    Usage:
        cache = ProcessMemoryCache({"profile": 10000, "ai-page": 5000})
        cache.set("profile", "alice", profile)
        value = cache.get("profile", "alice")
        if value is MISSING:
            ...

    Args:
        namespaces: Namespace name → maximum entry count
        std_ttl: Default TTL in seconds for set() without ttl_seconds
        check_period: Interval of the background sweep in seconds
        clock: Monotonic time source (seconds)
        metrics: Metrics collector (defaults to the global one)
    """

    def __init__(
        self,
        namespaces: Mapping[str, int],
        std_ttl: float = 300,
        check_period: float = 60,
        clock: Callable[[], float] = time.monotonic,
        metrics: MetricsCollector | None = None,
    ):
        if std_ttl <= 0:
            raise ValueError("std_ttl must be positive")
        self._namespaces = {
            name: CacheNamespace(name, max_keys, std_ttl) for name, max_keys in namespaces.items()
        }
        self._check_period = check_period
        self._clock = clock
        self._metrics = metrics or get_metrics_collector()
        self._sweeper: asyncio.Task | None = None
        self._sweep_hooks: list[Callable[[], int]] = []
        self._last_sweep: datetime | None = None

    def _namespace(self, namespace: str) -> CacheNamespace:
        try:
            return self._namespaces[namespace]
        except KeyError:
            raise CacheKeyError(
                f"Unknown cache namespace '{namespace}'",
                details={"namespace": namespace, "known": sorted(self._namespaces)},
            ) from None

    # -------------------------------------------------------------------------
    # Core Cache Operations
    # -------------------------------------------------------------------------

    def get(self, namespace: str, key: str) -> Any:
        """
        Return the live value for key, or MISSING.

        STAGE-2.0: Memory cache lookup
        """
        value = self._namespace(namespace).get(key, self._clock())
        self._metrics.record_cache_lookup("memory", namespace, "miss" if value is MISSING else "hit")
        return value

    def set(self, namespace: str, key: str, value: Any, ttl_seconds: float | None = None) -> None:
        """
        Store value under (namespace, key), replacing any existing entry.

        STAGE-2.2: Memory cache population
        """
        ns = self._namespace(namespace)
        evicted = ns.set(key, value, ttl_seconds, self._clock())
        if evicted:
            log_stage(
                logger,
                Stage.MEMORY_CACHE_LOOKUP,
                "Memory cache at capacity, evicted oldest entries",
                level="debug",
                namespace=namespace,
                evicted=evicted,
                max_keys=ns.max_keys,
            )
            self._metrics.record_memory_eviction(namespace, "capacity", evicted)
        self._metrics.set_memory_cache_keys(namespace, len(ns))

    def delete(self, namespace: str, key: str) -> bool:
        ns = self._namespace(namespace)
        deleted = ns.delete(key)
        self._metrics.set_memory_cache_keys(namespace, len(ns))
        return deleted

    def flush(self, namespace: str | None = None) -> int:
        """
        Drop all entries of one namespace, or of every namespace.

        Returns:
            Number of entries removed
        """
        targets = [self._namespace(namespace)] if namespace else list(self._namespaces.values())
        removed = 0
        for ns in targets:
            removed += ns.flush()
            self._metrics.set_memory_cache_keys(ns.name, 0)
        logger.info("Memory cache flushed", stage=Stage.MEMORY_CACHE_SWEEP.value,
                    namespace=namespace or "*", removed=removed)
        return removed

    def keys(self, namespace: str) -> list[str]:
        return self._namespace(namespace).keys()

    @property
    def namespaces(self) -> list[str]:
        return list(self._namespaces)

    # -------------------------------------------------------------------------
    # Expiry Sweep
    # -------------------------------------------------------------------------

    def sweep(self) -> int:
        """
        Remove expired entries from every namespace.

        STAGE-2.1: Periodic sweep

        Returns:
            Number of memory cache entries removed (hook removals excluded)
        """
        now = self._clock()
        total = 0
        for ns in self._namespaces.values():
            removed = ns.sweep(now)
            if removed:
                self._metrics.record_memory_eviction(ns.name, "expired", removed)
            self._metrics.set_memory_cache_keys(ns.name, len(ns))
            total += removed
        reclaimed = sum(hook() for hook in self._sweep_hooks)
        self._last_sweep = datetime.now(timezone.utc)
        if total:
            log_stage(logger, Stage.MEMORY_CACHE_SWEEP, "Expired memory cache entries swept",
                      level="debug", removed=total)
        if reclaimed:
            log_stage(logger, Stage.MEMORY_CACHE_SWEEP, "Sweep hooks reclaimed expired entries",
                      level="debug", removed=reclaimed)
        return total

    def add_sweep_hook(self, hook: Callable[[], int]) -> None:
        """
        Run hook on every sweep, after the namespaces are swept.

        hook returns the number of entries it removed; the resolver uses
        this to reclaim expired revalidation store entries.
        """
        self._sweep_hooks.append(hook)

    async def _sweep_loop(self) -> None:
        while True:
            await asyncio.sleep(self._check_period)
            self.sweep()

    def start(self) -> None:
        """Start the periodic sweeper on the running event loop."""
        if self._sweeper is None or self._sweeper.done():
            self._sweeper = asyncio.create_task(self._sweep_loop(), name="memory-cache-sweeper")
            logger.info("Memory cache sweeper started", stage=Stage.INITIALIZATION.value,
                        check_period=self._check_period)

    async def stop(self) -> None:
        """Cancel the sweeper and wait for it to finish."""
        if self._sweeper is None:
            return
        self._sweeper.cancel()
        try:
            await self._sweeper
        except asyncio.CancelledError:
            pass
        self._sweeper = None
        logger.info("Memory cache sweeper stopped", stage=Stage.CLEANUP.value)

    # -------------------------------------------------------------------------
    # Monitoring
    # -------------------------------------------------------------------------

    def stats(self) -> dict[str, Any]:
        """
        Per-namespace statistics.

        Returns:
            Dict with hits, misses, sizes and eviction counts per namespace
        """
        return {
            "namespaces": {name: ns.get_stats() for name, ns in self._namespaces.items()},
            "check_period": self._check_period,
            "sweeper_running": self._sweeper is not None and not self._sweeper.done(),
            "last_sweep": self._last_sweep.isoformat() if self._last_sweep else None,
        }
