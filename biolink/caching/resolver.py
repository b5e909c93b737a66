#!/usr/bin/env python3
"""
Public Page Resolver

Composes the read path for public profile and AI page lookups:

    RequestScope → ProcessMemoryCache → RevalidatingCache → record store

Per lookup of key k in namespace N:
    1. Memoize (N, k) in the request scope
    2. Memory cache hit → return it
    3. Resolve through the revalidating cache
    4. Value → store in the memory cache with the namespace TTL, return it
    5. None → return None; nothing is cached

Errors from the record store propagate unchanged. invalidate_tag() bumps
the tag in the revalidation store only: memory cache entries age out on
their own TTL. The memory cache sweeper also sweeps the revalidation
store, so entries past their maximum age are reclaimed even when they are
never read again.

Author: Refactored for clarity and maintainability
Date: 2025-12-13
"""

import time
from collections.abc import Callable, Mapping
from datetime import datetime, timezone
from typing import Any

from biolink.caching.request_scope import RequestScope
from biolink.core.config.constants import ResourceNamespace, Stage
from biolink.core.config.settings import Settings
from biolink.core.exceptions import CacheKeyError
from biolink.core.interfaces.cache import RevalidationStore
from biolink.core.interfaces.repository import AIPageRepository, ProfileRepository
from biolink.core.logging.logger import get_logger, log_stage
from biolink.infrastructure.cache.codecs import IdentityCodec, ModelCodec
from biolink.infrastructure.cache.memory_cache import MISSING, ProcessMemoryCache
from biolink.infrastructure.cache.revalidating_cache import RevalidatingCache
from biolink.infrastructure.monitoring.metrics_collector import (
    MetricsCollector,
    get_metrics_collector,
)
from biolink.models.ai_page import AIPage
from biolink.models.profile import Profile

logger = get_logger(__name__)


class PublicPageResolver:
    """
    Public resolution entry point.

    STAGE-1 → STAGE-4: Read path

    Usage:
        resolver = create_resolver(settings, profiles, ai_pages, store)
        profile = await resolver.get_profile("alice", scope)
        await resolver.invalidate_tag("profile")
        stats = resolver.stats()

    Args:
        memory_cache: Process memory cache with one namespace per resource
        caches: Namespace → revalidating cache
        store: Revalidation store shared by the caches (tag versions)
        memory_ttls: Namespace → memory cache TTL (std TTL when omitted)
        enabled: When False every lookup goes straight to the record store
    """

    def __init__(
        self,
        memory_cache: ProcessMemoryCache,
        caches: Mapping[str, RevalidatingCache],
        store: RevalidationStore,
        memory_ttls: Mapping[str, float] | None = None,
        enabled: bool = True,
        metrics: MetricsCollector | None = None,
    ):
        self._memory = memory_cache
        self._caches = dict(caches)
        self._store = store
        self._memory_ttls = dict(memory_ttls or {})
        self._enabled = enabled
        self._metrics = metrics or get_metrics_collector()
        # Expired revalidation entries are reclaimed on the memory cache sweep
        self._memory.add_sweep_hook(self._store.sweep)

    # -------------------------------------------------------------------------
    # Public Read Interface
    # -------------------------------------------------------------------------

    async def get_profile(self, username: str, scope: RequestScope | None = None) -> Profile | None:
        return await self.resolve(ResourceNamespace.PROFILE.value, username, scope)

    async def get_ai_page(self, slug: str, scope: RequestScope | None = None) -> AIPage | None:
        return await self.resolve(ResourceNamespace.AI_PAGE.value, slug, scope)

    async def resolve(self, namespace: str, key: str, scope: RequestScope | None = None) -> Any | None:
        """
        Resolve key in namespace through every tier.

        A call without a scope gets a private one-shot scope.
        """
        cache = self._cache_for(namespace)
        scope = scope if scope is not None else RequestScope()
        return await scope.memoize(namespace, key, lambda: self._resolve_through_tiers(namespace, key, cache))

    async def _resolve_through_tiers(self, namespace: str, key: str, cache: RevalidatingCache) -> Any | None:
        if not self._enabled:
            return await cache.fetch_uncached(key)

        value = self._memory.get(namespace, key)
        if value is not MISSING:
            log_stage(logger, Stage.MEMORY_CACHE_LOOKUP, "Memory cache hit", level="debug",
                      namespace=namespace, key=key)
            return value

        value = await cache.resolve(key)
        if value is not None:
            self._memory.set(namespace, key, value, self._memory_ttls.get(namespace))
        return value

    def _cache_for(self, namespace: str) -> RevalidatingCache:
        try:
            return self._caches[namespace]
        except KeyError:
            raise CacheKeyError(
                f"No revalidating cache for namespace '{namespace}'",
                details={"namespace": namespace, "known": sorted(self._caches)},
            ) from None

    # -------------------------------------------------------------------------
    # Invalidation
    # -------------------------------------------------------------------------

    @property
    def namespaces(self) -> list[str]:
        return sorted(self._caches)

    @property
    def tags(self) -> list[str]:
        """Every tag carried by the revalidating caches."""
        return sorted({tag for cache in self._caches.values() for tag in cache.tags})

    async def invalidate_tag(self, tag: str) -> int:
        """
        Make the next revalidating-cache lookup of every entry carrying tag
        fetch from the record store. The memory cache is left untouched.

        STAGE-3.2: Tag invalidation

        Returns:
            New tag version

        Raises:
            CacheError: The revalidation store is unreachable
        """
        version = await self._store.bump_tag(tag)
        self._metrics.record_tag_invalidation(tag)
        log_stage(logger, Stage.TAG_INVALIDATION, "Revalidation tag invalidated", tag=tag, version=version)
        return version

    def flush_memory(self, namespace: str | None = None) -> int:
        return self._memory.flush(namespace)

    # -------------------------------------------------------------------------
    # Lifecycle / Monitoring
    # -------------------------------------------------------------------------

    def start(self) -> None:
        self._memory.start()

    async def shutdown(self) -> None:
        """Stop the sweeper and let background refreshes finish."""
        await self._memory.stop()
        for cache in self._caches.values():
            await cache.drain()

    def stats(self) -> dict[str, Any]:
        return {
            "caching_enabled": self._enabled,
            "memory": self._memory.stats(),
            "revalidating": {name: cache.stats() for name, cache in self._caches.items()},
            "store": self._store.describe(),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }


def create_resolver(
    settings: Settings,
    profiles: ProfileRepository,
    ai_pages: AIPageRepository,
    store: RevalidationStore,
    memory_clock: Callable[[], float] = time.monotonic,
    wall_clock: Callable[[], float] = time.time,
    metrics: MetricsCollector | None = None,
) -> PublicPageResolver:
    """
    Build the read path from settings.

    STAGE-0.4: Read path construction

    Values are kept by reference in an in-process revalidation store and
    JSON-encoded for Redis.
    """
    cache_settings = settings.cache
    serialize = settings.storage.REVALIDATION_BACKEND == "redis"
    metrics = metrics or get_metrics_collector()

    memory = ProcessMemoryCache(
        namespaces={
            ResourceNamespace.PROFILE.value: cache_settings.MEMORY_CACHE_PROFILE_MAX_KEYS,
            ResourceNamespace.AI_PAGE.value: cache_settings.MEMORY_CACHE_AI_PAGE_MAX_KEYS,
        },
        std_ttl=cache_settings.MEMORY_CACHE_STD_TTL,
        check_period=cache_settings.MEMORY_CACHE_CHECK_PERIOD,
        clock=memory_clock,
        metrics=metrics,
    )

    accessors = {
        ResourceNamespace.PROFILE.value: (profiles.fetch_by_username, Profile),
        ResourceNamespace.AI_PAGE.value: (ai_pages.fetch_by_slug, AIPage),
    }
    caches = {
        namespace: RevalidatingCache(
            namespace,
            fetch=fetch,
            store=store,
            tags=[namespace],
            revalidate_seconds=cache_settings.REVALIDATE_SECONDS,
            stale_while_revalidate=cache_settings.REVALIDATE_STALE_WHILE_REVALIDATE,
            codec=ModelCodec(model) if serialize else IdentityCodec(),
            clock=wall_clock,
            metrics=metrics,
        )
        for namespace, (fetch, model) in accessors.items()
    }

    logger.info(
        "Read path constructed",
        stage=Stage.INITIALIZATION.value,
        caching_enabled=cache_settings.ENABLE_CACHING,
        memory_ttl=cache_settings.MEMORY_CACHE_STD_TTL,
        revalidate_seconds=cache_settings.REVALIDATE_SECONDS,
        stale_while_revalidate=cache_settings.REVALIDATE_STALE_WHILE_REVALIDATE,
        revalidation_backend=settings.storage.REVALIDATION_BACKEND,
    )

    return PublicPageResolver(
        memory_cache=memory,
        caches=caches,
        store=store,
        enabled=cache_settings.ENABLE_CACHING,
        metrics=metrics,
    )
