#!/usr/bin/env python3
"""
Revalidation Stores

Storage behind the RevalidatingCache. Two implementations of the
RevalidationStore protocol:

    InMemoryRevalidationStore
        Process-local dicts. Values kept by reference. Used in development,
        tests, and single-process deployments.

    RedisRevalidationStore
        Entries as orjson documents under
        biolink:revalidate:entry:<cache>:<key>, tag versions as INCR
        counters under biolink:revalidate:tag:<tag>. Shared by every
        process, so an invalidation in one worker is seen by all.

Both stores drop entries older than max_entry_age. Redis does this with
key expiry; the in-memory store drops them on read and in sweep(), which
the resolver runs from the memory cache sweeper. The revalidate window
itself is enforced by the cache, not the store.

Author: Refactored for clarity and maintainability
Date: 2025-12-13
"""

import time
from collections.abc import Callable
from typing import Any

import orjson

from biolink.core.config.constants import (
    REDIS_KEY_REVALIDATE_ENTRY,
    REDIS_KEY_REVALIDATE_TAG,
    REVALIDATE_MAX_ENTRY_AGE,
)
from biolink.core.interfaces.cache import KeyValueBackend, RevalidationEntry
from biolink.core.logging.logger import get_logger

logger = get_logger(__name__)


class InMemoryRevalidationStore:
    """
    Process-local revalidation store.

    Usage:
        store = InMemoryRevalidationStore()
        await store.set_entry("profile:alice", RevalidationEntry(profile, time.time(), {"profile": 0}))
        versions = await store.get_tag_versions(["profile"])
    """

    def __init__(
        self,
        max_entry_age: float = REVALIDATE_MAX_ENTRY_AGE,
        clock: Callable[[], float] = time.time,
    ):
        self._entries: dict[str, RevalidationEntry] = {}
        self._tag_versions: dict[str, int] = {}
        self._max_entry_age = max_entry_age
        self._clock = clock

    def _is_expired(self, entry: RevalidationEntry, now: float) -> bool:
        return now - entry.stored_at >= self._max_entry_age

    async def get_entry(self, key: str) -> RevalidationEntry | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._is_expired(entry, self._clock()):
            del self._entries[key]
            return None
        return entry

    async def set_entry(self, key: str, entry: RevalidationEntry) -> None:
        self._entries[key] = entry

    async def delete_entry(self, key: str) -> None:
        self._entries.pop(key, None)

    async def get_tag_versions(self, tags: list[str]) -> dict[str, int]:
        return {tag: self._tag_versions.get(tag, 0) for tag in tags}

    async def bump_tag(self, tag: str) -> int:
        version = self._tag_versions.get(tag, 0) + 1
        self._tag_versions[tag] = version
        return version

    def sweep(self) -> int:
        """Drop every entry older than max_entry_age. Returns the number removed."""
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if self._is_expired(entry, now)]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def describe(self) -> dict[str, Any]:
        return {
            "backend": "memory",
            "entries": len(self._entries),
            "tag_versions": dict(self._tag_versions),
            "max_entry_age": self._max_entry_age,
        }


class RedisRevalidationStore:
    """
    Redis-backed revalidation store.

    Entry document:
        {"payload": <codec output>, "stored_at": <unix time>, "tag_versions": {tag: n}}

    Tag versions live in plain Redis counters; a missing counter is
    version 0. INCR is atomic, so concurrent invalidations from several
    workers never lose a bump.
    """

    def __init__(self, backend: KeyValueBackend, max_entry_age: int = REVALIDATE_MAX_ENTRY_AGE):
        self._backend = backend
        self._max_entry_age = int(max_entry_age)

    @staticmethod
    def _entry_key(key: str) -> str:
        return f"{REDIS_KEY_REVALIDATE_ENTRY}:{key}"

    @staticmethod
    def _tag_key(tag: str) -> str:
        return f"{REDIS_KEY_REVALIDATE_TAG}:{tag}"

    async def get_entry(self, key: str) -> RevalidationEntry | None:
        raw = await self._backend.get(self._entry_key(key))
        if raw is None:
            return None
        try:
            document = orjson.loads(raw)
            return RevalidationEntry(
                payload=document["payload"],
                stored_at=float(document["stored_at"]),
                tag_versions={tag: int(v) for tag, v in document["tag_versions"].items()},
            )
        except (orjson.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            # Unreadable entries are dropped and refetched
            logger.warning("Discarding undecodable revalidation entry", key=key, error=str(e))
            await self._backend.delete(self._entry_key(key))
            return None

    async def set_entry(self, key: str, entry: RevalidationEntry) -> None:
        document = {
            "payload": entry.payload,
            "stored_at": entry.stored_at,
            "tag_versions": entry.tag_versions,
        }
        await self._backend.set(
            self._entry_key(key),
            orjson.dumps(document).decode("utf-8"),
            ttl=self._max_entry_age,
        )

    async def delete_entry(self, key: str) -> None:
        await self._backend.delete(self._entry_key(key))

    async def get_tag_versions(self, tags: list[str]) -> dict[str, int]:
        if not tags:
            return {}
        values = await self._backend.mget(*(self._tag_key(tag) for tag in tags))
        return {tag: int(value) if value is not None else 0 for tag, value in zip(tags, values)}

    async def bump_tag(self, tag: str) -> int:
        return await self._backend.incr(self._tag_key(tag))

    def sweep(self) -> int:
        # Entry keys carry a TTL; Redis expires them itself
        return 0

    def describe(self) -> dict[str, Any]:
        return {"backend": "redis", "max_entry_age": self._max_entry_age}
