"""
Cache Protocols

This module defines the abstract protocols the read-path caches depend on,
enabling dependency injection and testability.

- KeyValueBackend: the subset of Redis commands used by the Redis-backed
  revalidation store and record stores (RedisClient implements it).
- RevalidationStore: where the revalidating cache keeps its entries and tag
  versions (in-process dict or Redis).
- ValueCodec: turns cached values into store payloads and back.

Author: System Architect
Date: 2025-12-08
"""

from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable


@dataclass
class RevalidationEntry:
    """
    One stored result of a revalidating cache.

    Attributes:
        payload: Encoded value (the value itself for in-process stores)
        stored_at: Wall-clock time the fetch completed
        tag_versions: Version of every entry tag read before the fetch started
    """

    payload: Any
    stored_at: float
    tag_versions: dict[str, int] = field(default_factory=dict)


@runtime_checkable
class KeyValueBackend(Protocol):
    """
    Protocol for the key/value operations the Redis-backed stores need.

    Implementations:
    - RedisClient: Production Redis client
    - Test doubles in tests/test_fixtures
    """

    async def ping(self) -> bool:
        ...

    async def get(self, key: str) -> str | None:
        ...

    async def mget(self, *keys: str) -> list[str | None]:
        ...

    async def set(self, key: str, value: str, ttl: int | None = None) -> bool:
        ...

    async def delete(self, *keys: str) -> int:
        ...

    async def incr(self, key: str) -> int:
        ...

    # Hash operations
    async def hget(self, name: str, key: str) -> str | None:
        ...

    async def hset(self, name: str, key: str, value: str) -> int:
        ...

    async def hgetall(self, name: str) -> dict[str, str]:
        ...

    async def hdel(self, name: str, *keys: str) -> int:
        ...

    async def hexists(self, name: str, key: str) -> bool:
        ...


@runtime_checkable
class RevalidationStore(Protocol):
    """
    Protocol for the storage behind a RevalidatingCache.

    A tag version is a monotonically increasing counter. Bumping it makes
    every entry that recorded an older version invalid. A tag that was
    never bumped has version 0.
    """

    async def get_entry(self, key: str) -> RevalidationEntry | None:
        """Return the stored entry for key, or None."""
        ...

    async def set_entry(self, key: str, entry: RevalidationEntry) -> None:
        """Store (overwrite) the entry for key."""
        ...

    async def delete_entry(self, key: str) -> None:
        ...

    async def get_tag_versions(self, tags: list[str]) -> dict[str, int]:
        """Return the current version of every tag."""
        ...

    async def bump_tag(self, tag: str) -> int:
        """Invalidate every entry carrying tag; returns the new version."""
        ...

    def sweep(self) -> int:
        """Drop entries older than the maximum entry age; returns the number removed."""
        ...

    def describe(self) -> dict[str, Any]:
        """Short description for stats output."""
        ...


class ValueCodec(Protocol):
    """Converts values to JSON-compatible payloads and back."""

    def encode(self, value: Any) -> Any:
        ...

    def decode(self, payload: Any) -> Any:
        ...
