"""
Admin API Models
================

Request and response models for the cache administration endpoints.
"""

from typing import Any

from pydantic import BaseModel, Field


class RevalidateRequest(BaseModel):
    """Tag to invalidate in the revalidating cache."""

    tag: str = Field(..., min_length=1, description="Revalidation tag, e.g. 'profile' or 'ai-page'")


class RevalidateResponse(BaseModel):
    tag: str
    version: int = Field(..., description="Tag version after the bump")
    revalidated: bool = True


class MemoryFlushResponse(BaseModel):
    namespace: str | None = Field(None, description="Flushed namespace, or None for every namespace")
    flushed: int = Field(..., ge=0, description="Number of entries removed")


class CacheStatsResponse(BaseModel):
    """
    Read-path cache statistics.

    memory: per-namespace size, hits, misses and evictions of the process
    memory cache. revalidating: per-cache hit / stale / miss counters and
    background refresh activity. store: revalidation store description.
    """

    caching_enabled: bool
    memory: dict[str, Any]
    revalidating: dict[str, Any]
    store: dict[str, Any]
    timestamp: str
