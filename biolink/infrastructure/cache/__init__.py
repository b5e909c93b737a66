"""
Cache infrastructure: process memory cache, revalidating cache and their stores.
"""

from biolink.infrastructure.cache.codecs import IdentityCodec, ModelCodec
from biolink.infrastructure.cache.memory_cache import MISSING, ProcessMemoryCache
from biolink.infrastructure.cache.redis_client import RedisClient
from biolink.infrastructure.cache.revalidating_cache import RevalidatingCache
from biolink.infrastructure.cache.revalidation_store import (
    InMemoryRevalidationStore,
    RedisRevalidationStore,
)

__all__ = [
    "MISSING",
    "ProcessMemoryCache",
    "RevalidatingCache",
    "InMemoryRevalidationStore",
    "RedisRevalidationStore",
    "RedisClient",
    "IdentityCodec",
    "ModelCodec",
]
