"""
Cache-Related Exceptions

All exceptions related to caching operations (Redis revalidation store,
process memory cache).

Author: System Architect
Date: 2025-12-08
"""

from biolink.core.exceptions.base import BioLinkError


class CacheError(BioLinkError):
    """Base exception for cache-related errors."""
    status_code = 503


class CacheConnectionError(CacheError):
    """
    Raised when unable to connect to the cache (Redis).

    Common causes:
    - Redis server is down
    - Incorrect host/port configuration
    - Authentication failure
    """
    pass


class CacheKeyError(CacheError):
    """
    Raised when a cache key operation fails.

    Common causes:
    - Unknown namespace
    - Undecodable stored entry
    """
    status_code = 500
