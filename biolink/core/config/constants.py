"""
System Constants and Enumerations

This module defines system-wide constants and enumerations used across
the link-in-bio service.

Architectural Decision: Centralized constants for maintainability
- Single source of truth for namespaces, tags and TTL defaults
- Type-safe enums for cache tiers and stages
- Easy to update and track changes

Author: System Architect
Date: 2025-12-05
"""

from enum import Enum

# ============================================================================
# Stage Identifiers (for structured logging)
# ============================================================================


class Stage(str, Enum):
    """
    Read-path and write-path stages used in structured logs.

    Format: {SEQUENCE}_{DESCRIPTIVE_NAME}

    The read path walks the stages in order; a request stops at the first
    stage that produces a value.

    Examples:
        log_stage(logger, Stage.MEMORY_CACHE_LOOKUP, "Memory cache hit", key="alice")
    """

    INITIALIZATION = "0.0_INITIALIZATION"
    REQUEST_SCOPE = "1.0_REQUEST_SCOPE"
    MEMORY_CACHE_LOOKUP = "2.0_MEMORY_CACHE_LOOKUP"
    MEMORY_CACHE_SWEEP = "2.1_MEMORY_CACHE_SWEEP"
    REVALIDATING_CACHE_LOOKUP = "3.0_REVALIDATING_CACHE_LOOKUP"
    BACKGROUND_REVALIDATION = "3.1_BACKGROUND_REVALIDATION"
    TAG_INVALIDATION = "3.2_TAG_INVALIDATION"
    PERSISTENCE_FETCH = "4.0_PERSISTENCE_FETCH"
    WRITE_PATH = "5.0_WRITE_PATH"
    CLEANUP = "6.0_CLEANUP"


# ============================================================================
# Cache Tiers
# ============================================================================


class CacheTier(str, Enum):
    """
    Read-path tiers, fastest first.

    REQUEST: Per-request memoization (same request only)
    MEMORY: In-process TTL cache (shared by all requests in the process)
    REVALIDATING: Tag-addressable cache with revalidate window
    STORE: Persistence accessor (always a miss for caching purposes)
    """

    REQUEST = "request"
    MEMORY = "memory"
    REVALIDATING = "revalidating"
    STORE = "store"


# ============================================================================
# Resource Namespaces and Revalidation Tags
# ============================================================================


class ResourceNamespace(str, Enum):
    """
    Resource types served by the public read path.

    The value doubles as the memory cache namespace and the primary
    revalidation tag of every entry of that resource.
    """

    PROFILE = "profile"
    AI_PAGE = "ai-page"


TAG_PROFILE = ResourceNamespace.PROFILE.value
TAG_AI_PAGE = ResourceNamespace.AI_PAGE.value

# ============================================================================
# Cache Defaults
# ============================================================================

# Process memory cache
MEMORY_CACHE_STD_TTL = 300  # 5 minutes
MEMORY_CACHE_CHECK_PERIOD = 60  # sweep expired keys every 60s
MEMORY_CACHE_PROFILE_MAX_KEYS = 10000
MEMORY_CACHE_AI_PAGE_MAX_KEYS = 5000

# Revalidating cache
REVALIDATE_SECONDS = 60
REVALIDATE_MAX_ENTRY_AGE = 86400  # hard upper bound on stored entry age (24 hours)

# Accessor retries (Redis-backed stores)
MAX_RETRIES = 3
RETRY_BASE_DELAY = 0.05
RETRY_MAX_DELAY = 1.0

# ============================================================================
# Profile Defaults
# ============================================================================

DEFAULT_AVATAR_URL_TEMPLATE = "https://api.dicebear.com/9.x/avataaars/svg?seed={username}"
USERNAME_PATTERN = r"^[a-zA-Z0-9_-]+$"
USERNAME_MIN_LENGTH = 3

# ============================================================================
# Redis Key Prefixes
# ============================================================================

REDIS_KEY_REVALIDATE_ENTRY = "biolink:revalidate:entry"
REDIS_KEY_REVALIDATE_TAG = "biolink:revalidate:tag"
REDIS_KEY_PROFILES = "biolink:store:profiles"
REDIS_KEY_AI_PAGES = "biolink:store:ai-pages"
REDIS_KEY_AI_PAGE_IDS = "biolink:store:ai-page-ids"

# ============================================================================
# HTTP Headers
# ============================================================================

HEADER_REQUEST_ID = "X-Request-ID"
HEADER_USER_ID = "X-User-Id"
HEADER_USER_NAME = "X-User-Name"
HEADER_USER_EMAIL = "X-User-Email"
