"""API request and response models."""

from biolink.application.api.models.admin import (
    CacheStatsResponse,
    MemoryFlushResponse,
    RevalidateRequest,
    RevalidateResponse,
)
from biolink.application.api.models.public import (
    PageKind,
    PageMetadata,
    PublicPageResponse,
    SavePageResponse,
    SlugAvailabilityResponse,
)

__all__ = [
    "CacheStatsResponse",
    "MemoryFlushResponse",
    "RevalidateRequest",
    "RevalidateResponse",
    "PageKind",
    "PageMetadata",
    "PublicPageResponse",
    "SavePageResponse",
    "SlugAvailabilityResponse",
]
