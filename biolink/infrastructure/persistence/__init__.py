"""Record stores (persistence accessors) for profiles and AI pages."""

from biolink.infrastructure.persistence.memory_repositories import (
    InMemoryAIPageRepository,
    InMemoryProfileRepository,
)
from biolink.infrastructure.persistence.redis_repositories import (
    RedisAIPageRepository,
    RedisProfileRepository,
)

__all__ = [
    "InMemoryProfileRepository",
    "InMemoryAIPageRepository",
    "RedisProfileRepository",
    "RedisAIPageRepository",
]
