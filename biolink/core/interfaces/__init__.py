"""Protocols shared across layers."""

from biolink.core.interfaces.cache import (
    KeyValueBackend,
    RevalidationEntry,
    RevalidationStore,
    ValueCodec,
)
from biolink.core.interfaces.repository import AIPageRepository, ProfileRepository

__all__ = [
    "KeyValueBackend",
    "RevalidationEntry",
    "RevalidationStore",
    "ValueCodec",
    "ProfileRepository",
    "AIPageRepository",
]
