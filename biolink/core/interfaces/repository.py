"""
Persistence Accessor Protocols

Record stores for profiles and AI pages. The fetch_* methods are the
persistence accessors wrapped by the read-path caches: they return the
record or None when it does not exist. Write methods are used by the
write services only.

Author: System Architect
Date: 2025-12-08
"""

from typing import Protocol, runtime_checkable

from biolink.models.ai_page import AIPage, AIPageSummary
from biolink.models.profile import Profile


@runtime_checkable
class ProfileRepository(Protocol):
    """
    Profile record store.

    Error policy: fetch_by_username logs storage failures and raises
    PersistenceError("Failed to fetch profile.").
    """

    async def fetch_by_username(self, username: str) -> Profile | None:
        ...

    async def list_all(self) -> list[Profile]:
        """All profiles, newest first."""
        ...

    async def exists(self, username: str) -> bool:
        ...

    async def create(self, profile: Profile) -> Profile:
        ...

    async def update(self, profile: Profile) -> Profile:
        ...


@runtime_checkable
class AIPageRepository(Protocol):
    """
    AI page record store.

    Error policy: fetch_by_slug logs storage failures and returns None.
    """

    async def fetch_by_slug(self, slug: str) -> AIPage | None:
        ...

    async def get_by_id(self, page_id: str) -> AIPage | None:
        ...

    async def list_for_user(self, user_id: str) -> list[AIPageSummary]:
        """Summaries of the user's pages, most recently updated first."""
        ...

    async def exists(self, slug: str) -> bool:
        ...

    async def save(self, page: AIPage) -> AIPage:
        ...

    async def delete(self, page_id: str) -> bool:
        ...
