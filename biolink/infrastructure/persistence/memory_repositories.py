"""
In-Memory Record Stores

Process-local profile and AI page stores for development and tests.
Selected with STORAGE_BACKEND=memory. They never fail, so the error
policies of the Redis stores do not apply here.
"""

from biolink.core.exceptions import SlugUnavailableError, UsernameTakenError
from biolink.models.ai_page import AIPage, AIPageSummary
from biolink.models.profile import Profile


class InMemoryProfileRepository:
    """Profiles keyed by username."""

    def __init__(self, profiles: list[Profile] | None = None):
        self._profiles: dict[str, Profile] = {p.username: p for p in profiles or []}

    async def fetch_by_username(self, username: str) -> Profile | None:
        return self._profiles.get(username)

    async def list_all(self) -> list[Profile]:
        return sorted(self._profiles.values(), key=lambda p: p.created_at, reverse=True)

    async def exists(self, username: str) -> bool:
        return username in self._profiles

    async def create(self, profile: Profile) -> Profile:
        if profile.username in self._profiles:
            raise UsernameTakenError("Username is already taken", details={"username": profile.username})
        self._profiles[profile.username] = profile
        return profile

    async def update(self, profile: Profile) -> Profile:
        self._profiles[profile.username] = profile
        return profile


class InMemoryAIPageRepository:
    """AI pages keyed by slug, with an id → slug index."""

    def __init__(self, pages: list[AIPage] | None = None):
        self._pages: dict[str, AIPage] = {}
        self._slugs_by_id: dict[str, str] = {}
        for page in pages or []:
            self._pages[page.slug] = page
            self._slugs_by_id[page.id] = page.slug

    async def fetch_by_slug(self, slug: str) -> AIPage | None:
        return self._pages.get(slug)

    async def get_by_id(self, page_id: str) -> AIPage | None:
        slug = self._slugs_by_id.get(page_id)
        return self._pages.get(slug) if slug else None

    async def list_for_user(self, user_id: str) -> list[AIPageSummary]:
        pages = [p for p in self._pages.values() if p.user_id == user_id]
        pages.sort(key=lambda p: p.updated_at, reverse=True)
        return [p.summary() for p in pages]

    async def exists(self, slug: str) -> bool:
        return slug in self._pages

    async def save(self, page: AIPage) -> AIPage:
        existing = self._pages.get(page.slug)
        if existing is not None and existing.id != page.id:
            raise SlugUnavailableError("Slug is already used by another page", details={"slug": page.slug})
        self._pages[page.slug] = page
        self._slugs_by_id[page.id] = page.slug
        return page

    async def delete(self, page_id: str) -> bool:
        slug = self._slugs_by_id.pop(page_id, None)
        if slug is None:
            return False
        self._pages.pop(slug, None)
        return True
