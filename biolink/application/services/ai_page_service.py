"""
AI Page Service
===============

Write path for AI-generated pages: save (create or update in place),
delete, the caller's listing, and slug availability. Mutations invalidate
the "ai-page" revalidation tag.

Profiles and AI pages share one public URL space: a slug is available
only when neither a profile nor an AI page uses it.
"""

from datetime import datetime, timezone

from biolink.application.services.profile_service import TagInvalidator, invalidate_after_write
from biolink.core.config.constants import TAG_AI_PAGE, Stage
from biolink.core.exceptions import (
    PermissionDeniedError,
    PersistenceError,
    ResourceNotFoundError,
    SlugUnavailableError,
)
from biolink.core.interfaces.repository import AIPageRepository, ProfileRepository
from biolink.core.logging.logger import get_logger, log_stage
from biolink.models.ai_page import AIPage, AIPageCreate, AIPageSummary, PageOwner

logger = get_logger(__name__)


class AIPageService:
    """AI page save, delete, listing and slug checks."""

    def __init__(
        self,
        ai_pages: AIPageRepository,
        profiles: ProfileRepository,
        invalidator: TagInvalidator,
    ):
        self._ai_pages = ai_pages
        self._profiles = profiles
        self._invalidator = invalidator

    async def save_page(self, owner: PageOwner, data: AIPageCreate) -> tuple[AIPage, bool]:
        """
        Save data under its slug for owner.

        STAGE-5.0: Write path (AI page save)

        Saving to a slug the owner already uses updates that page in place.

        Returns:
            (page, created)

        Raises:
            SlugUnavailableError: A profile uses the slug
            PermissionDeniedError: Another user's page uses the slug
        """
        if await self._profiles.exists(data.slug):
            raise SlugUnavailableError(
                "This URL is already taken by a profile", details={"slug": data.slug}
            )

        existing = await self._ai_pages.fetch_by_slug(data.slug)
        if existing is not None and existing.user_id != owner.id:
            raise PermissionDeniedError(
                "You do not have permission to edit this page", details={"slug": data.slug}
            )

        if existing is None:
            page = AIPage(**data.model_dump(), user_id=owner.id, owner=owner)
        else:
            page = existing.model_copy(
                update={**data.model_dump(), "owner": owner, "updated_at": datetime.now(timezone.utc)}
            )

        saved = await self._ai_pages.save(page)
        created = existing is None
        log_stage(logger, Stage.WRITE_PATH, "AI page saved", slug=saved.slug, page_id=saved.id,
                  created=created, published=saved.is_published)

        await invalidate_after_write(self._invalidator, TAG_AI_PAGE, slug=saved.slug)
        return saved, created

    async def delete_page(self, user_id: str, page_id: str) -> None:
        """
        Delete a page owned by user_id.

        Raises:
            ResourceNotFoundError: No such page
            PermissionDeniedError: Caller does not own the page
        """
        page = await self._ai_pages.get_by_id(page_id)
        if page is None:
            raise ResourceNotFoundError("Page not found", details={"page_id": page_id})
        if page.user_id != user_id:
            raise PermissionDeniedError(
                "You don't have permission to delete this page", details={"page_id": page_id}
            )

        await self._ai_pages.delete(page_id)
        log_stage(logger, Stage.WRITE_PATH, "AI page deleted", slug=page.slug, page_id=page_id)

        await invalidate_after_write(self._invalidator, TAG_AI_PAGE, slug=page.slug)

    async def list_user_pages(self, user_id: str) -> list[AIPageSummary]:
        """The caller's pages, most recently updated first."""
        return await self._ai_pages.list_for_user(user_id)

    async def check_slug_available(self, slug: str) -> bool:
        """
        True when neither a profile nor an AI page uses slug.

        A storage failure reports the slug as unavailable.
        """
        try:
            if await self._profiles.exists(slug):
                return False
            return not await self._ai_pages.exists(slug)
        except PersistenceError as e:
            logger.error("Failed to check slug availability", slug=slug, error=str(e))
            return False
