"""
Profile Service
===============

Write path for profiles. Every successful mutation invalidates the
"profile" revalidation tag so the next public lookup that misses the
memory cache refetches from the record store.

Reads of a single public profile do not go through this service: they go
through the PublicPageResolver. Listings are served straight from the
record store.
"""

from typing import Protocol

from biolink.core.config.constants import TAG_PROFILE, Stage
from biolink.core.exceptions import (
    CacheError,
    InvalidInputError,
    PermissionDeniedError,
    ResourceNotFoundError,
    UsernameTakenError,
)
from biolink.core.interfaces.repository import AIPageRepository, ProfileRepository
from biolink.core.logging.logger import get_logger, log_stage
from biolink.models.profile import Profile, ProfileCreate, ProfileUpdate

logger = get_logger(__name__)


class TagInvalidator(Protocol):
    async def invalidate_tag(self, tag: str) -> int:
        ...


async def invalidate_after_write(invalidator: TagInvalidator, tag: str, **context) -> None:
    """
    Invalidate tag after a committed write.

    The write has already succeeded, so an unreachable revalidation store is
    logged rather than reported to the caller; cached entries then refresh
    on their revalidate window.
    """
    try:
        await invalidator.invalidate_tag(tag)
    except CacheError as e:
        log_stage(logger, Stage.TAG_INVALIDATION, "Tag invalidation failed after write",
                  level="error", tag=tag, error=str(e), **context)


class ProfileService:
    """
    Profile creation, update and listing.

    Usage:
        service = ProfileService(profiles, ai_pages, resolver)
        profile = await service.create_profile("user-1", ProfileCreate(...))
    """

    def __init__(
        self,
        profiles: ProfileRepository,
        ai_pages: AIPageRepository,
        invalidator: TagInvalidator,
    ):
        self._profiles = profiles
        self._ai_pages = ai_pages
        self._invalidator = invalidator

    async def create_profile(self, user_id: str, data: ProfileCreate) -> Profile:
        """
        Create a profile for user_id.

        STAGE-5.0: Write path (profile create)

        Raises:
            UsernameTakenError: Another profile or an AI page uses the username
        """
        if await self._profiles.exists(data.username) or await self._ai_pages.exists(data.username):
            raise UsernameTakenError(
                "Username is already taken", details={"username": data.username}
            ).with_suggestion("Choose a different username")

        profile = await self._profiles.create(data.to_profile(user_id))
        log_stage(logger, Stage.WRITE_PATH, "Profile created", username=profile.username, user_id=user_id)

        await invalidate_after_write(self._invalidator, TAG_PROFILE, username=profile.username)
        return profile

    async def update_profile(self, user_id: str, username: str, patch: ProfileUpdate) -> Profile:
        """
        Apply patch to the profile owned by user_id.

        STAGE-5.0: Write path (profile update)

        Raises:
            InvalidInputError: Empty patch
            ResourceNotFoundError: No such profile
            PermissionDeniedError: Caller does not own the profile
        """
        if not patch.model_fields_set:
            raise InvalidInputError("No fields to update", details={"username": username})

        current = await self._profiles.fetch_by_username(username)
        if current is None:
            raise ResourceNotFoundError("Profile not found", details={"username": username})
        if current.user_id != user_id:
            raise PermissionDeniedError(
                "You don't have permission to edit this profile", details={"username": username}
            )

        profile = await self._profiles.update(patch.apply_to(current))
        log_stage(logger, Stage.WRITE_PATH, "Profile updated", username=username,
                  fields=sorted(patch.model_fields_set))

        await invalidate_after_write(self._invalidator, TAG_PROFILE, username=username)
        return profile

    async def list_profiles(self) -> list[Profile]:
        """All profiles, newest first."""
        return await self._profiles.list_all()
