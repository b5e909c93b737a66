"""
Public API Response Models
==========================

Response shapes for the public page view, AI page writes and slug checks.
Profile and AI page records are returned as their domain models; only the
composite views live here.
"""

from enum import Enum

from pydantic import BaseModel, Field

from biolink.models.ai_page import AIPage
from biolink.models.profile import Profile

DESCRIPTION_MAX_LENGTH = 160


class PageKind(str, Enum):
    """What a public slug resolved to."""

    PROFILE = "profile"
    AI_PAGE = "ai-page"


class PageMetadata(BaseModel):
    """Document title and description for a public page."""

    title: str
    description: str | None = None


class PublicPageResponse(BaseModel):
    """
    Public view of a slug.

    Exactly one of profile / html is set, matching kind.
    """

    kind: PageKind
    metadata: PageMetadata
    profile: Profile | None = None
    html: str | None = None

    @classmethod
    def for_profile(cls, profile: Profile, app_name: str) -> "PublicPageResponse":
        return cls(
            kind=PageKind.PROFILE,
            metadata=PageMetadata(
                title=f"{profile.display_name} (@{profile.username}) | {app_name}",
                description=profile.bio or "",
            ),
            profile=profile,
        )

    @classmethod
    def for_ai_page(cls, page: AIPage, app_name: str) -> "PublicPageResponse":
        return cls(
            kind=PageKind.AI_PAGE,
            metadata=PageMetadata(
                title=f"{page.slug} | {app_name}",
                description=page.prompt[:DESCRIPTION_MAX_LENGTH],
            ),
            html=page.html,
        )


class SlugAvailabilityResponse(BaseModel):
    slug: str
    available: bool


class SavePageResponse(BaseModel):
    """Result of saving an AI page."""

    page: AIPage
    created: bool = Field(..., description="False when an existing page was updated in place")
