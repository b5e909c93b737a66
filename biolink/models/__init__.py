"""Domain records and write schemas."""

from biolink.models.ai_page import AIPage, AIPageCreate, AIPageSummary, PageOwner
from biolink.models.link import Link, LinkCreate, LinkStyle, LinkType
from biolink.models.profile import (
    Profile,
    ProfileCreate,
    ProfileTheme,
    ProfileUpdate,
    default_avatar_url,
)

__all__ = [
    "Link",
    "LinkCreate",
    "LinkStyle",
    "LinkType",
    "Profile",
    "ProfileCreate",
    "ProfileTheme",
    "ProfileUpdate",
    "default_avatar_url",
    "AIPage",
    "AIPageCreate",
    "AIPageSummary",
    "PageOwner",
]
