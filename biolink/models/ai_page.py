"""
AI Page Models
==============

An AI page is a complete HTML document generated from a prompt and saved
under a public slug. Listings use AIPageSummary, which leaves out the HTML.
"""

from datetime import datetime, timezone
from uuid import uuid4

from pydantic import BaseModel, Field

from biolink.core.config.constants import USERNAME_MIN_LENGTH, USERNAME_PATTERN


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PageOwner(BaseModel):
    """Public summary of the user who owns a page."""

    id: str
    name: str | None = None
    email: str | None = None


class AIPageSummary(BaseModel):
    """Listing projection of an AI page."""

    id: str
    slug: str
    prompt: str
    style: str | None = None
    color_scheme: str | None = None
    is_published: bool = False
    created_at: datetime
    updated_at: datetime


class AIPage(BaseModel):
    """Stored AI page record."""

    id: str = Field(default_factory=lambda: uuid4().hex)
    slug: str
    user_id: str
    prompt: str
    html: str
    style: str | None = None
    color_scheme: str | None = None
    is_published: bool = False
    owner: PageOwner | None = None
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    def summary(self) -> AIPageSummary:
        return AIPageSummary(**self.model_dump(exclude={"html", "user_id", "owner"}))


class AIPageCreate(BaseModel):
    """
    Save form for an AI page.

    Saving to a slug the caller already owns updates that page in place.
    """

    slug: str = Field(..., min_length=USERNAME_MIN_LENGTH, pattern=USERNAME_PATTERN)
    prompt: str = Field(..., min_length=1)
    html: str = Field(..., min_length=1)
    style: str | None = None
    color_scheme: str | None = None
    is_published: bool = False
