"""
Link Models
===========

A link is one button on a public profile page. Every style field is an
optional override of the profile-wide link button defaults: None means
"inherit from the profile".
"""

from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, Field, HttpUrl


class LinkType(str, Enum):
    """How a link is rendered on the public page."""

    CLASSIC = "classic"
    ICON = "icon"
    HEADER = "header"


class LinkStyle(BaseModel):
    """Per-link overrides of the profile's link button defaults."""

    button_color: str | None = None
    text_color: str | None = None
    border_color: str | None = None
    border_style: str | None = None
    button_style: str | None = None
    shadow: str | None = None
    shadow_color: str | None = None
    animation: str | None = None
    icon_color: str | None = None
    border_width: int | None = Field(default=None, ge=0, le=20)


class Link(LinkStyle):
    """Stored link record."""

    id: str = Field(default_factory=lambda: uuid4().hex)
    title: str
    url: str
    icon: str
    type: LinkType = LinkType.CLASSIC
    order: int = 0
    enabled: bool = True
    thumbnail: str | None = None


class LinkCreate(LinkStyle):
    """Link as submitted in a profile form."""

    title: str = Field(..., min_length=1, description="Button label")
    url: HttpUrl = Field(..., description="Link target")
    icon: str = Field(..., min_length=1, description="Icon name, e.g. 'Github'")
    type: LinkType = LinkType.CLASSIC
    thumbnail: str | None = None

    def to_link(self, order: int) -> Link:
        """Build the stored record; order is the link's position in the form."""
        return Link(
            **self.model_dump(exclude={"url"}),
            url=str(self.url),
            order=order,
        )
