"""
Profile Models
==============

Profile: the stored record served by the public read path.
ProfileCreate / ProfileUpdate: write schemas validated at the API boundary.

Defaults mirror the profile editor's initial theme (dark slate background,
emerald accents, white rounded link buttons).
"""

from datetime import datetime, timezone
from uuid import uuid4

from pydantic import BaseModel, Field, HttpUrl, field_validator

from biolink.core.config.constants import (
    DEFAULT_AVATAR_URL_TEMPLATE,
    USERNAME_MIN_LENGTH,
    USERNAME_PATTERN,
)
from biolink.models.link import Link, LinkCreate


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def default_avatar_url(username: str) -> str:
    """Generated avatar used when a profile has no avatar of its own."""
    return DEFAULT_AVATAR_URL_TEMPLATE.format(username=username)


class ProfileTheme(BaseModel):
    """
    Appearance settings shared by the stored record and the write schema.

    Groups:
    - background: color / type / gradient / image
    - profile card: text, accent and bio colors
    - avatar border
    - global link button defaults (overridable per link)
    """

    # Background
    background_color: str = "#0f172a"
    background_type: str = "solid"
    background_gradient: str | None = None
    background_image: str | None = None

    # Profile card
    profile_text_color: str = "#f1f5f9"
    profile_accent_color: str = "#10b981"
    profile_bio_color: str = "#94a3b8"

    # Font
    font_family: str = "Inter"

    # Avatar
    avatar_border_color: str = "#10b981"
    avatar_border_width: int = Field(default=4, ge=0, le=20)

    # Link button defaults
    link_button_style: str = "rounded"
    link_button_color: str = "#ffffff"
    link_button_text_color: str = "#0f172a"
    link_button_border: str = "none"
    link_button_border_color: str = "#10b981"
    link_button_shadow: str = "md"
    link_button_shadow_color: str | None = None
    link_button_animation: str = "scale"
    link_button_border_width: int | None = Field(default=None, ge=0, le=20)


class Profile(ProfileTheme):
    """Stored profile record; links are kept in display order."""

    id: str = Field(default_factory=lambda: uuid4().hex)
    username: str
    display_name: str
    bio: str | None = None
    avatar_url: str | None = None
    user_id: str
    links: list[Link] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @field_validator("links")
    @classmethod
    def sort_links(cls, links: list[Link]) -> list[Link]:
        return sorted(links, key=lambda link: link.order)


class ProfileCreate(ProfileTheme):
    """
    Profile creation form.

    username must be at least three characters of [a-zA-Z0-9_-]; an empty
    avatar_url or background_image is treated as "not set".
    """

    username: str = Field(
        ...,
        min_length=USERNAME_MIN_LENGTH,
        pattern=USERNAME_PATTERN,
        description="Public handle, used in the profile URL",
    )
    display_name: str = Field(..., min_length=1)
    bio: str | None = None
    avatar_url: HttpUrl | None = None
    background_image: HttpUrl | None = None
    links: list[LinkCreate] = Field(default_factory=list)

    @field_validator("avatar_url", "background_image", mode="before")
    @classmethod
    def empty_url_is_none(cls, v):
        if v == "":
            return None
        return v

    def to_profile(self, user_id: str) -> Profile:
        """Build the stored record, filling in the generated avatar."""
        data = self.model_dump(exclude={"links", "avatar_url", "background_image"})
        return Profile(
            **data,
            user_id=user_id,
            avatar_url=str(self.avatar_url) if self.avatar_url else default_avatar_url(self.username),
            background_image=str(self.background_image) if self.background_image else None,
            links=[link.to_link(order=index) for index, link in enumerate(self.links)],
        )


# Fields an update may explicitly clear with null
_NULLABLE_PROFILE_FIELDS = {
    "bio",
    "background_gradient",
    "link_button_shadow_color",
    "link_button_border_width",
}


class ProfileUpdate(BaseModel):
    """
    Partial profile update. Only fields that were sent are applied; links,
    when sent, replace the whole list. The username cannot be changed.
    """

    display_name: str | None = Field(default=None, min_length=1)
    bio: str | None = None
    avatar_url: HttpUrl | None = None
    background_color: str | None = None
    background_type: str | None = None
    background_gradient: str | None = None
    background_image: HttpUrl | None = None
    profile_text_color: str | None = None
    profile_accent_color: str | None = None
    profile_bio_color: str | None = None
    font_family: str | None = None
    avatar_border_color: str | None = None
    avatar_border_width: int | None = Field(default=None, ge=0, le=20)
    link_button_style: str | None = None
    link_button_color: str | None = None
    link_button_text_color: str | None = None
    link_button_border: str | None = None
    link_button_border_color: str | None = None
    link_button_shadow: str | None = None
    link_button_shadow_color: str | None = None
    link_button_animation: str | None = None
    link_button_border_width: int | None = Field(default=None, ge=0, le=20)
    links: list[LinkCreate] | None = None

    @field_validator("avatar_url", "background_image", mode="before")
    @classmethod
    def empty_url_is_none(cls, v):
        if v == "":
            return None
        return v

    def apply_to(self, profile: Profile) -> Profile:
        """Return a copy of profile with the sent fields applied."""
        changes = {
            name: value
            for name, value in self.model_dump(
                exclude_unset=True, exclude={"links", "avatar_url", "background_image"}
            ).items()
            if value is not None or name in _NULLABLE_PROFILE_FIELDS
        }
        if "avatar_url" in self.model_fields_set:
            changes["avatar_url"] = (
                str(self.avatar_url) if self.avatar_url else default_avatar_url(profile.username)
            )
        if "background_image" in self.model_fields_set:
            changes["background_image"] = str(self.background_image) if self.background_image else None
        if self.links is not None:
            changes["links"] = [link.to_link(order=index) for index, link in enumerate(self.links)]
        changes["updated_at"] = _utcnow()
        return profile.model_copy(update=changes)
