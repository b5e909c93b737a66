"""
Record Factory

Builds profiles and AI pages with sensible defaults for tests.
"""

from biolink.models.ai_page import AIPage, AIPageCreate, PageOwner
from biolink.models.link import Link
from biolink.models.profile import Profile, ProfileCreate


class RecordFactory:
    """Factory for domain records."""

    @staticmethod
    def profile(username: str = "alice", user_id: str = "user-1", **overrides) -> Profile:
        data = {
            "username": username,
            "display_name": username.title(),
            "bio": f"Hi, I'm {username}",
            "user_id": user_id,
            "links": [
                Link(title="GitHub", url=f"https://github.com/{username}", icon="Github", order=0),
            ],
        }
        data.update(overrides)
        return Profile(**data)

    @staticmethod
    def profile_create(username: str = "alice", **overrides) -> ProfileCreate:
        data = {
            "username": username,
            "display_name": username.title(),
            "bio": "Builder of things",
            "links": [{"title": "GitHub", "url": "https://github.com/alice", "icon": "Github"}],
        }
        data.update(overrides)
        return ProfileCreate(**data)

    @staticmethod
    def ai_page(slug: str = "launch", user_id: str = "user-1", **overrides) -> AIPage:
        data = {
            "slug": slug,
            "user_id": user_id,
            "prompt": "A landing page for a product launch",
            "html": "<!DOCTYPE html><html><body><h1>Launch</h1></body></html>",
            "style": "minimal",
            "color_scheme": "dark",
            "is_published": True,
            "owner": PageOwner(id=user_id, name="Alice"),
        }
        data.update(overrides)
        return AIPage(**data)

    @staticmethod
    def ai_page_create(slug: str = "launch", **overrides) -> AIPageCreate:
        data = {
            "slug": slug,
            "prompt": "A landing page for a product launch",
            "html": "<html><body>Launch</body></html>",
            "is_published": True,
        }
        data.update(overrides)
        return AIPageCreate(**data)
