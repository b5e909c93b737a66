"""
Public Page Route
=================

GET /public/{slug} renders whatever lives at a public slug: a profile or,
failing that, a published AI page.

Building the view takes two passes over the slug, one for the page
metadata (title, description) and one for the content, and each pass looks
up the profile and the AI page concurrently. All four lookups share the
request scope, so the record store sees at most one fetch per resource.
"""

import asyncio

from fastapi import APIRouter

from biolink.application.api.dependencies import RequestScopeDep, ResolverDep, SettingsDep
from biolink.application.api.models import PageMetadata, PublicPageResponse
from biolink.caching.request_scope import RequestScope
from biolink.caching.resolver import PublicPageResolver
from biolink.core.exceptions import ResourceNotFoundError
from biolink.models.ai_page import AIPage
from biolink.models.profile import Profile

router = APIRouter(prefix="/public", tags=["Public"])


async def _lookup(
    resolver: PublicPageResolver, slug: str, scope: RequestScope
) -> tuple[Profile | None, AIPage | None]:
    profile, page = await asyncio.gather(
        resolver.get_profile(slug, scope),
        resolver.get_ai_page(slug, scope),
    )
    if page is not None and not page.is_published:
        page = None
    return profile, page


async def _page_metadata(
    resolver: PublicPageResolver, slug: str, scope: RequestScope, app_name: str
) -> PageMetadata | None:
    profile, page = await _lookup(resolver, slug, scope)
    if profile is not None:
        return PublicPageResponse.for_profile(profile, app_name).metadata
    if page is not None:
        return PublicPageResponse.for_ai_page(page, app_name).metadata
    return None


async def _page_content(
    resolver: PublicPageResolver, slug: str, scope: RequestScope, app_name: str
) -> PublicPageResponse | None:
    profile, page = await _lookup(resolver, slug, scope)
    if profile is not None:
        return PublicPageResponse.for_profile(profile, app_name)
    if page is not None:
        return PublicPageResponse.for_ai_page(page, app_name)
    return None


@router.get("/{slug}", response_model=PublicPageResponse)
async def view_public_page(
    slug: str, resolver: ResolverDep, scope: RequestScopeDep, settings: SettingsDep
):
    """
    Public view of a slug. A profile takes precedence over an AI page.

    Raises:
        ResourceNotFoundError: Neither a profile nor a published AI page (404)
    """
    app_name = settings.app.APP_NAME
    metadata, content = await asyncio.gather(
        _page_metadata(resolver, slug, scope, app_name),
        _page_content(resolver, slug, scope, app_name),
    )
    if content is None or metadata is None:
        raise ResourceNotFoundError("Page not found", details={"slug": slug})
    return content.model_copy(update={"metadata": metadata})
