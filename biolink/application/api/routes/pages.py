"""
AI Page Routes
==============

GET    /pages/{slug}      published AI page (read path: all cache tiers)
GET    /pages             the caller's pages, most recently updated first
POST   /pages             save (create, or update the caller's page in place)
DELETE /pages/{page_id}   delete one of the caller's pages

Writes invalidate the "ai-page" tag.
"""

from fastapi import APIRouter, Response, status

from biolink.application.api.dependencies import (
    AIPageServiceDep,
    CallerDep,
    RequestScopeDep,
    ResolverDep,
)
from biolink.application.api.models import SavePageResponse
from biolink.core.exceptions import ResourceNotFoundError
from biolink.models.ai_page import AIPage, AIPageCreate, AIPageSummary

router = APIRouter(prefix="/pages", tags=["AI Pages"])


@router.get("/{slug}", response_model=AIPage)
async def get_page(slug: str, resolver: ResolverDep, scope: RequestScopeDep):
    """
    Public AI page lookup. Unpublished pages are reported as missing.
    """
    page = await resolver.get_ai_page(slug, scope)
    if page is None or not page.is_published:
        raise ResourceNotFoundError("Page not found", details={"slug": slug})
    return page


@router.get("", response_model=list[AIPageSummary])
async def list_pages(caller: CallerDep, service: AIPageServiceDep):
    return await service.list_user_pages(caller.id)


@router.post("", response_model=SavePageResponse)
async def save_page(
    data: AIPageCreate, caller: CallerDep, service: AIPageServiceDep, response: Response
):
    """
    Save an AI page under its slug.

    201 when a page was created, 200 when the caller's existing page for
    the slug was updated.
    """
    page, created = await service.save_page(caller, data)
    response.status_code = status.HTTP_201_CREATED if created else status.HTTP_200_OK
    return SavePageResponse(page=page, created=created)


@router.delete("/{page_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_page(page_id: str, caller: CallerDep, service: AIPageServiceDep):
    await service.delete_page(caller.id, page_id)
