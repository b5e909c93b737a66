"""Slug availability across profiles and AI pages."""

from fastapi import APIRouter

from biolink.application.api.dependencies import AIPageServiceDep
from biolink.application.api.models import SlugAvailabilityResponse

router = APIRouter(prefix="/slugs", tags=["Slugs"])


@router.get("/{slug}/availability", response_model=SlugAvailabilityResponse)
async def check_slug_availability(slug: str, service: AIPageServiceDep):
    available = await service.check_slug_available(slug)
    return SlugAvailabilityResponse(slug=slug, available=available)
