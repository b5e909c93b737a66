"""
Profile Routes
==============

GET    /profiles/{username}  public profile (read path: all cache tiers)
GET    /profiles             every profile, newest first (record store)
POST   /profiles             create the caller's profile
PATCH  /profiles/{username}  partial update by the owner

Writes require the X-User-Id header and invalidate the "profile" tag.
"""

from fastapi import APIRouter, status

from biolink.application.api.dependencies import (
    CallerDep,
    ProfileServiceDep,
    RequestScopeDep,
    ResolverDep,
)
from biolink.core.exceptions import ResourceNotFoundError
from biolink.core.logging.logger import get_logger
from biolink.models.profile import Profile, ProfileCreate, ProfileUpdate

logger = get_logger(__name__)

router = APIRouter(prefix="/profiles", tags=["Profiles"])


@router.get("/{username}", response_model=Profile)
async def get_profile(username: str, resolver: ResolverDep, scope: RequestScopeDep):
    """
    Public profile lookup.

    Raises:
        ResourceNotFoundError: No profile with this username (404)
        PersistenceError: Record store failure (503)
    """
    profile = await resolver.get_profile(username, scope)
    if profile is None:
        raise ResourceNotFoundError("Profile not found", details={"username": username})
    return profile


@router.get("", response_model=list[Profile])
async def list_profiles(service: ProfileServiceDep):
    return await service.list_profiles()


@router.post("", response_model=Profile, status_code=status.HTTP_201_CREATED)
async def create_profile(data: ProfileCreate, caller: CallerDep, service: ProfileServiceDep):
    return await service.create_profile(caller.id, data)


@router.patch("/{username}", response_model=Profile)
async def update_profile(
    username: str, patch: ProfileUpdate, caller: CallerDep, service: ProfileServiceDep
):
    return await service.update_profile(caller.id, username, patch)
