"""
FastAPI Dependency Injection
============================

Route handlers receive the application's long-lived components (resolver,
services, settings) and the per-request pieces (request scope, caller)
through FastAPI's dependency system instead of importing globals.

LIFECYCLE:
----------
- Long-lived components are built once in the application lifespan and
  stored on app.state. The providers below read them back.
- FastAPI caches a dependency's result for the duration of one request,
  so get_request_scope() yields exactly one RequestScope per request no
  matter how many route parameters or sub-dependencies ask for it.

Example:
    @router.get("/public/{slug}")
    async def view(slug: str, resolver: ResolverDep, scope: RequestScopeDep):
        return await resolver.get_profile(slug, scope)
"""

from typing import Annotated

from fastapi import Depends, Request

from biolink.application.services.ai_page_service import AIPageService
from biolink.application.services.profile_service import ProfileService
from biolink.caching.request_scope import RequestScope
from biolink.caching.resolver import PublicPageResolver
from biolink.core.config.constants import HEADER_USER_EMAIL, HEADER_USER_ID, HEADER_USER_NAME
from biolink.core.config.settings import Settings
from biolink.core.exceptions import AuthenticationRequiredError
from biolink.core.logging.logger import get_request_id
from biolink.models.ai_page import PageOwner

# ============================================================================
# DEPENDENCY FUNCTIONS
# ============================================================================


def _from_state(request: Request, name: str):
    component = getattr(request.app.state, name, None)
    if component is None:
        raise RuntimeError(
            f"'{name}' is not initialized in app.state. "
            "This indicates the application lifespan startup didn't complete properly."
        )
    return component


def get_app_settings(request: Request) -> Settings:
    """Settings the application was created with (create_app(settings))."""
    return _from_state(request, "settings")


def get_resolver(request: Request) -> PublicPageResolver:
    """
    Retrieve the PublicPageResolver built during startup.

    One resolver (and therefore one process memory cache) serves every
    request handled by this process.
    """
    return _from_state(request, "resolver")


def get_profile_service(request: Request) -> ProfileService:
    return _from_state(request, "profile_service")


def get_ai_page_service(request: Request) -> AIPageService:
    return _from_state(request, "ai_page_service")


async def get_request_scope() -> RequestScope:
    """
    Create the request scope for the current request.

    FastAPI calls this once per request and hands the same instance to
    every consumer, so concurrent lookups of the same key inside one
    request share a single fetch.
    """
    return RequestScope(request_id=get_request_id())


def get_caller(request: Request) -> PageOwner:
    """
    Identify the caller of a write or owner-scoped endpoint.

    Authentication happens upstream; the gateway forwards the signed-in
    user's id (and optionally name and e-mail) as headers.

    Raises:
        AuthenticationRequiredError: No user id header
    """
    user_id = request.headers.get(HEADER_USER_ID)
    if not user_id:
        raise AuthenticationRequiredError(
            "Authentication required", details={"header": HEADER_USER_ID}
        )
    return PageOwner(
        id=user_id,
        name=request.headers.get(HEADER_USER_NAME),
        email=request.headers.get(HEADER_USER_EMAIL),
    )


# ============================================================================
# TYPE ALIASES FOR CLEANER ROUTE SIGNATURES
# ============================================================================
# Annotated[Type, Depends(provider)] keeps the real type visible to type
# checkers while telling FastAPI how to resolve the parameter.

SettingsDep = Annotated[Settings, Depends(get_app_settings)]
ResolverDep = Annotated[PublicPageResolver, Depends(get_resolver)]
ProfileServiceDep = Annotated[ProfileService, Depends(get_profile_service)]
AIPageServiceDep = Annotated[AIPageService, Depends(get_ai_page_service)]
RequestScopeDep = Annotated[RequestScope, Depends(get_request_scope)]
CallerDep = Annotated[PageOwner, Depends(get_caller)]
