"""
FastAPI Application Entry Point

Configures the link-in-bio service: backends chosen from settings, the
public read path (request scope → memory cache → revalidating cache →
record store), write services, middleware, and routes.

Author: Senior Solution Architect
Date: 2025-12-05
"""

from contextlib import asynccontextmanager
from dataclasses import dataclass

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from biolink.application.api.middleware import setup_middleware
from biolink.application.api.routes.admin import router as admin_router
from biolink.application.api.routes.health import router as health_router
from biolink.application.api.routes.pages import router as pages_router
from biolink.application.api.routes.profiles import router as profiles_router
from biolink.application.api.routes.public import router as public_router
from biolink.application.api.routes.slugs import router as slugs_router
from biolink.application.services import AIPageService, ProfileService
from biolink.caching.resolver import PublicPageResolver, create_resolver
from biolink.core.config.constants import HEADER_REQUEST_ID, Stage
from biolink.core.config.settings import Settings, get_settings
from biolink.core.exceptions import BioLinkError
from biolink.core.interfaces.cache import RevalidationStore
from biolink.core.interfaces.repository import AIPageRepository, ProfileRepository
from biolink.core.logging.logger import get_logger, setup_logging
from biolink.infrastructure.cache.redis_client import RedisClient
from biolink.infrastructure.cache.revalidation_store import (
    InMemoryRevalidationStore,
    RedisRevalidationStore,
)
from biolink.infrastructure.monitoring.metrics_collector import get_metrics_collector
from biolink.infrastructure.persistence import (
    InMemoryAIPageRepository,
    InMemoryProfileRepository,
    RedisAIPageRepository,
    RedisProfileRepository,
)

logger = get_logger(__name__)


@dataclass
class Components:
    """Everything the lifespan builds and the routes consume."""

    profiles: ProfileRepository
    ai_pages: AIPageRepository
    store: RevalidationStore
    resolver: PublicPageResolver
    profile_service: ProfileService
    ai_page_service: AIPageService
    redis_client: RedisClient | None = None


async def build_components(settings: Settings) -> Components:
    """
    Construct backends, the read path and the write services.

    STAGE-0.4: Component construction

    Connects to Redis only when a Redis backend is configured.

    Raises:
        CacheConnectionError: Redis is configured but unreachable
    """
    redis_client = None
    if "redis" in (settings.storage.STORAGE_BACKEND, settings.storage.REVALIDATION_BACKEND):
        redis_client = RedisClient(settings)
        await redis_client.connect()

    if settings.storage.STORAGE_BACKEND == "redis":
        profiles = RedisProfileRepository(redis_client)
        ai_pages = RedisAIPageRepository(redis_client)
    else:
        profiles = InMemoryProfileRepository()
        ai_pages = InMemoryAIPageRepository()

    if settings.storage.REVALIDATION_BACKEND == "redis":
        store = RedisRevalidationStore(redis_client, max_entry_age=settings.cache.REVALIDATE_MAX_ENTRY_AGE)
    else:
        store = InMemoryRevalidationStore(max_entry_age=settings.cache.REVALIDATE_MAX_ENTRY_AGE)

    resolver = create_resolver(settings, profiles, ai_pages, store, metrics=get_metrics_collector())

    return Components(
        profiles=profiles,
        ai_pages=ai_pages,
        store=store,
        resolver=resolver,
        profile_service=ProfileService(profiles, ai_pages, resolver),
        ai_page_service=AIPageService(ai_pages, profiles, resolver),
        redis_client=redis_client,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifecycle (startup and shutdown).

    Startup builds every component and publishes it on app.state for the
    dependency providers; shutdown stops the memory cache sweeper, lets
    background revalidations finish and closes Redis.
    """
    settings: Settings = app.state.settings
    setup_logging(log_level=settings.logging.LOG_LEVEL, log_format=settings.logging.LOG_FORMAT)

    logger.info(
        "Starting BioLink service",
        stage=Stage.INITIALIZATION.value,
        environment=settings.app.ENVIRONMENT,
        version=settings.app.APP_VERSION,
        storage_backend=settings.storage.STORAGE_BACKEND,
        revalidation_backend=settings.storage.REVALIDATION_BACKEND,
    )

    components = await build_components(settings)
    app.state.components = components
    app.state.resolver = components.resolver
    app.state.profile_service = components.profile_service
    app.state.ai_page_service = components.ai_page_service
    app.state.redis_client = components.redis_client

    components.resolver.start()
    logger.info("Application startup complete")

    try:
        yield
    finally:
        logger.info("Shutting down application", stage=Stage.CLEANUP.value)
        await components.resolver.shutdown()
        if components.redis_client is not None:
            await components.redis_client.disconnect()
        logger.info("Application shutdown complete", stage=Stage.CLEANUP.value)


async def biolink_exception_handler(request: Request, exc: BioLinkError):
    """
    Map service errors to their HTTP status codes.

    Client errors (4xx) are logged at INFO, server-side failures at ERROR.
    """
    if exc.request_id is None:
        exc.request_id = getattr(request.state, "request_id", None)

    log = logger.error if exc.status_code >= 500 else logger.info
    log(
        f"Request error: {exc.message}",
        error_type=type(exc).__name__,
        status_code=exc.status_code,
        path=request.url.path,
    )
    if exc.status_code >= 500:
        get_metrics_collector().record_error(type(exc).__name__, "request")

    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
        headers={HEADER_REQUEST_ID: exc.request_id or ""},
    )


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Settings to use (the global settings when omitted)
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app.APP_NAME,
        version=settings.app.APP_VERSION,
        description="Link-in-bio profiles and AI pages with a layered read-path cache",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.app.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[HEADER_REQUEST_ID],
    )
    setup_middleware(app)

    app.add_exception_handler(BioLinkError, biolink_exception_handler)

    base_path = settings.app.API_BASE_PATH
    app.include_router(health_router, prefix=base_path)
    app.include_router(public_router, prefix=base_path)
    app.include_router(profiles_router, prefix=base_path)
    app.include_router(pages_router, prefix=base_path)
    app.include_router(slugs_router, prefix=base_path)
    app.include_router(admin_router, prefix=base_path)

    @app.get("/", tags=["Root"])
    async def root():
        """Root endpoint with API information."""
        return {
            "name": settings.app.APP_NAME,
            "version": settings.app.APP_VERSION,
            "environment": settings.app.ENVIRONMENT,
            "docs": "/docs",
            "health": f"{base_path}/health",
        }

    return app


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "biolink.application.app:create_app",
        factory=True,
        host=settings.app.API_HOST,
        port=settings.app.API_PORT,
        reload=settings.app.ENVIRONMENT == "development",
        log_level=settings.logging.LOG_LEVEL.lower(),
    )
