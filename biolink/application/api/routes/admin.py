"""
Admin Routes
============

Operational endpoints for the read-path caches:

GET    /admin/cache/stats       memory + revalidating cache statistics
POST   /admin/cache/revalidate  invalidate a revalidation tag
DELETE /admin/cache/memory      flush the process memory cache
GET    /admin/metrics           Prometheus exposition

Invalidating a tag does not touch the process memory cache; flush it as
well when a change must be visible before the memory TTL elapses.
"""

from fastapi import APIRouter, Depends, Response

from biolink.application.api.dependencies import ResolverDep
from biolink.application.api.models import (
    CacheStatsResponse,
    MemoryFlushResponse,
    RevalidateRequest,
    RevalidateResponse,
)
from biolink.core.exceptions import InvalidInputError
from biolink.core.logging.logger import get_logger
from biolink.infrastructure.monitoring.metrics_collector import get_metrics_collector

logger = get_logger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin"])


async def verify_admin_access() -> None:
    """
    Admin authentication hook.

    Access control is enforced by the upstream gateway; replace this with
    token verification when the service is exposed directly.
    """


@router.get(
    "/cache/stats",
    response_model=CacheStatsResponse,
    dependencies=[Depends(verify_admin_access)],
)
async def get_cache_stats(resolver: ResolverDep):
    return resolver.stats()


@router.post(
    "/cache/revalidate",
    response_model=RevalidateResponse,
    dependencies=[Depends(verify_admin_access)],
)
async def revalidate_tag(body: RevalidateRequest, resolver: ResolverDep):
    """
    Invalidate every revalidating-cache entry carrying the tag.

    Raises:
        InvalidInputError: Unknown tag (422)
        CacheError: Revalidation store unreachable (503)
    """
    if body.tag not in resolver.tags:
        raise InvalidInputError(
            f"Unknown revalidation tag '{body.tag}'",
            details={"tag": body.tag, "known_tags": resolver.tags},
        )
    version = await resolver.invalidate_tag(body.tag)
    return RevalidateResponse(tag=body.tag, version=version)


@router.delete(
    "/cache/memory",
    response_model=MemoryFlushResponse,
    dependencies=[Depends(verify_admin_access)],
)
async def flush_memory_cache(resolver: ResolverDep, namespace: str | None = None):
    """
    Flush the process memory cache (one namespace, or all of them).

    Raises:
        InvalidInputError: Unknown namespace (422)
    """
    if namespace is not None and namespace not in resolver.namespaces:
        raise InvalidInputError(
            f"Unknown cache namespace '{namespace}'",
            details={"namespace": namespace, "known_namespaces": resolver.namespaces},
        )
    flushed = resolver.flush_memory(namespace)
    logger.info("Memory cache flushed by admin", namespace=namespace, flushed=flushed)
    return MemoryFlushResponse(namespace=namespace, flushed=flushed)


@router.get("/metrics")
async def get_prometheus_metrics():
    """Expose metrics in Prometheus text format for scraping."""
    metrics_collector = get_metrics_collector()
    return Response(
        content=metrics_collector.get_prometheus_metrics(),
        media_type=metrics_collector.get_content_type(),
    )
