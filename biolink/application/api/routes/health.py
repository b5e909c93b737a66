"""
Health Check Routes
===================

LIVENESS vs READINESS:
----------------------
- GET /health        : the process is up (never touches dependencies)
- GET /health/ready  : dependencies answer (Redis when a Redis backend is
                       configured); 503 when one does not

Load balancers should route on readiness; orchestrators restart on
liveness.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

router = APIRouter(prefix="/health", tags=["Health"])


class HealthResponse(BaseModel):
    status: str  # "healthy", "unhealthy"
    timestamp: str  # ISO 8601
    components: dict | None = None


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("", response_model=HealthResponse)
async def health_check():
    """Liveness probe."""
    return HealthResponse(status="healthy", timestamp=_now())


@router.get("/ready", response_model=HealthResponse)
async def readiness_check(request: Request):
    """
    Readiness probe.

    Reports each configured dependency under components. The in-memory
    backends are always ready.
    """
    settings = request.app.state.settings
    components = {
        "storage_backend": settings.storage.STORAGE_BACKEND,
        "revalidation_backend": settings.storage.REVALIDATION_BACKEND,
    }

    redis_client = getattr(request.app.state, "redis_client", None)
    status = "healthy"
    if redis_client is not None:
        redis_health = await redis_client.health_check()
        components["redis"] = redis_health
        if redis_health["status"] != "healthy":
            status = "unhealthy"

    body = HealthResponse(status=status, timestamp=_now(), components=components)
    if status != "healthy":
        return JSONResponse(status_code=503, content=body.model_dump())
    return body
