"""
Request Context Middleware
==========================

Assigns every inbound request an ID, makes it visible to the structured
logger (and to the request scope) through a context variable, echoes it
in the X-Request-ID response header, and logs the request outcome.

A client-supplied X-Request-ID is kept so IDs correlate across services.
"""

import time
import uuid
from collections.abc import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from biolink.core.config.constants import HEADER_REQUEST_ID
from biolink.core.logging.logger import clear_request_id, get_logger, set_request_id

logger = get_logger(__name__)

# Health probes and scrapes would drown out real traffic at INFO.
QUIET_PATH_SUFFIXES = ("/health", "/metrics")


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Request ID propagation and request/response logging."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(HEADER_REQUEST_ID) or f"req_{uuid.uuid4().hex[:16]}"
        set_request_id(request_id)
        request.state.request_id = request_id

        start_time = time.perf_counter()
        method = request.method
        path = request.url.path
        level = "debug" if path.endswith(QUIET_PATH_SUFFIXES) else "info"

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                f"Request failed: {method} {path}",
                method=method,
                path=path,
                error_type=type(e).__name__,
                duration_seconds=round(time.perf_counter() - start_time, 4),
            )
            raise
        else:
            response.headers[HEADER_REQUEST_ID] = request_id
            getattr(logger, level)(
                f"Request completed: {method} {path}",
                method=method,
                path=path,
                status_code=response.status_code,
                duration_seconds=round(time.perf_counter() - start_time, 4),
            )
            return response
        finally:
            clear_request_id()


def add_request_context_middleware(app):
    app.add_middleware(RequestContextMiddleware)
    logger.info("Request context middleware registered")
