"""
Error Handling Middleware
=========================

Last line of defense for exceptions that escape the route handlers and
the BioLinkError exception handler registered in app.py.

Handled errors (BioLinkError subclasses) are mapped to their status codes
by the exception handler and never reach this middleware. Anything else
is logged with its stack trace, counted, and answered with a generic 500
body so internal details are not exposed to clients.
"""

import traceback
from collections.abc import Callable

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from biolink.core.logging.logger import get_logger
from biolink.infrastructure.monitoring.metrics_collector import get_metrics_collector

logger = get_logger(__name__)


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """
    Catch unhandled exceptions and format them consistently.

    Args:
        app: The ASGI application
        include_traceback: Include the stack trace in the response body
            (development only)
    """

    def __init__(self, app, include_traceback: bool = False):
        super().__init__(app)
        self.include_traceback = include_traceback

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)

        except Exception as e:
            method = request.method
            path = request.url.path
            error_type = type(e).__name__

            logger.error(
                f"Unhandled exception in request: {method} {path}",
                method=method,
                path=path,
                error_type=error_type,
                error_message=str(e),
                exc_info=True,
            )

            get_metrics_collector().record_error(error_type, "unhandled_exception")

            error_response = {
                "error_type": "InternalServerError",
                "message": "An unexpected error occurred while processing your request",
                "request_id": getattr(request.state, "request_id", None),
                "details": {},
            }

            if self.include_traceback:
                error_response["details"] = {
                    "original_error": error_type,
                    "detail": str(e),
                    "traceback": traceback.format_exc(),
                }

            return JSONResponse(status_code=500, content=error_response)


def add_error_handling_middleware(app, include_traceback: bool = False):
    """
    Add error handling middleware to the FastAPI application.

    Register it LAST (outermost) so it wraps every other middleware.
    """
    app.add_middleware(ErrorHandlingMiddleware, include_traceback=include_traceback)
    logger.info("Error handling middleware registered", include_traceback=include_traceback)
