"""
Middleware Package
==================

Middleware executes in order for requests and in reverse order for
responses. Starlette wraps each newly added middleware around the ones
added before it, so the LAST registration is the outermost layer:

Request flow:  Client → ErrorHandling → RequestContext → Handler

Usage:
    app = FastAPI()
    app.state.settings = settings
    setup_middleware(app)
"""

from fastapi import FastAPI

from biolink.core.logging.logger import get_logger

from .error_handler import add_error_handling_middleware
from .request_context import add_request_context_middleware

logger = get_logger(__name__)


def setup_middleware(app: FastAPI):
    """Register all middleware components in the correct order."""
    settings = app.state.settings

    logger.info("Registering middleware components...")

    # Inner: request ID must be set before any handler logs
    add_request_context_middleware(app)

    # Outer: catches errors from the request context layer too
    add_error_handling_middleware(
        app, include_traceback=(settings.app.ENVIRONMENT == "development")
    )

    logger.info("All middleware components registered successfully")


__all__ = [
    "setup_middleware",
    "add_error_handling_middleware",
    "add_request_context_middleware",
]
