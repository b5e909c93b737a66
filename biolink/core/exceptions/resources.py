"""
Resource Exceptions

Errors about profiles and AI pages raised by the write services and the API.

Author: System Architect
Date: 2025-12-08
"""

from biolink.core.exceptions.base import BioLinkError


class ResourceNotFoundError(BioLinkError):
    """Raised when a profile or AI page does not exist."""
    status_code = 404


class UsernameTakenError(BioLinkError):
    """Raised when creating a profile whose username is already in use."""
    status_code = 409


class SlugUnavailableError(BioLinkError):
    """
    Raised when a slug is already used by another resource.

    Profiles and AI pages share one public URL space, so a slug taken by
    either is unavailable to both.
    """
    status_code = 409


class PermissionDeniedError(BioLinkError):
    """Raised when the caller does not own the resource it tries to change."""
    status_code = 403


class AuthenticationRequiredError(BioLinkError):
    """Raised when a write endpoint is called without a caller identity."""
    status_code = 401
