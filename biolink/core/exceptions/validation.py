"""
Validation Exceptions

All exceptions related to request validation

Author: System Architect
Date: 2025-12-08
"""

from biolink.core.exceptions.base import BioLinkError


class ValidationError(BioLinkError):
    """
    Raised when request validation fails.

    This is the base class for all validation-related errors.
    """
    status_code = 422


class InvalidInputError(ValidationError):
    """
    Raised when input validation fails.

    Common causes:
    - Username or slug with characters outside [a-zA-Z0-9_-]
    - Unknown revalidation tag
    - Empty update payload
    """
    pass
