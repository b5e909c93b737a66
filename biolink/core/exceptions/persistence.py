"""
Persistence Exceptions

Errors raised by the persistence accessors. A PersistenceError is transient
by contract: the cache layers never store it and never convert it, and the
next lookup retries the fetch.

Author: System Architect
Date: 2025-12-08
"""

from biolink.core.exceptions.base import BioLinkError


class PersistenceError(BioLinkError):
    """
    Raised when the record store cannot serve a fetch or a write.

    Example:
        raise PersistenceError("Failed to fetch profile.", details={"username": "alice"})
    """
    status_code = 503
