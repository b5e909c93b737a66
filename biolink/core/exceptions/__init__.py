"""
Exception Module

Structured exception hierarchy for the biolink service.
All exceptions are organized by theme.

Module Structure:
-----------------
- **base.py**: BioLinkError base class + ConfigurationError
- **cache.py**: Cache-related exceptions (Redis, memory cache)
- **persistence.py**: Record store exceptions
- **resources.py**: Profile / AI page exceptions
- **validation.py**: Request validation exceptions

Usage:
------
```python
from biolink.core.exceptions import PersistenceError, ResourceNotFoundError
from biolink.core.exceptions.cache import CacheConnectionError
```

Author: System Architect
Date: 2025-12-08
"""

# Base exception
from biolink.core.exceptions.base import BioLinkError, ConfigurationError

# Cache exceptions
from biolink.core.exceptions.cache import CacheConnectionError, CacheError, CacheKeyError

# Persistence exceptions
from biolink.core.exceptions.persistence import PersistenceError

# Resource exceptions
from biolink.core.exceptions.resources import (
    AuthenticationRequiredError,
    PermissionDeniedError,
    ResourceNotFoundError,
    SlugUnavailableError,
    UsernameTakenError,
)

# Validation exceptions
from biolink.core.exceptions.validation import InvalidInputError, ValidationError

__all__ = [
    # Base
    "BioLinkError",
    "ConfigurationError",
    # Cache
    "CacheError",
    "CacheConnectionError",
    "CacheKeyError",
    # Persistence
    "PersistenceError",
    # Resources
    "ResourceNotFoundError",
    "UsernameTakenError",
    "SlugUnavailableError",
    "PermissionDeniedError",
    "AuthenticationRequiredError",
    # Validation
    "ValidationError",
    "InvalidInputError",
]
