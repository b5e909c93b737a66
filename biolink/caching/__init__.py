"""Read-path composition: request scope memoizer and public resolver."""

from biolink.caching.request_scope import RequestScope
from biolink.caching.resolver import PublicPageResolver, create_resolver

__all__ = ["RequestScope", "PublicPageResolver", "create_resolver"]
