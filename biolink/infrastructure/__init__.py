"""Infrastructure layer: caches, record stores and monitoring."""
