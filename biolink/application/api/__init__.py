"""FastAPI routes, dependencies, middleware and API models."""
