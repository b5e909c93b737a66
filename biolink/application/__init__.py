"""HTTP application layer: FastAPI app, routes, middleware and write services."""
