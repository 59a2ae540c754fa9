"""API routers grouped by concern."""
