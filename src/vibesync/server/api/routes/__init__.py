"""API routers for the VibeSync server."""
