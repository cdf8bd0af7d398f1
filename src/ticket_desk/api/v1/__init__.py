"""Version 1 API endpoints."""

from .endpoints import admin_router, queue_router

__all__ = ["admin_router", "queue_router"]
