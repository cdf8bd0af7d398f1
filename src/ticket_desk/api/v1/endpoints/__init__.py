"""API endpoint modules for version 1."""

from .admin import router as admin_router
from .queue import router as queue_router

__all__ = ["admin_router", "queue_router"]
