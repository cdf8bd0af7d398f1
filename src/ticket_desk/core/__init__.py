"""Core configuration and shared primitives."""

from .errors import StorageError, TicketDeskError
from .settings import Settings, settings

__all__ = ["Settings", "settings", "StorageError", "TicketDeskError"]
