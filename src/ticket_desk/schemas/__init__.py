"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .announcement import AnnouncementCreate, AnnouncementResponse, AnnouncementUpdate
from .device import DeviceCreate, DeviceRegistered, DeviceResponse
from .queue import (
    CloseDeskResponse,
    CounterStateResponse,
    HistoryItemResponse,
    TicketStatsResponse,
)

__all__ = [
    "AnnouncementCreate", "AnnouncementResponse", "AnnouncementUpdate",
    "DeviceCreate", "DeviceRegistered", "DeviceResponse",
    "CloseDeskResponse", "CounterStateResponse",
    "HistoryItemResponse", "TicketStatsResponse",
]
