"""SQLAlchemy models for the Ticket Desk application."""

from .announcement import Announcement
from .counter import COUNTER_ROW_ID, CounterState
from .device import Device
from .history import HistoryEvent, HistoryEventKind

__all__ = [
    "Announcement",
    "COUNTER_ROW_ID", "CounterState",
    "Device",
    "HistoryEvent", "HistoryEventKind",
]
