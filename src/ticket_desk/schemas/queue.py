"""Queue state, history and statistics schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class CounterStateResponse(BaseModel):
    """What the displays show: the wire names match the button and screen firmware."""

    guichet: str = Field(..., description="Desk that called the current ticket.")
    compteur: int = Field(..., ge=0, description="Current ticket number.")


class HistoryItemResponse(BaseModel):
    """A past ticket call of the current session."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    ticket_number: int
    desk_name: str
    created_at: datetime


class TicketStatsResponse(BaseModel):
    """Timing of one ticket served at a desk."""

    model_config = ConfigDict(from_attributes=True)

    ticket_number: int
    desk_name: str
    start_time: datetime
    end_time: datetime | None = None
    duration_minutes: float | None = None


class CloseDeskResponse(BaseModel):
    """Outcome of a close request: ``SUCCESS``, ``ALREADY_CLOSED`` or ``NO_HISTORY``."""

    desk_name: str
    status: str
