"""Append-only history of ticket calls, desk closures and resets."""

from __future__ import annotations

import enum
from datetime import datetime
from typing import Final

from sqlalchemy import DateTime, Enum, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from ticket_desk.db.session import Base
from ticket_desk.db.time import utcnow

# Integer codes used by older display clients for the marker events.
DESK_CLOSED_CODE: Final[int] = -1
SESSION_RESET_CODE: Final[int] = -2

RESET_DESK_NAME: Final[str] = "System"


class HistoryEventKind(str, enum.Enum):
    """Discriminant of a history row."""

    TICKET = "ticket"
    DESK_CLOSED = "desk_closed"
    SESSION_RESET = "session_reset"


class HistoryEvent(Base):
    """One immutable entry of the queue log.

    ``ticket_number`` is only set for ``TICKET`` rows. Closing markers bound
    the duration of the desk's last ticket; reset markers split the log into
    sessions.
    """

    __tablename__ = "history"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    kind: Mapped[HistoryEventKind] = mapped_column(
        Enum(HistoryEventKind, name="history_event_kind", native_enum=False),
        nullable=False,
        index=True,
    )
    ticket_number: Mapped[int | None] = mapped_column(Integer, nullable=True)
    desk_name: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    @classmethod
    def ticket(cls, number: int, desk_name: str, created_at: datetime) -> HistoryEvent:
        return cls(
            kind=HistoryEventKind.TICKET,
            ticket_number=number,
            desk_name=desk_name,
            created_at=created_at,
        )

    @classmethod
    def desk_closed(cls, desk_name: str, created_at: datetime) -> HistoryEvent:
        return cls(kind=HistoryEventKind.DESK_CLOSED, desk_name=desk_name, created_at=created_at)

    @classmethod
    def session_reset(cls, created_at: datetime) -> HistoryEvent:
        return cls(
            kind=HistoryEventKind.SESSION_RESET,
            desk_name=RESET_DESK_NAME,
            created_at=created_at,
        )

    @property
    def legacy_code(self) -> int:
        """Return the integer encoding (ticket number, -1 or -2)."""
        if self.kind is HistoryEventKind.DESK_CLOSED:
            return DESK_CLOSED_CODE
        if self.kind is HistoryEventKind.SESSION_RESET:
            return SESSION_RESET_CODE
        return int(self.ticket_number or 0)
