"""Session analytics derived from the history log.

A session is the span of history after the most recent reset marker. Ticket
durations come from the next event recorded at the same desk, which is
either the following ticket or the desk's closing marker.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime
from itertools import pairwise

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ticket_desk.db.time import as_utc
from ticket_desk.models import HistoryEvent, HistoryEventKind
from ticket_desk.services.ledger import QueueLedger, get_ledger

SECONDS_PER_MINUTE = 60.0


@dataclass(frozen=True)
class HistoryItem:
    """A past ticket call."""

    id: int
    ticket_number: int
    desk_name: str
    created_at: datetime


@dataclass(frozen=True)
class TicketStats:
    """How long a desk spent on one ticket; open-ended for the last event."""

    ticket_number: int
    desk_name: str
    start_time: datetime
    end_time: datetime | None
    duration_minutes: float | None


@dataclass(frozen=True)
class DeskEvent:
    """History row copied out of the session it was read in."""

    id: int
    kind: HistoryEventKind
    ticket_number: int | None
    desk_name: str
    created_at: datetime


def _session_marker_id(db: Session) -> int:
    """Return the id of the latest reset marker, or 0 when none exists."""
    marker = db.scalar(
        select(func.max(HistoryEvent.id)).where(
            HistoryEvent.kind == HistoryEventKind.SESSION_RESET
        )
    )
    return int(marker or 0)


def pair_with_successor(events: Sequence[DeskEvent]) -> list[TicketStats]:
    """Pair each event with the next one; marker rows only terminate durations.

    ``events`` must be ordered by id ascending. The result keeps only ticket
    rows, most recent first.
    """
    stats: list[tuple[int, TicketStats]] = []

    def _build(event: DeskEvent, successor: DeskEvent | None) -> None:
        if event.kind is not HistoryEventKind.TICKET:
            return
        end_time = successor.created_at if successor is not None else None
        duration = None
        if end_time is not None:
            duration = (end_time - event.created_at).total_seconds() / SECONDS_PER_MINUTE
        stats.append(
            (
                event.id,
                TicketStats(
                    ticket_number=int(event.ticket_number or 0),
                    desk_name=event.desk_name,
                    start_time=event.created_at,
                    end_time=end_time,
                    duration_minutes=duration,
                ),
            )
        )

    for current, successor in pairwise(events):
        _build(current, successor)
    if events:
        _build(events[-1], None)

    stats.sort(key=lambda item: item[0], reverse=True)
    return [item for _, item in stats]


class SessionAnalyzer:
    """Read-only queries over the current session of the log."""

    def __init__(self, ledger: QueueLedger) -> None:
        self._ledger = ledger

    def recent_history(self, limit: int = 5) -> list[HistoryItem]:
        """Return up to ``limit`` tickets before the one currently displayed."""

        def _query(db: Session) -> list[HistoryItem]:
            marker_id = _session_marker_id(db)
            rows = db.scalars(
                select(HistoryEvent)
                .where(
                    HistoryEvent.id > marker_id,
                    HistoryEvent.kind == HistoryEventKind.TICKET,
                )
                .order_by(HistoryEvent.id.desc())
                .offset(1)
                .limit(max(0, limit))
            ).all()
            return [
                HistoryItem(
                    id=row.id,
                    ticket_number=int(row.ticket_number or 0),
                    desk_name=row.desk_name,
                    created_at=as_utc(row.created_at),
                )
                for row in rows
            ]

        return self._ledger.read(_query)

    def desk_statistics(self, desk_name: str) -> list[TicketStats]:
        """Return per-ticket durations for ``desk_name`` in the current session."""

        def _snapshot(db: Session) -> list[DeskEvent]:
            marker_id = _session_marker_id(db)
            rows = db.scalars(
                select(HistoryEvent)
                .where(
                    HistoryEvent.id > marker_id,
                    HistoryEvent.desk_name == desk_name,
                    HistoryEvent.kind.in_(
                        (HistoryEventKind.TICKET, HistoryEventKind.DESK_CLOSED)
                    ),
                )
                .order_by(HistoryEvent.id.asc())
            ).all()
            return _detach(rows)

        return pair_with_successor(self._ledger.read(_snapshot))

    def desk_names(self) -> list[str]:
        """Return the desks that called at least one ticket this session."""

        def _query(db: Session) -> list[str]:
            marker_id = _session_marker_id(db)
            names = db.scalars(
                select(HistoryEvent.desk_name)
                .where(
                    HistoryEvent.id > marker_id,
                    HistoryEvent.kind == HistoryEventKind.TICKET,
                )
                .distinct()
                .order_by(HistoryEvent.desk_name)
            ).all()
            return list(names)

        return self._ledger.read(_query)


def _detach(rows: Iterable[HistoryEvent]) -> list[DeskEvent]:
    return [
        DeskEvent(
            id=row.id,
            kind=row.kind,
            ticket_number=row.ticket_number,
            desk_name=row.desk_name,
            created_at=as_utc(row.created_at),
        )
        for row in rows
    ]


def get_session_analyzer() -> SessionAnalyzer:
    """Return an analyzer bound to the process-wide ledger."""
    return SessionAnalyzer(get_ledger())
