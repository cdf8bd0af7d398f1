"""Serialized owner of the counter singleton and the append-only history.

Every mutation of the displayed counter goes through :class:`QueueLedger`.
It holds one exclusive lock over the storage handle so that "increment and
append" and "append reset marker and zero the counter" are each committed
as one transaction and observed atomically by any concurrent reader.
"""

from __future__ import annotations

import enum
import json
import logging
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import Final, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from ticket_desk.core.errors import StorageError
from ticket_desk.db.time import utcnow
from ticket_desk.models import COUNTER_ROW_ID, CounterState, HistoryEvent, HistoryEventKind

logger = logging.getLogger(__name__)

RESET_DISPLAY_NAME: Final[str] = "Reset"
INITIAL_DISPLAY_NAME: Final[str] = "None"

T = TypeVar("T")


class CloseOutcome(str, enum.Enum):
    """Result of closing a desk. None of these is an error."""

    SUCCESS = "SUCCESS"
    ALREADY_CLOSED = "ALREADY_CLOSED"
    NO_HISTORY = "NO_HISTORY"


@dataclass(frozen=True)
class CounterSnapshot:
    """Immutable copy of the counter row."""

    counter: int
    desk_name: str

    def as_payload(self) -> dict[str, object]:
        """Return the display payload using the firmware's field names."""
        return {"guichet": self.desk_name, "compteur": self.counter}

    def as_message(self) -> str:
        """Serialize the payload for the broadcast hub."""
        return json.dumps(self.as_payload(), ensure_ascii=False)


class QueueLedger:
    """Counter store and desk lifecycle manager behind a single storage lock."""

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._session_factory = session_factory
        self._clock = clock
        self._lock = threading.Lock()

    @contextmanager
    def _transaction(self, action: str) -> Iterator[Session]:
        """Yield a session inside one transaction while holding the storage lock."""
        with self._lock:
            db = self._session_factory()
            try:
                with db.begin():
                    yield db
            except SQLAlchemyError as exc:
                logger.exception("Storage failure during %s", action)
                raise StorageError(f"{action} failed") from exc
            finally:
                db.close()

    def read(self, reader: Callable[[Session], T]) -> T:
        """Run ``reader`` against one consistent snapshot of the log."""
        with self._transaction("read") as db:
            return reader(db)

    @staticmethod
    def _counter_row(db: Session) -> CounterState:
        row = db.get(CounterState, COUNTER_ROW_ID)
        if row is None:
            row = CounterState(id=COUNTER_ROW_ID, counter=0, last_desk=INITIAL_DISPLAY_NAME)
            db.add(row)
            db.flush()
        return row

    # -------------------- counter store --------------------

    def call_next(self, desk_name: str) -> CounterSnapshot:
        """Advance the shared counter for ``desk_name`` and log the ticket."""
        with self._transaction("call_next") as db:
            row = self._counter_row(db)
            row.counter += 1
            row.last_desk = desk_name
            db.add(HistoryEvent.ticket(row.counter, desk_name, self._clock()))
            db.flush()
            snapshot = CounterSnapshot(counter=row.counter, desk_name=row.last_desk)
        logger.info("Ticket %d called by %s", snapshot.counter, desk_name)
        return snapshot

    def current(self) -> CounterSnapshot:
        """Return what the displays currently show."""
        with self._transaction("current") as db:
            row = self._counter_row(db)
            return CounterSnapshot(counter=row.counter, desk_name=row.last_desk)

    # -------------------- desk lifecycle --------------------

    def close_desk(self, desk_name: str) -> CloseOutcome:
        """Append a closing marker unless the desk is already closed or never called.

        Reset markers are skipped when looking up the desk's latest event; this
        only matters for a desk literally named "System".
        """
        with self._transaction("close_desk") as db:
            latest = db.scalars(
                select(HistoryEvent)
                .where(
                    HistoryEvent.desk_name == desk_name,
                    HistoryEvent.kind != HistoryEventKind.SESSION_RESET,
                )
                .order_by(HistoryEvent.id.desc())
                .limit(1)
            ).first()
            if latest is None:
                outcome = CloseOutcome.NO_HISTORY
            elif latest.kind is HistoryEventKind.DESK_CLOSED:
                outcome = CloseOutcome.ALREADY_CLOSED
            else:
                db.add(HistoryEvent.desk_closed(desk_name, self._clock()))
                outcome = CloseOutcome.SUCCESS
        logger.info("Close desk %r: %s", desk_name, outcome.value)
        return outcome

    def reset_all(self) -> CounterSnapshot:
        """Start a new session: log a reset marker and zero the counter."""
        with self._transaction("reset") as db:
            db.add(HistoryEvent.session_reset(self._clock()))
            row = self._counter_row(db)
            row.counter = 0
            row.last_desk = RESET_DISPLAY_NAME
            db.flush()
            snapshot = CounterSnapshot(counter=row.counter, desk_name=row.last_desk)
        logger.info("Counter reset; new session started")
        return snapshot

    reset = reset_all


class _LedgerSingleton:
    """Process-wide ledger bound to the configured database."""

    _instance: QueueLedger | None = None

    @classmethod
    def get_instance(cls) -> QueueLedger:
        if cls._instance is None:
            from ticket_desk.db.session import SessionLocal

            cls._instance = QueueLedger(SessionLocal)
        return cls._instance


def get_ledger() -> QueueLedger:
    """Return the process-wide queue ledger."""
    return _LedgerSingleton.get_instance()
