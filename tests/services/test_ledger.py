"""Tests for the counter store and desk lifecycle operations."""

from concurrent.futures import ThreadPoolExecutor

import pytest
from sqlalchemy import func, select, text

from ticket_desk.core.errors import StorageError
from ticket_desk.models import CounterState, HistoryEvent, HistoryEventKind
from ticket_desk.services.ledger import CloseOutcome, CounterSnapshot

PARALLEL_CALLS = 24


def _history(db_session):
    return db_session.scalars(select(HistoryEvent).order_by(HistoryEvent.id)).all()


def test_fresh_database_shows_zero(ledger) -> None:
    snapshot = ledger.current()
    assert snapshot == CounterSnapshot(counter=0, desk_name="None")


def test_call_next_increments_and_logs(ledger, db_session, clock) -> None:
    first = ledger.call_next("Guichet 1")
    second = ledger.call_next("Guichet 2")

    assert first == CounterSnapshot(counter=1, desk_name="Guichet 1")
    assert second == CounterSnapshot(counter=2, desk_name="Guichet 2")
    assert ledger.current() == second

    events = _history(db_session)
    assert [(e.kind, e.ticket_number, e.desk_name) for e in events] == [
        (HistoryEventKind.TICKET, 1, "Guichet 1"),
        (HistoryEventKind.TICKET, 2, "Guichet 2"),
    ]


def test_counter_is_shared_across_desks(ledger) -> None:
    numbers = [ledger.call_next(desk).counter for desk in ("A", "B", "A", "C", "B")]
    assert numbers == [1, 2, 3, 4, 5]


def test_counters_have_no_gaps_and_match_history(ledger, db_session) -> None:
    returned = [ledger.call_next("A").counter for _ in range(10)]

    assert returned == list(range(1, 11))
    tickets = db_session.scalar(
        select(func.count()).where(HistoryEvent.kind == HistoryEventKind.TICKET)
    )
    assert tickets == returned[-1]


def test_concurrent_calls_are_serialized(ledger, db_session) -> None:
    desks = [f"Desk {i % 4}" for i in range(PARALLEL_CALLS)]
    with ThreadPoolExecutor(max_workers=8) as pool:
        snapshots = list(pool.map(ledger.call_next, desks))

    assert sorted(s.counter for s in snapshots) == list(range(1, PARALLEL_CALLS + 1))
    logged = {(e.ticket_number, e.desk_name) for e in _history(db_session)}
    assert logged == {(s.counter, s.desk_name) for s in snapshots}
    assert ledger.current().counter == PARALLEL_CALLS


def test_reset_zeroes_counter_and_appends_marker(ledger, db_session) -> None:
    ledger.call_next("A")
    ledger.call_next("A")

    snapshot = ledger.reset_all()

    assert snapshot == CounterSnapshot(counter=0, desk_name="Reset")
    assert ledger.current() == snapshot
    last = _history(db_session)[-1]
    assert last.kind is HistoryEventKind.SESSION_RESET
    assert last.desk_name == "System"
    assert last.ticket_number is None
    assert last.legacy_code == -2

    assert ledger.call_next("B").counter == 1


def test_reset_alias(ledger) -> None:
    ledger.call_next("A")
    assert ledger.reset().counter == 0


def test_close_twice_is_idempotent(ledger, db_session) -> None:
    ledger.call_next("A")

    assert ledger.close_desk("A") is CloseOutcome.SUCCESS
    assert ledger.close_desk("A") is CloseOutcome.ALREADY_CLOSED

    markers = [e for e in _history(db_session) if e.kind is HistoryEventKind.DESK_CLOSED]
    assert len(markers) == 1
    assert markers[0].legacy_code == -1


def test_close_without_history_inserts_nothing(ledger, db_session) -> None:
    ledger.call_next("A")

    assert ledger.close_desk("B") is CloseOutcome.NO_HISTORY
    assert len(_history(db_session)) == 1


def test_close_reopens_after_new_ticket(ledger) -> None:
    ledger.call_next("A")
    ledger.close_desk("A")
    ledger.call_next("A")

    assert ledger.close_desk("A") is CloseOutcome.SUCCESS


def test_close_ignores_other_desks(ledger) -> None:
    ledger.call_next("A")
    ledger.close_desk("A")
    ledger.call_next("B")

    assert ledger.close_desk("A") is CloseOutcome.ALREADY_CLOSED


def test_close_outcome_values_match_shell_codes() -> None:
    assert [o.value for o in CloseOutcome] == ["SUCCESS", "ALREADY_CLOSED", "NO_HISTORY"]


def test_counter_row_recreated_when_missing(ledger, db_session) -> None:
    db_session.execute(text("DELETE FROM counter_state"))
    db_session.commit()

    assert ledger.call_next("A").counter == 1
    assert db_session.get(CounterState, 1) is not None


def test_storage_failure_rolls_back(ledger, engine) -> None:
    ledger.call_next("A")
    with engine.begin() as conn:
        conn.execute(text("DROP TABLE history"))

    with pytest.raises(StorageError):
        ledger.call_next("A")

    assert ledger.current().counter == 1


def test_snapshot_payload_uses_display_field_names() -> None:
    snapshot = CounterSnapshot(counter=7, desk_name="Caisse 2")
    assert snapshot.as_payload() == {"guichet": "Caisse 2", "compteur": 7}
    assert snapshot.as_message() == '{"guichet": "Caisse 2", "compteur": 7}'


def test_close_after_reset_uses_the_desk_ticket(ledger) -> None:
    ledger.call_next("A")
    ledger.reset_all()

    assert ledger.close_desk("A") is CloseOutcome.SUCCESS
