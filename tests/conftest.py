# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Generator, Iterator
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("INIT_DB_ON_STARTUP", "false")

from ticket_desk.api.v1.dependencies import require_local_client
from ticket_desk.db.session import build_engine, init_db
from ticket_desk.db.session import get_db as app_get_session
from ticket_desk.main import app as fastapi_app
from ticket_desk.models import Device
from ticket_desk.services.analytics import SessionAnalyzer
from ticket_desk.services.broadcast import BroadcastHub, get_broadcast_hub
from ticket_desk.services.ledger import CounterSnapshot, QueueLedger, get_ledger
from ticket_desk.services.notifier import get_notifier

SESSION_START = datetime(2025, 3, 14, 8, 0, tzinfo=UTC)


class FakeClock:
    """Deterministic clock handed to the ledger."""

    def __init__(self, start: datetime = SESSION_START) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, minutes: float = 1.0) -> datetime:
        self.now = self.now + timedelta(minutes=minutes)
        return self.now


class RecordingNotifier:
    """Desktop shell stand-in that remembers what it was told."""

    def __init__(self) -> None:
        self.snapshots: list[CounterSnapshot] = []
        self.spoken: list[str] = []

    def notify(self, snapshot: CounterSnapshot) -> None:
        self.snapshots.append(snapshot)

    def announce(self, text: str) -> None:
        self.spoken.append(text)


@pytest.fixture()
def engine(tmp_path: Path) -> Generator[Engine, None, None]:
    engine = build_engine(f"sqlite:///{tmp_path / 'qms.db'}")
    init_db(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture()
def session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


@pytest.fixture()
def db_session(session_factory: sessionmaker[Session]) -> Iterator[Session]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def ledger(session_factory: sessionmaker[Session], clock: FakeClock) -> QueueLedger:
    return QueueLedger(session_factory, clock=clock)


@pytest.fixture()
def analyzer(ledger: QueueLedger) -> SessionAnalyzer:
    return SessionAnalyzer(ledger)


@pytest.fixture()
def hub() -> BroadcastHub:
    return BroadcastHub(queue_size=10)


@pytest.fixture()
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture()
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_dependencies(
    app: FastAPI,
    session_factory: sessionmaker[Session],
    ledger: QueueLedger,
    hub: BroadcastHub,
    notifier: RecordingNotifier,
) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    overrides = {
        app_get_session: _get_session_override,
        get_ledger: lambda: ledger,
        get_broadcast_hub: lambda: hub,
        get_notifier: lambda: notifier,
        require_local_client: lambda: None,
    }
    app.dependency_overrides.update(overrides)
    try:
        yield
    finally:
        for dependency in overrides:
            app.dependency_overrides.pop(dependency, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def button(db_session: Session) -> Device:
    """A registered button for desk "Guichet 1"."""
    device = Device(name="Guichet 1", token="a" * 32)
    db_session.add(device)
    db_session.commit()
    return device


@pytest.fixture()
def screen(db_session: Session) -> Device:
    """A registered display screen."""
    device = Device(name="Screen Hall", token="b" * 32)
    db_session.add(device)
    db_session.commit()
    return device


@pytest.fixture()
def button_headers(button: Device) -> dict[str, str]:
    """Return authorization headers for the button."""
    return {"Authorization": f"Bearer {button.token}"}
