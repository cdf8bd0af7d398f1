"""Tests for the ticket-desk-admin command line."""

import pytest

from ticket_desk.scripts import admin


@pytest.fixture(autouse=True)
def cli_backend(mocker, session_factory, ledger, analyzer):
    """Point the CLI at the test database instead of the configured one."""
    mocker.patch.object(admin, "SessionLocal", session_factory)
    mocker.patch.object(admin, "init_db")
    mocker.patch.object(admin, "get_ledger", return_value=ledger)
    mocker.patch.object(admin, "get_session_analyzer", return_value=analyzer)


def test_register_prints_token_once(capsys) -> None:
    assert admin.main(["register", "Guichet 4"]) == 0
    first = capsys.readouterr().out
    assert "Registered 'Guichet 4' with token " in first

    assert admin.main(["register", "Guichet 4"]) == 0
    assert "already exists" in capsys.readouterr().out

    admin.main(["devices"])
    listing = capsys.readouterr().out
    assert first.strip().split()[-1] in listing


def test_delete_unknown_device_fails(capsys) -> None:
    assert admin.main(["delete-device", "42"]) == 1
    assert "No device with id 42" in capsys.readouterr().out


def test_announcement_commands(capsys, db_session) -> None:
    admin.main(["announcements", "add", "Back", "in", "5", "minutes"])
    admin.main(["announcements", "disable", "1"])
    capsys.readouterr()

    admin.main(["announcements", "list"])
    assert "[off] Back in 5 minutes" in capsys.readouterr().out

    admin.main(["announcements", "edit", "1", "Closed"])
    admin.main(["announcements", "enable", "1"])
    capsys.readouterr()
    admin.main(["announcements", "list"])
    assert "[on ] Closed" in capsys.readouterr().out

    assert admin.main(["announcements", "delete"]) == 2
    assert admin.main(["announcements", "delete", "7"]) == 1


def test_queue_commands(capsys, ledger, clock) -> None:
    ledger.call_next("A")
    clock.advance(4)
    ledger.call_next("A")
    ledger.call_next("B")

    admin.main(["current"])
    assert "Ticket 3 at B" in capsys.readouterr().out

    admin.main(["close", "A"])
    assert "A: SUCCESS" in capsys.readouterr().out

    admin.main(["history"])
    out = capsys.readouterr().out
    assert "#2" in out and "#1" in out and "#3" not in out

    admin.main(["stats", "A"])
    out = capsys.readouterr().out
    assert "== A" in out
    assert "4.0 min" in out

    admin.main(["reset"])
    assert ledger.current().counter == 0


def test_add_announcement_needs_a_message(capsys, db_session) -> None:
    assert admin.main(["announcements", "add"]) == 2
    assert "'add' needs a message" in capsys.readouterr().out

    admin.main(["announcements", "list"])
    assert capsys.readouterr().out == ""


def test_edit_announcement_needs_a_message(capsys) -> None:
    admin.main(["announcements", "add", "Back", "soon"])
    capsys.readouterr()

    assert admin.main(["announcements", "edit", "1"]) == 2
    assert "'edit' needs an announcement id and a message" in capsys.readouterr().out

    admin.main(["announcements", "list"])
    assert "Back soon" in capsys.readouterr().out
