"""Sinks towards the desktop shell: the main window and the speech engine.

Both are fire-and-forget. A failing sink is logged and never affects the
ticket call that triggered it.
"""

from __future__ import annotations

import logging
from typing import Protocol

from ticket_desk.core.settings import settings
from ticket_desk.services.ledger import CounterSnapshot

logger = logging.getLogger(__name__)


class DisplayNotifier(Protocol):
    """Receiver of queue updates inside the desktop shell.

    Sinks run on a worker thread, so a slow speech engine only delays the
    ticket call that triggered it, never the open event streams.
    """

    def notify(self, snapshot: CounterSnapshot) -> None:
        """Show the newly called ticket in the main window."""

    def announce(self, text: str) -> None:
        """Speak ``text`` aloud."""


class LoggingNotifier:
    """Default sink used when no desktop shell is attached."""

    def notify(self, snapshot: CounterSnapshot) -> None:
        logger.info("Display update: %s", snapshot.as_message())

    def announce(self, text: str) -> None:
        logger.info("Announce: %s", text)


def announcement_text(snapshot: CounterSnapshot, template: str | None = None) -> str:
    """Render the sentence spoken for a ticket call."""
    return (template or settings.announce_template).format(
        compteur=snapshot.counter,
        guichet=snapshot.desk_name,
    )


def dispatch_ticket_call(notifier: DisplayNotifier, snapshot: CounterSnapshot) -> None:
    """Notify the window then announce the call, isolating sink failures."""
    try:
        notifier.notify(snapshot)
    except Exception:
        logger.exception("Display notifier failed for ticket %d", snapshot.counter)
    try:
        notifier.announce(announcement_text(snapshot))
    except Exception:
        logger.exception("Announcer failed for ticket %d", snapshot.counter)


class _NotifierSingleton:
    """Holds the notifier installed by the desktop shell."""

    _instance: DisplayNotifier | None = None

    @classmethod
    def get_instance(cls) -> DisplayNotifier:
        if cls._instance is None:
            cls._instance = LoggingNotifier()
        return cls._instance


def install_notifier(notifier: DisplayNotifier) -> None:
    """Replace the process-wide notifier, e.g. with the shell's window bridge."""
    _NotifierSingleton._instance = notifier


def get_notifier() -> DisplayNotifier:
    """Return the process-wide notifier."""
    return _NotifierSingleton.get_instance()
