"""Business logic services for the Ticket Desk application."""

from .analytics import HistoryItem, SessionAnalyzer, TicketStats
from .broadcast import BroadcastHub, HeartbeatPublisher, Subscription, event_stream
from .ledger import CloseOutcome, CounterSnapshot, QueueLedger
from .notifier import DisplayNotifier, LoggingNotifier

__all__ = [
    "BroadcastHub",
    "CloseOutcome",
    "CounterSnapshot",
    "DisplayNotifier",
    "HeartbeatPublisher",
    "HistoryItem",
    "LoggingNotifier",
    "QueueLedger",
    "SessionAnalyzer",
    "Subscription",
    "TicketStats",
    "event_stream",
]
