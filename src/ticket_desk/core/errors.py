"""Exception types shared across the Ticket Desk services."""

from __future__ import annotations


class TicketDeskError(RuntimeError):
    """Base exception for all Ticket Desk failures."""


class StorageError(TicketDeskError):
    """Raised when the persistence layer fails during an operation.

    The transaction that triggered it has already been rolled back, so the
    stored counter and history are unchanged.
    """
