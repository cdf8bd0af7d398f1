"""Ticket Desk: queue ticketing server for service counters."""

__version__ = "0.1.0"
