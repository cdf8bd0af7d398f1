"""Maintenance and administration entry points."""
