"""Database configuration and utilities."""

from .session import SessionLocal, get_db, init_db

__all__ = ["get_db", "init_db", "SessionLocal"]
