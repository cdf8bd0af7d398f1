"""CRUD-style helpers for managing display announcements."""
from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Sequence

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ticket_desk.core.errors import StorageError
from ticket_desk.models import Announcement
from ticket_desk.schemas.announcement import AnnouncementUpdate

logger = logging.getLogger(__name__)

__all__ = [
    "add_announcement",
    "delete_announcement",
    "get_announcement",
    "list_announcements",
    "set_announcement_active",
    "update_announcement",
]


@contextmanager
def _storage(db: Session, action: str) -> Iterator[None]:
    """Roll back and raise StorageError if ``action`` fails in the database."""
    try:
        yield
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Failed to %s", action)
        raise StorageError(f"could not {action}") from exc


def get_announcement(db: Session, announcement_id: int) -> Announcement | None:
    """Return a single announcement by primary key."""
    with _storage(db, f"load announcement {announcement_id}"):
        return db.get(Announcement, announcement_id)


def list_announcements(db: Session, *, active_only: bool = False) -> Sequence[Announcement]:
    """Return announcements ordered by id, optionally only the active ones."""
    query = select(Announcement).order_by(Announcement.id)
    if active_only:
        query = query.where(Announcement.active.is_(True))
    with _storage(db, "list announcements"):
        return db.scalars(query).all()


def add_announcement(db: Session, message: str) -> Announcement:
    """Persist a new, active announcement."""
    announcement = Announcement(message=message, active=True)
    with _storage(db, "add announcement"):
        db.add(announcement)
        db.commit()
        db.refresh(announcement)
    return announcement


def update_announcement(
    db: Session, announcement: Announcement, update_data: AnnouncementUpdate
) -> Announcement:
    """Apply partial updates to an existing announcement."""
    update_dict = update_data.model_dump(exclude_unset=True, exclude_none=True)
    for key, value in update_dict.items():
        setattr(announcement, key, value)

    with _storage(db, f"update announcement {announcement.id}"):
        db.add(announcement)
        db.commit()
        db.refresh(announcement)
    return announcement


def set_announcement_active(db: Session, announcement: Announcement, active: bool) -> Announcement:
    """Toggle whether the displays show an announcement."""
    return update_announcement(db, announcement, AnnouncementUpdate(active=active))


def delete_announcement(db: Session, announcement: Announcement) -> Announcement:
    """Remove an announcement and return the deleted instance."""
    with _storage(db, f"delete announcement {announcement.id}"):
        db.delete(announcement)
        db.commit()
    return announcement
