"""Device registry: token issuance and bearer-token resolution."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from secrets import token_hex

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ticket_desk.core.errors import StorageError
from ticket_desk.core.settings import settings
from ticket_desk.models import Device

logger = logging.getLogger(__name__)

__all__ = [
    "DeviceIdentity",
    "authenticate",
    "delete_device",
    "generate_token",
    "list_devices",
    "register_device",
]


@dataclass(frozen=True)
class DeviceIdentity:
    """Authenticated caller; ``name`` is also the desk name used for ticket calls."""

    id: int
    name: str


def generate_token() -> str:
    """Return a fresh opaque token made of hex characters only."""
    return token_hex(max(8, settings.token_bytes))


def register_device(db: Session, name: str) -> str | None:
    """Register ``name`` and return its new token.

    Re-registering an existing name is a no-op that returns None: the first
    token issued for a name stays valid and is never rotated. Use
    :func:`list_devices` to recover it.
    """
    name = name.strip()
    if not name:
        raise ValueError("device name must not be blank")

    try:
        if db.scalar(select(Device.id).where(Device.name == name)) is not None:
            logger.info("Device %r already registered; keeping its token", name)
            return None
        token = generate_token()
        db.add(Device(name=name, token=token))
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        # A concurrent registration of the same name won the race.
        if db.scalar(select(Device.id).where(Device.name == name)) is not None:
            return None
        logger.exception("Failed to register device %r", name)
        raise StorageError(f"could not register device {name!r}") from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Failed to register device %r", name)
        raise StorageError(f"could not register device {name!r}") from exc

    logger.info("Registered device %r", name)
    return token


def authenticate(db: Session, token: str | None) -> DeviceIdentity | None:
    """Resolve a bearer token; None means the caller is not authenticated."""
    if not token:
        return None
    try:
        row = db.execute(select(Device.id, Device.name).where(Device.token == token)).first()
    except SQLAlchemyError as exc:
        logger.exception("Token lookup failed")
        raise StorageError("could not look up device token") from exc
    if row is None:
        return None
    return DeviceIdentity(id=row.id, name=row.name)


def list_devices(db: Session) -> Sequence[Device]:
    """Return every registered device ordered by id."""
    try:
        return db.scalars(select(Device).order_by(Device.id)).all()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Failed to list devices")
        raise StorageError("could not list devices") from exc


def delete_device(db: Session, device_id: int) -> bool:
    """Remove a device; returns False when the id does not exist."""
    try:
        device = db.get(Device, device_id)
        if device is None:
            return False
        name = device.name
        db.delete(device)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Failed to delete device %d", device_id)
        raise StorageError(f"could not delete device {device_id}") from exc
    logger.info("Deleted device %r", name)
    return True
