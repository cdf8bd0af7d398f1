"""Shared API dependencies for device authentication and service access."""

import logging
from typing import Annotated

from fastapi import Depends, HTTPException, Query, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from ticket_desk.core.settings import settings
from ticket_desk.db.session import get_db
from ticket_desk.services.analytics import SessionAnalyzer
from ticket_desk.services.broadcast import BroadcastHub, get_broadcast_hub
from ticket_desk.services.devices import DeviceIdentity, authenticate
from ticket_desk.services.ledger import QueueLedger, get_ledger
from ticket_desk.services.notifier import DisplayNotifier, get_notifier

logger = logging.getLogger(__name__)

# Buttons send "Authorization: Bearer <token>"; a missing header is handled below.
bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]
LedgerDep = Annotated[QueueLedger, Depends(get_ledger)]
HubDep = Annotated[BroadcastHub, Depends(get_broadcast_hub)]
NotifierDep = Annotated[DisplayNotifier, Depends(get_notifier)]


def get_session_analyzer_dep(ledger: LedgerDep) -> SessionAnalyzer:
    """Get a SessionAnalyzer sharing the request's ledger."""
    return SessionAnalyzer(ledger)


AnalyzerDep = Annotated[SessionAnalyzer, Depends(get_session_analyzer_dep)]


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_button_device(
    db: SessionDep,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    token: Annotated[str | None, Query()] = None,
) -> DeviceIdentity:
    """Resolve the device behind a ticket-call request.

    The bearer header is preferred; older button firmware puts the token in
    the query string instead.

    Raises:
        HTTPException: 401 if no token was sent or it matches no device
    """
    supplied = credentials.credentials if credentials is not None else token
    if not supplied:
        raise _unauthorized("Missing Token")

    device = authenticate(db, supplied)
    if device is None:
        logger.warning("Ticket call rejected: invalid token")
        raise _unauthorized("Invalid Token")
    return device


def get_stream_device(
    db: SessionDep,
    token: Annotated[str | None, Query()] = None,
) -> DeviceIdentity:
    """Resolve the screen opening an event stream from its ``?token=`` parameter.

    Raises:
        HTTPException: 401 before any stream is opened
    """
    device = authenticate(db, token)
    if device is None:
        logger.warning("Event stream rejected: invalid token")
        raise _unauthorized("Invalid Token")
    return device


def require_local_client(request: Request) -> None:
    """Restrict the administrative surface to the desktop shell's host.

    Raises:
        HTTPException: 403 for any other client address
    """
    host = request.client.host if request.client else None
    if host not in settings.admin_allowed_hosts:
        logger.warning("Admin request from %s refused", host)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Administrative API is only available locally",
        )


# Type aliases for authenticated device dependencies
ButtonDeviceDep = Annotated[DeviceIdentity, Depends(get_button_device)]
StreamDeviceDep = Annotated[DeviceIdentity, Depends(get_stream_device)]
