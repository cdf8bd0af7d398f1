"""Administrative endpoints used by the desktop shell.

Everything here is restricted to local clients by ``require_local_client``.
"""

from __future__ import annotations

import asyncio
from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from ticket_desk.api.v1.dependencies import (
    AnalyzerDep,
    LedgerDep,
    SessionDep,
    require_local_client,
)
from ticket_desk.core.settings import settings
from ticket_desk.models import Announcement
from ticket_desk.schemas.announcement import (
    AnnouncementCreate,
    AnnouncementResponse,
    AnnouncementUpdate,
)
from ticket_desk.schemas.device import DeviceCreate, DeviceRegistered, DeviceResponse
from ticket_desk.schemas.queue import (
    CloseDeskResponse,
    CounterStateResponse,
    HistoryItemResponse,
    TicketStatsResponse,
)
from ticket_desk.services import announcements as announcement_service
from ticket_desk.services import devices as device_service

router = APIRouter(
    prefix="/admin",
    tags=["admin"],
    dependencies=[Depends(require_local_client)],
)


# -------------------- devices --------------------


@router.post("/devices", response_model=DeviceRegistered, status_code=status.HTTP_201_CREATED)
async def register_device(device_data: DeviceCreate, db: SessionDep) -> dict[str, Any]:
    """Register a device; an existing name keeps its original token."""
    token = device_service.register_device(db, device_data.name)
    return {"name": device_data.name, "created": token is not None}


@router.get("/devices", response_model=list[DeviceResponse])
async def list_devices(db: SessionDep) -> Any:
    """List all registered devices with their tokens."""
    return device_service.list_devices(db)


@router.delete("/devices/{device_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_device(device_id: int, db: SessionDep) -> Response:
    """Delete a device by id."""
    if not device_service.delete_device(db, device_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Device not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# -------------------- announcements --------------------


def _get_announcement_or_404(db: Session, announcement_id: int) -> Announcement:
    announcement = announcement_service.get_announcement(db, announcement_id)
    if announcement is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Announcement not found",
        )
    return announcement


@router.get("/announcements", response_model=list[AnnouncementResponse])
async def list_announcements(
    db: SessionDep,
    active_only: Annotated[bool, Query()] = False,
) -> Any:
    """List announcements, optionally only those currently shown."""
    return announcement_service.list_announcements(db, active_only=active_only)


@router.post(
    "/announcements",
    response_model=AnnouncementResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_announcement(data: AnnouncementCreate, db: SessionDep) -> Announcement:
    """Add a new active announcement."""
    return announcement_service.add_announcement(db, data.message)


@router.patch("/announcements/{announcement_id}", response_model=AnnouncementResponse)
async def update_announcement(
    announcement_id: int,
    data: AnnouncementUpdate,
    db: SessionDep,
) -> Announcement:
    """Change the message and/or the active flag of an announcement."""
    announcement = _get_announcement_or_404(db, announcement_id)
    return announcement_service.update_announcement(db, announcement, data)


@router.delete("/announcements/{announcement_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_announcement(announcement_id: int, db: SessionDep) -> Response:
    """Delete an announcement."""
    announcement = _get_announcement_or_404(db, announcement_id)
    announcement_service.delete_announcement(db, announcement)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# -------------------- counter, desks and history --------------------


@router.get("/counter", response_model=CounterStateResponse)
async def get_counter_state(ledger: LedgerDep) -> dict[str, object]:
    """Return what the displays currently show."""
    snapshot = await asyncio.to_thread(ledger.current)
    return snapshot.as_payload()


@router.post("/counter/reset", response_model=CounterStateResponse)
async def reset_counter(ledger: LedgerDep) -> dict[str, object]:
    """Start a new session and zero the counter."""
    snapshot = await asyncio.to_thread(ledger.reset_all)
    return snapshot.as_payload()


@router.post("/desks/{desk_name}/close", response_model=CloseDeskResponse)
async def close_desk(desk_name: str, ledger: LedgerDep) -> dict[str, str]:
    """Mark a desk as closed; repeated or pointless closes are reported, not failed."""
    outcome = await asyncio.to_thread(ledger.close_desk, desk_name)
    return {"desk_name": desk_name, "status": outcome.value}


@router.get("/desks", response_model=list[str])
async def list_active_desks(analyzer: AnalyzerDep) -> list[str]:
    """List desks that called tickets in the current session."""
    return await asyncio.to_thread(analyzer.desk_names)


@router.get("/history", response_model=list[HistoryItemResponse])
async def get_history(
    analyzer: AnalyzerDep,
    limit: Annotated[int | None, Query(ge=0, le=100)] = None,
) -> Any:
    """Return the tickets called before the one on display, newest first."""
    size = settings.recent_history_limit if limit is None else limit
    return await asyncio.to_thread(analyzer.recent_history, size)


@router.get("/stats/{desk_name}", response_model=list[TicketStatsResponse])
async def get_desk_stats(desk_name: str, analyzer: AnalyzerDep) -> Any:
    """Return per-ticket timing for a desk in the current session."""
    return await asyncio.to_thread(analyzer.desk_statistics, desk_name)
