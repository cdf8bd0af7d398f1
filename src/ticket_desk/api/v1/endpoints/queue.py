"""Device-facing endpoints: ticket calls from buttons and event streams for screens."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import aclosing

from fastapi import APIRouter
from fastapi.responses import StreamingResponse

from ticket_desk.api.v1.dependencies import (
    ButtonDeviceDep,
    HubDep,
    LedgerDep,
    NotifierDep,
    StreamDeviceDep,
)
from ticket_desk.schemas.queue import CounterStateResponse
from ticket_desk.services.broadcast import BroadcastHub, event_stream
from ticket_desk.services.devices import DeviceIdentity
from ticket_desk.services.notifier import dispatch_ticket_call

logger = logging.getLogger(__name__)

router = APIRouter(tags=["queue"])

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


def format_sse(message: str) -> str:
    """Frame one message as a Server-Sent Events ``data`` record."""
    lines = message.splitlines() or [""]
    return "".join(f"data: {line}\n" for line in lines) + "\n"


@router.post("/next", response_model=CounterStateResponse)
async def call_next_ticket(
    device: ButtonDeviceDep,
    ledger: LedgerDep,
    hub: HubDep,
    notifier: NotifierDep,
) -> dict[str, object]:
    """Advance the shared counter on behalf of the calling desk.

    The new state is persisted first; the desktop shell, the speech sink and
    every connected screen are only told once the ticket is in the log.

    Args:
        device: Authenticated button; its name is the desk name
        ledger: Counter store
        hub: Broadcast hub feeding the screens
        notifier: Desktop shell sinks

    Returns:
        ``{"guichet": desk, "compteur": number}``
    """
    logger.info("Button pressed by %s", device.name)
    snapshot = await asyncio.to_thread(ledger.call_next, device.name)

    await asyncio.to_thread(dispatch_ticket_call, notifier, snapshot)
    reached = hub.publish(snapshot.as_message())
    logger.debug("Ticket %d broadcast to %d screen(s)", snapshot.counter, reached)

    return snapshot.as_payload()


async def _sse_frames(hub: BroadcastHub, device: DeviceIdentity) -> AsyncIterator[str]:
    logger.info("Screen %s connected", device.name)
    try:
        async with aclosing(event_stream(hub)) as messages:
            async for message in messages:
                yield format_sse(message)
    finally:
        logger.info("Screen %s disconnected", device.name)


@router.get("/events")
async def stream_events(device: StreamDeviceDep, hub: HubDep) -> StreamingResponse:
    """Open a Server-Sent Events stream for an authenticated screen.

    The stream starts with a ``connected`` record, then carries every ticket
    call as ``{"guichet", "compteur"}`` JSON and a ``PING`` heartbeat.
    """
    return StreamingResponse(
        _sse_frames(hub, device),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )
