# src/ticket_desk/main.py
"""Main entry point for the Ticket Desk server."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ticket_desk import __version__
from ticket_desk.api.v1 import admin_router, queue_router
from ticket_desk.core.errors import StorageError
from ticket_desk.core.settings import settings
from ticket_desk.db.session import init_db
from ticket_desk.services.broadcast import HeartbeatPublisher, get_broadcast_hub

logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Queue ticketing for service desks: buttons, screens and history",
    version=__version__,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

# Buttons and screens use the bare paths baked into their firmware.
app.include_router(queue_router)
if settings.admin_api_enabled:
    app.include_router(admin_router, prefix="/api/v1")


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
    """Report persistence failures without leaking driver details."""
    logger.error("Storage failure on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Storage unavailable"},
    )


@app.on_event("startup")
async def on_startup() -> None:
    if settings.init_db_on_startup:
        init_db()
    heartbeat = HeartbeatPublisher(get_broadcast_hub())
    await heartbeat.start()
    app.state.heartbeat = heartbeat
    logger.info("Ticket Desk ready on http://%s:%d", settings.host, settings.port)


@app.on_event("shutdown")
async def on_shutdown() -> None:
    heartbeat: HeartbeatPublisher | None = getattr(app.state, "heartbeat", None)
    if heartbeat:
        await heartbeat.stop()
    get_broadcast_hub().close_all()


@app.get("/health")
async def health_check() -> dict[str, object]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok", "subscribers": get_broadcast_hub().subscriber_count}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": settings.app_name,
        "version": __version__,
        "docs": "/docs",
    }


def run() -> None:
    """Serve the app with uvicorn using the configured listener."""
    import uvicorn

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    run()
