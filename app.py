"""FastAPI service exposing the Orbital Guardian realtime broadcaster."""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Annotated, Any

from fastapi import Depends, FastAPI, HTTPException, Request, WebSocket, WebSocketDisconnect
from fastapi.responses import PlainTextResponse

from orbital_guardian.logging_config import configure_service_logging
from orbital_guardian.metrics import latest_metrics
from orbital_guardian.models import SettingsUpdate, to_wire
from orbital_guardian.realtime import DATA_CHANNELS, Broadcaster, parse_channel
from orbital_guardian.settings import settings
from orbital_guardian.structured_logging import correlation_scope

CORRELATION_HEADER = "X-Correlation-ID"


@asynccontextmanager
async def lifespan(app: FastAPI):
    broadcaster = Broadcaster(config=settings)
    app.state.broadcaster = broadcaster
    logger.info("Orbital Guardian realtime service started")
    try:
        yield
    finally:
        await broadcaster.shutdown()
        logger.info("Orbital Guardian realtime service stopped")


app = FastAPI(title="Orbital Guardian Realtime", version="0.1.0", lifespan=lifespan)

configure_service_logging(settings)

logger = logging.getLogger(__name__)


@app.middleware("http")
async def bind_correlation_id(request: Request, call_next):
    with correlation_scope(request.headers.get(CORRELATION_HEADER)) as cid:
        response = await call_next(request)
    response.headers[CORRELATION_HEADER] = cid
    return response


def get_broadcaster(request: Request) -> Broadcaster:
    return request.app.state.broadcaster


BroadcasterDep = Annotated[Broadcaster, Depends(get_broadcaster)]


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/status")
async def system_status(broadcaster: BroadcasterDep) -> dict[str, Any]:
    return to_wire(broadcaster.get_system_status())


@app.get("/settings")
async def get_settings(broadcaster: BroadcasterDep) -> dict[str, Any]:
    return to_wire(broadcaster.get_settings())


@app.patch("/settings")
async def patch_settings(update: SettingsUpdate, broadcaster: BroadcasterDep) -> dict[str, Any]:
    return to_wire(broadcaster.update_settings(update))


@app.post("/channels/{channel}/trigger")
async def trigger_channel(channel: str, broadcaster: BroadcasterDep) -> dict[str, Any]:
    resolved = parse_channel(channel)
    if resolved is None:
        raise HTTPException(status_code=404, detail=f"Unknown channel: {channel}")
    if resolved not in DATA_CHANNELS:
        raise HTTPException(status_code=400, detail=f"Channel {channel} is not triggerable")
    payload = broadcaster.trigger_update(resolved)
    if payload is None:
        raise HTTPException(status_code=503, detail=f"Update for {channel} failed; see connection status")
    return {"channel": resolved.value, "data": to_wire(payload)}


@app.post("/reconnect")
async def reconnect(broadcaster: BroadcasterDep) -> dict[str, Any]:
    broadcaster.reconnect()
    return to_wire(broadcaster.get_connection_status())


@app.get("/metrics")
async def metrics() -> PlainTextResponse:
    content = latest_metrics()
    return PlainTextResponse(content, media_type="text/plain; version=0.0.4")


@app.websocket("/ws/{channel}")
async def channel_ws(websocket: WebSocket, channel: str) -> None:
    resolved = parse_channel(channel)
    if resolved is None:
        await websocket.close(code=1008)
        return

    broadcaster: Broadcaster = websocket.app.state.broadcaster
    await websocket.accept()
    with correlation_scope(websocket.headers.get(CORRELATION_HEADER)):
        logger.info("WebSocket session opened", extra={"channel": resolved.value})
        queue: asyncio.Queue = asyncio.Queue()
        unsubscribe = broadcaster.subscribe(resolved, queue.put_nowait)

        async def forward() -> None:
            while True:
                payload = await queue.get()
                await websocket.send_json({"channel": resolved.value, "data": to_wire(payload)})

        sender = asyncio.create_task(forward())
        try:
            while True:
                # Clients may ask for an out-of-band refresh of their channel.
                if await websocket.receive_text() == "refresh":
                    broadcaster.trigger_update(resolved)
        except WebSocketDisconnect:
            pass
        finally:
            unsubscribe()
            sender.cancel()
            await asyncio.gather(sender, return_exceptions=True)
            logger.info("WebSocket session closed", extra={"channel": resolved.value})


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
