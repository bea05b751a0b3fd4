"""WebSocket endpoint for real-time bus positions."""

import asyncio
import logging

import orjson
from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from shuttle.core.broadcaster import sample_payload

logger = logging.getLogger(__name__)

router = APIRouter()


async def _snapshot(websocket: WebSocket) -> list[dict]:
    broadcaster = websocket.app.state.broadcaster
    positions = await broadcaster.get_positions()
    if positions:
        return positions
    # Redis unavailable or empty: fall back to the database
    ingest = websocket.app.state.ingest
    return [sample_payload(sample, name) for sample, name in await ingest.live_positions()]


@router.websocket("/ws/buses")
async def buses_ws(websocket: WebSocket) -> None:
    """Send the latest position of every live bus, then stream new samples."""
    await websocket.accept()

    broadcaster = getattr(websocket.app.state, "broadcaster", None)
    if broadcaster is None:
        await websocket.close(code=1011, reason="Service not ready")
        return

    queue = broadcaster.subscribe()
    try:
        snapshot = {"type": "snapshot", "buses": await _snapshot(websocket)}
        await websocket.send_bytes(orjson.dumps(snapshot))
        while True:
            data = await queue.get()
            await websocket.send_bytes(data)
    except WebSocketDisconnect:
        pass
    except asyncio.CancelledError:
        pass
    except Exception:
        logger.exception("WebSocket error")
    finally:
        broadcaster.unsubscribe(queue)
