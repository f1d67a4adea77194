"""WebSocket endpoint streaming book updates to live listeners."""

import logging

from fastapi import APIRouter, Depends, WebSocket

from bookstore.api.deps import get_hub
from bookstore.services.broadcast import BroadcastHub

logger = logging.getLogger(__name__)

router = APIRouter(tags=["live"])

# Longest slice of an incoming frame written to the log
_PREVIEW_CHARS = 80


@router.websocket("/ws/books")
async def book_updates(websocket: WebSocket, hub: BroadcastHub = Depends(get_hub)):
    await websocket.accept()
    hub.register(websocket)
    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                logger.debug(f"Listener disconnected with code {message.get('code')}")
                break
            data = message.get("text") or message.get("bytes") or ""
            logger.debug(
                f"Received message from listener (length {len(data)}): "
                f"{data[:_PREVIEW_CHARS]!r}"
            )
    finally:
        hub.unregister(websocket)
