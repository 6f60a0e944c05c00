# kitstore/api/routers/realtime.py
import asyncio
import contextlib

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

router = APIRouter(tags=["realtime"])


@router.websocket("/ws")
async def products_socket(websocket: WebSocket):
    """Pushes {"event": "productsChange", "payload": [...]} after every product change."""
    hub = websocket.app.state.hub
    # registered before accept so no event published after the handshake is missed
    queue = hub.connect()
    await websocket.accept()

    async def forward():
        while True:
            await websocket.send_json(await queue.get())

    sender = asyncio.create_task(forward())
    try:
        # clients never send anything, receiving only detects the disconnect
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    finally:
        sender.cancel()
        # a send that failed on a closed socket ends the sender with that error
        with contextlib.suppress(asyncio.CancelledError, Exception):
            await sender
        hub.disconnect(queue)
