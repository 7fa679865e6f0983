"""
Display Router
Websocket push channel for the "now serving" screen
"""
from fastapi import APIRouter, WebSocket, WebSocketDisconnect
import logging

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Display"])


@router.websocket("/ws/display")
async def display_updates(websocket: WebSocket):
    """
    Sends the current display on connect, then every update until the client leaves.
    Incoming messages are ignored.
    """
    notifier = websocket.app.state.notifier
    service = websocket.app.state.queue_service

    await notifier.connect(websocket, service.display_payload)
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    finally:
        notifier.disconnect(websocket)
