"""
Display notification service.
Pushes "now serving" snapshots to connected websocket clients.
"""
import asyncio
import logging
from typing import Any, Callable, Dict, Optional, Set

from fastapi import WebSocket

logger = logging.getLogger(__name__)

DISPLAY_UPDATED_EVENT = "display_updated"


class DisplayNotifier:
    """
    Fan-out of display snapshots to websocket listeners.

    Delivery is fire-and-forget: a client whose send fails is dropped and
    gets nothing further. Connection bookkeeping happens on the event loop
    only; publish() may be called from any thread.
    """

    def __init__(self):
        self._connections: Set[WebSocket] = set()
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self.latest: Optional[Dict[str, Any]] = None

    @property
    def connection_count(self) -> int:
        return len(self._connections)

    def bind_loop(self, loop: asyncio.AbstractEventLoop) -> None:
        """Attach the event loop that owns the websocket connections."""
        self._loop = loop

    def unbind_loop(self) -> None:
        self._loop = None

    @staticmethod
    def build_message(payload: Dict[str, Any]) -> Dict[str, Any]:
        return {"event": DISPLAY_UPDATED_EVENT, "data": payload}

    async def connect(self, websocket: WebSocket, payload_factory: Callable[[], Dict[str, Any]]) -> None:
        """
        Accept a listener and send it the current display right away.

        The socket is registered before the snapshot is built, so any update
        published in between is broadcast to it as well.
        """
        await websocket.accept()
        self._connections.add(websocket)
        logger.info(f"[Notifier] Display client connected ({self.connection_count} total)")
        await websocket.send_json(self.build_message(payload_factory()))

    def disconnect(self, websocket: WebSocket) -> None:
        if websocket in self._connections:
            self._connections.discard(websocket)
            logger.info(f"[Notifier] Display client disconnected ({self.connection_count} total)")

    async def broadcast(self, payload: Dict[str, Any]) -> int:
        """
        Send a snapshot to every listener.

        Returns:
            Number of clients the message reached
        """
        message = self.build_message(payload)
        delivered = 0
        for websocket in list(self._connections):
            try:
                await websocket.send_json(message)
                delivered += 1
            except Exception as e:
                logger.warning(f"[Notifier] Dropping display client after failed send: {e}")
                self.disconnect(websocket)
        return delivered

    def publish(self, payload: Dict[str, Any]) -> None:
        """
        Record the latest snapshot and schedule a broadcast on the bound loop.
        Safe to call from request worker threads.
        """
        self.latest = payload
        loop = self._loop
        if loop is None or loop.is_closed() or not self._connections:
            return
        asyncio.run_coroutine_threadsafe(self.broadcast(payload), loop)

    async def close_all(self) -> None:
        for websocket in list(self._connections):
            try:
                await websocket.close()
            except Exception as e:
                logger.debug(f"[Notifier] Ignoring error while closing client: {e}")
            self.disconnect(websocket)
