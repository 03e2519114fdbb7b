"""Buffered, non-blocking outbound side of a WebSocket connection."""
import asyncio
import logging
from typing import Optional

from starlette.websockets import WebSocket, WebSocketState

from lan_chat_hub.hub_errors import TransportError

logger = logging.getLogger(__name__)

_CLOSE = object()


class WebSocketTransport:
    """Queues frames for one client and writes them from a dedicated task.

    ``send_text`` returns immediately, so a slow or dead peer never stalls
    the dispatcher. When the queue is full the frame is rejected with
    :class:`TransportError`.
    """

    def __init__(self, ws: WebSocket, participant_id: str, max_queue: int = 256):
        self._ws = ws
        self.participant_id = participant_id
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=max_queue)
        self._writer: Optional[asyncio.Task] = None
        self._closed = False

    @property
    def is_open(self) -> bool:
        return not self._closed and self._ws.client_state == WebSocketState.CONNECTED

    def start(self) -> None:
        if self._writer is None:
            self._writer = asyncio.create_task(self._drain())

    def send_text(self, text: str) -> None:
        if not self.is_open:
            raise TransportError(self.participant_id, "connection closed")
        try:
            self._queue.put_nowait(text)
        except asyncio.QueueFull:
            raise TransportError(self.participant_id, "send buffer full")

    async def close(self) -> None:
        """Stop accepting frames and wait for the writer to flush what is queued."""
        if self._closed:
            return
        self._closed = True
        if self._writer is None:
            return
        try:
            self._queue.put_nowait(_CLOSE)
        except asyncio.QueueFull:
            self._writer.cancel()
        try:
            await self._writer
        except asyncio.CancelledError:
            pass

    async def _drain(self) -> None:
        while True:
            item = await self._queue.get()
            if item is _CLOSE:
                return
            if self._ws.client_state != WebSocketState.CONNECTED:
                continue
            try:
                await self._ws.send_text(item)
            except Exception as e:
                logger.debug(f"[WS] Send to {self.participant_id} failed: {e}")
                self._closed = True
                return
