"""A single live WebSocket session and its read/write pumps."""
from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Any, Awaitable, Callable

from fastapi import WebSocket, WebSocketDisconnect

logger = logging.getLogger(__name__)

FrameHandler = Callable[["Connection", str], Awaitable[None]]

# Marks the end of the outbound stream.
_CLOSE = None


class Connection:
    """One transport session for one user.

    The outbound queue is bounded; ``enqueue`` never blocks and drops the
    frame when the queue is full or the connection is closed. Only the
    write pump touches the transport for sending, only the read pump for
    receiving.
    """

    def __init__(self, websocket: WebSocket, user_id: int, *, queue_size: int = 256) -> None:
        self.id = uuid.uuid4().hex[:12]
        self.user_id = user_id
        self._ws = websocket
        self._queue: asyncio.Queue[str | None] = asyncio.Queue(maxsize=queue_size)
        self._closed = False
        self._overflowing = False

    def __repr__(self) -> str:
        return f"<Connection {self.id} user={self.user_id}>"

    @property
    def closed(self) -> bool:
        return self._closed

    def enqueue(self, frame: str) -> bool:
        if self._closed:
            return False
        try:
            self._queue.put_nowait(frame)
        except asyncio.QueueFull:
            # Warn once per overflow episode; the hub counts individual drops.
            if self._overflowing:
                logger.debug("Outbound queue full for %r, dropping frame", self)
            else:
                self._overflowing = True
                logger.warning("Outbound queue full for %r, dropping frames", self)
            return False
        self._overflowing = False
        return True

    def close(self) -> None:
        """Close the outbound queue. Frames already queued are still written."""
        if self._closed:
            return
        self._closed = True
        try:
            self._queue.put_nowait(_CLOSE)
        except asyncio.QueueFull:
            # Make room for the terminator by dropping the oldest frame.
            self._queue.get_nowait()
            self._queue.put_nowait(_CLOSE)

    async def write_pump(self) -> None:
        try:
            while True:
                frame = await self._queue.get()
                if frame is _CLOSE:
                    break
                await self._ws.send_text(frame)
        except Exception:
            logger.info("Write failed for %r", self, exc_info=True)
        finally:
            self._closed = True
            await self._close_transport()

    async def read_pump(self, on_frame: FrameHandler) -> None:
        """Read until the transport fails. Raises WebSocketDisconnect on close."""
        while True:
            message: dict[str, Any] = await self._ws.receive()
            if message["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(message.get("code", 1000), message.get("reason"))
            raw = message.get("text")
            if raw is None:
                raw = (message.get("bytes") or b"").decode("utf-8", errors="replace")
            await on_frame(self, raw)

    async def _close_transport(self) -> None:
        try:
            await self._ws.close()
        except Exception:
            # Peer already gone.
            logger.debug("Transport for %r already closed", self)
