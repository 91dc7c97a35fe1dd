"""Device bus connection.

JSON text frames over a websocket. Every inbound frame that decodes to a
JSON object is handed to the registered listeners in arrival order; an
async listener is awaited before the next frame is read.
"""

from __future__ import annotations

import asyncio
import inspect
import json
from typing import Any, Awaitable, Callable, Optional, Union

import structlog
import websockets
from websockets.exceptions import ConnectionClosed, WebSocketException

logger = structlog.get_logger(__name__)

Frame = dict[str, Any]
FrameListener = Callable[[Frame], Union[None, Awaitable[None]]]


class BusError(Exception):
    """Raised when the device bus cannot be reached or written to."""


class BusConnection:
    """An open connection to the device bus."""

    def __init__(self, bus_id: str, websocket):
        self.bus_id = bus_id
        self._ws = websocket
        self._listeners: list[FrameListener] = []
        self._reader_task: Optional[asyncio.Task] = None
        self._closed = asyncio.Event()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def add_listener(self, listener: FrameListener) -> None:
        self._listeners.append(listener)

    def start(self) -> None:
        """Start reading inbound frames in a background task."""
        if self._reader_task is None:
            self._reader_task = asyncio.create_task(self._read_loop(), name="bus-reader")

    async def send(self, frame: Frame) -> None:
        """Send one frame.

        Raises:
            BusError: If the connection is closed
        """
        try:
            await self._ws.send(json.dumps(frame))
        except ConnectionClosed as e:
            raise BusError(f"Device bus connection closed: {e}") from e
        logger.debug("bus_frame_sent", frame_type=frame.get("type"))

    async def wait_closed(self) -> None:
        await self._closed.wait()

    async def close(self) -> None:
        if self._reader_task is not None and not self._reader_task.done():
            self._reader_task.cancel()
            try:
                await self._reader_task
            except asyncio.CancelledError:
                pass
        await self._ws.close()
        self._closed.set()
        logger.info("bus_disconnected", bus_id=self.bus_id)

    async def _read_loop(self) -> None:
        try:
            async for raw in self._ws:
                await self._dispatch(raw)
        except ConnectionClosed as e:
            logger.warning("bus_connection_closed", bus_id=self.bus_id, error=str(e))
        finally:
            self._closed.set()

    async def _dispatch(self, raw) -> None:
        try:
            frame = json.loads(raw)
        except (TypeError, ValueError) as e:
            logger.warning("bus_frame_undecodable", error=str(e))
            return

        if not isinstance(frame, dict):
            logger.warning("bus_frame_not_an_object", frame_type=type(frame).__name__)
            return

        for listener in self._listeners:
            try:
                result = listener(frame)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.error(
                    "bus_listener_failed",
                    listener=getattr(listener, "__name__", repr(listener)),
                    error=str(e),
                    error_type=type(e).__name__,
                )


async def connect(bus_id: str, address: str) -> BusConnection:
    """Open a connection to the device bus and identify as ``bus_id``.

    Args:
        bus_id: Identifier announced to the bus
        address: Websocket URI of the bus (ws:// or wss://)

    Returns:
        Started BusConnection

    Raises:
        BusError: If the bus cannot be reached
    """
    logger.info("bus_connecting", bus_id=bus_id, address=address)
    try:
        websocket = await websockets.connect(address)
    except (WebSocketException, OSError) as e:
        logger.error("bus_connection_failed", address=address, error=str(e))
        raise BusError(f"Cannot connect to device bus at {address}: {e}") from e

    connection = BusConnection(bus_id, websocket)
    await connection.send({"type": "hello", "id": bus_id})
    connection.start()
    logger.info("bus_connected", bus_id=bus_id)
    return connection
