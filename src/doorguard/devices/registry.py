"""Device registry over a bus connection.

Discovers the devices announced on the bus and routes their state updates
to per-device handlers.

Frames consumed:
    {"type": "devices", "devices": [{"id": "..."}, ...]}
    {"type": "update", "device": "...", "fields": {...}}
"""

from __future__ import annotations

import asyncio
import inspect
from typing import Any, Awaitable, Callable, Optional, Union

import structlog

from .bus import BusConnection, BusError, Frame

logger = structlog.get_logger(__name__)

UpdateHandler = Callable[[dict[str, Any]], Union[None, Awaitable[None]]]


class RemoteDevice:
    """Handle to a device living on the bus."""

    def __init__(self, device_id: str, info: Optional[dict[str, Any]] = None):
        self.id = device_id
        self.info = dict(info or {})
        self._handlers: list[UpdateHandler] = []

    def on_update(self, handler: UpdateHandler) -> None:
        """Subscribe to state updates. Handlers receive a dict of changed fields."""
        self._handlers.append(handler)

    async def dispatch_update(self, fields: dict[str, Any]) -> None:
        for handler in self._handlers:
            try:
                result = handler(dict(fields))
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.error(
                    "device_update_handler_failed",
                    device_id=self.id,
                    handler=getattr(handler, "__name__", repr(handler)),
                    error=str(e),
                    error_type=type(e).__name__,
                )

    def __repr__(self) -> str:
        return f"RemoteDevice({self.id!r})"


class Registry:
    """Lookup of remote devices by identifier."""

    def __init__(self, connection: BusConnection):
        self._connection = connection
        self._devices: dict[str, RemoteDevice] = {}
        self._discovered: Optional[asyncio.Future] = None

    async def start(self) -> None:
        """Request the device list and wait until the bus answers.

        Raises:
            BusError: If the connection closes before the device list arrives
        """
        if self._discovered is not None and self._discovered.done():
            return

        if self._discovered is None:
            self._discovered = asyncio.get_running_loop().create_future()
            self._connection.add_listener(self._on_frame)
        await self._connection.send({"type": "discover"})

        closed = asyncio.ensure_future(self._connection.wait_closed())
        try:
            await asyncio.wait({self._discovered, closed}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            closed.cancel()

        if not self._discovered.done():
            logger.error("registry_discovery_aborted", reason="bus_closed")
            raise BusError("Device bus closed during discovery")

        logger.info("registry_started", device_count=len(self._devices))

    def find(self, device_id: str) -> Optional[RemoteDevice]:
        return self._devices.get(device_id)

    @property
    def devices(self) -> list[RemoteDevice]:
        return list(self._devices.values())

    async def _on_frame(self, frame: Frame) -> None:
        frame_type = frame.get("type")

        if frame_type == "devices":
            self._load_devices(frame.get("devices"))
            if self._discovered is not None and not self._discovered.done():
                self._discovered.set_result(None)
        elif frame_type == "update":
            await self._route_update(frame)

    def _load_devices(self, entries: Any) -> None:
        if not isinstance(entries, list):
            logger.warning("registry_device_list_malformed")
            return

        for entry in entries:
            if not isinstance(entry, dict) or not isinstance(entry.get("id"), str):
                logger.warning("registry_device_entry_skipped", entry=entry)
                continue
            device_id = entry["id"]
            # Re-announced devices keep their handlers
            if device_id in self._devices:
                self._devices[device_id].info.update(entry)
            else:
                self._devices[device_id] = RemoteDevice(device_id, entry)
                logger.debug("registry_device_added", device_id=device_id)

    async def _route_update(self, frame: Frame) -> None:
        device = self._devices.get(frame.get("device"))
        if device is None:
            logger.debug("update_for_unknown_device", device_id=frame.get("device"))
            return

        fields = frame.get("fields")
        if not isinstance(fields, dict):
            logger.warning("device_update_malformed", device_id=device.id)
            return

        await device.dispatch_update(fields)
