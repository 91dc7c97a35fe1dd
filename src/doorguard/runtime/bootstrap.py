"""Startup wiring: device bus, registry, Telegram client and Guard."""

from __future__ import annotations

import asyncio
import contextlib
from typing import Awaitable, Optional, TypeVar

import structlog

from ..config.manager import GuardSettings
from ..devices.bus import connect
from ..devices.registry import Registry
from ..gateway.telegram_client import TelegramClient
from .guard import Guard

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class DeviceNotFoundError(LookupError):
    """Raised when a configured sensor is not present in the registry."""

    def __init__(self, missing: list[str]):
        self.missing = missing
        super().__init__("No devices: " + ", ".join(missing))


class _StartupInterrupted(Exception):
    """Shutdown was requested before startup finished."""


async def run_guard(settings: GuardSettings, stop_event: Optional[asyncio.Event] = None) -> None:
    """Connect everything, then serve until stopped or the bus goes away.

    Setting ``stop_event`` while connecting or discovering devices abandons
    startup and returns without building the Guard.

    Args:
        settings: Loaded startup configuration
        stop_event: Set to request shutdown; runs until the bus closes if omitted

    Raises:
        BusError: If the device bus cannot be reached or closes during discovery
        DeviceNotFoundError: If either sensor is missing; the Guard is not built
        TelegramError: If the Telegram client fails to start, e.g. an invalid token
    """
    try:
        connection = await _unless_stopped(connect(settings.bus_id, settings.bus_address), stop_event)
    except _StartupInterrupted:
        logger.info("startup_interrupted", phase="connect")
        return

    telegram: Optional[TelegramClient] = None

    try:
        registry = Registry(connection)
        await _unless_stopped(registry.start(), stop_event)

        motion = registry.find(settings.motion_device_id)
        door = registry.find(settings.door_device_id)

        if motion is None or door is None:
            missing = [
                device_id
                for device_id, device in (
                    (settings.motion_device_id, motion),
                    (settings.door_device_id, door),
                )
                if device is None
            ]
            logger.error("devices_not_found", missing=missing)
            raise DeviceNotFoundError(missing)

        telegram = TelegramClient(settings.telegram_token)
        Guard(settings.telegram_chat_id, telegram, motion, door)
        await telegram.start()

        logger.info(
            "guard_started",
            chat_id=settings.telegram_chat_id,
            motion_id=motion.id,
            door_id=door.id,
        )
        await _wait_for_shutdown(connection, stop_event)
    except _StartupInterrupted:
        logger.info("startup_interrupted", phase="discovery")
    finally:
        if telegram is not None:
            await telegram.stop()
        await connection.close()
        logger.info("guard_stopped")


async def _wait_for_shutdown(connection, stop_event: Optional[asyncio.Event]) -> None:
    waiters = [asyncio.create_task(connection.wait_closed())]
    if stop_event is not None:
        waiters.append(asyncio.create_task(stop_event.wait()))

    done, pending = await asyncio.wait(waiters, return_when=asyncio.FIRST_COMPLETED)
    for task in pending:
        task.cancel()

    if waiters[0] in done:
        logger.warning("bus_closed_shutting_down")


async def _unless_stopped(awaitable: Awaitable[T], stop_event: Optional[asyncio.Event]) -> T:
    """Await ``awaitable`` unless ``stop_event`` is set first.

    Raises:
        _StartupInterrupted: If the stop event wins; the awaitable is cancelled
    """
    if stop_event is None:
        return await awaitable

    task = asyncio.ensure_future(awaitable)
    stopper = asyncio.create_task(stop_event.wait())
    try:
        await asyncio.wait({task, stopper}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        stopper.cancel()

    if task.done():
        return task.result()

    task.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await task
    raise _StartupInterrupted()
