"""Shared fixtures: fake Telegram transport, fake bus connection, settings."""

import asyncio
import inspect
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.doorguard.config.manager import GuardSettings


class FakeConnection:
    """In-memory stand-in for BusConnection that answers discovery."""

    def __init__(self, devices=None, answer_discovery=True, close_on_discover=False):
        self.devices = devices if devices is not None else []
        self.answer_discovery = answer_discovery
        self.close_on_discover = close_on_discover
        self.listeners = []
        self.sent = []
        self.close = AsyncMock()
        self._closed = asyncio.Event()

    def add_listener(self, listener):
        self.listeners.append(listener)

    async def send(self, frame):
        self.sent.append(frame)
        if frame.get("type") != "discover":
            return
        if self.close_on_discover:
            self.drop()
        elif self.answer_discovery:
            asyncio.get_running_loop().create_task(
                self.emit({"type": "devices", "devices": self.devices})
            )

    async def emit(self, frame):
        for listener in self.listeners:
            result = listener(frame)
            if inspect.isawaitable(result):
                await result

    async def wait_closed(self):
        await self._closed.wait()

    def drop(self):
        self._closed.set()


@pytest.fixture
def telegram():
    """Mock chat transport with the TelegramClient surface."""
    client = MagicMock()
    client.on_message = MagicMock()
    client.on_callback_query = MagicMock()
    client.send_message = AsyncMock(return_value=True)
    client.answer_callback_query = AsyncMock(return_value=True)
    client.start = AsyncMock()
    client.stop = AsyncMock()
    return client


@pytest.fixture
def settings():
    return GuardSettings(
        bus_id="doorguard-test",
        bus_address="ws://127.0.0.1:8765",
        motion_device_id="lumi.motion.1",
        door_device_id="lumi.magnet.1",
        telegram_chat_id=42,
        telegram_token="123:test-token",
    )


@pytest.fixture
def make_message():
    """Factory for inbound Telegram messages."""

    def _make(text, chat_id=42):
        return SimpleNamespace(text=text, chat=SimpleNamespace(id=chat_id))

    return _make


@pytest.fixture
def make_callback_query():
    """Factory for inbound callback queries."""

    def _make(action, chat_id=42, query_id="cbq-1"):
        return SimpleNamespace(
            id=query_id,
            data=action,
            message=SimpleNamespace(chat=SimpleNamespace(id=chat_id)),
        )

    return _make


@pytest.fixture
def make_connection():
    """Factory for fake bus connections announcing the given device ids."""

    def _make(*device_ids, **behaviour):
        return FakeConnection([{"id": device_id} for device_id in device_ids], **behaviour)

    return _make
