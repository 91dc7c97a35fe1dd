"""Integration tests: bus frames through the registry and Guard to Telegram."""

import pytest

from src.doorguard.devices.registry import Registry
from src.doorguard.runtime.guard import Guard

DOOR_ID = "lumi.magnet.1"
MOTION_ID = "lumi.motion.1"


@pytest.fixture
async def wired(make_connection, telegram):
    connection = make_connection(MOTION_ID, DOOR_ID)
    registry = Registry(connection)
    await registry.start()
    guard = Guard(42, telegram, registry.find(MOTION_ID), registry.find(DOOR_ID))
    return connection, guard


def door_frame(fields):
    return {"type": "update", "device": DOOR_ID, "fields": fields}


def motion_frame(fields):
    return {"type": "update", "device": MOTION_ID, "fields": fields}


@pytest.mark.asyncio
async def test_enable_then_door_opened(wired, telegram, make_callback_query):
    """Disabled guard ignores the door; after enable the same update alerts."""
    connection, guard = wired

    await connection.emit(door_frame({"magnet": {"open": True}}))
    telegram.send_message.assert_not_called()

    await guard.on_telegram_callback_query(make_callback_query("enable"))
    assert guard.enabled is True
    telegram.answer_callback_query.assert_awaited_once_with("cbq-1", text="Guard: enabled")

    await connection.emit(door_frame({"magnet": {"open": True}}))
    telegram.send_message.assert_awaited_once_with(42, 'Magnet sensor "door-1" is opened')


@pytest.mark.asyncio
async def test_alerts_go_to_configured_chat(wired, telegram, make_callback_query):
    """Alerts target the configured chat even when enabled from another chat."""
    connection, guard = wired
    await guard.on_telegram_callback_query(make_callback_query("enable", chat_id=777))

    await connection.emit(motion_frame({"motionAt": 1700000000}))
    await connection.emit(door_frame({"magnet": {"open": False}}))

    sent = [c.args for c in telegram.send_message.call_args_list]
    assert sent == [
        (42, 'Motion detected on sensor "motion-1"'),
        (42, 'Magnet sensor "door-1" is closed'),
    ]


@pytest.mark.asyncio
async def test_unrelated_fields_never_alert(wired, telegram, make_callback_query):
    connection, guard = wired
    await guard.on_telegram_callback_query(make_callback_query("enable"))

    await connection.emit(door_frame({"battery": 95, "voltage": 3015}))
    await connection.emit(motion_frame({"illuminance": 40}))

    telegram.send_message.assert_not_called()


@pytest.mark.asyncio
async def test_disable_stops_alerts(wired, telegram, make_callback_query):
    connection, guard = wired
    await guard.on_telegram_callback_query(make_callback_query("enable"))
    await guard.on_telegram_callback_query(make_callback_query("disable"))

    await connection.emit(motion_frame({"motionAt": 1700000000}))

    telegram.send_message.assert_not_called()
    answers = [c.kwargs["text"] for c in telegram.answer_callback_query.call_args_list]
    assert answers == ["Guard: enabled", "Guard: disabled"]
