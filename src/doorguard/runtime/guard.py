"""
Guard.

Relays door and motion sensor updates to a Telegram chat while enabled,
and lets the chat toggle alerts through inline buttons.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import structlog
from telegram import InlineKeyboardButton, InlineKeyboardMarkup

from ..gateway.formatters import (
    format_door_alert,
    format_memory_report,
    format_motion_alert,
    format_status,
)
from ..observability.memory import collect_memory_usage

logger = structlog.get_logger(__name__)

UNKNOWN_COMMAND = "Unknown command"


@dataclass
class StatusPayload:
    """Status text plus the inline keyboard offering the three actions."""
    text: str
    reply_markup: InlineKeyboardMarkup


class Guard:
    """Bridge between two sensors and one Telegram chat."""

    def __init__(self, chat_id: int, telegram, motion, door):
        """
        Initialize Guard and subscribe to all four event sources.

        Args:
            chat_id: Chat that receives sensor alerts
            telegram: Chat transport (TelegramClient)
            motion: Motion sensor device handle
            door: Door magnet sensor device handle
        """
        self.chat_id = chat_id
        self.telegram = telegram
        self.enabled = False

        telegram.on_message(self.on_telegram_message)
        telegram.on_callback_query(self.on_telegram_callback_query)

        motion.on_update(self.on_motion_update)
        door.on_update(self.on_door_update)

    async def on_door_update(self, update: Mapping[str, Any]) -> None:
        logger.info("door_updated", update=dict(update))

        if not self.enabled:
            return

        if "magnet" not in update:
            return

        magnet = update["magnet"]
        # Non-mapping magnet values are reported as closed
        opened = isinstance(magnet, Mapping) and magnet.get("open") is True

        await self.telegram.send_message(self.chat_id, format_door_alert(opened))

    async def on_motion_update(self, update: Mapping[str, Any]) -> None:
        if not self.enabled:
            return

        if "motionAt" not in update:
            return

        await self.telegram.send_message(self.chat_id, format_motion_alert())

    def build_status(self) -> StatusPayload:
        keyboard = [
            [
                InlineKeyboardButton("Status", callback_data="status"),
                InlineKeyboardButton("Enable", callback_data="enable"),
                InlineKeyboardButton("Disable", callback_data="disable"),
            ]
        ]
        return StatusPayload(
            text=format_status(self.enabled),
            reply_markup=InlineKeyboardMarkup(keyboard),
        )

    async def on_telegram_message(self, message) -> None:
        """
        Handle /memory and /start. Replies go to the message's own chat.

        Args:
            message: Inbound Telegram message
        """
        chat_id = message.chat.id
        text = message.text

        if text == "/memory":
            usage = collect_memory_usage()
            await self.telegram.send_message(chat_id, format_memory_report(usage))
        elif text == "/start":
            status = self.build_status()
            await self.telegram.send_message(chat_id, status.text, reply_markup=status.reply_markup)
        else:
            await self.telegram.send_message(chat_id, UNKNOWN_COMMAND)

    async def on_telegram_callback_query(self, query) -> None:
        """
        Handle inline button presses.

        Known actions are acknowledged with answer_callback_query; unknown
        ones get a regular "Unknown command" message instead.

        Args:
            query: Inbound Telegram callback query
        """
        action = query.data
        chat_id = query.message.chat.id

        if action == "enable":
            self.enabled = True
            logger.info("guard_enabled", chat_id=chat_id)
        elif action == "disable":
            self.enabled = False
            logger.info("guard_disabled", chat_id=chat_id)
        elif action != "status":
            logger.warning("unknown_callback_action", action=action, chat_id=chat_id)
            await self.telegram.send_message(chat_id, UNKNOWN_COMMAND)
            return

        status = self.build_status()
        await self.telegram.answer_callback_query(query.id, text=status.text)
