"""
Telegram Gateway module.

Receives commands and button presses from Telegram and delivers the
guard's replies and alerts.
"""

from .formatters import format_memory_report, format_status
from .telegram_client import TelegramClient

__all__ = ["format_memory_report", "format_status", "TelegramClient"]
