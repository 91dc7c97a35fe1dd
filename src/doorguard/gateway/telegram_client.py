"""
Telegram Bot Client.

Adapts the python-telegram-bot Application to the small surface the guard
needs: inbound message and callback-query handlers, and outbound
send_message / answer_callback_query calls.
"""

from typing import Any, Awaitable, Callable, Optional

import structlog
from telegram import InlineKeyboardMarkup, Update
from telegram.ext import Application, CallbackQueryHandler, MessageHandler, filters

logger = structlog.get_logger(__name__)

InboundHandler = Callable[[Any], Awaitable[None]]


class TelegramClient:
    """Async Telegram Bot API transport with long polling."""

    def __init__(self, token: str):
        """
        Initialize TelegramClient.

        Builds the application without any network I/O so handlers can be
        registered before polling starts.

        Args:
            token: Telegram bot token from @BotFather
        """
        self.token = token
        self.application = Application.builder().token(token).build()
        self.application.add_error_handler(self._on_error)
        self._polling = False

    def on_message(self, handler: InboundHandler) -> None:
        """Register a handler for every new inbound message.

        Non-text messages are delivered too; edited messages are not.
        """

        async def _dispatch(update: Update, context) -> None:
            if not update.effective_message or not update.effective_chat:
                logger.warning("received_update_without_message_or_chat")
                return

            logger.info(
                "telegram_message_received",
                chat_id=update.effective_chat.id,
                message_length=len(update.effective_message.text or ""),
            )
            await handler(update.effective_message)

        self.application.add_handler(MessageHandler(filters.UpdateType.MESSAGE, _dispatch))

    def on_callback_query(self, handler: InboundHandler) -> None:
        """Register a handler for inline button presses."""

        async def _dispatch(update: Update, context) -> None:
            query = update.callback_query
            if query is None or query.message is None:
                logger.warning("received_callback_query_without_message")
                return

            logger.info("telegram_callback_query_received", action=query.data)
            await handler(query)

        self.application.add_handler(CallbackQueryHandler(_dispatch))

    async def start(self):
        """Initialize and start the bot with polling."""
        logger.info("telegram_bot_starting")

        await self.application.initialize()
        await self.application.start()
        await self.application.updater.start_polling()
        self._polling = True

        logger.info("telegram_bot_started")

    async def stop(self):
        """Stop the bot gracefully."""
        logger.info("telegram_bot_stopping")
        if self._polling:
            await self.application.updater.stop()
            self._polling = False
        if self.application.running:
            await self.application.stop()
        await self.application.shutdown()
        logger.info("telegram_bot_stopped")

    async def send_message(
        self,
        chat_id: int,
        text: str,
        reply_markup: Optional[InlineKeyboardMarkup] = None,
    ) -> bool:
        """
        Send message to specific chat.

        Args:
            chat_id: Telegram chat ID
            text: Message text to send
            reply_markup: Optional inline keyboard attached to the message

        Returns:
            True if successful, False otherwise
        """
        try:
            await self.application.bot.send_message(
                chat_id=chat_id,
                text=text,
                reply_markup=reply_markup,
            )
            logger.info("message_sent", chat_id=chat_id)
            return True
        except Exception as e:
            logger.error(
                "send_message_error",
                chat_id=chat_id,
                error=str(e),
                error_type=type(e).__name__
            )
            return False

    async def answer_callback_query(self, callback_query_id: str, text: str) -> bool:
        """
        Acknowledge an inline button press with a short notification.

        Args:
            callback_query_id: ID of the callback query being answered
            text: Notification text shown to the user

        Returns:
            True if successful, False otherwise
        """
        try:
            await self.application.bot.answer_callback_query(
                callback_query_id=callback_query_id,
                text=text,
            )
            logger.info("callback_query_answered", callback_query_id=callback_query_id)
            return True
        except Exception as e:
            logger.error(
                "answer_callback_query_error",
                callback_query_id=callback_query_id,
                error=str(e),
                error_type=type(e).__name__
            )
            return False

    async def _on_error(self, update: object, context) -> None:
        logger.error(
            "telegram_handler_error",
            error=str(context.error),
            error_type=type(context.error).__name__,
        )
