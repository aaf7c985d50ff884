"""Telegram notifier adapter - pushes reminders and digests to chats."""

import logging

from telegram import Bot

from taskminder.telegram_format import send_markdown

logger = logging.getLogger(__name__)


class TelegramNotifier:
    """
    Telegram bot notifier.

    Implements Notifier protocol. Owner ids are Telegram chat ids.
    """

    def __init__(self, bot: Bot):
        self.bot = bot

    async def send(self, owner_id: str, text: str, *, rich: bool = False) -> None:
        chat_id = int(owner_id)
        if rich:
            await send_markdown(self.bot, text, chat_id=chat_id)
        else:
            await self.bot.send_message(chat_id=chat_id, text=text)
