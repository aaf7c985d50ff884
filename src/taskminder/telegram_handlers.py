"""Telegram command handlers.

Workflows can block on the LLM, OpenAI or a subprocess, so they run in a
worker thread and the reminder scan keeps its schedule.
"""

import asyncio
import logging

from telegram import Update
from telegram.ext import ContextTypes

from .commands import run_command
from .telegram_format import send_markdown
from .workflows import Reply, Services, handle_text, handle_voice

logger = logging.getLogger(__name__)

GENERIC_ERROR = "Error processing your message. Please try again."


def _services(context: ContextTypes.DEFAULT_TYPE) -> Services:
    return context.bot_data["services"]


def _owner(update: Update) -> str:
    return str(update.effective_user.id)


async def send_replies(message, replies: list[Reply]):
    """Send workflow replies back to the chat the message came from."""
    for reply in replies:
        if reply.rich:
            await send_markdown(message, reply.text)
        else:
            await message.reply_text(reply.text)


# ============== Commands ==============


async def command_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle every slash command through the shared command grammar."""
    try:
        replies = await asyncio.to_thread(run_command, update.message.text, _owner(update), _services(context))
    except Exception:
        logger.exception(f"Command {update.message.text!r} failed")
        await update.message.reply_text(GENERIC_ERROR)
        return

    await send_replies(update.message, replies)


# ============== Free text and voice ==============


async def text_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle plain text - quick queries or tasks to capture."""
    text = (update.message.text or "").strip()
    if not text:
        return

    try:
        replies = await asyncio.to_thread(handle_text, _services(context), _owner(update), text)
    except Exception:
        logger.exception("Error processing message")
        await update.message.reply_text(GENERIC_ERROR)
        return

    await send_replies(update.message, replies)


async def voice_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle voice notes - transcribe, then capture tasks."""
    await update.message.reply_text("Transcribing your voice message... 🎤")

    try:
        voice_file = await update.message.voice.get_file()
        audio = bytes(await voice_file.download_as_bytearray())
        replies = await asyncio.to_thread(handle_voice, _services(context), _owner(update), audio)
    except Exception:
        logger.exception("Error processing voice message")
        await update.message.reply_text("Error processing voice message. Please try again.")
        return

    await send_replies(update.message, replies)
