"""Telegram message formatting utilities."""

import telegramify_markdown

MAX_CHUNK = 4000


def split_chunks(text: str, limit: int = MAX_CHUNK) -> list[str]:
    """
    Split text into pieces of at most `limit` chars.

    Breaks on newlines where possible so an escape sequence or a task line
    is never cut in half; only a single overlong line is hard-split.
    """
    chunks: list[str] = []
    current = ""
    for line in text.splitlines(keepends=True):
        while len(line) > limit:
            if current:
                chunks.append(current)
                current = ""
            chunks.append(line[:limit])
            line = line[limit:]
        if len(current) + len(line) > limit:
            chunks.append(current)
            current = ""
        current += line
    if current:
        chunks.append(current)
    return chunks


async def send_markdown(target, text: str, *, chat_id: int | None = None):
    """Convert markdown to MarkdownV2 and send it in Telegram-sized chunks.

    target: a Bot (pass chat_id) or an incoming Message (replies to it).
    """
    for chunk in split_chunks(telegramify_markdown.markdownify(text)):
        if chat_id is not None:
            await target.send_message(chat_id=chat_id, text=chunk, parse_mode="MarkdownV2")
        else:
            await target.reply_text(chunk, parse_mode="MarkdownV2")
