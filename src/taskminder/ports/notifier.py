"""Outbound message interface."""

from typing import Protocol


class Notifier(Protocol):
    """
    Delivers text to a task owner over the chat channel.

    Best-effort: implementations may raise, callers log and move on.
    """

    async def send(self, owner_id: str, text: str, *, rich: bool = False) -> None:
        """Send `text` to `owner_id`. `rich` enables markdown formatting."""
        ...
