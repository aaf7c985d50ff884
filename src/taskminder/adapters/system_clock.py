"""System clock adapter."""

from datetime import datetime, timezone


class SystemClock:
    """
    Wall clock.

    Implements Clock protocol. Always returns an aware UTC instant.
    """

    def now(self) -> datetime:
        return datetime.now(timezone.utc)
