"""Clock interface."""

from datetime import datetime
from typing import Protocol


class Clock(Protocol):
    """Source of the current instant. Lets schedulers run on simulated time."""

    def now(self) -> datetime:
        """Current instant, timezone-aware (UTC)."""
        ...
