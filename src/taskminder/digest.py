"""Daily digest - one morning summary per owner."""

import logging
from datetime import date

from .core.digest import format_digest
from .core.tasks import TaskStatus
from .core.timeutil import to_local
from .ports.clock import Clock
from .ports.notifier import Notifier
from .ports.task_repo import TaskRepository

logger = logging.getLogger(__name__)


def collect_owners(store: TaskRepository) -> list[str]:
    """Distinct owners across all tasks, in order of first appearance."""
    owners: list[str] = []
    for task in store.snapshot():
        if task.owner_id not in owners:
            owners.append(task.owner_id)
    return owners


class DigestScheduler:
    """
    Sends each owner the open tasks due on the current local day.

    The wall-clock time is the caller's business (a CronTrigger in the bot).
    `fire()` only runs once per local date.
    """

    def __init__(
        self,
        store: TaskRepository,
        notifier: Notifier,
        clock: Clock,
        timezone: str = "Asia/Kolkata",
    ):
        self.store = store
        self.notifier = notifier
        self.clock = clock
        self.timezone = timezone
        self.last_run: date | None = None

    async def fire(self) -> list[str]:
        """Send today's digests. Returns the owners that received one."""
        today = to_local(self.clock.now(), self.timezone).date()
        if self.last_run == today:
            logger.info(f"Digest already sent for {today}, skipping")
            return []
        self.last_run = today

        logger.info(f"Sending daily digest for {today}")
        sent = []
        for owner_id in collect_owners(self.store):
            tasks = self.store.query(owner_id, status=TaskStatus.OPEN, due_today=True)
            if not tasks:
                continue

            try:
                await self.notifier.send(owner_id, format_digest(tasks, self.timezone), rich=True)
                sent.append(owner_id)
            except Exception as e:
                logger.error(f"Failed to send digest to {owner_id}: {e}")

        logger.info(f"Digest sent to {len(sent)} owner(s)")
        return sent
