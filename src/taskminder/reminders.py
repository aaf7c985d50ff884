"""Reminder dispatch - the periodic due-time and early-reminder scan."""

import asyncio
import logging

from .core.digest import format_reminder
from .core.tasks import ReminderKind, Task
from .core.timeutil import within_window
from .errors import StorageError
from .ports.clock import Clock
from .ports.notifier import Notifier
from .ports.task_repo import TaskRepository

logger = logging.getLogger(__name__)


class ReminderScheduler:
    """
    Fires due-time and early reminders.

    Each task carries two independent flags (due_reminded, early_reminded);
    a reminder fires only while its flag is false and the due instant is
    inside the matching window, so every kind fires at most once per due
    time. The flag is committed before the message goes out.

    The caller decides the cadence (APScheduler in the bot); `tick()` only
    looks at the clock and the store.
    """

    def __init__(
        self,
        store: TaskRepository,
        notifier: Notifier,
        clock: Clock,
        interval_seconds: int = 60,
        early_minutes: int = 30,
    ):
        self.store = store
        self.notifier = notifier
        self.clock = clock
        self.interval_seconds = interval_seconds
        self.early_minutes = early_minutes
        self.due_window = (0, interval_seconds)
        self.early_window = (early_minutes * 60 - interval_seconds, early_minutes * 60)
        self._lock = asyncio.Lock()

    async def tick(self) -> list[tuple[int, ReminderKind]]:
        """
        Run one scan. Returns the (task id, kind) pairs that fired.

        Scans never overlap: a tick arriving mid-scan waits for the lock.
        """
        async with self._lock:
            return await self._scan()

    def _pending_kinds(self, task: Task, now) -> list[ReminderKind]:
        """Reminder kinds whose window is open for this task right now."""
        if not task.is_open or task.due_at is None:
            return []

        kinds = []
        if not task.due_reminded and within_window(task.due_at, now, *self.due_window):
            kinds.append(ReminderKind.DUE)
        if (
            task.is_high_priority
            and not task.early_reminded
            and within_window(task.due_at, now, *self.early_window)
        ):
            kinds.append(ReminderKind.EARLY)
        return kinds

    async def _scan(self) -> list[tuple[int, ReminderKind]]:
        now = self.clock.now()
        fired = []

        for task_id in [t.id for t in self.store.snapshot()]:
            # Re-read: a handler may have finished or deleted it during a send.
            task = self.store.get(task_id)
            if task is None:
                continue

            try:
                kinds = self._pending_kinds(task, now)
            except (TypeError, ValueError) as e:
                logger.error(f"Skipping task {task.id} with unusable due time {task.due_at!r}: {e}")
                continue

            for kind in kinds:
                if not self._commit(task, kind):
                    continue
                fired.append((task.id, kind))
                await self._send(task, kind)

        if fired:
            logger.info(f"Reminder scan at {now.isoformat()} fired {len(fired)} reminder(s)")
        return fired

    def _commit(self, task: Task, kind: ReminderKind) -> bool:
        """Set the reminder flag. False if the task vanished or changed since the read."""
        try:
            return self.store.mark_reminded(task.id, kind, expected_due_at=task.due_at) is not None
        except StorageError as e:
            # Flag is set in memory; the reminder still goes out once.
            logger.error(f"Could not persist {kind.value} reminder flag for task {task.id}: {e}")
            return True

    async def _send(self, task: Task, kind: ReminderKind) -> None:
        text = format_reminder(task, kind, self.early_minutes)
        try:
            await self.notifier.send(task.owner_id, text)
            logger.info(f"Sent {kind.value} reminder for task {task.id} to {task.owner_id}")
        except Exception as e:
            logger.error(f"Failed to send {kind.value} reminder for task {task.id} to {task.owner_id}: {e}")
