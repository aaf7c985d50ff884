"""JSON file task store adapter."""

import contextlib
import json
import logging
import os
import tempfile
import threading
from dataclasses import replace
from datetime import datetime
from pathlib import Path

from taskminder.core.tasks import (
    Priority,
    ReminderKind,
    Task,
    TaskStatus,
    filter_due_today,
    sort_tasks,
)
from taskminder.core.timeutil import to_utc
from taskminder.errors import StorageError
from taskminder.ports.clock import Clock

from .system_clock import SystemClock

logger = logging.getLogger(__name__)


class JsonTaskStore:
    """
    JSON file task store.

    Implements TaskRepository protocol. The whole collection is kept in
    memory and the file is rewritten after every mutation: the new content
    goes to a temp file in the same directory, is fsynced, then swapped in
    with os.replace. A failed write never touches the previous file.

    Safe to share between the event loop and worker threads; every public
    method holds the store lock.

    Layout: {"tasks": [...], "next_id": N}
    """

    def __init__(
        self,
        path: Path | str,
        clock: Clock | None = None,
        timezone: str = "Asia/Kolkata",
    ):
        self.path = Path(path).expanduser()
        self.clock = clock or SystemClock()
        self.timezone = timezone
        self.diverged = False
        self._tasks: list[Task] = []
        self._next_id = 1
        self._lock = threading.RLock()
        self._load()

    @property
    def next_id(self) -> int:
        return self._next_id

    # ---- persistence ----

    def _load(self) -> None:
        """Load the task file; a missing or unreadable file means an empty store."""
        if not self.path.exists():
            logger.info(f"No task file at {self.path}, starting with an empty store")
            return

        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            tasks = [Task.from_dict(item) for item in data.get("tasks", [])]
            next_id = int(data.get("next_id", 1))
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as e:
            logger.warning(f"Could not read task file {self.path} ({e}); starting with an empty store")
            return

        max_id = max((t.id for t in tasks), default=0)
        if next_id <= max_id:
            logger.warning(f"Task file counter {next_id} behind max id {max_id}; raising it")
            next_id = max_id + 1

        self._tasks = tasks
        self._next_id = max(next_id, 1)
        logger.info(f"Loaded {len(tasks)} tasks from {self.path} (next id {self._next_id})")

    def _persist(self) -> None:
        """Atomically rewrite the task file."""
        payload = json.dumps(
            {"tasks": [t.to_dict() for t in self._tasks], "next_id": self._next_id},
            indent=2,
            ensure_ascii=False,
        )

        tmp_path = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
        except OSError as e:
            if tmp_path:
                with contextlib.suppress(OSError):
                    os.unlink(tmp_path)
            logger.error(f"Failed to write task file {self.path}: {e}")
            raise StorageError(f"Failed to write {self.path}: {e}") from e

    def _save(self) -> None:
        """Persist after an in-place mutation; on failure memory is ahead of disk."""
        try:
            self._persist()
        except StorageError:
            self.diverged = True
            raise

    def _find(self, task_id: int) -> Task | None:
        for task in self._tasks:
            if task.id == task_id:
                return task
        return None

    # ---- public API ----

    def create(
        self,
        owner_id: str,
        title: str,
        due_at: datetime | None = None,
        category: str | None = None,
        priority: Priority = Priority.NORMAL,
    ) -> Task:
        title = (title or "").strip()
        if not title:
            raise ValueError("title is required")

        with self._lock:
            task = Task(
                id=self._next_id,
                owner_id=str(owner_id),
                title=title,
                due_at=to_utc(due_at) if due_at else None,
                created_at=self.clock.now(),
                category=(category or "").strip() or None,
                priority=priority,
            )
            self._tasks.append(task)
            self._next_id += 1

            try:
                self._persist()
            except StorageError:
                # Not created: restore the state that is still on disk.
                self._tasks.pop()
                self._next_id = task.id
                raise

            logger.info(f"Task {task.id} created for owner {task.owner_id} (due {task.due_at})")
            return replace(task)

    def get(self, task_id: int) -> Task | None:
        with self._lock:
            task = self._find(task_id)
            return replace(task) if task else None

    def query(
        self,
        owner_id: str,
        status: TaskStatus | None = None,
        due_today: bool = False,
    ) -> list[Task]:
        owner_id = str(owner_id)
        with self._lock:
            tasks = [
                replace(t)
                for t in self._tasks
                if t.owner_id == owner_id and (status is None or t.status == status)
            ]
        if due_today:
            tasks = filter_due_today(tasks, self.clock.now(), self.timezone)
        return sort_tasks(tasks)

    def mark_done(self, task_id: int) -> bool:
        with self._lock:
            task = self._find(task_id)
            if task is None:
                return False
            if task.status == TaskStatus.DONE:
                return True

            task.status = TaskStatus.DONE
            self._save()
        logger.info(f"Task {task_id} marked done")
        return True

    def delete(self, task_id: int) -> bool:
        with self._lock:
            task = self._find(task_id)
            if task is None:
                return False

            self._tasks.remove(task)
            self._save()
        logger.info(f"Task {task_id} deleted")
        return True

    def set_due_at(self, task_id: int, due_at: datetime | None) -> Task | None:
        with self._lock:
            task = self._find(task_id)
            if task is None:
                return None

            task.due_at = to_utc(due_at) if due_at else None
            task.due_reminded = False
            task.early_reminded = False
            self._save()
            logger.info(f"Task {task_id} due time set to {task.due_at}; reminders re-armed")
            return replace(task)

    def update_fields(
        self,
        task_id: int,
        title: str | None = None,
        category: str | None = None,
        priority: Priority | None = None,
    ) -> Task | None:
        if title is not None:
            title = title.strip()
            if not title:
                raise ValueError("title is required")

        with self._lock:
            task = self._find(task_id)
            if task is None:
                return None

            if title is not None:
                task.title = title
            if category is not None:
                task.category = category.strip() or None
            if priority is not None:
                task.priority = priority

            self._save()
            return replace(task)

    def mark_reminded(
        self, task_id: int, kind: ReminderKind, expected_due_at: datetime | None = None
    ) -> Task | None:
        with self._lock:
            task = self._find(task_id)
            if task is None:
                return None

            attr = "early_reminded" if kind == ReminderKind.EARLY else "due_reminded"
            if expected_due_at is not None and (
                not task.is_open or task.due_at != expected_due_at or getattr(task, attr)
            ):
                # Changed since the caller looked at it
                return None
            if getattr(task, attr):
                return replace(task)

            setattr(task, attr, True)
            self._save()
            return replace(task)

    def snapshot(self) -> list[Task]:
        with self._lock:
            return [replace(t) for t in self._tasks]
