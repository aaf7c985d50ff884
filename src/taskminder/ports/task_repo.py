"""Task repository interface."""

from datetime import datetime
from typing import Protocol

from taskminder.core.tasks import Priority, ReminderKind, Task, TaskStatus


class TaskRepository(Protocol):
    """Interface for the durable task collection."""

    def create(
        self,
        owner_id: str,
        title: str,
        due_at: datetime | None = None,
        category: str | None = None,
        priority: Priority = Priority.NORMAL,
    ) -> Task:
        """Create an open task with the next id and persist it."""
        ...

    def get(self, task_id: int) -> Task | None:
        """Fetch a single task by id."""
        ...

    def query(
        self,
        owner_id: str,
        status: TaskStatus | None = None,
        due_today: bool = False,
    ) -> list[Task]:
        """Owner's tasks, optionally filtered, ordered by due instant."""
        ...

    def mark_done(self, task_id: int) -> bool:
        """Transition to done. False if the id is absent."""
        ...

    def delete(self, task_id: int) -> bool:
        """Remove the task. False if the id is absent."""
        ...

    def set_due_at(self, task_id: int, due_at: datetime | None) -> Task | None:
        """Change the due instant and re-arm both reminder flags."""
        ...

    def update_fields(
        self,
        task_id: int,
        title: str | None = None,
        category: str | None = None,
        priority: Priority | None = None,
    ) -> Task | None:
        """Edit descriptive fields. Never touches due_at or reminder flags."""
        ...

    def mark_reminded(
        self, task_id: int, kind: ReminderKind, expected_due_at: datetime | None = None
    ) -> Task | None:
        """
        Record that a reminder of `kind` fired.

        With `expected_due_at`, only a still-open task with that due time and
        the flag unset is marked; anything else returns None.
        """
        ...

    def snapshot(self) -> list[Task]:
        """Read-only copy of every task, in creation order."""
        ...
