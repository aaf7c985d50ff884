"""Task mutations shared by the bot and the CLI: snooze, done, delete, edit."""

import logging

from .core.tasks import Priority, Task
from .core.timeutil import add_hours
from .errors import InvalidStateError, TaskNotFoundError
from .ports.task_repo import TaskRepository

logger = logging.getLogger(__name__)


def find_task(store: TaskRepository, task_id: int, owner_id: str | None = None) -> Task | None:
    """Look up a task; tasks of other owners are invisible when owner_id is given."""
    task = store.get(task_id)
    if task is None:
        return None
    if owner_id is not None and task.owner_id != str(owner_id):
        return None
    return task


def snooze(
    store: TaskRepository,
    task_id: int,
    delta_hours: float,
    owner_id: str | None = None,
) -> Task:
    """
    Push a task's due time back by `delta_hours`.

    Re-arms both reminders. The task must have a due time.
    """
    task = find_task(store, task_id, owner_id)
    if task is None:
        raise TaskNotFoundError(task_id)
    if task.due_at is None:
        raise InvalidStateError(f"Task {task_id} has no due date")

    updated = store.set_due_at(task_id, add_hours(task.due_at, delta_hours))
    if updated is None:
        raise TaskNotFoundError(task_id)

    logger.info(f"Task {task_id} snoozed by {delta_hours}h to {updated.due_at}")
    return updated


def mark_done(store: TaskRepository, task_id: int, owner_id: str | None = None) -> bool:
    """Complete a task. Idempotent; False if absent."""
    if find_task(store, task_id, owner_id) is None:
        return False
    return store.mark_done(task_id)


def delete_task(store: TaskRepository, task_id: int, owner_id: str | None = None) -> bool:
    """Remove a task for good. False if absent."""
    if find_task(store, task_id, owner_id) is None:
        return False
    return store.delete(task_id)


def edit_task(
    store: TaskRepository,
    task_id: int,
    owner_id: str | None = None,
    title: str | None = None,
    category: str | None = None,
    priority: Priority | None = None,
) -> Task:
    """Edit title, category or priority. Due time and reminder flags are untouched."""
    if find_task(store, task_id, owner_id) is None:
        raise TaskNotFoundError(task_id)

    updated = store.update_fields(task_id, title=title, category=category, priority=priority)
    if updated is None:
        raise TaskNotFoundError(task_id)
    return updated
