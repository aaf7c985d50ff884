"""Functional core - pure business logic with no I/O."""

from .tasks import (
    Priority,
    ReminderKind,
    Task,
    TaskStatus,
    filter_due_today,
    format_task_line,
    sort_tasks,
)
from .timeutil import local_day_bounds, resolve_due_at, within_window
from .extraction import ExtractedTask, build_extraction_prompt, parse_extraction
from .digest import format_digest, format_reminder, format_task_list

__all__ = [
    # Tasks
    "Priority",
    "ReminderKind",
    "Task",
    "TaskStatus",
    "filter_due_today",
    "format_task_line",
    "sort_tasks",
    # Time
    "local_day_bounds",
    "resolve_due_at",
    "within_window",
    # Extraction
    "ExtractedTask",
    "build_extraction_prompt",
    "parse_extraction",
    # Messages
    "format_digest",
    "format_reminder",
    "format_task_list",
]
