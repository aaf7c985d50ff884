"""Pure message assembly for digests, listings and reminders - no I/O."""

from zoneinfo import ZoneInfo

from .tasks import ReminderKind, Task, format_task_line

DIGEST_HEADER = "*Good morning! ☀️*\n\n*Today's tasks:*\n\n"


def format_task_list(header: str, tasks: list[Task], tz: str | ZoneInfo) -> str:
    """
    Format a titled task listing.

    Pure function - no I/O. Tasks are rendered in the order given.
    """
    lines = [format_task_line(t, tz) for t in tasks]
    return f"*{header}:*\n\n" + "\n".join(lines) + "\n"


def format_digest(tasks: list[Task], tz: str | ZoneInfo) -> str:
    """Format the daily digest body for one owner."""
    lines = [format_task_line(t, tz) for t in tasks]
    return DIGEST_HEADER + "\n".join(lines) + "\n"


def format_reminder(task: Task, kind: ReminderKind, early_minutes: int = 30) -> str:
    """Text of a due-time or early reminder."""
    if kind == ReminderKind.EARLY:
        return f"⚠️ Upcoming (in {early_minutes} min): {task.title}"
    return f"⏰ Reminder: {task.title}"
