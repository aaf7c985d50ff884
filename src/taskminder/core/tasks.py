"""Pure task domain logic - no I/O dependencies."""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from zoneinfo import ZoneInfo

from .timeutil import format_local, is_within_local_day


class Priority(Enum):
    """Task priority. High priority tasks get an early reminder."""

    NORMAL = "normal"
    HIGH = "high"

    @classmethod
    def parse(cls, raw: str | None) -> "Priority":
        """Lenient parse; anything other than 'high' is normal."""
        if raw and raw.strip().lower() == cls.HIGH.value:
            return cls.HIGH
        return cls.NORMAL


class TaskStatus(Enum):
    """Task lifecycle. open -> done is one-way."""

    OPEN = "open"
    DONE = "done"


class ReminderKind(Enum):
    """The two independent reminder channels of a task."""

    DUE = "due"
    EARLY = "early"


@dataclass
class Task:
    """A user-owned task with an optional due instant."""

    id: int
    owner_id: str
    title: str
    due_at: datetime | None
    created_at: datetime
    category: str | None = None
    priority: Priority = Priority.NORMAL
    status: TaskStatus = TaskStatus.OPEN
    due_reminded: bool = False
    early_reminded: bool = False

    @property
    def is_open(self) -> bool:
        return self.status == TaskStatus.OPEN

    @property
    def is_high_priority(self) -> bool:
        return self.priority == Priority.HIGH

    def is_due_on(self, now: datetime, tz: str | ZoneInfo) -> bool:
        """Whether the due instant falls on the local day of `now`."""
        return is_within_local_day(self.due_at, now, tz)

    def to_dict(self) -> dict:
        """Serialize for the JSON store."""
        return {
            "id": self.id,
            "owner_id": self.owner_id,
            "title": self.title,
            "due_at": self.due_at.isoformat() if self.due_at else None,
            "category": self.category,
            "priority": self.priority.value,
            "status": self.status.value,
            "created_at": self.created_at.isoformat(),
            "due_reminded": self.due_reminded,
            "early_reminded": self.early_reminded,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Task":
        """Create Task from its stored representation."""
        due = data.get("due_at")
        return cls(
            id=int(data["id"]),
            owner_id=str(data["owner_id"]),
            title=data["title"],
            due_at=_parse_instant(due) if due else None,
            created_at=_parse_instant(data["created_at"]),
            category=data.get("category") or None,
            priority=Priority.parse(data.get("priority")),
            status=TaskStatus(data.get("status", "open")),
            due_reminded=bool(data.get("due_reminded", False)),
            early_reminded=bool(data.get("early_reminded", False)),
        )


def _parse_instant(raw: str) -> datetime:
    """Stored instants are UTC; a value written without an offset is read as UTC."""
    value = datetime.fromisoformat(raw)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def sort_key(task: Task) -> tuple:
    """Dated tasks first by due instant, undated after; ties by id."""
    if task.due_at is None:
        return (1, 0.0, task.id)
    return (0, task.due_at.timestamp(), task.id)


def sort_tasks(tasks: list[Task]) -> list[Task]:
    """
    Order tasks the way every listing shows them.

    Pure function - no I/O.
    """
    return sorted(tasks, key=sort_key)


def filter_due_today(tasks: list[Task], now: datetime, tz: str | ZoneInfo) -> list[Task]:
    """Tasks whose due instant is inside the current local day."""
    return [t for t in tasks if t.is_due_on(now, tz)]


def format_task_line(task: Task, tz: str | ZoneInfo) -> str:
    """
    Format a single task for chat/CLI display.

    e.g. "3. Pay rent - Nov 06, 10:00 AM [payment] ⚠️"
    """
    text = f"{task.id}. {task.title}"
    if task.due_at:
        text += f" - {format_local(task.due_at, tz)}"
    if task.category:
        text += f" [{task.category}]"
    if task.is_high_priority:
        text += " ⚠️"
    if task.status == TaskStatus.DONE:
        text += " ✅"
    return text
