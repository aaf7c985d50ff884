"""Chat command grammar and dispatch.

Commands are parsed into small frozen dataclasses before anything runs, so
bad ids or hours are rejected with a usage hint instead of half-executing.
"""

import logging
import re
from dataclasses import dataclass

from . import operations
from .core.timeutil import format_local
from .errors import CommandError, InvalidStateError, TaskNotFoundError
from .workflows import Reply, Services, add_from_text, all_tasks, next_tasks, today_tasks

logger = logging.getLogger(__name__)

USAGE = {
    "add": "Usage: /add <task> <time>\nExample: /add Pay rent tomorrow 10am",
    "done": "Usage: /done <id>\nExample: /done 2",
    "snooze": "Usage: /snooze <id> <hours>h\nExample: /snooze 3 2h",
    "delete": "Usage: /delete <id>\nExample: /delete 4",
}

_ID_RE = re.compile(r"^\d+$")
_HOURS_RE = re.compile(r"^(\d+)h?$", re.IGNORECASE)


@dataclass(frozen=True)
class HelpCommand:
    pass


@dataclass(frozen=True)
class AddCommand:
    text: str


@dataclass(frozen=True)
class NextCommand:
    limit: int = 5


@dataclass(frozen=True)
class TodayCommand:
    pass


@dataclass(frozen=True)
class ListCommand:
    pass


@dataclass(frozen=True)
class DoneCommand:
    task_id: int


@dataclass(frozen=True)
class SnoozeCommand:
    task_id: int
    hours: int


@dataclass(frozen=True)
class DeleteCommand:
    task_id: int


Command = (
    HelpCommand
    | AddCommand
    | NextCommand
    | TodayCommand
    | ListCommand
    | DoneCommand
    | SnoozeCommand
    | DeleteCommand
)


def help_text(timezone: str) -> str:
    """Welcome message listing the commands."""
    return f"""Welcome to Task Manager Bot! 🤖

I can help you manage your tasks with text or voice messages.

*Commands:*
/add <task> <time> - Add a task
/next - Show next tasks
/today - Show today's tasks
/done <id> - Mark task as done
/snooze <id> <hours>h - Snooze a task
/delete <id> - Delete a task
/list - Show all open tasks

*Examples:*
• Just send: "Buy groceries after work and call Mini at 10 AM tomorrow"
• Voice note: Send a voice message with your tasks
• /add Pay rent tomorrow 10am
• /done 2
• /snooze 3 2h

Time zone: {timezone}"""


def _parse_id(raw: str, command: str) -> int:
    raw = raw.strip()
    if not _ID_RE.match(raw) or int(raw) <= 0:
        raise CommandError(USAGE[command])
    return int(raw)


def _parse_hours(raw: str) -> int:
    match = _HOURS_RE.match(raw.strip())
    if not match or int(match.group(1)) <= 0:
        raise CommandError(USAGE["snooze"])
    return int(match.group(1))


def parse_command(text: str) -> Command:
    """
    Parse a slash command such as "/snooze 3 2h".

    A trailing "@BotName" on the command word is ignored. Raises
    CommandError with a usage message when the input doesn't fit.
    """
    text = (text or "").strip()
    if not text.startswith("/"):
        raise CommandError("Commands start with '/'. Try /help.")

    parts = text.split(maxsplit=1)
    name = parts[0][1:].split("@", 1)[0].lower()
    args = parts[1].strip() if len(parts) > 1 else ""

    match name:
        case "start" | "help":
            return HelpCommand()
        case "add":
            if not args:
                raise CommandError(USAGE["add"])
            return AddCommand(args)
        case "next":
            return NextCommand()
        case "today":
            return TodayCommand()
        case "list":
            return ListCommand()
        case "done":
            return DoneCommand(_parse_id(args, "done"))
        case "snooze":
            fields = args.split()
            if len(fields) != 2:
                raise CommandError(USAGE["snooze"])
            return SnoozeCommand(_parse_id(fields[0], "snooze"), _parse_hours(fields[1]))
        case "delete":
            return DeleteCommand(_parse_id(args, "delete"))
        case _:
            raise CommandError(f"Unknown command /{name}. Try /help to see available commands.")


def execute(command: Command, owner_id: str, services: Services) -> list[Reply]:
    """Run a parsed command for an owner and return the replies to send."""
    store = services.store
    owner_id = str(owner_id)

    match command:
        case HelpCommand():
            return [Reply(help_text(services.timezone), rich=True)]
        case AddCommand(text=text):
            return add_from_text(services, owner_id, text)
        case NextCommand(limit=limit):
            return next_tasks(services, owner_id, limit=limit)
        case TodayCommand():
            return today_tasks(services, owner_id)
        case ListCommand():
            return all_tasks(services, owner_id)
        case DoneCommand(task_id=task_id):
            if operations.mark_done(store, task_id, owner_id):
                return [Reply(f"Task {task_id} marked as done! ✅")]
            return [Reply(f"Task {task_id} not found.")]
        case SnoozeCommand(task_id=task_id, hours=hours):
            try:
                task = operations.snooze(store, task_id, hours, owner_id)
            except (TaskNotFoundError, InvalidStateError):
                return [Reply(f"Task {task_id} not found or has no due date.")]
            return [Reply(f"Task {task_id} snoozed to {format_local(task.due_at, services.timezone)} ⏰")]
        case DeleteCommand(task_id=task_id):
            if operations.delete_task(store, task_id, owner_id):
                return [Reply(f"Task {task_id} deleted.")]
            return [Reply(f"Task {task_id} not found.")]

    raise CommandError(f"Unsupported command: {command!r}")


def run_command(text: str, owner_id: str, services: Services) -> list[Reply]:
    """Parse and execute in one step; usage problems become a reply."""
    try:
        command = parse_command(text)
    except CommandError as e:
        return [Reply(str(e))]
    logger.debug(f"Executing {command!r} for {owner_id}")
    return execute(command, owner_id, services)
