"""Taskminder CLI - tasks and reminders from the terminal."""

import json
import sys

import click

from . import operations
from .core.digest import format_digest
from .core.tasks import Priority, TaskStatus, format_task_line
from .core.timeutil import format_local, resolve_due_at
from .errors import InvalidStateError, StorageError, TaskNotFoundError
from .workflows import NO_PENDING, NO_TODAY, add_from_text, build_services

owner_option = click.option("--owner", default=None, help="Task owner (default: CLI_OWNER from config)")
priority_choice = click.Choice([p.value for p in Priority], case_sensitive=False)


def _open(owner: str | None):
    """Load services and resolve the owner id."""
    services = build_services()
    return services, owner or services.config.cli_owner


def _fail(message: str):
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


def _echo_tasks(tasks, timezone: str, empty_msg: str) -> None:
    if not tasks:
        click.echo(empty_msg)
        return
    for task in tasks:
        click.echo(format_task_line(task, timezone))


@click.group()
@click.version_option()
def main():
    """Taskminder - task reminders over Telegram."""
    pass


@main.command()
@click.argument("title", nargs=-1, required=True)
@click.option("--due", default=None, help="Due time, ISO 8601 (local time if no offset)")
@click.option("--category", default=None, help="Category label")
@click.option("--priority", type=priority_choice, default="normal", help="Task priority")
@owner_option
def add(title: tuple[str, ...], due: str | None, category: str | None, priority: str, owner: str | None):
    """Add a task directly, without the LLM."""
    services, owner = _open(owner)

    due_at = None
    if due:
        due_at = resolve_due_at(due, services.timezone)
        if due_at is None:
            _fail(f"Could not parse due time {due!r}. Use e.g. 2024-11-06T10:00")

    try:
        task = services.store.create(
            owner,
            " ".join(title),
            due_at=due_at,
            category=category,
            priority=Priority.parse(priority),
        )
    except (ValueError, StorageError) as e:
        _fail(str(e))

    click.echo(f"Added: {format_task_line(task, services.timezone)}")


@main.command()
@click.argument("text", nargs=-1, required=True)
@owner_option
def capture(text: tuple[str, ...], owner: str | None):
    """Capture tasks from free text using the LLM extractor."""
    services, owner = _open(owner)
    try:
        replies = add_from_text(services, owner, " ".join(text))
    except ValueError as e:
        _fail(str(e))

    for reply in replies:
        click.echo(reply.text)


@main.command("list")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.option("--all", "show_all", is_flag=True, help="Include completed tasks")
@owner_option
def list_tasks(as_json: bool, show_all: bool, owner: str | None):
    """List open tasks."""
    services, owner = _open(owner)
    tasks = services.store.query(owner, status=None if show_all else TaskStatus.OPEN)

    if as_json:
        click.echo(json.dumps([t.to_dict() for t in tasks], indent=2, ensure_ascii=False))
        return

    _echo_tasks(tasks, services.timezone, NO_PENDING)


@main.command("next")
@click.option("--limit", default=5, show_default=True, help="How many tasks to show")
@owner_option
def next_cmd(limit: int, owner: str | None):
    """Show the next open tasks."""
    services, owner = _open(owner)
    tasks = services.store.query(owner, status=TaskStatus.OPEN)[:limit]
    _echo_tasks(tasks, services.timezone, NO_PENDING)


@main.command()
@owner_option
def today(owner: str | None):
    """Show open tasks due today."""
    services, owner = _open(owner)
    tasks = services.store.query(owner, status=TaskStatus.OPEN, due_today=True)
    _echo_tasks(tasks, services.timezone, NO_TODAY)


@main.command()
@click.argument("task_id", type=int)
@owner_option
def done(task_id: int, owner: str | None):
    """Mark a task as done."""
    services, owner = _open(owner)
    try:
        found = operations.mark_done(services.store, task_id, owner)
    except StorageError as e:
        _fail(str(e))

    if not found:
        _fail(f"Task {task_id} not found.")
    click.echo(f"Task {task_id} marked as done! ✅")


@main.command()
@click.argument("task_id", type=int)
@click.argument("hours", type=click.FloatRange(min=0, min_open=True))
@owner_option
def snooze(task_id: int, hours: float, owner: str | None):
    """Push a task's due time back by HOURS."""
    services, owner = _open(owner)
    try:
        task = operations.snooze(services.store, task_id, hours, owner)
    except (TaskNotFoundError, InvalidStateError):
        _fail(f"Task {task_id} not found or has no due date.")
    except StorageError as e:
        _fail(str(e))

    click.echo(f"Task {task_id} snoozed to {format_local(task.due_at, services.timezone)} ⏰")


@main.command()
@click.argument("task_id", type=int)
@owner_option
def delete(task_id: int, owner: str | None):
    """Delete a task."""
    services, owner = _open(owner)
    try:
        found = operations.delete_task(services.store, task_id, owner)
    except StorageError as e:
        _fail(str(e))

    if not found:
        _fail(f"Task {task_id} not found.")
    click.echo(f"Task {task_id} deleted.")


@main.command()
@click.argument("task_id", type=int)
@click.option("--title", default=None, help="New title")
@click.option("--category", default=None, help="New category (empty string clears it)")
@click.option("--priority", type=priority_choice, default=None, help="New priority")
@owner_option
def edit(task_id: int, title: str | None, category: str | None, priority: str | None, owner: str | None):
    """Edit a task's title, category or priority."""
    if title is None and category is None and priority is None:
        _fail("Nothing to change. Pass --title, --category or --priority.")

    services, owner = _open(owner)
    try:
        task = operations.edit_task(
            services.store,
            task_id,
            owner,
            title=title,
            category=category,
            priority=Priority.parse(priority) if priority else None,
        )
    except (TaskNotFoundError, ValueError, StorageError) as e:
        _fail(str(e))

    click.echo(f"Updated: {format_task_line(task, services.timezone)}")


@main.command()
@owner_option
def digest(owner: str | None):
    """Print today's digest."""
    services, owner = _open(owner)
    tasks = services.store.query(owner, status=TaskStatus.OPEN, due_today=True)
    if not tasks:
        click.echo(NO_TODAY)
        return
    click.echo(format_digest(tasks, services.timezone).rstrip())


@main.command()
@click.option("--debug", is_flag=True, help="Enable debug logging")
def bot(debug: bool):
    """Run the Telegram bot."""
    from .telegram_bot import run_bot

    try:
        click.echo("Starting Taskminder Telegram bot...")
        click.echo("Press Ctrl+C to stop")
        run_bot(debug=debug)
    except ValueError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(1)
    except KeyboardInterrupt:
        click.echo("\nBot stopped.")
