"""Pure task extraction helpers - prompt assembly and reply parsing.

The LLM call itself lives behind the LLMService port; everything here is
deterministic and testable without a model.
"""

import json
import logging
import re
from dataclasses import dataclass, replace
from datetime import datetime
from zoneinfo import ZoneInfo

from .tasks import Priority
from .timeutil import resolve_due_at

logger = logging.getLogger(__name__)

URGENCY_MARKERS = ("urgent", "important", "asap")

SYSTEM_PROMPT = (
    "You are a task extraction assistant. Extract tasks from text and return "
    "valid JSON only. No explanations."
)

_FENCE_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```")


@dataclass(frozen=True)
class ExtractedTask:
    """A task candidate produced from free text."""

    title: str
    due_at: datetime | None
    category: str | None = None
    priority: Priority = Priority.NORMAL


def has_urgency_marker(text: str) -> bool:
    """True if the text contains words like 'urgent' or 'ASAP'."""
    words = set(re.findall(r"[a-z]+", text.lower()))
    return any(marker in words for marker in URGENCY_MARKERS)


def build_extraction_prompt(text: str, now_local: datetime) -> str:
    """Compile the extraction prompt for a piece of user text."""
    current = now_local.strftime("%Y-%m-%d %H:%M:%S")
    offset = now_local.strftime("%z")
    offset = f"{offset[:3]}:{offset[3:]}" if offset else "+00:00"
    tz_name = now_local.tzname() or "local"

    return f"""Current time: {current} {tz_name} (UTC{offset})

Extract tasks from this text: "{text}"

For each task, extract:
1. title: The task description
2. due_at: When it should be done (ISO 8601 with the UTC offset {offset})
3. category: Type like "call", "payment", "work", "shopping", "personal", etc.
4. priority: "high" or "normal"

Rules:
- If no time specified, use 9 AM for morning, 2 PM for afternoon, 7 PM for evening
- "today" means current date
- "tomorrow" means next day
- "after work" means 7 PM
- "morning" means 9 AM, "afternoon" means 2 PM, "evening" means 7 PM
- Use context to determine category (e.g., "call" for phone calls, "payment" for bills, etc.)
- Mark as "high" priority if words like "urgent", "important", "ASAP" are used
- Use null for due_at when the text gives no time at all

Return JSON array of tasks. Example:
[
  {{
    "title": "Buy groceries",
    "due_at": "{now_local.strftime('%Y-%m-%d')}T19:00:00{offset}",
    "category": "shopping",
    "priority": "normal"
  }}
]

If no tasks found, return empty array: []"""


def parse_extraction(content: str, tz: str | ZoneInfo, source_text: str = "") -> list[ExtractedTask]:
    """
    Parse the model's reply into task candidates.

    Malformed replies yield an empty list. Items without a title are skipped.
    An urgency marker in `source_text` raises a lone task to high priority.
    """
    content = (content or "").strip()
    match = _FENCE_RE.search(content)
    if match:
        content = match.group(1)

    try:
        data = json.loads(content)
    except json.JSONDecodeError:
        logger.warning(f"Extractor returned non-JSON content: {content[:200]!r}")
        return []

    if isinstance(data, dict):
        data = data.get("tasks", [])
    if not isinstance(data, list):
        return []

    tasks = []
    for item in data:
        if not isinstance(item, dict):
            continue
        title = str(item.get("title") or "").strip()
        if not title:
            continue

        raw_due = item.get("due_at")
        due_at = resolve_due_at(raw_due, tz) if isinstance(raw_due, str) else None

        priority = Priority.parse(str(item.get("priority") or ""))
        if has_urgency_marker(title):
            priority = Priority.HIGH

        category = str(item.get("category") or "").strip() or None
        tasks.append(
            ExtractedTask(
                title=title,
                due_at=due_at,
                category=category,
                priority=priority,
            )
        )

    # With several tasks the marker can't be attributed to one of them
    if len(tasks) == 1 and has_urgency_marker(source_text):
        tasks[0] = replace(tasks[0], priority=Priority.HIGH)
    return tasks
