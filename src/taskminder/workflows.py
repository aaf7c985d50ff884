"""Shared workflow layer between CLI and Telegram.

Everything here returns Reply objects instead of talking to a chat, so the
bot handlers and the CLI render the same texts.
"""

import logging
from dataclasses import dataclass

from .adapters.claude_cli import ClaudeCLIService
from .adapters.json_task_store import JsonTaskStore
from .adapters.llm_extractor import LLMExtractor
from .adapters.openai_api import OpenAIChatService, OpenAITranscriber
from .adapters.system_clock import SystemClock
from .config import TASKMINDER_HOME, Config, load_config
from .core.digest import format_task_list
from .core.extraction import ExtractedTask
from .core.tasks import Task, TaskStatus
from .core.timeutil import format_local, to_local
from .errors import StorageError, TranscriptionError
from .ports.clock import Clock
from .ports.extractor import Extractor, Transcriber
from .ports.task_repo import TaskRepository

logger = logging.getLogger(__name__)

NO_PENDING = "No pending tasks! 🎉"
NO_TODAY = "No tasks for today! 🎉"


@dataclass(frozen=True)
class Reply:
    """One outgoing message. `rich` marks markdown content."""

    text: str
    rich: bool = False


# ============== Service wiring ==============


def get_store(config: Config, clock: Clock | None = None) -> JsonTaskStore:
    """Open the JSON task store named by config."""
    return JsonTaskStore(config.tasks_path, clock=clock, timezone=config.timezone)


def get_extractor(config: Config) -> LLMExtractor:
    """Build the configured extractor. Raises ValueError when a key is missing."""
    if config.extractor == "claude":
        llm = ClaudeCLIService(cwd=TASKMINDER_HOME if TASKMINDER_HOME.exists() else None)
    else:
        if not config.openai_api_key:
            raise ValueError(
                "OPENAI_API_KEY not configured. "
                "Set it in the environment or add it to taskminder.conf"
            )
        llm = OpenAIChatService(config.openai_api_key, model=config.openai_model)
    return LLMExtractor(llm, timezone=config.timezone)


def get_transcriber(config: Config) -> OpenAITranscriber:
    """Build the voice transcriber. Raises ValueError when the key is missing."""
    if not config.openai_api_key:
        raise ValueError("OPENAI_API_KEY not configured; voice notes need it for transcription")
    return OpenAITranscriber(
        config.openai_api_key,
        model=config.transcription_model,
        language=config.transcription_language,
    )


class Services:
    """
    Everything a front end needs, built once per process.

    The extractor and transcriber are created on first use so commands
    that never call an LLM work without API keys.
    """

    def __init__(
        self,
        config: Config,
        clock: Clock | None = None,
        store: TaskRepository | None = None,
        extractor: Extractor | None = None,
        transcriber: Transcriber | None = None,
    ):
        self.config = config
        self.clock = clock or SystemClock()
        self.store = store if store is not None else get_store(config, self.clock)
        self._extractor = extractor
        self._transcriber = transcriber

    @property
    def extractor(self) -> Extractor:
        if self._extractor is None:
            self._extractor = get_extractor(self.config)
        return self._extractor

    @property
    def transcriber(self) -> Transcriber:
        if self._transcriber is None:
            self._transcriber = get_transcriber(self.config)
        return self._transcriber

    @property
    def timezone(self) -> str:
        return self.config.timezone


def build_services(config: Config | None = None) -> Services:
    """Wire the real adapters from config."""
    return Services(config or load_config())


# ============== Listings ==============


def next_tasks(services: Services, owner_id: str, limit: int = 5) -> list[Reply]:
    """The owner's soonest open tasks."""
    tasks = services.store.query(owner_id, status=TaskStatus.OPEN)[:limit]
    if not tasks:
        return [Reply(NO_PENDING)]
    return [Reply(format_task_list("Next tasks", tasks, services.timezone), rich=True)]


def today_tasks(services: Services, owner_id: str) -> list[Reply]:
    """Open tasks due on the current local day."""
    tasks = services.store.query(owner_id, status=TaskStatus.OPEN, due_today=True)
    if not tasks:
        return [Reply(NO_TODAY)]
    return [Reply(format_task_list("Today's tasks", tasks, services.timezone), rich=True)]


def all_tasks(services: Services, owner_id: str) -> list[Reply]:
    """Every open task of the owner."""
    tasks = services.store.query(owner_id, status=TaskStatus.OPEN)
    if not tasks:
        return [Reply(NO_PENDING)]
    return [Reply(format_task_list("All tasks", tasks, services.timezone), rich=True)]


# ============== Capture ==============


def added_message(task: Task, timezone: str) -> str:
    """Confirmation line for a newly created task."""
    text = f"Task added: {task.title}"
    if task.due_at:
        text += f" - {format_local(task.due_at, timezone)}"
    return text + " ✅"


def save_extracted(services: Services, owner_id: str, extracted: list[ExtractedTask]) -> list[Reply]:
    """Create a task per candidate and confirm each one."""
    replies = []
    for item in extracted:
        try:
            task = services.store.create(
                owner_id,
                item.title,
                due_at=item.due_at,
                category=item.category,
                priority=item.priority,
            )
        except StorageError:
            logger.exception(f"Could not save task {item.title!r} for {owner_id}")
            replies.append(Reply("Error adding task. Please try again."))
            break
        replies.append(Reply(added_message(task, services.timezone)))
    return replies


def extract_tasks(services: Services, text: str) -> list[ExtractedTask]:
    """Run the extractor against the owner's current local time."""
    now_local = to_local(services.clock.now(), services.timezone)
    return services.extractor.extract(text, now_local)


def add_from_text(services: Services, owner_id: str, text: str) -> list[Reply]:
    """Explicit /add: extract tasks from the text and save them."""
    extracted = extract_tasks(services, text)
    if not extracted:
        return [Reply("Couldn't understand the task. Please try again with more details.")]
    return save_extracted(services, owner_id, extracted)


def handle_text(services: Services, owner_id: str, text: str) -> list[Reply]:
    """
    Free-form chat message.

    A couple of quick queries are answered directly; anything else is
    treated as tasks to capture.
    """
    lower = text.lower()
    if "what's next" in lower or "whats next" in lower:
        return next_tasks(services, owner_id, limit=3)
    if "show" in lower and "today" in lower:
        return today_tasks(services, owner_id)

    extracted = extract_tasks(services, text)
    if not extracted:
        return [Reply("I didn't understand that. Try /start to see available commands.")]
    return save_extracted(services, owner_id, extracted)


def handle_voice(services: Services, owner_id: str, audio: bytes, filename: str = "voice.ogg") -> list[Reply]:
    """Voice note: transcribe, echo what was heard, then capture tasks."""
    try:
        text = services.transcriber.transcribe(audio, filename)
    except TranscriptionError:
        logger.exception(f"Voice transcription failed for {owner_id}")
        return [Reply("Error processing voice message. Please try again.")]

    replies = [Reply(f'Heard: "{text}"')]
    extracted = extract_tasks(services, text) if text else []
    if not extracted:
        replies.append(Reply("Couldn't find any tasks in your message."))
        return replies
    return replies + save_extracted(services, owner_id, extracted)
