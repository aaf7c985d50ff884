"""Configuration management for Taskminder."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

TASKMINDER_HOME = Path(os.environ.get("TASKMINDER_HOME", Path.home() / "taskminder"))
CONFIG_FILE = TASKMINDER_HOME / "config" / "taskminder.conf"
DATA_DIR = TASKMINDER_HOME / "data"

EXTRACTORS = ("openai", "claude")


@dataclass
class Config:
    """Taskminder configuration."""

    # Telegram bot settings
    telegram_bot_token: str = ""
    # LLM settings
    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"
    extractor: str = "openai"
    transcription_model: str = "whisper-1"
    transcription_language: str = "en"
    # Scheduling
    timezone: str = "Asia/Kolkata"
    digest_time: str = "08:00"
    reminder_interval_seconds: int = 60
    early_reminder_minutes: int = 30
    # Storage
    tasks_file: str = ""
    cli_owner: str = "local"

    @property
    def tasks_path(self) -> Path:
        """Resolved location of the task store file."""
        if self.tasks_file:
            return Path(self.tasks_file).expanduser()
        return DATA_DIR / "tasks.json"


def parse_clock_time(value: str) -> tuple[int, int]:
    """Parse "HH:MM" into (hour, minute). Raises ValueError."""
    hour, minute = map(int, value.split(":"))
    if not (0 <= hour < 24 and 0 <= minute < 60):
        raise ValueError(f"time out of range: {value}")
    return hour, minute


def _unquote(value: str) -> str:
    """Strip quotes, or an inline comment from an unquoted value."""
    # Handle quoted values with inline comments: "value" # comment
    for quote in ('"', "'"):
        if value.startswith(quote):
            end_quote = value.find(quote, 1)
            return value[1:end_quote] if end_quote != -1 else value[1:]

    if "#" in value:
        value = value.split("#")[0].strip()
    return value


def _parse_int(key: str, value: str, default: int) -> int:
    try:
        parsed = int(value)
    except ValueError:
        logger.warning(f"Invalid integer for {key.upper()}: {value!r}; using {default}")
        return default
    if parsed <= 0:
        logger.warning(f"{key.upper()} must be positive, got {parsed}; using {default}")
        return default
    return parsed


def load_config(path: Path | None = None) -> Config:
    """Load configuration from taskminder.conf, then apply environment overrides."""
    config = Config()
    path = path or CONFIG_FILE

    if path.exists():
        for line in path.read_text().splitlines():
            line = line.strip()
            if not line or line.startswith("#"):
                continue

            if "=" not in line:
                continue

            key, _, value = line.partition("=")
            key = key.strip().lower()
            value = _unquote(value.strip())

            match key:
                case "telegram_bot_token":
                    config.telegram_bot_token = value
                case "openai_api_key":
                    config.openai_api_key = value
                case "openai_model":
                    config.openai_model = value
                case "extractor":
                    if value.lower() in EXTRACTORS:
                        config.extractor = value.lower()
                    else:
                        logger.warning(f"Unknown EXTRACTOR {value!r}; using {config.extractor}")
                case "transcription_model":
                    config.transcription_model = value
                case "transcription_language":
                    config.transcription_language = value
                case "timezone":
                    config.timezone = value
                case "digest_time":
                    config.digest_time = value
                case "reminder_interval_seconds":
                    config.reminder_interval_seconds = _parse_int(key, value, config.reminder_interval_seconds)
                case "early_reminder_minutes":
                    config.early_reminder_minutes = _parse_int(key, value, config.early_reminder_minutes)
                case "tasks_file":
                    config.tasks_file = value
                case "cli_owner":
                    config.cli_owner = value

    # Secrets usually come from the environment
    if os.environ.get("TELEGRAM_BOT_TOKEN"):
        config.telegram_bot_token = os.environ["TELEGRAM_BOT_TOKEN"]
    if os.environ.get("OPENAI_API_KEY"):
        config.openai_api_key = os.environ["OPENAI_API_KEY"]

    return config
