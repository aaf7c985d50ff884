"""Adapters - I/O implementations of ports."""

from .json_task_store import JsonTaskStore
from .system_clock import SystemClock
from .openai_api import OpenAIChatService, OpenAITranscriber
from .claude_cli import ClaudeCLIService
from .llm_extractor import LLMExtractor

__all__ = [
    "JsonTaskStore",
    "SystemClock",
    "OpenAIChatService",
    "OpenAITranscriber",
    "ClaudeCLIService",
    "LLMExtractor",
]
