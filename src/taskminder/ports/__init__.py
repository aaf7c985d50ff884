"""Ports - interfaces/protocols for external dependencies."""

from .task_repo import TaskRepository
from .clock import Clock
from .notifier import Notifier
from .extractor import Extractor, Transcriber
from .llm_service import LLMService

__all__ = [
    "TaskRepository",
    "Clock",
    "Notifier",
    "Extractor",
    "Transcriber",
    "LLMService",
]
