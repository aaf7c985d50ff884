"""Task extraction and transcription interfaces."""

from datetime import datetime
from typing import Protocol

from taskminder.core.extraction import ExtractedTask


class Extractor(Protocol):
    """Turns free text into task candidates."""

    def extract(self, text: str, now_local: datetime) -> list[ExtractedTask]:
        """Extract tasks. Failures yield an empty list, never an exception."""
        ...


class Transcriber(Protocol):
    """Turns a voice note into text."""

    def transcribe(self, audio: bytes, filename: str = "voice.ogg") -> str:
        """Transcribe audio. Raises TranscriptionError on failure."""
        ...
