"""LLM-backed task extractor."""

import logging
from datetime import datetime

from taskminder.core.extraction import (
    SYSTEM_PROMPT,
    ExtractedTask,
    build_extraction_prompt,
    parse_extraction,
)
from taskminder.errors import UpstreamError
from taskminder.ports.llm_service import LLMService

logger = logging.getLogger(__name__)


class LLMExtractor:
    """
    Extracts tasks from free text with an LLM.

    Implements Extractor protocol. Backend failures and unusable replies
    are logged and come back as an empty list.
    """

    def __init__(self, llm: LLMService, timezone: str = "Asia/Kolkata"):
        self.llm = llm
        self.timezone = timezone

    def extract(self, text: str, now_local: datetime) -> list[ExtractedTask]:
        prompt = build_extraction_prompt(text, now_local)
        try:
            content = self.llm.generate(prompt, system=SYSTEM_PROMPT)
        except UpstreamError as e:
            logger.error(f"Task extraction failed: {e}")
            return []

        tasks = parse_extraction(content, self.timezone, source_text=text)
        logger.info(f"Extracted {len(tasks)} task(s) from {len(text)} chars of text")
        return tasks
