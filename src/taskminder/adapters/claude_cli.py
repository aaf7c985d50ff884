"""Claude CLI adapter - subprocess wrapper for Claude Code."""

import logging
import subprocess
from pathlib import Path

from taskminder.errors import UpstreamError

logger = logging.getLogger(__name__)


class ClaudeCLIService:
    """
    Claude CLI subprocess adapter.

    Implements LLMService protocol. The prompt is fed on stdin so long
    messages don't hit argv limits.
    """

    def __init__(
        self,
        cwd: Path | str | None = None,
        timeout: int = 120,
    ):
        self.cwd = Path(cwd) if cwd else None
        self.timeout = timeout

    def generate(self, prompt: str, system: str | None = None) -> str:
        """Generate text from a prompt. Returns complete response."""
        full_prompt = f"{system}\n\n{prompt}" if system else prompt
        try:
            proc = subprocess.run(
                ["claude", "-p", "-"],
                input=full_prompt,
                cwd=self.cwd,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except FileNotFoundError:
            raise UpstreamError("Claude CLI not found. Install with: npm install -g @anthropic-ai/claude-code")
        except subprocess.TimeoutExpired:
            raise UpstreamError(f"Claude CLI timed out after {self.timeout}s")

        if proc.returncode != 0:
            logger.error(f"Claude CLI failed: {proc.stderr}")
            raise UpstreamError(f"Claude CLI failed: {proc.stderr}")
        return proc.stdout
