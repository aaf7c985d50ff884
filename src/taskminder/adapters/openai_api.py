"""OpenAI API adapter - HTTP client for chat completions and transcription."""

import logging

import requests

from taskminder.errors import TranscriptionError, UpstreamError

logger = logging.getLogger(__name__)

API_BASE = "https://api.openai.com/v1"


class _OpenAIClient:
    """Shared session and auth for the OpenAI endpoints."""

    def __init__(self, api_key: str, api_base: str = API_BASE, timeout: int = 60):
        if not api_key:
            raise ValueError("OpenAI API key is required")
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        self._session = requests.Session()
        self._session.headers["Authorization"] = f"Bearer {api_key}"

    def _post(self, endpoint: str, **kwargs) -> dict:
        resp = self._session.post(f"{self.api_base}{endpoint}", timeout=self.timeout, **kwargs)
        resp.raise_for_status()
        return resp.json()


class OpenAIChatService(_OpenAIClient):
    """
    OpenAI chat completions adapter.

    Implements LLMService protocol.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        temperature: float = 0.3,
        **kwargs,
    ):
        super().__init__(api_key, **kwargs)
        self.model = model
        self.temperature = temperature

    def generate(self, prompt: str, system: str | None = None) -> str:
        """Generate text from a prompt. Returns complete response."""
        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})

        try:
            data = self._post(
                "/chat/completions",
                json={
                    "model": self.model,
                    "messages": messages,
                    "temperature": self.temperature,
                },
            )
            return data["choices"][0]["message"]["content"] or ""
        except requests.RequestException as e:
            logger.error(f"OpenAI chat request failed: {e}")
            raise UpstreamError(f"OpenAI chat request failed: {e}") from e
        except (KeyError, IndexError, TypeError, ValueError) as e:
            logger.error(f"Unexpected OpenAI chat response: {e}")
            raise UpstreamError(f"Unexpected OpenAI chat response: {e}") from e


class OpenAITranscriber(_OpenAIClient):
    """
    OpenAI audio transcription adapter.

    Implements Transcriber protocol.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "whisper-1",
        language: str = "en",
        **kwargs,
    ):
        super().__init__(api_key, **kwargs)
        self.model = model
        self.language = language

    def transcribe(self, audio: bytes, filename: str = "voice.ogg") -> str:
        """Transcribe an audio clip to text."""
        try:
            data = self._post(
                "/audio/transcriptions",
                data={"model": self.model, "language": self.language},
                files={"file": (filename, audio)},
            )
            text = data["text"]
        except requests.RequestException as e:
            logger.error(f"OpenAI transcription failed: {e}")
            raise TranscriptionError(f"Transcription failed: {e}") from e
        except (KeyError, TypeError, ValueError) as e:
            logger.error(f"Unexpected OpenAI transcription response: {e}")
            raise TranscriptionError(f"Unexpected transcription response: {e}") from e

        return (text or "").strip()
