"""Tests for the HTTP, subprocess and Telegram adapters."""

import subprocess
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import requests

from taskminder.adapters.claude_cli import ClaudeCLIService
from taskminder.adapters.openai_api import OpenAIChatService, OpenAITranscriber
from taskminder.adapters.system_clock import SystemClock
from taskminder.adapters.telegram_notifier import TelegramNotifier
from taskminder.errors import TranscriptionError, UpstreamError


def fake_response(payload=None, error=None):
    resp = MagicMock()
    resp.json.return_value = payload
    if error:
        resp.raise_for_status.side_effect = error
    return resp


class TestOpenAIChatService:
    def test_requires_key(self):
        with pytest.raises(ValueError):
            OpenAIChatService("")

    def test_generate(self):
        service = OpenAIChatService("sk-test")
        service._session = MagicMock()
        service._session.post.return_value = fake_response(
            {"choices": [{"message": {"content": "[]"}}]}
        )

        assert service.generate("Extract tasks", system="Be terse") == "[]"

        url = service._session.post.call_args.args[0]
        body = service._session.post.call_args.kwargs["json"]
        assert url == "https://api.openai.com/v1/chat/completions"
        assert body["model"] == "gpt-4o-mini"
        assert body["temperature"] == 0.3
        assert body["messages"] == [
            {"role": "system", "content": "Be terse"},
            {"role": "user", "content": "Extract tasks"},
        ]

    def test_sends_bearer_token(self):
        service = OpenAIChatService("sk-test")
        assert service._session.headers["Authorization"] == "Bearer sk-test"

    def test_http_error(self):
        service = OpenAIChatService("sk-test")
        service._session = MagicMock()
        service._session.post.return_value = fake_response(error=requests.HTTPError("500 Server Error"))

        with pytest.raises(UpstreamError):
            service.generate("Extract tasks")

    def test_unexpected_payload(self):
        service = OpenAIChatService("sk-test")
        service._session = MagicMock()
        service._session.post.return_value = fake_response({"error": "nope"})

        with pytest.raises(UpstreamError):
            service.generate("Extract tasks")


class TestOpenAITranscriber:
    def test_transcribe(self):
        transcriber = OpenAITranscriber("sk-test")
        transcriber._session = MagicMock()
        transcriber._session.post.return_value = fake_response({"text": " Buy groceries \n"})

        assert transcriber.transcribe(b"OggS", "note.ogg") == "Buy groceries"

        kwargs = transcriber._session.post.call_args.kwargs
        assert transcriber._session.post.call_args.args[0].endswith("/audio/transcriptions")
        assert kwargs["data"] == {"model": "whisper-1", "language": "en"}
        assert kwargs["files"] == {"file": ("note.ogg", b"OggS")}

    def test_failure(self):
        transcriber = OpenAITranscriber("sk-test")
        transcriber._session = MagicMock()
        transcriber._session.post.side_effect = requests.ConnectionError("offline")

        with pytest.raises(TranscriptionError):
            transcriber.transcribe(b"OggS")


class TestClaudeCLIService:
    @patch("taskminder.adapters.claude_cli.subprocess.run")
    def test_generate(self, mock_run):
        mock_run.return_value = MagicMock(returncode=0, stdout="[]", stderr="")

        assert ClaudeCLIService().generate("Extract tasks", system="Be terse") == "[]"

        args, kwargs = mock_run.call_args
        assert args[0] == ["claude", "-p", "-"]
        assert kwargs["input"] == "Be terse\n\nExtract tasks"

    @patch("taskminder.adapters.claude_cli.subprocess.run")
    def test_nonzero_exit(self, mock_run):
        mock_run.return_value = MagicMock(returncode=1, stdout="", stderr="boom")
        with pytest.raises(UpstreamError, match="boom"):
            ClaudeCLIService().generate("Extract tasks")

    @patch("taskminder.adapters.claude_cli.subprocess.run", side_effect=FileNotFoundError)
    def test_not_installed(self, mock_run):
        with pytest.raises(UpstreamError, match="not found"):
            ClaudeCLIService().generate("Extract tasks")

    @patch(
        "taskminder.adapters.claude_cli.subprocess.run",
        side_effect=subprocess.TimeoutExpired(cmd="claude", timeout=5),
    )
    def test_timeout(self, mock_run):
        with pytest.raises(UpstreamError, match="timed out"):
            ClaudeCLIService(timeout=5).generate("Extract tasks")


class TestTelegramNotifier:
    @pytest.mark.asyncio
    async def test_plain_send(self):
        bot = AsyncMock()
        await TelegramNotifier(bot).send("42", "⏰ Reminder: Call Mini")
        bot.send_message.assert_awaited_once_with(chat_id=42, text="⏰ Reminder: Call Mini")

    @pytest.mark.asyncio
    async def test_rich_send_uses_markdown_v2(self):
        bot = AsyncMock()
        await TelegramNotifier(bot).send("42", "*Today's tasks:*\n\n1. Pay rent", rich=True)

        kwargs = bot.send_message.await_args.kwargs
        assert kwargs["chat_id"] == 42
        assert kwargs["parse_mode"] == "MarkdownV2"

    @pytest.mark.asyncio
    async def test_errors_propagate(self):
        bot = AsyncMock()
        bot.send_message.side_effect = RuntimeError("Forbidden: bot was blocked by the user")
        with pytest.raises(RuntimeError):
            await TelegramNotifier(bot).send("42", "hi")


class TestSystemClock:
    def test_aware_utc(self):
        now = SystemClock().now()
        assert now.tzinfo is not None
        assert now.utcoffset().total_seconds() == 0
