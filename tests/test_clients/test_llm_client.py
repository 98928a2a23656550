"""Tests for LLMClient (Claude API wrapper)."""

from __future__ import annotations

import base64
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from comeback_coach.clients.llm_client import (
    LLMClient,
    LLMResponse,
    attachment_block,
    build_llm_client,
    build_messages,
)
from comeback_coach.config import LLMConfig
from comeback_coach.models.interview import ChatMessage
from comeback_coach.models.payload import FilePayload

PATCH_TARGET = "comeback_coach.clients.llm_client.anthropic.AsyncAnthropic"


def _make_api_message(text: str, input_tokens: int = 100, output_tokens: int = 50) -> MagicMock:
    """Build a mock anthropic Message-like object."""
    message = MagicMock()
    message.usage.input_tokens = input_tokens
    message.usage.output_tokens = output_tokens
    message.content = [MagicMock(text=text)]
    return message


class _FakeStream:
    """Stands in for the object returned by ``client.messages.stream``."""

    def __init__(self, chunks, message=None, fail_after=None):
        self.chunks = chunks
        self.message = message or _make_api_message("".join(chunks))
        self.fail_after = fail_after

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False

    @property
    async def text_stream(self):
        for i, chunk in enumerate(self.chunks):
            if self.fail_after is not None and i == self.fail_after:
                raise ConnectionError("connection dropped")
            yield chunk

    async def get_final_message(self):
        return self.message


class TestLLMClientInit:
    def test_init_default_creates_client_with_no_kwargs(self):
        with patch(PATCH_TARGET) as mock_cls:
            LLMClient()
            mock_cls.assert_called_once_with()

    def test_init_with_both_params_passes_both(self):
        with patch(PATCH_TARGET) as mock_cls:
            LLMClient(api_key="test-key", timeout=30.0)
            mock_cls.assert_called_once_with(api_key="test-key", timeout=30.0)


class TestBuildLLMClient:
    def test_missing_key_returns_none(self, monkeypatch):
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
        assert build_llm_client(LLMConfig()) is None

    def test_placeholder_key_returns_none(self, monkeypatch):
        monkeypatch.setenv("ANTHROPIC_API_KEY", "your_api_key_here")
        assert build_llm_client(LLMConfig()) is None

    def test_real_key_builds_client(self, monkeypatch):
        monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-ant-test")
        with patch(PATCH_TARGET) as mock_cls:
            client = build_llm_client(LLMConfig(timeout=45))
        assert isinstance(client, LLMClient)
        mock_cls.assert_called_once_with(api_key="sk-ant-test", timeout=45)


class TestBuildMessages:
    def test_prompt_only(self):
        messages, preamble = build_messages("hello")
        assert messages == [{"role": "user", "content": [{"type": "text", "text": "hello"}]}]
        assert preamble == ""

    def test_leading_assistant_turn_becomes_preamble(self):
        history = [
            ChatMessage(role="assistant", content="Welcome! Tell me about yourself."),
            ChatMessage(role="user", content="I was a developer."),
            ChatMessage(role="assistant", content="What did you build?"),
        ]
        messages, preamble = build_messages("A dashboard.", history)
        assert preamble == "Welcome! Tell me about yourself."
        assert [m["role"] for m in messages] == ["user", "assistant", "user"]
        assert messages[-1]["content"][-1]["text"] == "A dashboard."

    def test_consecutive_user_turns_merge(self):
        history = [ChatMessage(role="user", content="first")]
        messages, _ = build_messages("second", history)
        assert len(messages) == 1
        texts = [block["text"] for block in messages[0]["content"]]
        assert texts == ["first", "second"]

    def test_attachment_precedes_prompt(self):
        payload = FilePayload("application/pdf", b"%PDF")
        messages, _ = build_messages("Analyze this", attachment=payload)
        content = messages[0]["content"]
        assert content[0]["type"] == "document"
        assert content[1] == {"type": "text", "text": "Analyze this"}


class TestAttachmentBlock:
    def test_pdf(self):
        block = attachment_block(FilePayload("application/pdf", b"%PDF"))
        assert block["type"] == "document"
        assert block["source"]["media_type"] == "application/pdf"
        assert base64.b64decode(block["source"]["data"]) == b"%PDF"

    def test_image(self):
        assert attachment_block(FilePayload("image/png", b"\x89PNG"))["type"] == "image"

    def test_text(self):
        block = attachment_block(FilePayload("text/plain", b"my resume"))
        assert block == {"type": "text", "text": "my resume"}

    def test_unsupported(self):
        with pytest.raises(ValueError, match="Unsupported attachment type"):
            attachment_block(FilePayload("application/zip", b"PK"))


class TestLLMClientGenerate:
    async def test_generate_returns_llm_response(self):
        with patch(PATCH_TARGET) as mock_cls:
            mock_client = MagicMock()
            mock_client.messages.create = AsyncMock(
                return_value=_make_api_message("hello world", input_tokens=100, output_tokens=50)
            )
            mock_cls.return_value = mock_client

            llm = LLMClient()
            result = await llm.generate("say hello", system="be brief")

        assert isinstance(result, LLMResponse)
        assert result.text == "hello world"
        kwargs = mock_client.messages.create.call_args.kwargs
        assert kwargs["system"] == "be brief"

    async def test_generate_json_parses_fenced_json(self):
        with patch(PATCH_TARGET) as mock_cls:
            mock_client = MagicMock()
            mock_client.messages.create = AsyncMock(
                return_value=_make_api_message('```json\n{"overallScore": 80}\n```')
            )
            mock_cls.return_value = mock_client

            llm = LLMClient()
            result = await llm.generate_json("score this")

        assert result == {"overallScore": 80}

    async def test_generate_json_raises_on_non_json_response(self):
        with patch(PATCH_TARGET) as mock_cls:
            mock_client = MagicMock()
            mock_client.messages.create = AsyncMock(
                return_value=_make_api_message("this is plain text, not json")
            )
            mock_cls.return_value = mock_client

            llm = LLMClient()
            with pytest.raises(ValueError):
                await llm.generate_json("give me json")


class TestLLMClientStream:
    async def test_stream_yields_chunks_in_order(self):
        with patch(PATCH_TARGET) as mock_cls:
            mock_client = MagicMock()
            mock_client.messages.stream = MagicMock(
                return_value=_FakeStream(["Reading...", " done.", ' {"a": 1}'])
            )
            mock_cls.return_value = mock_client

            llm = LLMClient()
            chunks = [c async for c in llm.stream_text("go", system="sys", model="m")]

        assert chunks == ["Reading...", " done.", ' {"a": 1}']
        kwargs = mock_client.messages.stream.call_args.kwargs
        assert kwargs["model"] == "m"
        assert kwargs["system"] == "sys"

    async def test_stream_logs_tokens_from_final_message(self):
        with patch(PATCH_TARGET) as mock_cls:
            mock_client = MagicMock()
            mock_client.messages.stream = MagicMock(
                return_value=_FakeStream(["x"], _make_api_message("x", 300, 20))
            )
            mock_cls.return_value = mock_client

            llm = LLMClient()
            [c async for c in llm.stream_text("go", model="claude-sonnet-4-5-20250929")]

        assert llm.get_token_summary()["calls"] == [("claude-sonnet-4-5-20250929", 300, 20)]

    async def test_stream_failure_propagates(self):
        with patch(PATCH_TARGET) as mock_cls:
            mock_client = MagicMock()
            mock_client.messages.stream = MagicMock(
                return_value=_FakeStream(["a", "b"], fail_after=1)
            )
            mock_cls.return_value = mock_client

            llm = LLMClient()
            received = []
            with pytest.raises(ConnectionError):
                async for chunk in llm.stream_text("go"):
                    received.append(chunk)

        assert received == ["a"]
        assert llm._token_log == []

    async def test_history_preamble_goes_to_system(self):
        history = [ChatMessage(role="assistant", content="Welcome!")]
        with patch(PATCH_TARGET) as mock_cls:
            mock_client = MagicMock()
            mock_client.messages.stream = MagicMock(return_value=_FakeStream(["ok"]))
            mock_cls.return_value = mock_client

            llm = LLMClient()
            [c async for c in llm.stream_text("Hi", system="Interview", history=history)]

        kwargs = mock_client.messages.stream.call_args.kwargs
        assert kwargs["system"].startswith("Interview")
        assert "Welcome!" in kwargs["system"]
        assert kwargs["messages"][0]["role"] == "user"


class TestLLMClientTokenSummary:
    def test_get_token_summary_returns_totals_and_clears(self):
        with patch(PATCH_TARGET):
            llm = LLMClient()
            llm._token_log = [
                ("claude-haiku-4-5-20251001", 100, 50),
                ("claude-sonnet-4-5-20250929", 200, 80),
            ]

        summary = llm.get_token_summary()
        assert summary["input"] == 300
        assert summary["output"] == 130
        assert len(summary["calls"]) == 2
        assert llm.get_token_summary()["calls"] == []
