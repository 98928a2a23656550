"""Claude API wrapper with async streaming and retry logic."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Sequence
from dataclasses import dataclass

import anthropic
from tenacity import retry, stop_after_attempt, wait_exponential

from comeback_coach.config import LLMConfig
from comeback_coach.models.interview import ChatMessage
from comeback_coach.models.payload import FilePayload
from comeback_coach.utils.json_parser import extract_json

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "claude-haiku-4-5-20251001"


@dataclass
class LLMResponse:
    """Response from the LLM including usage metadata."""

    text: str
    input_tokens: int
    output_tokens: int


def attachment_block(payload: FilePayload) -> dict:
    """Build an inline base64 content block for an uploaded file."""
    source = {
        "type": "base64",
        "media_type": payload.mime_type,
        "data": payload.b64_data,
    }
    if payload.mime_type == "application/pdf":
        return {"type": "document", "source": source}
    if payload.mime_type.startswith("image/"):
        return {"type": "image", "source": source}
    if payload.mime_type.startswith("text/"):
        return {"type": "text", "text": payload.data.decode("utf-8", errors="replace")}
    raise ValueError(f"Unsupported attachment type: {payload.mime_type}")


def build_messages(
    prompt: str,
    history: Sequence[ChatMessage] = (),
    attachment: FilePayload | None = None,
) -> tuple[list[dict], str]:
    """Map chat history plus the new prompt onto user/assistant turns.

    The API wants the conversation to open with a user turn, so leading
    assistant turns are returned separately as preamble text for the system
    prompt. Consecutive turns from the same role are merged.
    Returns (messages, preamble).
    """
    turns = list(history)
    preamble_parts: list[str] = []
    while turns and turns[0].role == "assistant":
        preamble_parts.append(turns.pop(0).content)

    messages: list[dict] = []
    for turn in turns:
        if messages and messages[-1]["role"] == turn.role:
            messages[-1]["content"][0]["text"] += "\n\n" + turn.content
        else:
            messages.append({"role": turn.role, "content": [{"type": "text", "text": turn.content}]})

    content: list[dict] = []
    if attachment is not None:
        content.append(attachment_block(attachment))
    content.append({"type": "text", "text": prompt})

    if messages and messages[-1]["role"] == "user":
        messages[-1]["content"].extend(content)
    else:
        messages.append({"role": "user", "content": content})

    return messages, "\n\n".join(preamble_parts)


class LLMClient:
    """Async Claude API client with exponential-backoff retries."""

    def __init__(self, api_key: str | None = None, timeout: float | None = None):
        kwargs: dict = {}
        if api_key is not None:
            kwargs["api_key"] = api_key
        if timeout is not None:
            kwargs["timeout"] = timeout
        self.client = anthropic.AsyncAnthropic(**kwargs)
        self._token_log: list[tuple[str, int, int]] = []  # (model, input_tokens, output_tokens)

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(min=1, max=10),
        reraise=True,
    )
    async def _call_api(
        self,
        messages: list[dict],
        system: str,
        model: str,
        temperature: float,
        max_tokens: int,
    ) -> anthropic.types.Message:
        """Make the actual API call with retry logic."""
        kwargs: dict = {
            "model": model,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "messages": messages,
        }
        if system:
            kwargs["system"] = system
        return await self.client.messages.create(**kwargs)

    async def generate(
        self,
        prompt: str,
        system: str = "",
        model: str = DEFAULT_MODEL,
        temperature: float = 0.0,
        max_tokens: int = 8192,
    ) -> LLMResponse:
        """Send a prompt to Claude and return the text response with usage."""
        logger.debug("LLM call: model=%s", model)
        messages, _ = build_messages(prompt)
        try:
            message = await self._call_api(
                messages=messages,
                system=system,
                model=model,
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except Exception:
            logger.error("LLM call failed", exc_info=True)
            raise
        input_tokens = message.usage.input_tokens
        output_tokens = message.usage.output_tokens
        logger.debug("LLM response: %d input, %d output tokens", input_tokens, output_tokens)
        self._token_log.append((model, input_tokens, output_tokens))
        return LLMResponse(
            text=message.content[0].text,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
        )

    async def generate_json(
        self,
        prompt: str,
        system: str = "",
        model: str = DEFAULT_MODEL,
        temperature: float = 0.0,
        max_tokens: int = 8192,
    ) -> dict:
        """Send a prompt and parse JSON from response."""
        response = await self.generate(
            prompt=prompt,
            system=system,
            model=model,
            temperature=temperature,
            max_tokens=max_tokens,
        )
        return extract_json(response.text)

    async def stream_text(
        self,
        prompt: str,
        *,
        system: str = "",
        model: str = DEFAULT_MODEL,
        history: Sequence[ChatMessage] = (),
        attachment: FilePayload | None = None,
        temperature: float = 0.0,
        max_tokens: int = 8192,
    ) -> AsyncIterator[str]:
        """Stream the response text chunk by chunk, in arrival order.

        Streams are not retried: a failure part way through would replay text
        the caller has already consumed.
        """
        messages, preamble = build_messages(prompt, history, attachment)
        if preamble:
            system = f"{system}\n\nYou opened the conversation with:\n{preamble}".strip()

        kwargs: dict = {
            "model": model,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "messages": messages,
        }
        if system:
            kwargs["system"] = system

        logger.debug("LLM stream: model=%s, turns=%d", model, len(messages))
        try:
            async with self.client.messages.stream(**kwargs) as stream:
                async for text in stream.text_stream:
                    yield text
                message = await stream.get_final_message()
        except Exception:
            logger.error("LLM stream failed", exc_info=True)
            raise

        input_tokens = message.usage.input_tokens
        output_tokens = message.usage.output_tokens
        logger.debug("LLM stream done: %d input, %d output tokens", input_tokens, output_tokens)
        self._token_log.append((model, input_tokens, output_tokens))

    def get_token_summary(self) -> dict:
        """Return accumulated token usage and reset the log."""
        summary = {
            "input": sum(t[1] for t in self._token_log),
            "output": sum(t[2] for t in self._token_log),
            "calls": list(self._token_log),
        }
        self._token_log.clear()
        return summary


def build_llm_client(config: LLMConfig) -> LLMClient | None:
    """Create a client when a usable API key is configured, else None (demo mode)."""
    api_key = config.resolve_api_key()
    if api_key is None:
        logger.info("No %s configured, running in demo mode", config.api_key_env)
        return None
    return LLMClient(api_key=api_key, timeout=config.timeout)
