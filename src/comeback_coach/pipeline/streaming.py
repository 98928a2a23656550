"""Streamed LLM calls that end in a structured result, with mock fallback.

Every structured step (skill analysis, roadmap) follows the same flow:

1. Offline (no credential, or demo mode): narrate canned progress lines with
   small delays, then return the canned result.
2. Check the rate limiter; a denied call raises RateLimitError.
3. Stream the response, handing each chunk to the caller in arrival order.
4. Parse the last JSON object in the accumulated text.
5. An ``error`` field in that object raises InvalidInputError. Anything else
   that goes wrong degrades to the canned result.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Sequence
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ValidationError

from comeback_coach.clients.llm_client import LLMClient
from comeback_coach.models.payload import AnalysisInput, FilePayload
from comeback_coach.utils.json_parser import extract_last_json
from comeback_coach.utils.rate_limiter import RateLimiter, RateLimitError

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


class InvalidInputError(ValueError):
    """The service judged the input unusable, e.g. it is not a resume."""


@dataclass
class StreamEvent:
    """One step of a streamed call: a text chunk, or the final result."""

    text: str = ""
    result: Any = None

    @property
    def done(self) -> bool:
        return self.result is not None


@dataclass(frozen=True)
class RatePolicy:
    key: str
    max_requests: int
    window_seconds: float


async def narrate(lines: Sequence[str], delay: float) -> AsyncIterator[StreamEvent]:
    """Emit fixed lines as if they were streamed."""
    for line in lines:
        await asyncio.sleep(delay)
        yield StreamEvent(text=line)


def split_input(item: AnalysisInput) -> tuple[str, FilePayload | None]:
    """Return (inline text, attachment) for a resume input."""
    if isinstance(item, FilePayload):
        return "", item
    return item.text, None


class StructuredStream(Generic[T]):
    """Runs one structured streaming step for a pydantic result type."""

    def __init__(
        self,
        llm: LLMClient | None,
        rate_limiter: RateLimiter,
        policy: RatePolicy,
        *,
        schema: type[T],
        fallback: T,
        narration: Sequence[str] = (),
        narration_delay: float = 0.6,
        demo_mode: bool = False,
        model: str = "claude-sonnet-4-5-20250929",
    ):
        self.llm = llm
        self.rate_limiter = rate_limiter
        self.policy = policy
        self.schema = schema
        self.fallback = fallback
        self.narration = narration
        self.narration_delay = narration_delay
        self.demo_mode = demo_mode
        self.model = model

    @property
    def offline(self) -> bool:
        return self.llm is None or self.demo_mode

    async def stream(
        self,
        prompt: str,
        *,
        system: str = "",
        attachment: FilePayload | None = None,
    ) -> AsyncIterator[StreamEvent]:
        if self.offline:
            logger.info("Demo mode: serving canned %s", self.schema.__name__)
            async for event in narrate(self.narration, self.narration_delay):
                yield event
            yield StreamEvent(result=self._canned("demo"))
            return

        if not self.rate_limiter.is_allowed(
            self.policy.key, self.policy.max_requests, self.policy.window_seconds
        ):
            raise RateLimitError(self.policy.key, self.policy.window_seconds)

        chunks: list[str] = []
        try:
            async for chunk in self.llm.stream_text(
                prompt, system=system, model=self.model, attachment=attachment
            ):
                chunks.append(chunk)
                yield StreamEvent(text=chunk)
        except Exception as exc:
            logger.warning("%s stream failed, using mock data: %s", self.schema.__name__, exc)
            # Don't count an attempt the service never answered.
            self.rate_limiter.reset(self.policy.key)
            yield StreamEvent(result=self._canned("mock", error=f"Service unavailable: {exc}"))
            return

        yield StreamEvent(result=self.parse("".join(chunks)))

    async def run(
        self,
        prompt: str,
        *,
        system: str = "",
        attachment: FilePayload | None = None,
    ) -> T:
        """Consume the stream and return only the final result."""
        result = None
        async for event in self.stream(prompt, system=system, attachment=attachment):
            if event.done:
                result = event.result
        return result

    def parse(self, text: str) -> T:
        """Turn accumulated stream text into a result, degrading to mock data."""
        try:
            data = extract_last_json(text)
        except Exception as exc:
            logger.warning("No usable JSON in %s response, using mock data: %s", self.schema.__name__, exc)
            return self._canned("mock", error="Response did not contain a structured result")

        if data.get("error"):
            raise InvalidInputError(str(data["error"]))

        try:
            result = self.schema.model_validate(data)
        except ValidationError as exc:
            logger.warning("Invalid %s payload, using mock data: %s", self.schema.__name__, exc)
            return self._canned("mock", error="Response did not match the expected format")
        return result.model_copy(update={"source": "llm"})

    def _canned(self, source: str, error: str | None = None) -> T:
        update: dict = {"source": source}
        if error is not None and "error" in self.schema.model_fields:
            update["error"] = error
        return self.fallback.model_copy(deep=True, update=update)
