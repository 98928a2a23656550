"""Interviewer - conducts the text mock interview turn by turn."""

from __future__ import annotations

import itertools
import logging
import time
from collections.abc import AsyncIterator, Callable, Sequence
from typing import TYPE_CHECKING

from comeback_coach.clients.llm_client import LLMClient
from comeback_coach.data.mock_data import CHAT_FALLBACK_REPLY, INTERVIEW_QUESTIONS
from comeback_coach.models.analysis import Roadmap
from comeback_coach.models.interview import ChatMessage
from comeback_coach.pipeline.streaming import StreamEvent, narrate
from comeback_coach.utils.rate_limiter import CHAT_KEY, RateLimiter, RateLimitError

if TYPE_CHECKING:
    from comeback_coach.session.store import SessionStore

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """\
You are conducting a technical interview for someone returning to tech after a
career break. Provide a thoughtful follow-up question or feedback on the
candidate's latest answer. Be encouraging but professional. Ask about
technical skills, problem-solving, or past experiences. Keep responses concise
(2-3 sentences)."""

VOICE_OFFLINE_MESSAGE = (
    "Voice interviews are offline right now. Continuing with a text interview instead."
)


def welcome_message(roadmap: Roadmap | None) -> str:
    """Opening line for the interview, mentioning the roadmap goal when known."""
    if roadmap is not None and roadmap.overall_goal:
        context = f"focusing on {roadmap.overall_goal}"
    else:
        context = "general tech skills"
    return (
        f"Welcome to your interview practice! I'm here to help you prepare for your "
        f"tech comeback {context}. Let's start with a simple question: Tell me about "
        f"your background and what brought you back to tech."
    )


def format_duration(seconds: float) -> str:
    """Format seconds as MM:SS."""
    total = max(0, int(seconds))
    return f"{total // 60:02d}:{total % 60:02d}"


class Interviewer:
    """Produces interviewer replies, streamed from Claude or scripted offline."""

    def __init__(
        self,
        llm: LLMClient | None,
        rate_limiter: RateLimiter,
        *,
        model: str = "claude-haiku-4-5-20251001",
        max_requests: int = 5,
        window_seconds: float = 60,
        demo_mode: bool = False,
        narration_delay: float = 0.6,
    ):
        self.llm = llm
        self.rate_limiter = rate_limiter
        self.model = model
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.demo_mode = demo_mode
        self.narration_delay = narration_delay
        self._scripted = itertools.cycle(INTERVIEW_QUESTIONS)

    async def reply_stream(
        self,
        history: Sequence[ChatMessage],
        user_input: str,
    ) -> AsyncIterator[StreamEvent]:
        """Stream reply chunks, ending with an event carrying the full reply.

        If the service fails, the final reply is the apology line and any
        chunks already shown should be replaced by it.
        """
        if self.llm is None or self.demo_mode:
            reply = next(self._scripted)
            words = reply.split(" ")
            chunks = [w + " " for w in words[:-1]] + [words[-1]]
            async for event in narrate(chunks, self.narration_delay / 10):
                yield event
            yield StreamEvent(result=reply)
            return

        if not self.rate_limiter.is_allowed(CHAT_KEY, self.max_requests, self.window_seconds):
            raise RateLimitError(CHAT_KEY, self.window_seconds)

        chunks: list[str] = []
        try:
            async for chunk in self.llm.stream_text(
                user_input,
                system=SYSTEM_PROMPT,
                model=self.model,
                history=history,
                temperature=0.7,
                max_tokens=512,
            ):
                chunks.append(chunk)
                yield StreamEvent(text=chunk)
        except Exception as exc:
            logger.warning("Interview reply failed: %s", exc)
            yield StreamEvent(result=CHAT_FALLBACK_REPLY)
            return

        reply = "".join(chunks).strip()
        yield StreamEvent(result=reply or CHAT_FALLBACK_REPLY)

    async def reply(self, history: Sequence[ChatMessage], user_input: str) -> str:
        result = CHAT_FALLBACK_REPLY
        async for event in self.reply_stream(history, user_input):
            if event.done:
                result = event.result
        return result


class InterviewSession:
    """A timed text interview: message log plus countdown."""

    def __init__(
        self,
        interviewer: Interviewer,
        roadmap: Roadmap | None = None,
        *,
        duration_seconds: int = 300,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.interviewer = interviewer
        self.duration_seconds = duration_seconds
        self._clock = clock
        self._started_at = clock()
        self.messages: list[ChatMessage] = [
            ChatMessage(role="assistant", content=welcome_message(roadmap))
        ]

    def time_remaining(self) -> float:
        return max(0.0, self.duration_seconds - (self._clock() - self._started_at))

    def is_expired(self) -> bool:
        return self.time_remaining() <= 0

    async def send_stream(self, user_input: str) -> AsyncIterator[StreamEvent]:
        """Add the user's answer and stream the interviewer's reply.

        Blank input yields nothing. RateLimitError propagates with the user's
        message already recorded.
        """
        text = user_input.strip()
        if not text:
            return
        history = list(self.messages)
        self.messages.append(ChatMessage(role="user", content=text))
        async for event in self.interviewer.reply_stream(history, text):
            if event.done:
                self.messages.append(ChatMessage(role="assistant", content=event.result))
            yield event

    async def send(self, user_input: str) -> str | None:
        reply = None
        async for event in self.send_stream(user_input):
            if event.done:
                reply = event.result
        return reply

    def end(self, store: SessionStore) -> None:
        """Record the finished interview in the session."""
        store.update_session(current_step="interview", interview_transcript=list(self.messages))
