"""Feedback Reviewer - scores a finished mock interview."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from comeback_coach.clients.llm_client import LLMClient
from comeback_coach.data.mock_data import MOCK_FEEDBACK
from comeback_coach.models.interview import ChatMessage, InterviewFeedback

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """\
You are an interview coach reviewing a practice interview with someone
returning to tech after a career break. Score the candidate's answers on three
axes, each 0-100:

1. Technical Knowledge: accuracy and depth of technical answers
2. Communication: clarity, structure, and concision
3. Confidence & Presence: composure and ownership of their experience

Respond with JSON only:
{
  "overallScore": 0-100,
  "sections": [
    {
      "title": "Technical Knowledge",
      "score": 0-100,
      "maxScore": 100,
      "feedback": "One or two sentences",
      "highlights": ["what went well"],
      "improvements": ["what to practice"]
    }
  ]
}

Be encouraging and specific. Quote the candidate where it helps."""


def format_transcript(messages: Sequence[ChatMessage]) -> str:
    return "\n".join(
        f"{'Candidate' if m.role == 'user' else 'Interviewer'}: {m.content}" for m in messages
    )


class FeedbackReviewer:
    def __init__(
        self,
        llm: LLMClient | None,
        model: str = "claude-haiku-4-5-20251001",
        *,
        demo_mode: bool = False,
    ):
        self.llm = llm
        self.model = model
        self.demo_mode = demo_mode

    async def review(self, transcript: Sequence[ChatMessage]) -> InterviewFeedback:
        """Score the interview, falling back to the canned summary."""
        answered = any(m.role == "user" for m in transcript)
        if self.llm is None or self.demo_mode or not answered:
            return MOCK_FEEDBACK.model_copy(deep=True)

        logger.info("Reviewing interview (%d messages)...", len(transcript))
        prompt = f"""Review this practice interview:

---
{format_transcript(transcript)}
---

Respond with JSON only."""

        try:
            data = await self.llm.generate_json(prompt=prompt, system=SYSTEM_PROMPT, model=self.model)
            feedback = InterviewFeedback.model_validate(data)
        except ValueError as exc:
            logger.warning("Could not parse interview feedback, using mock summary: %s", exc)
            return MOCK_FEEDBACK.model_copy(deep=True)
        except Exception as exc:
            logger.warning("Interview feedback call failed, using mock summary: %s", exc)
            return MOCK_FEEDBACK.model_copy(deep=True)

        return feedback.model_copy(update={"source": "llm"})
