"""Models for mock interview messages and feedback."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import Field

from comeback_coach.models.analysis import CamelModel


class ChatMessage(CamelModel):
    role: Literal["user", "assistant"]
    content: str
    timestamp: datetime = Field(default_factory=datetime.now)


class FeedbackSection(CamelModel):
    title: str
    score: int = Field(ge=0)
    max_score: int = 100
    feedback: str
    highlights: list[str] = []
    improvements: list[str] = []


class InterviewFeedback(CamelModel):
    overall_score: int = Field(ge=0, le=100)
    sections: list[FeedbackSection]
    source: str | None = None


def score_band(score: int) -> str:
    """Map a 0-100 score to a display band: success, warning or error."""
    if score >= 80:
        return "success"
    if score >= 60:
        return "warning"
    return "error"
