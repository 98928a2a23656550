"""Wizard session state persisted between runs."""

from __future__ import annotations

from typing import Literal

from comeback_coach.models.analysis import CamelModel, Roadmap, SkillAnalysis
from comeback_coach.models.interview import ChatMessage

Step = Literal["idle", "resume-input", "analyzing", "roadmap", "interview"]
InterviewMode = Literal["voice", "text"]


class SessionState(CamelModel):
    has_active_session: bool = False
    current_step: Step = "idle"
    resume_data: str | None = None
    roadmap_weeks: int | None = None
    analysis_result: SkillAnalysis | None = None
    roadmap_data: Roadmap | None = None
    interview_mode: InterviewMode | None = None
    interview_transcript: list[ChatMessage] | None = None
