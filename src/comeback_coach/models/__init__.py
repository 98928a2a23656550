"""Data models for the career comeback coach."""

from comeback_coach.models.analysis import Roadmap, RoadmapWeek, SkillAnalysis
from comeback_coach.models.interview import (
    ChatMessage,
    FeedbackSection,
    InterviewFeedback,
)
from comeback_coach.models.payload import AnalysisInput, FilePayload, TextInput
from comeback_coach.models.session import SessionState

__all__ = [
    "AnalysisInput",
    "ChatMessage",
    "FeedbackSection",
    "FilePayload",
    "InterviewFeedback",
    "Roadmap",
    "RoadmapWeek",
    "SessionState",
    "SkillAnalysis",
    "TextInput",
]
