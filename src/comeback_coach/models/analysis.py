"""Pydantic models for skill analysis and roadmap output."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model whose JSON form uses camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class SkillAnalysis(CamelModel):
    current_skills: list[str] = []
    outdated_skills: list[str] = []
    skill_gaps: list[str] = []
    suggested_roles: list[str] = []
    strength_areas: list[str] = []
    improvement_areas: list[str] = []
    source: str | None = None  # "mock" | "demo" | "llm"
    error: str | None = None


class RoadmapWeek(CamelModel):
    week: int
    title: str
    goals: list[str] = []
    topics: list[str] = []
    resources: list[str] = []  # "Title|URL" or bare text/URL
    projects: list[str] = []


class Roadmap(CamelModel):
    overall_goal: str = ""
    estimated_hours: float = Field(default=0, ge=0)
    weeks: list[RoadmapWeek] = []
    source: str | None = None
    restored_from: str | None = None
    timestamp: str | None = None
