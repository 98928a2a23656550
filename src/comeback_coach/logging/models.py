"""Usage log entries for analysis runs, interviews and feedback reviews."""

from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, Field


class UsageLog(BaseModel):
    """One coach run: what was produced, where it came from and what it cost.

    ``source`` tells sample data apart from real service output, so monthly
    stats can count runs that fell back to canned results.
    """

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    session_id: str = "anonymous"
    timestamp: datetime = Field(default_factory=datetime.now)
    mode: str  # "analysis" | "interview" | "feedback"
    source: str | None = None  # "llm" | "mock" | "demo"; None when the run failed
    roadmap_weeks: int | None = None  # requested roadmap length
    elapsed_seconds: float = 0.0
    total_input_tokens: int = 0
    total_output_tokens: int = 0
    search_count: int = 0  # Tavily lookups for resource links
    estimated_cost_usd: float = 0.0
    success: bool = True
    error_message: str | None = None
