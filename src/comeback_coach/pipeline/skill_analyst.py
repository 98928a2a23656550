"""Skill Analyst - assesses a returning professional's resume."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator

from comeback_coach.clients.llm_client import LLMClient
from comeback_coach.data.mock_data import ANALYSIS_NARRATION, MOCK_SKILL_ANALYSIS
from comeback_coach.models.analysis import SkillAnalysis
from comeback_coach.models.payload import AnalysisInput, describe_input
from comeback_coach.pipeline.streaming import (
    RatePolicy,
    StreamEvent,
    StructuredStream,
    split_input,
)
from comeback_coach.utils.rate_limiter import ANALYSIS_KEY, RateLimiter

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """\
You are a career coach specializing in helping women return to tech careers.
You review a resume (or a short description of skills) and assess where the
candidate stands against today's tech job market.

While you work, narrate your progress in a few short sentences. Finish with a
single JSON object and nothing after it:
{
  "currentSkills": ["skills that are still relevant"],
  "outdatedSkills": ["skills that need updating"],
  "skillGaps": ["missing skills for modern tech roles"],
  "suggestedRoles": ["suitable comeback roles"],
  "strengthAreas": ["areas where the candidate is strong"],
  "improvementAreas": ["areas that need work"]
}

If the input is clearly not a resume or a description of someone's skills and
experience, finish instead with:
{"error": "<one sentence telling the user what to provide>"}"""


class SkillAnalyst:
    def __init__(
        self,
        llm: LLMClient | None,
        rate_limiter: RateLimiter,
        *,
        model: str = "claude-sonnet-4-5-20250929",
        max_requests: int = 3,
        window_seconds: float = 60,
        demo_mode: bool = False,
        narration_delay: float = 0.6,
    ):
        self.runner = StructuredStream(
            llm,
            rate_limiter,
            RatePolicy(ANALYSIS_KEY, max_requests, window_seconds),
            schema=SkillAnalysis,
            fallback=MOCK_SKILL_ANALYSIS,
            narration=ANALYSIS_NARRATION,
            narration_delay=narration_delay,
            demo_mode=demo_mode,
            model=model,
        )

    @staticmethod
    def build_prompt(resume_text: str) -> str:
        if resume_text:
            return f"""Analyze the following resume/skills:

---
{resume_text}
---

Narrate briefly, then end with the JSON object."""
        return "Analyze the attached resume. Narrate briefly, then end with the JSON object."

    def analyze_stream(self, item: AnalysisInput) -> AsyncIterator[StreamEvent]:
        """Stream narration chunks, ending with a SkillAnalysis result event."""
        logger.info("Analyzing resume: %s", describe_input(item))
        text, attachment = split_input(item)
        return self.runner.stream(
            self.build_prompt(text), system=SYSTEM_PROMPT, attachment=attachment
        )

    async def analyze(self, item: AnalysisInput) -> SkillAnalysis:
        """Analyze a resume and return the structured assessment."""
        result = None
        async for event in self.analyze_stream(item):
            if event.done:
                result = event.result
        return result
