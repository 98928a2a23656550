"""Roadmap Planner - turns a skill analysis into a week-by-week learning plan."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator

from comeback_coach.clients.llm_client import LLMClient
from comeback_coach.clients.search_client import SearchClient
from comeback_coach.data.mock_data import MOCK_ROADMAP, ROADMAP_NARRATION
from comeback_coach.models.analysis import Roadmap, SkillAnalysis
from comeback_coach.parsers.resource_parser import parse_resource
from comeback_coach.pipeline.streaming import RatePolicy, StreamEvent, StructuredStream
from comeback_coach.utils.rate_limiter import ROADMAP_KEY, RateLimiter

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """\
You are a career coach creating comeback roadmaps for women returning to tech.
Focus on modern, in-demand technologies and real, well-known learning
resources.

Narrate your planning in a few short sentences, then finish with a single JSON
object and nothing after it:
{
  "overallGoal": "Brief description of the roadmap goal",
  "estimatedHours": <total estimated hours as a number>,
  "weeks": [
    {
      "week": 1,
      "title": "Week title",
      "goals": ["Goal 1", "Goal 2"],
      "topics": ["Topic to learn"],
      "resources": ["Resource title|https://resource.url"],
      "projects": ["Hands-on project idea"]
    }
  ]
}

Write every resource as "Title|URL". Number weeks from 1 without gaps."""


class RoadmapPlanner:
    def __init__(
        self,
        llm: LLMClient | None,
        rate_limiter: RateLimiter,
        *,
        search: SearchClient | None = None,
        model: str = "claude-sonnet-4-5-20250929",
        max_requests: int = 3,
        window_seconds: float = 60,
        demo_mode: bool = False,
        narration_delay: float = 0.6,
    ):
        self.search = search
        self.runner = StructuredStream(
            llm,
            rate_limiter,
            RatePolicy(ROADMAP_KEY, max_requests, window_seconds),
            schema=Roadmap,
            fallback=MOCK_ROADMAP,
            narration=ROADMAP_NARRATION,
            narration_delay=narration_delay,
            demo_mode=demo_mode,
            model=model,
        )

    @staticmethod
    def build_prompt(analysis: SkillAnalysis, weeks: int) -> str:
        return f"""Create a detailed {weeks}-week comeback learning roadmap based on this skill analysis:

- Current Skills: {', '.join(analysis.current_skills) or 'not stated'}
- Outdated Skills: {', '.join(analysis.outdated_skills) or 'none'}
- Skill Gaps: {', '.join(analysis.skill_gaps) or 'not stated'}
- Suggested Roles: {', '.join(analysis.suggested_roles) or 'not stated'}

The roadmap must contain exactly {weeks} weeks."""

    async def plan_stream(self, analysis: SkillAnalysis, weeks: int = 4) -> AsyncIterator[StreamEvent]:
        """Stream planning narration, ending with a Roadmap result event."""
        logger.info("Planning %d-week roadmap", weeks)
        async for event in self.runner.stream(
            self.build_prompt(analysis, weeks), system=SYSTEM_PROMPT
        ):
            if event.done and self.search is not None and event.result.source == "llm":
                event = StreamEvent(result=await self.enrich_resources(event.result))
            yield event

    async def plan(self, analysis: SkillAnalysis, weeks: int = 4) -> Roadmap:
        """Generate a roadmap and return it."""
        result = None
        async for event in self.plan_stream(analysis, weeks):
            if event.done:
                result = event.result
        return result

    async def enrich_resources(self, roadmap: Roadmap) -> Roadmap:
        """Resolve bare-text resources to "Title|URL" using the top search hit."""
        pending: list[tuple[int, int, str]] = []
        for w, week in enumerate(roadmap.weeks):
            for r, resource in enumerate(week.resources):
                if parse_resource(resource).is_search:
                    pending.append((w, r, resource.strip()))
        if not pending:
            return roadmap

        results = await asyncio.gather(
            *(self.search.find_resource_url(query) for _, _, query in pending),
            return_exceptions=True,
        )

        enriched = roadmap.model_copy(deep=True)
        for (w, r, query), url in zip(pending, results):
            if isinstance(url, Exception):
                logger.warning("Resource search failed for %r: %s", query, url)
                continue
            if url:
                enriched.weeks[w].resources[r] = f"{query}|{url}"
        return enriched
