"""Main pipeline orchestrator - runs the analysis step of the wizard."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field

from comeback_coach.clients.llm_client import LLMClient
from comeback_coach.clients.search_client import SearchClient
from comeback_coach.config import AppConfig
from comeback_coach.logging.cost_calculator import calculate_cost
from comeback_coach.logging.models import UsageLog
from comeback_coach.logging.usage_store import UsageStore
from comeback_coach.models.analysis import Roadmap, SkillAnalysis
from comeback_coach.models.payload import parse_analysis_input
from comeback_coach.pipeline.roadmap_planner import RoadmapPlanner
from comeback_coach.pipeline.skill_analyst import SkillAnalyst
from comeback_coach.session.store import SessionStore
from comeback_coach.utils.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)


@dataclass
class AnalysisRunResult:
    """Result of one analysis + roadmap run."""

    analysis: SkillAnalysis
    roadmap: Roadmap
    elapsed_seconds: float = 0.0
    metadata: dict = field(default_factory=dict)


class CoachOrchestrator:
    """Runs skill analysis then roadmap planning against a session."""

    def __init__(
        self,
        llm: LLMClient | None,
        rate_limiter: RateLimiter,
        *,
        search: SearchClient | None = None,
        analysis_model: str = "claude-sonnet-4-5-20250929",
        max_requests: int = 3,
        window_seconds: float = 60,
        demo_mode: bool = False,
        narration_delay: float = 0.6,
        default_weeks: int = 4,
        usage_store: UsageStore | None = None,
    ):
        self.llm = llm
        common = dict(
            model=analysis_model,
            max_requests=max_requests,
            window_seconds=window_seconds,
            demo_mode=demo_mode,
            narration_delay=narration_delay,
        )
        self.analyst = SkillAnalyst(llm, rate_limiter, **common)
        self.planner = RoadmapPlanner(llm, rate_limiter, search=search, **common)
        self.search = search
        self.default_weeks = default_weeks
        self.usage_store = usage_store

    @classmethod
    def from_config(
        cls,
        config: AppConfig,
        llm: LLMClient | None,
        rate_limiter: RateLimiter,
        *,
        search: SearchClient | None = None,
        usage_store: UsageStore | None = None,
        demo_mode: bool | None = None,
    ) -> CoachOrchestrator:
        return cls(
            llm,
            rate_limiter,
            search=search,
            analysis_model=config.llm.analysis_model,
            max_requests=config.rate_limit.analysis_max_requests,
            window_seconds=config.rate_limit.analysis_window_seconds,
            demo_mode=config.pipeline.demo_mode if demo_mode is None else demo_mode,
            narration_delay=config.pipeline.narration_delay,
            default_weeks=config.pipeline.default_weeks,
            usage_store=usage_store,
        )

    async def run(
        self,
        store: SessionStore,
        *,
        on_phase: Callable[[str, str], None] | None = None,
        on_chunk: Callable[[str], None] | None = None,
    ) -> AnalysisRunResult:
        """Analyze the session's resume, plan a roadmap and save both.

        Args:
            store: Session holding ``resume_data`` (and optionally ``roadmap_weeks``).
            on_phase: Optional callback(phase_name, detail) for progress.
            on_chunk: Optional callback receiving streamed text in order.

        Raises:
            ValueError: The session has no resume.
            RateLimitError: Too many analysis runs in the current window.
            InvalidInputError: The service says the input is not a resume.
        """
        state = store.state
        if not state.resume_data:
            raise ValueError("No resume in the current session. Add one first.")
        weeks = state.roadmap_weeks or self.default_weeks
        start = time.monotonic()

        def _notify(phase: str, detail: str = ""):
            if on_phase:
                on_phase(phase, detail)

        def _emit(text: str):
            if on_chunk and text:
                on_chunk(text)

        store.start_session("analyzing")
        try:
            _notify("analysis", "Analyzing your skills and experience...")
            analysis = None
            async for event in self.analyst.analyze_stream(parse_analysis_input(state.resume_data)):
                _emit(event.text)
                if event.done:
                    analysis = event.result
            store.update_session(analysis_result=analysis)

            _notify("roadmap", "Creating your personalized roadmap...")
            roadmap = None
            async for event in self.planner.plan_stream(analysis, weeks):
                _emit(event.text)
                if event.done:
                    roadmap = event.result
            store.update_session(roadmap_data=roadmap, current_step="roadmap")
        except Exception as exc:
            self._record(start, source=None, weeks=weeks, error=exc)
            raise

        elapsed = time.monotonic() - start
        _notify("done", "Analysis complete!")
        # A run counts as fallback when either step served canned data.
        source = analysis.source if roadmap.source == analysis.source else "mock"
        self._record(start, source=source, weeks=weeks)

        return AnalysisRunResult(
            analysis=analysis,
            roadmap=roadmap,
            elapsed_seconds=elapsed,
            metadata={"weeks": weeks, "source": source},
        )

    def _record(
        self,
        start: float,
        *,
        source: str | None,
        weeks: int,
        error: Exception | None = None,
    ) -> None:
        if self.usage_store is None:
            return
        tokens = self.llm.get_token_summary() if self.llm is not None else {"input": 0, "output": 0, "calls": []}
        search_count = self.search.get_search_count() if self.search is not None else 0
        log = UsageLog(
            mode="analysis",
            source=source,
            roadmap_weeks=weeks,
            elapsed_seconds=time.monotonic() - start,
            total_input_tokens=tokens["input"],
            total_output_tokens=tokens["output"],
            search_count=search_count,
            estimated_cost_usd=calculate_cost(tokens["calls"], search_count=search_count),
            success=error is None,
            error_message=str(error) if error is not None else None,
        )
        try:
            self.usage_store.save_log(log)
        except Exception:
            logger.warning("Failed to save usage log", exc_info=True)
