"""Shared test fixtures."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from comeback_coach.clients.llm_client import LLMClient, LLMResponse
from comeback_coach.clients.search_client import SearchClient
from comeback_coach.models.analysis import Roadmap, RoadmapWeek, SkillAnalysis
from comeback_coach.session.storage import MemoryStorage
from comeback_coach.session.store import SessionStore
from comeback_coach.utils.rate_limiter import RateLimiter


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def stream_of(*chunks: str):
    """Replacement for LLMClient.stream_text yielding fixed chunks."""

    async def _stream(prompt, **kwargs):
        for chunk in chunks:
            yield chunk

    return _stream


def failing_stream(exc: Exception, *chunks: str):
    """Replacement for LLMClient.stream_text that fails after some chunks."""

    async def _stream(prompt, **kwargs):
        for chunk in chunks:
            yield chunk
        raise exc

    return _stream


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def rate_limiter(clock) -> RateLimiter:
    return RateLimiter(clock=clock)


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def store(storage) -> SessionStore:
    return SessionStore(storage)


@pytest.fixture
def sample_resume_text() -> str:
    return """Jane Doe
jane@example.com

Experience:
- Frontend Developer, Acme Corp (2012 - 2018)
  - Built customer dashboards with jQuery and Backbone.js
  - Maintained a PHP templating layer
- Career break (2018 - 2024): caregiving

Skills: HTML, CSS, JavaScript, jQuery, PHP, MySQL
"""


@pytest.fixture
def sample_analysis() -> SkillAnalysis:
    return SkillAnalysis(
        current_skills=["HTML", "CSS", "JavaScript"],
        outdated_skills=["jQuery", "Backbone.js"],
        skill_gaps=["React", "TypeScript", "Testing"],
        suggested_roles=["Frontend Developer"],
        strength_areas=["UI work"],
        improvement_areas=["Modern tooling"],
        source="llm",
    )


@pytest.fixture
def sample_roadmap() -> Roadmap:
    return Roadmap(
        overall_goal="Return as a React developer",
        estimated_hours=40,
        weeks=[
            RoadmapWeek(
                week=1,
                title="Modern JavaScript",
                goals=["Learn ES2020+"],
                topics=["Modules", "async/await"],
                resources=["MDN JavaScript Guide|https://developer.mozilla.org/en-US/docs/Web/JavaScript/Guide"],
                projects=["Rewrite an old jQuery widget"],
            ),
            RoadmapWeek(
                week=2,
                title="React basics",
                goals=["Build components"],
                topics=["Hooks"],
                resources=["React tutorial"],
                projects=["Todo app"],
            ),
        ],
        source="llm",
    )


@pytest.fixture
def mock_llm_client() -> LLMClient:
    """Create a mock LLM client."""
    client = AsyncMock(spec=LLMClient)
    client.generate = AsyncMock(
        return_value=LLMResponse(text="{}", input_tokens=100, output_tokens=50)
    )
    client.generate_json = AsyncMock(return_value={})
    client.stream_text = stream_of()
    client.get_token_summary = lambda: {"input": 0, "output": 0, "calls": []}
    return client


@pytest.fixture
def mock_search_client() -> SearchClient:
    """Create a mock search client."""
    client = AsyncMock(spec=SearchClient)
    client.search = AsyncMock(
        return_value=[
            {"title": "Test", "url": "https://example.com", "content": "Test content"}
        ]
    )
    client.find_resource_url = AsyncMock(return_value="https://example.com")
    client.get_search_count = lambda: 0
    return client


@pytest.fixture
def fake_stream():
    """Factory for a stream_text replacement: fake_stream("a", "b")."""
    return stream_of


@pytest.fixture
def broken_stream():
    """Factory for a failing stream_text: broken_stream(exc, "partial")."""
    return failing_stream
