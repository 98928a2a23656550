"""Tests for the skill analysis step."""

from __future__ import annotations

import pytest

from comeback_coach.models.payload import FilePayload, TextInput
from comeback_coach.pipeline.skill_analyst import SYSTEM_PROMPT, SkillAnalyst
from comeback_coach.pipeline.streaming import InvalidInputError

ANALYSIS_JSON = (
    '{"currentSkills": ["HTML", "CSS"], "outdatedSkills": ["jQuery"], '
    '"skillGaps": ["React"], "suggestedRoles": ["Frontend Developer"], '
    '"strengthAreas": ["UI"], "improvementAreas": ["Testing"]}'
)


def _recording_stream(calls: list, *chunks: str):
    async def _stream(prompt, **kwargs):
        calls.append((prompt, kwargs))
        for chunk in chunks:
            yield chunk

    return _stream


class TestBuildPrompt:
    def test_includes_resume_text(self, sample_resume_text):
        prompt = SkillAnalyst.build_prompt(sample_resume_text)
        assert "Jane Doe" in prompt
        assert "JSON" in prompt

    def test_attachment_prompt(self):
        assert "attached resume" in SkillAnalyst.build_prompt("")


class TestSkillAnalyst:
    async def test_analyze_text(self, mock_llm_client, rate_limiter, sample_resume_text):
        calls: list = []
        mock_llm_client.stream_text = _recording_stream(calls, "Reviewing...\n", ANALYSIS_JSON)
        analyst = SkillAnalyst(mock_llm_client, rate_limiter, narration_delay=0)

        result = await analyst.analyze(TextInput(sample_resume_text))

        assert result.source == "llm"
        assert result.current_skills == ["HTML", "CSS"]
        assert result.suggested_roles == ["Frontend Developer"]
        prompt, kwargs = calls[0]
        assert "Jane Doe" in prompt
        assert kwargs["system"] == SYSTEM_PROMPT
        assert kwargs["attachment"] is None
        assert kwargs["model"] == "claude-sonnet-4-5-20250929"

    async def test_analyze_file_passes_attachment(self, mock_llm_client, rate_limiter):
        calls: list = []
        mock_llm_client.stream_text = _recording_stream(calls, ANALYSIS_JSON)
        payload = FilePayload("application/pdf", b"%PDF-1.4", filename="cv.pdf")
        analyst = SkillAnalyst(mock_llm_client, rate_limiter, narration_delay=0)

        await analyst.analyze(payload)

        _, kwargs = calls[0]
        assert kwargs["attachment"] is payload

    async def test_streamed_chunks_precede_result(self, mock_llm_client, rate_limiter, fake_stream):
        mock_llm_client.stream_text = fake_stream("Reviewing...\n", ANALYSIS_JSON)
        analyst = SkillAnalyst(mock_llm_client, rate_limiter, narration_delay=0)

        events = [e async for e in analyst.analyze_stream(TextInput("cv"))]

        assert [e.text for e in events[:-1]] == ["Reviewing...\n", ANALYSIS_JSON]
        assert events[-1].done

    async def test_not_a_resume(self, mock_llm_client, rate_limiter, fake_stream):
        mock_llm_client.stream_text = fake_stream('{"error": "Please provide a resume."}')
        analyst = SkillAnalyst(mock_llm_client, rate_limiter, narration_delay=0)
        with pytest.raises(InvalidInputError, match="Please provide a resume."):
            await analyst.analyze(TextInput("What's the weather?"))

    async def test_demo_mode(self, rate_limiter):
        analyst = SkillAnalyst(None, rate_limiter, narration_delay=0)
        events = [e async for e in analyst.analyze_stream(TextInput("cv"))]
        assert len(events) == 5  # four narration lines plus the result
        assert events[-1].result.source == "demo"
