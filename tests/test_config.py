"""Tests for config loading and validation."""

import pytest

from comeback_coach.config import (
    SESSION_KEY,
    AppConfig,
    ExportConfig,
    LLMConfig,
    PipelineConfig,
    RateLimitConfig,
    SessionConfig,
    load_config,
)


class TestConfig:
    def test_defaults(self):
        config = AppConfig()
        assert config.llm.analysis_model == "claude-sonnet-4-5-20250929"
        assert config.llm.chat_model == "claude-haiku-4-5-20251001"
        assert config.rate_limit.analysis_max_requests == 3
        assert config.rate_limit.chat_max_requests == 5
        assert config.pipeline.default_weeks == 4
        assert config.session.slot_key == SESSION_KEY == "ccc-session-state"

    def test_load_config_defaults(self, tmp_path):
        """Loading from non-existent path returns defaults."""
        config = load_config(tmp_path / "nonexistent.yaml")
        assert config.pipeline.interview_seconds == 300

    def test_load_config_from_yaml(self, tmp_path):
        yaml_path = tmp_path / "config.yaml"
        yaml_path.write_text(
            "llm:\n  chat_model: test-model\npipeline:\n  default_weeks: 8\n  demo_mode: true\n"
        )
        config = load_config(yaml_path)
        assert config.llm.chat_model == "test-model"
        assert config.pipeline.default_weeks == 8
        assert config.pipeline.demo_mode is True
        # Defaults for unspecified
        assert config.rate_limit.chat_window_seconds == 60

    def test_empty_yaml(self, tmp_path):
        yaml_path = tmp_path / "config.yaml"
        yaml_path.write_text("")
        assert load_config(yaml_path) == AppConfig()

    def test_session_resolved_path(self):
        session = SessionConfig(db_path="~/test.db")
        assert "~" not in str(session.resolved_db_path)

    def test_frozen_config(self):
        config = LLMConfig()
        with pytest.raises(AttributeError):
            config.chat_model = "changed"


class TestConfigValidation:
    @pytest.mark.parametrize("weeks", [0, 53])
    def test_default_weeks_range(self, weeks):
        with pytest.raises(ValueError, match="default_weeks"):
            PipelineConfig(default_weeks=weeks)

    def test_negative_narration_delay(self):
        with pytest.raises(ValueError, match="narration_delay"):
            PipelineConfig(narration_delay=-1)

    def test_zero_requests(self):
        with pytest.raises(ValueError, match="chat_max_requests"):
            RateLimitConfig(chat_max_requests=0)

    def test_timeout_must_be_positive(self):
        with pytest.raises(ValueError, match="timeout"):
            LLMConfig(timeout=0)

    def test_unknown_theme(self):
        with pytest.raises(ValueError, match="theme"):
            ExportConfig(theme="neon")

    def test_invalid_value_in_yaml(self, tmp_path):
        yaml_path = tmp_path / "config.yaml"
        yaml_path.write_text("pipeline:\n  default_weeks: 100\n")
        with pytest.raises(ValueError, match="default_weeks"):
            load_config(yaml_path)


class TestResolveApiKey:
    def test_missing_key(self, monkeypatch):
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
        assert LLMConfig().resolve_api_key() is None

    @pytest.mark.parametrize("value", ["", "   ", "YOUR_API_KEY", "your_anthropic_api_key", "<key>"])
    def test_placeholder_treated_as_missing(self, monkeypatch, value):
        monkeypatch.setenv("ANTHROPIC_API_KEY", value)
        assert LLMConfig().resolve_api_key() is None

    def test_real_key(self, monkeypatch):
        monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-ant-test")
        assert LLMConfig().resolve_api_key() == "sk-ant-test"

    def test_custom_env_name(self, monkeypatch):
        monkeypatch.setenv("COACH_KEY", "sk-ant-other")
        assert LLMConfig(api_key_env="COACH_KEY").resolve_api_key() == "sk-ant-other"
