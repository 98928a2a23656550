"""Application configuration loaded from config.yaml."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

SESSION_KEY = "ccc-session-state"

# Values shipped in sample .env files; treated the same as a missing key.
_PLACEHOLDER_PREFIXES = ("YOUR_", "your_", "<")


def _check_range(name: str, value: float, low: float, high: float | None = None) -> None:
    if value < low or (high is not None and value > high):
        bound = f">= {low}" if high is None else f"between {low} and {high}"
        raise ValueError(f"{name} must be {bound}, got {value!r}")


@dataclass(frozen=True)
class LLMConfig:
    analysis_model: str = "claude-sonnet-4-5-20250929"
    chat_model: str = "claude-haiku-4-5-20251001"
    api_key_env: str = "ANTHROPIC_API_KEY"
    timeout: int = 120
    max_tokens: int = 8192

    def __post_init__(self) -> None:
        _check_range("timeout", self.timeout, 1)
        _check_range("max_tokens", self.max_tokens, 1)

    def resolve_api_key(self) -> str | None:
        """Return the configured API key, or None when absent or a placeholder."""
        key = os.environ.get(self.api_key_env, "").strip()
        if not key or key.startswith(_PLACEHOLDER_PREFIXES):
            return None
        return key


@dataclass(frozen=True)
class RateLimitConfig:
    analysis_max_requests: int = 3
    analysis_window_seconds: float = 60
    chat_max_requests: int = 5
    chat_window_seconds: float = 60

    def __post_init__(self) -> None:
        _check_range("analysis_max_requests", self.analysis_max_requests, 1)
        _check_range("analysis_window_seconds", self.analysis_window_seconds, 1)
        _check_range("chat_max_requests", self.chat_max_requests, 1)
        _check_range("chat_window_seconds", self.chat_window_seconds, 1)


@dataclass(frozen=True)
class PipelineConfig:
    demo_mode: bool = False
    default_weeks: int = 4
    narration_delay: float = 0.6
    interview_seconds: int = 300
    inline_files: bool = True

    def __post_init__(self) -> None:
        _check_range("default_weeks", self.default_weeks, 1, 52)
        _check_range("narration_delay", self.narration_delay, 0)
        _check_range("interview_seconds", self.interview_seconds, 1)


@dataclass(frozen=True)
class SessionConfig:
    db_path: str = "~/.comeback-coach/session.db"
    slot_key: str = SESSION_KEY

    @property
    def resolved_db_path(self) -> Path:
        return Path(self.db_path).expanduser()


@dataclass(frozen=True)
class UsageConfig:
    db_path: str = "~/.comeback-coach/usage.db"
    enabled: bool = True

    @property
    def resolved_db_path(self) -> Path:
        return Path(self.db_path).expanduser()


@dataclass(frozen=True)
class ExportConfig:
    theme: str = "professional"

    def __post_init__(self) -> None:
        themes = ("professional", "modern", "minimal")
        if self.theme not in themes:
            raise ValueError(f"theme must be one of {themes}, got {self.theme!r}")


@dataclass(frozen=True)
class AppConfig:
    llm: LLMConfig = field(default_factory=LLMConfig)
    rate_limit: RateLimitConfig = field(default_factory=RateLimitConfig)
    pipeline: PipelineConfig = field(default_factory=PipelineConfig)
    session: SessionConfig = field(default_factory=SessionConfig)
    usage: UsageConfig = field(default_factory=UsageConfig)
    export: ExportConfig = field(default_factory=ExportConfig)


def load_config(path: str | Path | None = None) -> AppConfig:
    """Load config from YAML file, falling back to defaults."""
    if path is None:
        # Look for config.yaml relative to the project root
        candidates = [
            Path.cwd() / "config.yaml",
            Path(__file__).resolve().parent.parent.parent / "config.yaml",
        ]
        for c in candidates:
            if c.exists():
                path = c
                break

    raw: dict = {}
    if path is not None:
        p = Path(path)
        if p.exists():
            raw = yaml.safe_load(p.read_text()) or {}

    return AppConfig(
        llm=LLMConfig(**raw.get("llm", {})),
        rate_limit=RateLimitConfig(**raw.get("rate_limit", {})),
        pipeline=PipelineConfig(**raw.get("pipeline", {})),
        session=SessionConfig(**raw.get("session", {})),
        usage=UsageConfig(**raw.get("usage", {})),
        export=ExportConfig(**raw.get("export", {})),
    )
