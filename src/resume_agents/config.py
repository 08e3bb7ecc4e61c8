"""Application configuration loaded from config.yaml."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import yaml


def _check_range(name: str, value: int | float, low: int | float, high: int | float) -> None:
    if not low <= value <= high:
        raise ValueError(f"{name} must be between {low} and {high}, got {value}")


@dataclass(frozen=True)
class LLMConfig:
    timeout: int = 120
    max_retries: int = 3

    def __post_init__(self) -> None:
        _check_range("timeout", self.timeout, 1, 600)
        _check_range("max_retries", self.max_retries, 1, 10)


@dataclass(frozen=True)
class ModelsConfig:
    """Task -> model id assignments (cost tiers)."""

    intent_analysis: str = "llama-3.3-70b-versatile"
    general_questions: str = "llama-3.3-70b-versatile"
    edit_summary: str = "llama-3.3-70b-versatile"
    edit_skills: str = "llama-3.3-70b-versatile"
    edit_education: str = "llama-3.3-70b-versatile"
    edit_experience: str = "gemini-2.0-flash"
    edit_project: str = "gemini-2.0-flash"
    job_analyzer: str = "gemini-2.0-flash"
    profile_matcher: str = "gemini-2.0-flash"
    experience_optimizer: str = "gemini-2.0-flash"
    project_optimizer: str = "gemini-2.0-flash"
    skills_enhancer: str = "gemini-2.0-flash"
    summary_generator: str = "openai/gpt-oss-120b"


@dataclass(frozen=True)
class PipelineConfig:
    emit_branch_events: bool = False
    history_window: int = 5

    def __post_init__(self) -> None:
        _check_range("history_window", self.history_window, 0, 50)


@dataclass(frozen=True)
class StoreConfig:
    db_path: str = "~/.resume-agents/resumes.db"
    usage_db_path: str = "~/.resume-agents/usage.db"

    @property
    def resolved_db_path(self) -> Path:
        return Path(self.db_path).expanduser()

    @property
    def resolved_usage_db_path(self) -> Path:
        return Path(self.usage_db_path).expanduser()


@dataclass(frozen=True)
class ServerConfig:
    host: str = "127.0.0.1"
    port: int = 8000

    def __post_init__(self) -> None:
        _check_range("port", self.port, 1, 65535)


@dataclass(frozen=True)
class AppConfig:
    llm: LLMConfig = field(default_factory=LLMConfig)
    models: ModelsConfig = field(default_factory=ModelsConfig)
    pipeline: PipelineConfig = field(default_factory=PipelineConfig)
    store: StoreConfig = field(default_factory=StoreConfig)
    server: ServerConfig = field(default_factory=ServerConfig)


def load_config(path: str | Path | None = None) -> AppConfig:
    """Load config from YAML file, falling back to defaults."""
    if path is None:
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
        models=ModelsConfig(**raw.get("models", {})),
        pipeline=PipelineConfig(**raw.get("pipeline", {})),
        store=StoreConfig(**raw.get("store", {})),
        server=ServerConfig(**raw.get("server", {})),
    )
