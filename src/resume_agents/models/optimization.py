"""Pydantic models for the section optimizer and summary stages."""

from __future__ import annotations

from typing import Any

from pydantic import Field

from resume_agents.models.base import CamelModel
from resume_agents.models.resume import ExperienceEntry, ProjectEntry


class ScoredExperience(ExperienceEntry):
    relevance_score: int | None = None


class ScoredProject(ProjectEntry):
    relevance_score: int | None = None


class ExperienceOptimization(CamelModel):
    optimized_experience: list[ScoredExperience]
    optimization_notes: dict[str, Any] = Field(default_factory=dict)


class ProjectOptimization(CamelModel):
    optimized_projects: list[ScoredProject]
    optimization_notes: dict[str, Any] = Field(default_factory=dict)


class SkillsEnhancement(CamelModel):
    optimized_skills: dict[str, list[str]]
    optimization_notes: dict[str, Any] = Field(default_factory=dict)


class SummaryResult(CamelModel):
    summary: str = Field(min_length=1)
