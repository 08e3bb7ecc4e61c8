"""Pydantic models for the job analysis and profile match stages."""

from __future__ import annotations

from pydantic import Field

from resume_agents.models.base import CamelModel


class TechnicalSkills(CamelModel):
    required: list[str] = Field(default_factory=list)
    preferred: list[str] = Field(default_factory=list)
    nice_to_have: list[str] = Field(default_factory=list)


class ExperienceLevel(CamelModel):
    years: str = ""
    level: str = ""
    specific_requirements: list[str] = Field(default_factory=list)


class SkillPriority(CamelModel):
    must_have: list[str] = Field(default_factory=list)
    should_have: list[str] = Field(default_factory=list)
    could_have: list[str] = Field(default_factory=list)


class JobAnalysis(CamelModel):
    technical_skills: TechnicalSkills
    key_responsibilities: list[str]
    soft_skills: list[str] = Field(default_factory=list)
    experience_level: ExperienceLevel = Field(default_factory=ExperienceLevel)
    industry_terms: list[str] = Field(default_factory=list)
    project_types: list[str] = Field(default_factory=list)
    methodologies: list[str] = Field(default_factory=list)
    education: list[str] = Field(default_factory=list)
    certifications: list[str] = Field(default_factory=list)
    ats_keywords: list[str] = Field(default_factory=list)
    priority: SkillPriority = Field(default_factory=SkillPriority)


class MatchStrengths(CamelModel):
    direct_matches: list[str] = Field(default_factory=list)
    experience_alignments: list[str] = Field(default_factory=list)
    project_similarities: list[str] = Field(default_factory=list)
    education_fit: list[str] = Field(default_factory=list)


class MatchGaps(CamelModel):
    critical_missing: list[str] = Field(default_factory=list)
    preferred_missing: list[str] = Field(default_factory=list)
    experience_gaps: list[str] = Field(default_factory=list)


class MatchRecommendations(CamelModel):
    priority_focus: list[str] = Field(default_factory=list)
    skills_to_highlight: list[str] = Field(default_factory=list)
    experience_to_emphasize: list[str] = Field(default_factory=list)
    gaps_to_address: list[str] = Field(default_factory=list)


class MatchAnalysis(CamelModel):
    match_score: int = Field(ge=0, le=100)
    strengths: MatchStrengths
    gaps: MatchGaps
    hidden_strengths: dict[str, list[str]] = Field(default_factory=dict)
    optimization_opportunities: dict[str, list[str]] = Field(default_factory=dict)
    competitive_advantages: list[str] = Field(default_factory=list)
    recommendations: MatchRecommendations = Field(default_factory=MatchRecommendations)

    @classmethod
    def empty(cls) -> MatchAnalysis:
        """Fixed default used when the matcher's output cannot be parsed."""
        return cls(match_score=0, strengths=MatchStrengths(), gaps=MatchGaps())
