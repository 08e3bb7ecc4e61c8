"""Tests for resume assembly and the relevance fallback."""

from __future__ import annotations

import pytest

from resume_agents.models.optimization import (
    ExperienceOptimization,
    ProjectOptimization,
    SkillsEnhancement,
    SummaryResult,
)
from resume_agents.pipeline.assembler import (
    assemble_resume,
    experience_entries,
    experience_relevance,
    format_date_for_resume,
    project_entries,
    project_relevance,
)


@pytest.mark.parametrize(
    "value, expected",
    [
        ("2021-03", "Mar 2021"),
        ("2023-05-10", "May 2023"),
        ("2023-05-10T12:00:00Z", "May 2023"),
        ("", "Present"),
        (None, "Present"),
        ("present", "Present"),
        (" Present ", "Present"),
        ("Summer 2019", "Summer 2019"),
    ],
)
def test_format_date_for_resume(value, expected):
    assert format_date_for_resume(value) == expected


class TestRelevance:
    def test_experience_scores(self, sample_profile, sample_job_analysis):
        globex, initech, _ = sample_profile.experiences
        assert experience_relevance(globex, sample_job_analysis) == pytest.approx(40.0)
        assert experience_relevance(initech, sample_job_analysis) == 0

    def test_project_score(self, sample_profile, sample_job_analysis):
        assert project_relevance(sample_profile.projects[0], sample_job_analysis) == pytest.approx(15.0)

    def test_empty_job_terms(self, sample_profile, sample_job_analysis):
        empty = sample_job_analysis.model_copy(update={"key_responsibilities": [], "industry_terms": []})
        assert experience_relevance(sample_profile.experiences[0], empty) == pytest.approx(40.0)


class TestEntries:
    def test_optimizer_output_wins(self, sample_profile, sample_job_analysis, experience_json):
        entries = experience_entries(
            sample_profile, sample_job_analysis, ExperienceOptimization.model_validate(experience_json)
        )
        assert len(entries) == 1
        assert entries[0].start_date == "Mar 2021"
        assert entries[0].end_date == "Present"
        assert "relevanceScore" not in entries[0].to_wire()

    def test_empty_experience_falls_back_to_profile(self, sample_profile, sample_job_analysis):
        entries = experience_entries(
            sample_profile, sample_job_analysis, ExperienceOptimization(optimized_experience=[])
        )
        assert [e.company for e in entries] == ["Globex"]
        assert entries[0].highlights == [
            "Built Python REST APIs with FastAPI",
            "Ran PostgreSQL and Redis in production",
        ]
        assert entries[0].end_date == "Present"

    def test_low_relevance_projects_dropped(self, sample_profile, sample_job_analysis):
        entries = project_entries(
            sample_profile, sample_job_analysis, ProjectOptimization(optimized_projects=[])
        )
        assert entries == []


class TestAssembleResume:
    def test_assemble(self, sample_profile, sample_job_analysis, experience_json, projects_json, skills_json):
        resume = assemble_resume(
            sample_profile,
            sample_job_analysis,
            ExperienceOptimization.model_validate(experience_json),
            ProjectOptimization.model_validate(projects_json),
            SkillsEnhancement.model_validate(skills_json),
            SummaryResult(summary="Seasoned backend engineer."),
        )
        assert resume.header.name == "Jane Doe"
        assert resume.header.contact.linkedin == "https://linkedin.com/in/janedoe"
        assert resume.summary == "Seasoned backend engineer."
        assert list(resume.skills) == ["Programming Languages", "Frameworks & Tools", "Databases"]
        assert resume.projects[0].end_date == "Jun 2022"
        assert [e.school for e in resume.education] == ["State University"]
        assert resume.education[0].gpa == "3.7"
        assert resume.certificates[0].date == "May 2023"
