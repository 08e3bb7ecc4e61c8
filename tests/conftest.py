"""Shared test fixtures."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from resume_agents.clients.llm_client import LLMClient
from resume_agents.models.job import JobAnalysis, MatchAnalysis
from resume_agents.models.optimization import (
    ExperienceOptimization,
    ProjectOptimization,
    SkillsEnhancement,
    SummaryResult,
)
from resume_agents.models.profile import UserProfile
from resume_agents.models.resume import ResumeDocument

CREDENTIALS = {
    "GEMINI_API_KEY": "gemini-test-key",
    "GROQ_API_KEY": "groq-test-key",
    "OPENAI_API_KEY": "openai-test-key",
}


@pytest.fixture
def credentials() -> dict[str, str]:
    return dict(CREDENTIALS)


@pytest.fixture
def sample_jd_text() -> str:
    return """Senior Backend Engineer - Acme Cloud

Responsibilities:
- Design and build REST APIs serving millions of requests per day
- Own the event pipeline built on Kafka
- Mentor junior engineers

Requirements:
- 5+ years of Python
- FastAPI or Django
- PostgreSQL, Redis

Nice to have:
- Kubernetes, AWS
"""


@pytest.fixture
def profile_json() -> dict:
    return {
        "name": "Jane Doe",
        "email": "jane@example.com",
        "title": "Backend Engineer",
        "phone": "+1 555 0100",
        "about": "Backend engineer focused on APIs and data pipelines.",
        "linkedinUrl": "https://linkedin.com/in/janedoe",
        "githubUrl": "https://github.com/janedoe",
        "experiences": [
            {
                "company": "Globex",
                "position": "Backend Engineer",
                "location": "Remote",
                "startDate": "2021-03",
                "endDate": "",
                "description": "Built Python REST APIs with FastAPI\nRan PostgreSQL and Redis in production",
            },
            {
                "company": "Initech",
                "position": "Support Analyst",
                "startDate": "2018-01",
                "endDate": "2021-02",
                "description": "Answered customer tickets",
            },
            {
                "company": "Hidden Co",
                "position": "Intern",
                "startDate": "2017-06",
                "endDate": "2017-09",
                "description": "Python scripts",
                "includeInResume": False,
            },
        ],
        "projects": [
            {
                "title": "Event Router",
                "description": "Kafka consumer written in Python",
                "technologies": "Python, Kafka",
                "startDate": "2022-01",
                "endDate": "2022-06",
            },
        ],
        "education": [
            {"school": "State University", "degree": "BSc Computer Science",
             "startDate": "2014-09", "endDate": "2018-06", "cgpa": "3.7"},
            {"school": "Old College", "degree": "Diploma", "includeInResume": False},
        ],
        "skills": [{"name": "Python"}, {"name": "FastAPI"}, "PostgreSQL"],
        "certificates": [
            {"name": "AWS Developer", "issuer": "Amazon", "issueDate": "2023-05-10"},
        ],
    }


@pytest.fixture
def sample_profile(profile_json) -> UserProfile:
    return UserProfile.model_validate(profile_json)


@pytest.fixture
def job_analysis_json() -> dict:
    return {
        "technicalSkills": {
            "required": ["Python", "FastAPI", "PostgreSQL"],
            "preferred": ["Kubernetes", "AWS"],
            "niceToHave": [],
        },
        "keyResponsibilities": ["Design REST APIs", "Own the event pipeline"],
        "softSkills": ["Mentoring"],
        "experienceLevel": {"years": "5+", "level": "Senior"},
        "industryTerms": ["cloud"],
        "projectTypes": ["event pipeline"],
        "atsKeywords": ["Python", "REST", "Kafka"],
    }


@pytest.fixture
def sample_job_analysis(job_analysis_json) -> JobAnalysis:
    return JobAnalysis.model_validate(job_analysis_json)


@pytest.fixture
def match_analysis_json() -> dict:
    return {
        "matchScore": 82,
        "strengths": {"directMatches": ["Python", "FastAPI"]},
        "gaps": {"criticalMissing": [], "preferredMissing": ["Kubernetes"]},
        "competitiveAdvantages": ["Production Redis experience"],
        "recommendations": {"priorityFocus": ["API scale"]},
    }


@pytest.fixture
def sample_match_analysis(match_analysis_json) -> MatchAnalysis:
    return MatchAnalysis.model_validate(match_analysis_json)


@pytest.fixture
def experience_json() -> dict:
    return {
        "optimizedExperience": [
            {
                "title": "Backend Engineer",
                "company": "Globex",
                "location": "Remote",
                "startDate": "2021-03",
                "endDate": "present",
                "highlights": ["Built FastAPI services handling 2M requests/day"],
                "relevanceScore": 95,
            }
        ],
        "optimizationNotes": {"experiencesIncluded": 1},
    }


@pytest.fixture
def projects_json() -> dict:
    return {
        "optimizedProjects": [
            {
                "title": "Event Router",
                "startDate": "2022-01",
                "endDate": "2022-06",
                "technologies": "Python, Kafka",
                "highlights": ["Routed 50k events/s through Kafka"],
                "relevanceScore": 88,
            }
        ]
    }


@pytest.fixture
def skills_json() -> dict:
    return {
        "optimizedSkills": {
            "Programming Languages": ["Python"],
            "Frameworks & Tools": ["FastAPI"],
            "Databases": ["PostgreSQL"],
        }
    }


@pytest.fixture
def summary_json() -> dict:
    return {"summary": "Backend engineer with 5 years building Python APIs."}


@pytest.fixture
def stage_outputs(
    job_analysis_json, match_analysis_json, experience_json, projects_json, skills_json, summary_json
) -> dict:
    """Canned output per stage schema."""
    return {
        JobAnalysis: job_analysis_json,
        MatchAnalysis: match_analysis_json,
        ExperienceOptimization: experience_json,
        ProjectOptimization: projects_json,
        SkillsEnhancement: skills_json,
        SummaryResult: summary_json,
    }


def make_mock_llm(outputs: dict | None = None, failures: dict | None = None) -> LLMClient:
    """AsyncMock LLM whose generate_model answers from ``outputs`` by schema.

    ``failures`` maps a schema to an exception to raise instead.
    """
    outputs = outputs or {}
    failures = failures or {}
    client = AsyncMock(spec=LLMClient)

    async def generate_model(request, schema):
        if schema in failures:
            raise failures[schema]
        return schema.model_validate(outputs[schema])

    client.generate_model = AsyncMock(side_effect=generate_model)
    client.generate_text = AsyncMock(return_value="Keep it to one page.")
    client.fork = MagicMock(return_value=client)
    client.get_token_summary = MagicMock(
        return_value={"input": 1000, "output": 500, "calls": [("gemini-2.0-flash", 1000, 500)]}
    )
    return client


@pytest.fixture
def mock_llm_client(stage_outputs) -> LLMClient:
    """Create a mock LLM client that answers every pipeline stage."""
    return make_mock_llm(stage_outputs)


@pytest.fixture
def sample_resume() -> ResumeDocument:
    return ResumeDocument.model_validate({
        "header": {"name": "Jane Doe", "title": "Backend Engineer",
                   "contact": {"email": "jane@example.com"}},
        "summary": "Backend engineer.",
        "skills": {"Languages": ["Python"]},
        "experience": [
            {"title": "A", "company": "Alpha"},
            {"title": "B", "company": "Beta"},
            {"title": "C", "company": "Gamma"},
        ],
        "projects": [{"title": "P0"}, {"title": "P1"}],
        "education": [{"degree": "BSc", "school": "State University"}],
        "certificates": [],
    })


@pytest.fixture
def llm_factory():
    """Build a scripted mock LLM: ``llm_factory(outputs, failures)``."""
    return make_mock_llm
