"""Read-only user profile snapshot consumed by the pipeline."""

from __future__ import annotations

from pydantic import Field, field_validator

from resume_agents.models.base import CamelModel


class ProfileExperience(CamelModel):
    company: str = ""
    position: str = ""
    location: str = ""
    start_date: str = ""
    end_date: str = ""
    description: str = ""
    include_in_resume: bool = True


class ProfileProject(CamelModel):
    title: str = ""
    description: str = ""
    technologies: str = ""
    start_date: str = ""
    end_date: str = ""
    project_url: str = ""
    github_url: str = ""
    include_in_resume: bool = True


class ProfileEducation(CamelModel):
    school: str = ""
    degree: str = ""
    start_date: str = ""
    end_date: str = ""
    cgpa: str = ""
    include_in_resume: bool = True


class ProfileCertificate(CamelModel):
    name: str = ""
    issuer: str = ""
    issue_date: str = ""
    credential_url: str = ""
    include_in_resume: bool = True


class ProfileSkill(CamelModel):
    name: str
    level: str = ""


class UserProfile(CamelModel):
    name: str
    email: str = ""
    title: str = ""
    phone: str = ""
    location: str = ""
    about: str = ""
    linkedin_url: str = ""
    github_url: str = ""
    portfolio_url: str = ""
    experiences: list[ProfileExperience] = Field(default_factory=list)
    projects: list[ProfileProject] = Field(default_factory=list)
    education: list[ProfileEducation] = Field(default_factory=list)
    skills: list[ProfileSkill] = Field(default_factory=list)
    certificates: list[ProfileCertificate] = Field(default_factory=list)

    @field_validator("skills", mode="before")
    @classmethod
    def _skills_from_strings(cls, value):
        # The profile form stores skills as objects; older records are plain strings.
        if isinstance(value, list):
            return [{"name": v} if isinstance(v, str) else v for v in value]
        return value

    @property
    def skill_names(self) -> list[str]:
        return [s.name for s in self.skills]
