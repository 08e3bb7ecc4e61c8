"""The resume document aggregate."""

from __future__ import annotations

from pydantic import Field

from resume_agents.models.base import CamelModel


class Contact(CamelModel):
    email: str = ""
    phone: str = ""
    linkedin: str = ""
    github: str = ""
    portfolio: str = ""


class Header(CamelModel):
    name: str = ""
    title: str = ""
    contact: Contact = Field(default_factory=Contact)


class ExperienceEntry(CamelModel):
    title: str = ""
    company: str = ""
    location: str = ""
    start_date: str = ""
    end_date: str = ""
    highlights: list[str] = Field(default_factory=list)


class ProjectEntry(CamelModel):
    title: str = ""
    start_date: str = ""
    end_date: str = ""
    technologies: str = ""
    highlights: list[str] = Field(default_factory=list)


class EducationEntry(CamelModel):
    degree: str = ""
    school: str = ""
    location: str = ""
    start_date: str = ""
    end_date: str = ""
    gpa: str = ""


class CertificateEntry(CamelModel):
    name: str = ""
    issuer: str = ""
    date: str = ""
    credential_url: str = ""


class ResumeDocument(CamelModel):
    header: Header = Field(default_factory=Header)
    summary: str = ""
    skills: dict[str, list[str]] = Field(default_factory=dict)  # domain -> skills
    experience: list[ExperienceEntry] = Field(default_factory=list)
    projects: list[ProjectEntry] = Field(default_factory=list)
    education: list[EducationEntry] = Field(default_factory=list)
    certificates: list[CertificateEntry] = Field(default_factory=list)


# Positional sections the mutation engine may edit, with their entry type.
SECTION_ENTRY_TYPES: dict[str, type[CamelModel]] = {
    "experience": ExperienceEntry,
    "projects": ProjectEntry,
    "education": EducationEntry,
    "certificates": CertificateEntry,
}
