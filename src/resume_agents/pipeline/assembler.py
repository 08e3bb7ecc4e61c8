"""Final stage: merge stage outputs and the profile into a ResumeDocument.

No generation happens here. When an optimizer returned nothing, the
profile's own entries are filtered by a keyword relevance score instead.
"""

from __future__ import annotations

from datetime import datetime

from resume_agents.models.job import JobAnalysis
from resume_agents.models.optimization import (
    ExperienceOptimization,
    ProjectOptimization,
    SkillsEnhancement,
    SummaryResult,
)
from resume_agents.models.profile import ProfileExperience, ProfileProject, UserProfile
from resume_agents.models.resume import (
    CertificateEntry,
    Contact,
    EducationEntry,
    ExperienceEntry,
    Header,
    ProjectEntry,
    ResumeDocument,
)

EXPERIENCE_THRESHOLD = 30
PROJECT_THRESHOLD = 25


def format_date_for_resume(value: str | None) -> str:
    """Normalise a profile date to "Mon YYYY".

    Empty values and "present" become "Present"; anything unparseable is
    returned unchanged.
    """
    if not value or value.strip().lower() == "present":
        return "Present"
    text = value.strip()
    try:
        if len(text) <= 7 and "-" in text:
            parsed = datetime.strptime(text, "%Y-%m")
        else:
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return value
    return parsed.strftime("%b %Y")


def _fraction(text: str, terms: list[str]) -> float:
    hits = sum(1 for term in terms if term and term.lower() in text)
    return hits / max(len(terms), 1)


def experience_relevance(exp: ProfileExperience, job: JobAnalysis) -> float:
    text = f"{exp.position} {exp.company} {exp.description}".lower()
    score = (
        _fraction(text, job.technical_skills.required) * 40
        + _fraction(text, job.technical_skills.preferred) * 25
        + _fraction(text, job.key_responsibilities) * 20
        + _fraction(text, job.industry_terms) * 15
    )
    return min(score, 100.0)


def project_relevance(project: ProfileProject, job: JobAnalysis) -> float:
    text = f"{project.title} {project.description} {project.technologies}".lower()
    score = (
        _fraction(text, job.technical_skills.required) * 45
        + _fraction(text, job.technical_skills.preferred) * 30
        + _fraction(text, job.project_types) * 25
    )
    return min(score, 100.0)


def _highlights(description: str) -> list[str]:
    return [line.strip() for line in description.splitlines() if line.strip()]


def relevant_experience(profile: UserProfile, job: JobAnalysis) -> list[ExperienceEntry]:
    scored = [
        (experience_relevance(e, job), e)
        for e in profile.experiences
        if e.include_in_resume
    ]
    kept = sorted((s for s in scored if s[0] >= EXPERIENCE_THRESHOLD), key=lambda s: s[0], reverse=True)
    return [
        ExperienceEntry(
            title=e.position,
            company=e.company,
            location=e.location,
            start_date=e.start_date,
            end_date=e.end_date,
            highlights=_highlights(e.description),
        )
        for _, e in kept
    ]


def relevant_projects(profile: UserProfile, job: JobAnalysis) -> list[ProjectEntry]:
    scored = [
        (project_relevance(p, job), p)
        for p in profile.projects
        if p.include_in_resume
    ]
    kept = sorted((s for s in scored if s[0] >= PROJECT_THRESHOLD), key=lambda s: s[0], reverse=True)
    return [
        ProjectEntry(
            title=p.title,
            start_date=p.start_date,
            end_date=p.end_date,
            technologies=p.technologies,
            highlights=_highlights(p.description),
        )
        for _, p in kept
    ]


def experience_entries(
    profile: UserProfile, job: JobAnalysis, experience: ExperienceOptimization
) -> list[ExperienceEntry]:
    """Optimizer output with resume dates, or the relevance-filtered profile."""
    if experience.optimized_experience:
        entries = [
            ExperienceEntry.model_validate(e.model_dump(exclude={"relevance_score"}))
            for e in experience.optimized_experience
        ]
    else:
        entries = relevant_experience(profile, job)
    for entry in entries:
        entry.start_date = format_date_for_resume(entry.start_date)
        entry.end_date = format_date_for_resume(entry.end_date)
    return entries


def project_entries(
    profile: UserProfile, job: JobAnalysis, projects: ProjectOptimization
) -> list[ProjectEntry]:
    if projects.optimized_projects:
        entries = [
            ProjectEntry.model_validate(p.model_dump(exclude={"relevance_score"}))
            for p in projects.optimized_projects
        ]
    else:
        entries = relevant_projects(profile, job)
    for entry in entries:
        entry.start_date = format_date_for_resume(entry.start_date)
        entry.end_date = format_date_for_resume(entry.end_date)
    return entries


def assemble_resume(
    profile: UserProfile,
    job: JobAnalysis,
    experience: ExperienceOptimization,
    projects: ProjectOptimization,
    skills: SkillsEnhancement,
    summary: SummaryResult,
) -> ResumeDocument:
    return ResumeDocument(
        header=Header(
            name=profile.name,
            title=profile.title,
            contact=Contact(
                email=profile.email,
                phone=profile.phone,
                linkedin=profile.linkedin_url,
                github=profile.github_url,
                portfolio=profile.portfolio_url,
            ),
        ),
        summary=summary.summary,
        skills=dict(skills.optimized_skills),
        experience=experience_entries(profile, job, experience),
        projects=project_entries(profile, job, projects),
        education=[
            EducationEntry(
                degree=edu.degree,
                school=edu.school,
                start_date=format_date_for_resume(edu.start_date),
                end_date=format_date_for_resume(edu.end_date),
                gpa=edu.cgpa,
            )
            for edu in profile.education
            if edu.include_in_resume
        ],
        certificates=[
            CertificateEntry(
                name=cert.name,
                issuer=cert.issuer,
                date=format_date_for_resume(cert.issue_date),
                credential_url=cert.credential_url,
            )
            for cert in profile.certificates
            if cert.include_in_resume
        ],
    )
