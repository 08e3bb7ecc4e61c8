"""Section coordinator - regenerates one resume section (or all of it) on demand."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from resume_agents.errors import ValidationError
from resume_agents.models.job import JobAnalysis, MatchAnalysis
from resume_agents.models.optimization import (
    ExperienceOptimization,
    ProjectOptimization,
    ScoredExperience,
    ScoredProject,
    SkillsEnhancement,
)
from resume_agents.models.profile import UserProfile
from resume_agents.models.resume import ResumeDocument
from resume_agents.pipeline.assembler import experience_entries, project_entries
from resume_agents.pipeline.orchestrator import PipelineOrchestrator

logger = logging.getLogger(__name__)

SECTIONS = ("experience", "projects", "skills", "summary", "all")


@dataclass
class SectionResult:
    section: str
    result: dict[str, Any]
    job_analysis: JobAnalysis
    match_analysis: MatchAnalysis
    updated_resume: ResumeDocument | None = None


def profile_sections(
    profile: UserProfile,
) -> tuple[ExperienceOptimization, ProjectOptimization, SkillsEnhancement]:
    """The profile's own sections, used as summary input when nothing was optimized."""
    experience = ExperienceOptimization(optimized_experience=[
        ScoredExperience(
            title=e.position,
            company=e.company,
            location=e.location,
            start_date=e.start_date,
            end_date=e.end_date,
            highlights=[line.strip() for line in e.description.splitlines() if line.strip()],
        )
        for e in profile.experiences
        if e.include_in_resume
    ])
    projects = ProjectOptimization(optimized_projects=[
        ScoredProject(
            title=p.title,
            start_date=p.start_date,
            end_date=p.end_date,
            technologies=p.technologies,
            highlights=[line.strip() for line in p.description.splitlines() if line.strip()],
        )
        for p in profile.projects
        if p.include_in_resume
    ])
    skills = SkillsEnhancement(optimized_skills={"Skills": profile.skill_names})
    return experience, projects, skills


class SectionCoordinator:
    def __init__(self, orchestrator: PipelineOrchestrator):
        self.orchestrator = orchestrator

    async def run(
        self,
        section: str,
        profile: UserProfile,
        *,
        job_description: str | None = None,
        job_analysis: JobAnalysis | None = None,
        match_analysis: MatchAnalysis | None = None,
        user_request: str | None = None,
        current_resume: ResumeDocument | None = None,
    ) -> SectionResult:
        if section not in SECTIONS:
            raise ValidationError(f"Invalid section {section!r}; expected one of {', '.join(SECTIONS)}")
        if job_analysis is None and not job_description:
            raise ValidationError("Either jobDescription or jobAnalysis is required")

        orch = self.orchestrator
        job = job_analysis
        if job is None:
            logger.info("Generating job analysis for %s section", section)
            job = await orch.jd_analyst.analyze(job_description)
        match = match_analysis
        if match is None:
            logger.info("Generating match analysis for %s section", section)
            match = await orch.profile_matcher.match(profile, job)

        if section == "all":
            pipeline = await orch.generate(
                profile, job_description or "", user_request=user_request, job=job, match=match
            )
            return SectionResult(
                section=section,
                result={"resume": pipeline.resume.to_wire(), "insights": pipeline.insights},
                job_analysis=job,
                match_analysis=match,
                updated_resume=pipeline.resume,
            )

        logger.info("Optimizing %s section", section)
        update: dict[str, Any] = {}
        if section == "experience":
            output = await orch.experience_optimizer.optimize(profile, job, match, user_request)
            update["experience"] = experience_entries(profile, job, output)
        elif section == "projects":
            output = await orch.project_optimizer.optimize(profile, job, match, user_request)
            update["projects"] = project_entries(profile, job, output)
        elif section == "skills":
            output = await orch.skills_enhancer.enhance(profile, job, match, user_request)
            update["skills"] = dict(output.optimized_skills)
        else:
            experience, projects, skills = profile_sections(profile)
            output = await orch.summary_writer.write(
                profile, job, experience, projects, skills, user_request
            )
            update["summary"] = output.summary

        updated = None
        if current_resume is not None:
            updated = current_resume.model_copy(update=update, deep=True)
        return SectionResult(
            section=section,
            result={section: output.to_wire()},
            job_analysis=job,
            match_analysis=match,
            updated_resume=updated,
        )
