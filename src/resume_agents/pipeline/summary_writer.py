"""Stage 4: Summary Writer - writes the professional summary from the optimized sections."""

from __future__ import annotations

import json

from resume_agents.clients.llm_client import GenerationRequest, LLMClient
from resume_agents.models.job import JobAnalysis
from resume_agents.models.optimization import (
    ExperienceOptimization,
    ProjectOptimization,
    SkillsEnhancement,
    SummaryResult,
)
from resume_agents.models.profile import UserProfile
from resume_agents.pipeline.prompting import request_note

SYSTEM_PROMPT = """\
You are a Summary Optimization Agent. Write a compelling 2-3 sentence professional summary for the resume below.

Open with the candidate's title and years of experience, name the 3-4 skills the job cares most about, and close with a concrete value proposition. Use the job's keywords naturally. Do not invent credentials that are not in the resume.

Return JSON only, in this format:
{"summary": "..."}"""


class SummaryWriter:
    def __init__(self, llm: LLMClient, model: str = "openai/gpt-oss-120b"):
        self.llm = llm
        self.model = model

    async def write(
        self,
        profile: UserProfile,
        job: JobAnalysis,
        experience: ExperienceOptimization,
        projects: ProjectOptimization,
        skills: SkillsEnhancement,
        user_request: str | None = None,
    ) -> SummaryResult:
        """Write the summary once all three section branches have finished."""
        resume_so_far = {
            "name": profile.name,
            "title": profile.title,
            "about": profile.about,
            "experience": [e.to_wire() for e in experience.optimized_experience],
            "projects": [p.to_wire() for p in projects.optimized_projects],
            "skills": skills.optimized_skills,
        }
        request = GenerationRequest(
            model_id=self.model,
            system_instructions=SYSTEM_PROMPT + request_note(user_request),
            user_content=(
                f"OPTIMIZED RESUME:\n{json.dumps(resume_so_far, indent=2)}\n\n"
                f"JOB REQUIREMENTS:\n{json.dumps(job.to_wire(), indent=2)}\n\n"
                "Write the professional summary."
            ),
            temperature=0.3,
            max_tokens=3000,
        )
        return await self.llm.generate_model(request, SummaryResult)
