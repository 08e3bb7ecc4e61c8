"""Stage 3b: Project Optimizer - selects and rewrites projects for the target job."""

from __future__ import annotations

import json

from resume_agents.clients.llm_client import GenerationRequest, LLMClient
from resume_agents.models.job import JobAnalysis, MatchAnalysis
from resume_agents.models.optimization import ProjectOptimization
from resume_agents.models.profile import UserProfile
from resume_agents.pipeline.prompting import job_context, request_note

SYSTEM_PROMPT = """\
You are a Projects Optimization Agent. Pick the projects that demonstrate job-relevant skills and rewrite their descriptions around the technologies, problems solved and measurable results the job cares about.

Return JSON only, in this format:
{
  "optimizedProjects": [
    {"title": "", "startDate": "", "endDate": "", "technologies": "", "highlights": [], "relevanceScore": 95}
  ],
  "optimizationNotes": {"projectsIncluded": 0, "projectsFiltered": 0, "keywordsAdded": [], "overallRelevance": 0}
}"""


class ProjectOptimizer:
    def __init__(self, llm: LLMClient, model: str = "gemini-2.0-flash"):
        self.llm = llm
        self.model = model

    async def optimize(
        self,
        profile: UserProfile,
        job: JobAnalysis,
        match: MatchAnalysis,
        user_request: str | None = None,
    ) -> ProjectOptimization:
        projects = [p.to_wire() for p in profile.projects if p.include_in_resume]
        request = GenerationRequest(
            model_id=self.model,
            system_instructions=SYSTEM_PROMPT + request_note(user_request),
            user_content=(
                "Optimize the projects section for this profile:\n\n"
                f"USER PROJECTS:\n{json.dumps(projects, indent=2)}\n\n"
                f"{job_context(job, match)}\n\n"
                "Select the most relevant projects and optimize their descriptions for this specific job."
            ),
            temperature=0.4,
            max_tokens=4000,
        )
        return await self.llm.generate_model(request, ProjectOptimization)
