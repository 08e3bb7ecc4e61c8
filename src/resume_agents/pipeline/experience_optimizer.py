"""Stage 3a: Experience Optimizer - rewrites work history for the target job."""

from __future__ import annotations

import json

from resume_agents.clients.llm_client import GenerationRequest, LLMClient
from resume_agents.models.job import JobAnalysis, MatchAnalysis
from resume_agents.models.optimization import ExperienceOptimization
from resume_agents.models.profile import UserProfile
from resume_agents.pipeline.prompting import job_context, request_note

SYSTEM_PROMPT = """\
You are an Experience Optimization Agent. Rewrite work experience entries so they highlight the skills, achievements and responsibilities that match the target job.

Work in job keywords naturally, quantify outcomes, lead with strong action verbs, and keep only experience with real relevance (score >= 30), most relevant first.

Return JSON only, in this format:
{
  "optimizedExperience": [
    {"title": "", "company": "", "location": "", "startDate": "", "endDate": "", "highlights": [], "relevanceScore": 95}
  ],
  "optimizationNotes": {"experiencesIncluded": 0, "experiencesFiltered": 0, "keywordsAdded": [], "overallRelevance": 0}
}"""


class ExperienceOptimizer:
    def __init__(self, llm: LLMClient, model: str = "gemini-2.0-flash"):
        self.llm = llm
        self.model = model

    async def optimize(
        self,
        profile: UserProfile,
        job: JobAnalysis,
        match: MatchAnalysis,
        user_request: str | None = None,
    ) -> ExperienceOptimization:
        experiences = [e.to_wire() for e in profile.experiences if e.include_in_resume]
        request = GenerationRequest(
            model_id=self.model,
            system_instructions=SYSTEM_PROMPT + request_note(user_request),
            user_content=(
                "Optimize the work experience for this profile:\n\n"
                f"USER EXPERIENCE:\n{json.dumps(experiences, indent=2)}\n\n"
                f"{job_context(job, match)}\n\n"
                "Rewrite all relevant experience entries to maximize impact for this specific job."
            ),
            temperature=0.4,
            max_tokens=6000,
        )
        return await self.llm.generate_model(request, ExperienceOptimization)
