"""Stage 3c: Skills Enhancer - groups and prioritises skills for the target job."""

from __future__ import annotations

import json

from resume_agents.clients.llm_client import GenerationRequest, LLMClient
from resume_agents.models.job import JobAnalysis, MatchAnalysis
from resume_agents.models.optimization import SkillsEnhancement
from resume_agents.models.profile import UserProfile
from resume_agents.pipeline.prompting import job_context, request_note

SYSTEM_PROMPT = """\
You are a Skills Optimization Agent. Organize the user's skills into domain categories, job-required skills first within each category, using the job description's exact keywords where the user genuinely has the skill.

Return JSON only, in this format:
{
  "optimizedSkills": {"Programming Languages": [], "Frameworks & Tools": [], "Cloud & DevOps": [], "Soft Skills": []},
  "optimizationNotes": {"prioritizedSkills": [], "addedKeywords": [], "removedIrrelevant": [], "relevanceScore": 0}
}"""


class SkillsEnhancer:
    def __init__(self, llm: LLMClient, model: str = "gemini-2.0-flash"):
        self.llm = llm
        self.model = model

    async def enhance(
        self,
        profile: UserProfile,
        job: JobAnalysis,
        match: MatchAnalysis,
        user_request: str | None = None,
    ) -> SkillsEnhancement:
        request = GenerationRequest(
            model_id=self.model,
            system_instructions=SYSTEM_PROMPT + request_note(user_request),
            user_content=(
                "Optimize the skills section for this profile:\n\n"
                f"USER SKILLS:\n{json.dumps(profile.skill_names, indent=2)}\n\n"
                f"{job_context(job, match)}\n\n"
                "Create a strategically organized skills section for this specific job."
            ),
            temperature=0.4,
            max_tokens=3000,
        )
        return await self.llm.generate_model(request, SkillsEnhancement)
