"""Stage 1: Job Description Analyst - extracts requirements from a posting."""

from __future__ import annotations

from resume_agents.clients.llm_client import GenerationRequest, LLMClient
from resume_agents.models.job import JobAnalysis

SYSTEM_PROMPT = """\
You are a Job Description Analyzer Agent. Analyze the job description and extract everything other agents need to tailor a resume.

Mark technical skills as required, preferred, or nice-to-have, and only report what the posting actually says.

Return JSON only, in this format:
{
  "technicalSkills": {"required": [], "preferred": [], "niceToHave": []},
  "softSkills": [],
  "experienceLevel": {"years": "3-5", "level": "mid-senior", "specificRequirements": []},
  "keyResponsibilities": [],
  "industryTerms": [],
  "projectTypes": [],
  "methodologies": [],
  "education": [],
  "certifications": [],
  "atsKeywords": [],
  "priority": {"mustHave": [], "shouldHave": [], "couldHave": []}
}"""


class JDAnalyst:
    def __init__(self, llm: LLMClient, model: str = "gemini-2.0-flash"):
        self.llm = llm
        self.model = model

    async def analyze(self, job_description: str) -> JobAnalysis:
        """Analyze a job description and return structured requirements."""
        request = GenerationRequest(
            model_id=self.model,
            system_instructions=SYSTEM_PROMPT,
            user_content=f"Analyze this job description thoroughly:\n\n{job_description}",
            temperature=0.3,
            max_tokens=4000,
        )
        return await self.llm.generate_model(request, JobAnalysis)
