"""Stage 2: Profile Matcher - compares the profile against the job analysis."""

from __future__ import annotations

import json
import logging

from resume_agents.clients.llm_client import GenerationRequest, LLMClient
from resume_agents.errors import ParseError
from resume_agents.models.job import JobAnalysis, MatchAnalysis
from resume_agents.models.profile import UserProfile

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """\
You are a Profile Matcher Agent. Compare the user's profile with the job requirements and identify strengths, gaps, hidden strengths, optimization opportunities and competitive advantages.

Return JSON only, in this format:
{
  "matchScore": 85,
  "strengths": {"directMatches": [], "experienceAlignments": [], "projectSimilarities": [], "educationFit": []},
  "gaps": {"criticalMissing": [], "preferredMissing": [], "experienceGaps": []},
  "hiddenStrengths": {"transferableSkills": [], "relevantExperience": [], "uniqueValue": []},
  "optimizationOpportunities": {"emphasizeMore": [], "reframe": [], "quantify": []},
  "competitiveAdvantages": [],
  "recommendations": {"priorityFocus": [], "skillsToHighlight": [], "experienceToEmphasize": [], "gapsToAddress": []}
}"""


def format_profile(profile: UserProfile) -> dict:
    """Condensed view of the profile for matching prompts."""
    return {
        "name": profile.name,
        "title": profile.title,
        "skills": profile.skill_names,
        "experience": [
            {
                "position": e.position,
                "company": e.company,
                "duration": f"{e.start_date} - {e.end_date or 'Present'}",
                "description": e.description,
            }
            for e in profile.experiences
        ],
        "education": [
            {
                "degree": e.degree,
                "school": e.school,
                "duration": f"{e.start_date} - {e.end_date or 'Present'}",
            }
            for e in profile.education
        ],
        "projects": [
            {
                "title": p.title,
                "duration": f"{p.start_date} - {p.end_date or 'Present'}",
                "description": p.description,
            }
            for p in profile.projects
        ],
    }


class ProfileMatcher:
    def __init__(self, llm: LLMClient, model: str = "gemini-2.0-flash"):
        self.llm = llm
        self.model = model

    async def match(self, profile: UserProfile, job: JobAnalysis) -> MatchAnalysis:
        """Match the profile to the job.

        Unparseable output degrades to ``MatchAnalysis.empty()``; provider
        failures still propagate.
        """
        request = GenerationRequest(
            model_id=self.model,
            system_instructions=SYSTEM_PROMPT,
            user_content=(
                "Analyze this profile against the job requirements:\n\n"
                f"USER PROFILE:\n{json.dumps(format_profile(profile), indent=2)}\n\n"
                f"JOB ANALYSIS:\n{json.dumps(job.to_wire(), indent=2)}\n\n"
                "Provide a comprehensive matching analysis."
            ),
            temperature=0.3,
            max_tokens=4000,
        )
        try:
            return await self.llm.generate_model(request, MatchAnalysis)
        except ParseError as exc:
            logger.warning("Match analysis unparseable, using empty analysis: %s", exc)
            return MatchAnalysis.empty()
