"""Intent Classifier - routes a chat message to a handler."""

from __future__ import annotations

import logging
import re

from resume_agents.clients.llm_client import GenerationRequest, LLMClient
from resume_agents.models.chat import ChatTurn
from resume_agents.models.intent import IntentResult
from resume_agents.models.resume import ResumeDocument

logger = logging.getLogger(__name__)

AUTONOMOUS_KEYWORDS = (
    "make up",
    "make something up",
    "fill in",
    "invent",
    "fabricate",
    "be creative",
    "don't ask",
    "just generate",
    "use placeholder",
    "whatever you think",
)

# Whole words only, so "inventory" or "Inventor" never trigger autonomy.
_AUTONOMY_RE = re.compile(
    r"\b(?:" + "|".join(re.escape(keyword) for keyword in AUTONOMOUS_KEYWORDS) + r")\b"
)

SYSTEM_PROMPT = """\
You are an Intent Analysis Agent for a resume assistant. Decide what the user wants, and write a short todo list of the actions needed.

INTENT TYPES:
- "question": resume tips, ATS, formatting, career advice
- "editSummary": change the professional summary
- "editExperience": add, change or remove a work experience entry
- "editProject": add, change or remove a project
- "editSkills": add, remove or reorganize skills
- "editEducation": add, change or remove an education entry
- "newResumeRequest": the user pastes a new job description or wants a whole new resume

RULES:
- "job description", "new job", "apply for" -> newResumeRequest
- "change/update/rewrite summary" -> editSummary
- a company or role from the experience section -> editExperience
- a project name -> editProject
- "how to", "what is", "why" -> question
- if unclear, use question
- set "autonomousMode" to true when the user asks you to fill in missing details yourself instead of asking

Return JSON only:
{
  "type": "intent_type",
  "confidence": 0.95,
  "todoList": ["Action item 1", "Action item 2"],
  "autonomousMode": false,
  "targetSection": "section name or null",
  "reasoning": "Brief explanation"
}"""


def wants_autonomy(message: str) -> bool:
    return _AUTONOMY_RE.search(message.lower()) is not None


def format_history(history: list[ChatTurn], window: int) -> str:
    if window <= 0 or not history:
        return ""
    recent = history[-window:]
    return "\n".join(f"{turn.role.upper()}: {turn.content}" for turn in recent)


class IntentClassifier:
    def __init__(
        self,
        llm: LLMClient,
        model: str = "llama-3.3-70b-versatile",
        *,
        history_window: int = 5,
    ):
        self.llm = llm
        self.model = model
        self.history_window = history_window

    async def classify(
        self,
        message: str,
        resume: ResumeDocument | None,
        history: list[ChatTurn],
    ) -> IntentResult:
        """Classify ``message``. Provider and parse failures propagate."""
        context = format_history(history, self.history_window)
        sections = ", ".join(ResumeDocument.model_fields) if resume else ""
        user_content = f'Analyze this message:\n\nUSER MESSAGE: "{message}"\n\n'
        if context:
            user_content += f"RECENT CONVERSATION:\n{context}\n\n"
        user_content += f"HAS CURRENT RESUME: {'Yes' if resume else 'No'}\n"
        if sections:
            user_content += f"CURRENT RESUME SECTIONS: {sections}\n"
        user_content += "\nDetermine the intent and create a todo list."

        request = GenerationRequest(
            model_id=self.model,
            system_instructions=SYSTEM_PROMPT,
            user_content=user_content,
            temperature=0.3,
            max_tokens=500,
        )
        result = await self.llm.generate_model(request, IntentResult)
        if not result.autonomous_mode and wants_autonomy(message):
            result = result.model_copy(update={"autonomous_mode": True})
        logger.info("Intent %s (confidence %.2f)", result.intent.value, result.confidence)
        return result
