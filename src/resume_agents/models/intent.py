"""Pydantic models for the intent classifier output."""

from __future__ import annotations

from enum import Enum

from pydantic import Field, field_validator

from resume_agents.models.base import CamelModel


class Intent(str, Enum):
    QUESTION = "question"
    EDIT_SUMMARY = "editSummary"
    EDIT_EXPERIENCE = "editExperience"
    EDIT_PROJECT = "editProject"
    EDIT_SKILLS = "editSkills"
    EDIT_EDUCATION = "editEducation"
    NEW_RESUME_REQUEST = "newResumeRequest"


# Spellings the chat frontend and older prompts still produce.
INTENT_ALIASES: dict[str, Intent] = {
    "general_question": Intent.QUESTION,
    "edit_summary": Intent.EDIT_SUMMARY,
    "edit_experience": Intent.EDIT_EXPERIENCE,
    "edit_project": Intent.EDIT_PROJECT,
    "edit_skills": Intent.EDIT_SKILLS,
    "edit_education": Intent.EDIT_EDUCATION,
    "generate_new_resume": Intent.NEW_RESUME_REQUEST,
}


class IntentResult(CamelModel):
    intent: Intent = Field(validation_alias="type", serialization_alias="type")
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    todo_list: list[str] = Field(default_factory=list)
    autonomous_mode: bool = False
    target_section: str | None = None
    reasoning: str = ""

    @field_validator("intent", mode="before")
    @classmethod
    def _accept_aliases(cls, value):
        if isinstance(value, str) and value in INTENT_ALIASES:
            return INTENT_ALIASES[value]
        return value
