"""Pydantic models for chat turns and handler responses."""

from __future__ import annotations

from typing import Any

from pydantic import Field

from resume_agents.models.base import CamelModel
from resume_agents.models.resume import ResumeDocument


class ChatTurn(CamelModel):
    role: str
    content: str


class ChatResponse(CamelModel):
    type: str
    result: Any = None
    updated_resume: ResumeDocument | None = None
    message: str = ""
    requires_action: bool = False
    todo_list: list[str] = Field(default_factory=list)


class SummaryEdit(CamelModel):
    new_summary: str = Field(min_length=1)
    changes: list[str] = Field(default_factory=list)
    explanation: str = ""


class SkillsEdit(CamelModel):
    skills: dict[str, list[str]]
    changes: list[str] = Field(default_factory=list)
    explanation: str = ""


class SectionEdit(CamelModel):
    """Batch of operations proposed for one positional section."""

    operations: list[dict[str, Any]]
    changes: list[str] = Field(default_factory=list)
    explanation: str = ""
