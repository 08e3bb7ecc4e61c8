"""Structural edit operations applied by the mutation engine."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import Field, model_validator

from resume_agents.models.base import CamelModel


class EditAction(str, Enum):
    UPDATE = "update"
    DELETE = "delete"


class SectionName(str, Enum):
    EXPERIENCE = "experience"
    PROJECTS = "projects"
    EDUCATION = "education"
    CERTIFICATES = "certificates"


class EditOperation(CamelModel):
    """One update/delete/append against a positional resume section.

    ``target_index=None`` appends and is only valid for updates.
    """

    target_collection: SectionName
    target_index: int | None = None
    action: EditAction = EditAction.UPDATE
    payload: Any = None
    changes: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_shape(self) -> EditOperation:
        if self.action is EditAction.DELETE and self.target_index is None:
            raise ValueError("delete requires a target_index")
        if self.action is EditAction.UPDATE and self.payload is None:
            raise ValueError("update requires a payload")
        return self

    @property
    def is_append(self) -> bool:
        return self.action is EditAction.UPDATE and self.target_index is None
