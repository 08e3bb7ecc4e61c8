"""Progress events emitted by the pipeline orchestrator."""

from __future__ import annotations

from enum import Enum
from typing import Any

from resume_agents.models.base import CamelModel


class EventKind(str, Enum):
    START = "start"
    PROGRESS = "progress"
    COMPLETE = "complete"
    ERROR = "error"


class ProgressEvent(CamelModel):
    kind: EventKind
    message: str
    step_index: int
    total_steps: int
    payload: Any = None

    def to_line(self) -> str:
        """One newline-terminated JSON object, as written to the stream."""
        return self.model_dump_json(by_alias=True) + "\n"
