"""Prompt fragments shared by the section agents."""

from __future__ import annotations

import json

from resume_agents.models.job import JobAnalysis, MatchAnalysis


def job_context(job: JobAnalysis, match: MatchAnalysis) -> str:
    return (
        f"JOB REQUIREMENTS:\n{json.dumps(job.to_wire(), indent=2)}\n\n"
        f"MATCHING INSIGHTS:\n{json.dumps(match.to_wire(), indent=2)}"
    )


def request_note(user_request: str | None) -> str:
    if not user_request:
        return ""
    return f'\n\nSPECIFIC USER REQUEST: "{user_request}" - address this request while optimizing.'


def numbered(items: list[str]) -> str:
    return "\n".join(f"{i}. {item}" for i, item in enumerate(items, 1))
