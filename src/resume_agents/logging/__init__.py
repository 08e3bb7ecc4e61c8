"""Log setup and usage accounting."""

from __future__ import annotations

import logging

from rich.logging import RichHandler

from resume_agents.logging.cost_calculator import calculate_cost
from resume_agents.logging.models import UsageLog


def configure_logging(level: str | int = "INFO") -> None:
    """Route the standard library's logging through rich."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )
    # httpx logs every request at INFO.
    logging.getLogger("httpx").setLevel(logging.WARNING)


def build_usage_log(
    mode: str,
    token_summary: dict,
    *,
    user_id: str | None = None,
    detail: str | None = None,
    elapsed_seconds: float = 0.0,
    error: BaseException | str | None = None,
) -> UsageLog:
    """Turn an ``LLMClient.get_token_summary()`` result into a UsageLog."""
    calls = token_summary.get("calls", [])
    return UsageLog(
        user_id=user_id or "anonymous",
        mode=mode,
        detail=detail,
        elapsed_seconds=elapsed_seconds,
        total_input_tokens=token_summary.get("input", 0),
        total_output_tokens=token_summary.get("output", 0),
        call_count=len(calls),
        estimated_cost_usd=calculate_cost(calls),
        success=error is None,
        error_message=str(error) if error is not None else None,
    )


__all__ = ["UsageLog", "build_usage_log", "calculate_cost", "configure_logging"]
