"""Error taxonomy shared by the router, generation client, and pipeline."""

from __future__ import annotations


class ResumeAgentsError(Exception):
    """Base class for all errors raised by resume_agents."""


class ConfigurationError(ResumeAgentsError):
    """A required credential or setting is missing."""

    def __init__(self, key: str, message: str | None = None):
        self.key = key
        super().__init__(message or f"Missing required configuration: {key}")


class GenerationError(ResumeAgentsError):
    """A provider call failed (after any fallback attempt)."""

    def __init__(self, status: int, body: str):
        self.status = status
        self.body = body
        super().__init__(f"Provider returned {status}: {body}")


class ParseError(ResumeAgentsError, ValueError):
    """Model output could not be parsed or did not match the expected shape."""

    def __init__(self, message: str, raw: str = "", *, truncated: bool = False):
        self.raw = raw
        self.truncated = truncated
        super().__init__(message)


class EditIndexError(ResumeAgentsError, IndexError):
    """An edit operation targeted a position outside the collection."""

    def __init__(self, index: int, valid_range: tuple[int, int] | None):
        self.index = index
        self.valid_range = valid_range
        if valid_range is None:
            detail = "collection is empty"
        else:
            detail = f"valid range is {valid_range[0]}..{valid_range[1]}"
        super().__init__(f"Edit index {index} out of range ({detail})")


class ValidationError(ResumeAgentsError, ValueError):
    """An inbound request is malformed."""


class StageError(ResumeAgentsError):
    """A pipeline stage failed; wraps the underlying error."""

    def __init__(self, stage: str, cause: BaseException):
        self.stage = stage
        self.cause = cause
        super().__init__(f"{stage} failed: {cause}")
