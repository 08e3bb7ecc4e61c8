"""Utility to extract JSON from model responses."""

from __future__ import annotations

import json
import re

from resume_agents.errors import ParseError

_FENCE_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)```")


def extract_json(text: str) -> dict | list:
    """Extract a JSON object or array from model output.

    Tries in order:
    1. Direct json.loads on the full text
    2. Contents of the first fenced code block
    3. First '{' to last '}' (or '[' to ']')

    Output whose brackets never balance is reported as truncated rather
    than repaired; a truncated answer is not a usable answer.
    """
    if not isinstance(text, str) or not text.strip():
        raise ParseError("Empty response content", text or "")

    text = text.strip()

    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass

    candidate = text
    fenced = _FENCE_RE.search(text)
    if fenced:
        candidate = fenced.group(1).strip()
        try:
            return json.loads(candidate)
        except json.JSONDecodeError:
            pass

    span = _outer_span(candidate)
    if span is not None:
        try:
            return json.loads(span)
        except json.JSONDecodeError:
            pass

    start = _first_open(candidate)
    if start != -1 and is_truncated(candidate[start:]):
        raise ParseError(
            "Response was truncated before the JSON was complete",
            candidate[:500],
            truncated=True,
        )
    raise ParseError(f"Could not extract JSON from text: {text[:200]}...", text[:500])


def is_truncated(text: str) -> bool:
    """True if brackets or a string literal are left open."""
    depth_brace = depth_bracket = 0
    in_string = escape = False
    for char in text:
        if escape:
            escape = False
            continue
        if char == "\\":
            escape = True
            continue
        if char == '"':
            in_string = not in_string
            continue
        if in_string:
            continue
        if char == "{":
            depth_brace += 1
        elif char == "}":
            depth_brace -= 1
        elif char == "[":
            depth_bracket += 1
        elif char == "]":
            depth_bracket -= 1
    return in_string or depth_brace > 0 or depth_bracket > 0


def _first_open(text: str) -> int:
    positions = [p for p in (text.find("{"), text.find("[")) if p != -1]
    return min(positions) if positions else -1


def _outer_span(text: str) -> str | None:
    """Slice from the first opening bracket to its matching last closer."""
    start = _first_open(text)
    if start == -1:
        return None
    closer = "}" if text[start] == "{" else "]"
    end = text.rfind(closer)
    if end <= start:
        return None
    return text[start : end + 1]
