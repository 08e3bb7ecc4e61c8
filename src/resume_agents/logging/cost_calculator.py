"""Cost calculator for provider token usage, priced by model tier."""

from __future__ import annotations

from resume_agents.clients.providers import MODEL_REGISTRY

# Pricing per 1M tokens (USD)
TIER_PRICING: dict[str, dict[str, float]] = {
    "light": {"input": 0.27, "output": 0.27},
    "mid": {"input": 0.27, "output": 0.27},
    "high": {"input": 0.10, "output": 0.40},
    "premium": {"input": 0.75, "output": 0.75},
}


def price_for(model_id: str) -> dict[str, float] | None:
    model = MODEL_REGISTRY.get(model_id)
    if model is None:
        return None
    return TIER_PRICING.get(model.tier)


def calculate_cost(calls: list[tuple[str, int, int]]) -> float:
    """Calculate total cost for a set of generation calls.

    Args:
        calls: List of (model_id, input_tokens, output_tokens) tuples.

    Returns:
        Total estimated cost in USD. Models outside the registry cost nothing.
    """
    total = 0.0
    for model_id, input_tokens, output_tokens in calls:
        pricing = price_for(model_id)
        if pricing is None:
            continue
        total += (input_tokens / 1_000_000) * pricing["input"]
        total += (output_tokens / 1_000_000) * pricing["output"]
    return total
