"""Token and cost tracking for extraction calls.

One paste is usually one call, but an operator may retry several times in a
session; the tracker adds them up for the CLI summary.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)

# Fallback pricing per 1M tokens (USD) when litellm lookup fails.
_FALLBACK_PRICING: dict[str, tuple[float, float]] = {
    # (input_cost_per_1M, output_cost_per_1M)
    "gpt-4o-mini": (0.15, 0.60),
    "gpt-4o": (2.50, 10.00),
}

_warned_models: set[str] = set()


def _normalize_model_name(model: str) -> str:
    """Strip provider routing prefixes ("openai/", "openrouter/openai/", "azure/")."""
    return model.rsplit("/", 1)[-1]


@dataclass
class CallUsage:
    """Usage for a single LLM call."""

    model: str
    prompt_tokens: int
    completion_tokens: int
    operation: str = ""

    @property
    def total_tokens(self) -> int:
        return self.prompt_tokens + self.completion_tokens

    @property
    def cost(self) -> float:
        """Cost in USD from litellm's pricing database, else the fallback table."""
        normalized = _normalize_model_name(self.model)
        try:
            from litellm import completion_cost
            return completion_cost(
                model=normalized,
                prompt_tokens=self.prompt_tokens,
                completion_tokens=self.completion_tokens,
            )
        except Exception:
            if normalized in _FALLBACK_PRICING:
                input_rate, output_rate = _FALLBACK_PRICING[normalized]
                return (self.prompt_tokens * input_rate + self.completion_tokens * output_rate) / 1_000_000
            if self.model not in _warned_models:
                _warned_models.add(self.model)
                logger.warning(f"No pricing available for model '{self.model}', cost will show as $0")
            return 0.0


@dataclass
class CostTracker:
    """Accumulates token usage and costs across a session."""

    calls: list[CallUsage] = field(default_factory=list)

    def record(self, model: str, usage: Any, operation: str = "") -> CallUsage:
        """Record usage from a LiteLLM response.

        A missing usage object is recorded as a zero-token call so the call
        count stays accurate.
        """
        call = CallUsage(
            model=model,
            prompt_tokens=getattr(usage, "prompt_tokens", 0) or 0,
            completion_tokens=getattr(usage, "completion_tokens", 0) or 0,
            operation=operation,
        )
        self.calls.append(call)
        return call

    @property
    def call_count(self) -> int:
        return len(self.calls)

    @property
    def total_tokens(self) -> int:
        return sum(c.total_tokens for c in self.calls)

    @property
    def total_cost(self) -> float:
        """Total cost in USD."""
        return sum(c.cost for c in self.calls)

    def summary(self) -> str:
        """One-line summary for the CLI."""
        return (
            f"{self.call_count} extraction call{'s' if self.call_count != 1 else ''}, "
            f"{self.total_tokens:,} tokens, ${self.total_cost:.4f}"
        )

    def to_dict(self) -> dict:
        """Export as dict for JSON serialization."""
        return {
            "total_calls": self.call_count,
            "total_tokens": self.total_tokens,
            "total_cost_usd": round(self.total_cost, 6),
        }
