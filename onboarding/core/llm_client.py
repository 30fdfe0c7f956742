"""LLM client for the onboarding pipeline.

Absorbs the boilerplate around one completion call:
- Message building
- Cost tracking integration
- JSON parsing (with json_repair as a second chance)

The client owns no global state. It is constructed with a litellm Router
(see core/llm_router.py) that already carries its credentials, so tests can
hand it a stub router and production code can build one per session.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any

from json_repair import repair_json
from litellm import Router

from onboarding.core.config import LLMConfig
from onboarding.core.cost_tracker import CostTracker

logger = logging.getLogger(__name__)

# Suppress LiteLLM debug noise (done once at module load)
logging.getLogger("litellm").setLevel(logging.ERROR)
logging.getLogger("httpx").setLevel(logging.ERROR)


@dataclass
class LLMResponse:
    """Parsed response from an LLM call.

    Attributes:
        content: Parsed JSON content as a dictionary.
        raw_content: Raw string content from the LLM.
        model: Model identifier used for the call.
    """

    content: dict[str, Any]
    raw_content: str
    model: str


class LLMClient:
    """Client for making LLM API calls through an injected Router.

    Usage:
        client = LLMClient(build_router(api_key=token), cost_tracker=tracker)
        response = await client.complete(
            system_prompt="You extract student names.",
            user_prompt="Jane Doe\\nJohn Smith",
            model="openai/gpt-4o-mini",
            operation="extraction",
        )
        data = response.content  # Parsed JSON dict

    Exceptions from the router (auth, rate limit, 413, timeouts) propagate
    unchanged; the extraction service classifies them.
    """

    def __init__(self, router: Router, cost_tracker: CostTracker | None = None) -> None:
        """Initialize the client.

        Args:
            router: Configured litellm Router.
            cost_tracker: Optional tracker for recording API token usage.
        """
        self.router = router
        self.cost_tracker = cost_tracker

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        model: str,
        operation: str = "",
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> LLMResponse:
        """Make an LLM completion call with system and user prompts.

        Args:
            system_prompt: System message content (instructions).
            user_prompt: User message content (the actual request).
            model: LLM model identifier (e.g., "openai/gpt-4o-mini").
            operation: Label for cost tracking (e.g., "extraction").
            temperature: Sampling temperature. Defaults to LLMConfig.TEMPERATURE.
            max_tokens: Completion budget. Defaults to LLMConfig.MAX_TOKENS.

        Returns:
            LLMResponse with parsed JSON content.

        Raises:
            ValueError: If the response is empty or not a JSON object, even
                after repair.
            litellm exceptions: For API errors (after Router retries).
        """
        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ]

        response = await self.router.acompletion(
            model=model,
            messages=messages,
            response_format=LLMConfig.RESPONSE_FORMAT,
            temperature=temperature if temperature is not None else LLMConfig.TEMPERATURE,
            max_tokens=max_tokens or LLMConfig.MAX_TOKENS,
        )

        if self.cost_tracker:
            self.cost_tracker.record(model, getattr(response, "usage", None), operation=operation)

        raw_content = response.choices[0].message.content
        if not raw_content:
            raise ValueError("No response content from LLM")

        return LLMResponse(
            content=parse_json_object(raw_content),
            raw_content=raw_content,
            model=model,
        )


def parse_json_object(raw_content: str) -> dict[str, Any]:
    """Parse a JSON object, repairing common LLM formatting mistakes.

    Raises:
        ValueError: If nothing object-shaped can be recovered.
    """
    try:
        content = json.loads(raw_content)
    except json.JSONDecodeError:
        logger.warning("JSON parse failed, attempting repair")
        content = repair_json(raw_content, return_objects=True)

    if not isinstance(content, dict):
        raise ValueError(f"Expected a JSON object, got {type(content).__name__}")
    return content
