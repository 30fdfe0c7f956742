"""Tests for onboarding.core.llm_client and llm_router modules.

Tests the LLMClient class with a stub Router:
- complete(): message building, defaults, cost tracking
- parse_json_object(): strict parse, repair, non-object rejection
- build_router model lists per provider
"""

import pytest
from unittest.mock import AsyncMock, MagicMock

from onboarding.core.config import GITHUB_MODELS_BASE_URL
from onboarding.core.cost_tracker import CostTracker
from onboarding.core.llm_client import LLMClient, LLMResponse, parse_json_object
from onboarding.core.llm_router import (
    _build_fallbacks,
    _build_github_model_list,
    _build_openrouter_model_list,
)


def _completion(content: str | None, prompt_tokens: int = 100, completion_tokens: int = 50):
    return MagicMock(
        choices=[MagicMock(message=MagicMock(content=content))],
        usage=MagicMock(prompt_tokens=prompt_tokens, completion_tokens=completion_tokens),
    )


@pytest.fixture
def mock_router():
    """Stub Router whose acompletion returns a small JSON object."""
    router = MagicMock()
    router.acompletion = AsyncMock(return_value=_completion('{"students": []}'))
    return router


# =============================================================================
# LLMClient tests
# =============================================================================


class TestLLMClient:
    """Tests for LLMClient class."""

    @pytest.mark.asyncio
    async def test_complete_returns_parsed_json(self, mock_router):
        client = LLMClient(mock_router)
        response = await client.complete("System", "User", model="test-model")
        assert isinstance(response, LLMResponse)
        assert response.content == {"students": []}
        assert response.raw_content == '{"students": []}'
        assert response.model == "test-model"

    @pytest.mark.asyncio
    async def test_complete_calls_router_with_correct_args(self, mock_router):
        client = LLMClient(mock_router)
        await client.complete("System prompt", "User prompt", model="test-model")

        mock_router.acompletion.assert_called_once()
        call_kwargs = mock_router.acompletion.call_args.kwargs
        assert call_kwargs["model"] == "test-model"
        assert call_kwargs["response_format"] == {"type": "json_object"}
        assert call_kwargs["temperature"] == 0.1
        assert call_kwargs["max_tokens"] == 2000
        # Router owns the credentials
        assert "api_key" not in call_kwargs
        assert call_kwargs["messages"] == [
            {"role": "system", "content": "System prompt"},
            {"role": "user", "content": "User prompt"},
        ]

    @pytest.mark.asyncio
    async def test_custom_temperature(self, mock_router):
        client = LLMClient(mock_router)
        await client.complete("S", "U", model="m", temperature=0.0)
        assert mock_router.acompletion.call_args.kwargs["temperature"] == 0.0

    @pytest.mark.asyncio
    async def test_complete_tracks_costs(self, mock_router):
        tracker = CostTracker()
        client = LLMClient(mock_router, cost_tracker=tracker)
        await client.complete("S", "U", model="test-model", operation="extraction")
        await client.complete("S", "U", model="test-model", operation="extraction")
        assert tracker.call_count == 2
        assert tracker.total_tokens == 300
        assert tracker.calls[0].operation == "extraction"

    @pytest.mark.asyncio
    async def test_empty_content_raises(self, mock_router):
        mock_router.acompletion.return_value = _completion(None)
        with pytest.raises(ValueError, match="No response content"):
            await LLMClient(mock_router).complete("S", "U", model="m")

    @pytest.mark.asyncio
    async def test_router_errors_propagate(self, mock_router):
        mock_router.acompletion.side_effect = ConnectionError("refused")
        with pytest.raises(ConnectionError):
            await LLMClient(mock_router).complete("S", "U", model="m")


# =============================================================================
# parse_json_object tests
# =============================================================================


class TestParseJsonObject:
    """Tests for parse_json_object."""

    def test_valid_object(self):
        assert parse_json_object('{"confidence": 0.9}') == {"confidence": 0.9}

    def test_trailing_comma_is_repaired(self):
        assert parse_json_object('{"confidence": 0.9, "students": [],}') == {
            "confidence": 0.9,
            "students": [],
        }

    def test_array_is_rejected(self):
        with pytest.raises(ValueError, match="Expected a JSON object"):
            parse_json_object("[1, 2]")


# =============================================================================
# Router configuration tests
# =============================================================================


class TestRouterConfig:
    """Tests for per-provider model lists."""

    def test_github_uses_models_endpoint(self):
        [entry] = _build_github_model_list("token", "openai/gpt-4o-mini")
        assert entry["model_name"] == "openai/gpt-4o-mini"
        assert entry["litellm_params"]["api_base"] == GITHUB_MODELS_BASE_URL
        assert entry["litellm_params"]["api_key"] == "token"

    def test_openrouter_adds_fallback_model(self):
        names = [e["model_name"] for e in _build_openrouter_model_list("k", "openrouter/openai/gpt-4o-mini")]
        assert names == ["openrouter/openai/gpt-4o-mini", "openrouter/openai/gpt-4o"]

    def test_fallbacks_only_for_openrouter(self):
        assert _build_fallbacks("github", "openai/gpt-4o-mini") == []
        assert _build_fallbacks("openrouter", "openrouter/openai/gpt-4o-mini") == [
            {"openrouter/openai/gpt-4o-mini": ["openrouter/openai/gpt-4o"]}
        ]
