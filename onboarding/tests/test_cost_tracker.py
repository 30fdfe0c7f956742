"""Tests for onboarding.core.cost_tracker module."""

import pytest
from unittest.mock import MagicMock, patch

from onboarding.core.cost_tracker import CallUsage, CostTracker


class TestCallUsage:
    """Tests for CallUsage."""

    def test_total_tokens(self):
        assert CallUsage("openai/gpt-4o-mini", 100, 50).total_tokens == 150

    def test_fallback_pricing_when_lookup_fails(self):
        usage = CallUsage("openai/gpt-4o-mini", 1_000_000, 1_000_000)
        with patch("litellm.completion_cost", side_effect=Exception("no pricing")):
            assert usage.cost == pytest.approx(0.75)

    def test_unknown_model_costs_zero(self):
        usage = CallUsage("openai/unknown-model", 10, 10)
        with patch("litellm.completion_cost", side_effect=Exception("no pricing")):
            assert usage.cost == 0.0


class TestCostTracker:
    """Tests for CostTracker."""

    def test_missing_usage_still_counts_call(self):
        tracker = CostTracker()
        tracker.record("m", None)
        assert tracker.call_count == 1
        assert tracker.total_tokens == 0

    def test_summary_and_dict(self):
        tracker = CostTracker()
        tracker.record("m", MagicMock(prompt_tokens=1000, completion_tokens=200))
        with patch("litellm.completion_cost", return_value=0.5):
            assert tracker.summary() == "1 extraction call, 1,200 tokens, $0.5000"
            assert tracker.to_dict() == {"total_calls": 1, "total_tokens": 1200, "total_cost_usd": 0.5}
